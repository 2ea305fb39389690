"""Pydantic schemas for the upstream chat-completions API."""
from pydantic import BaseModel, Field
from typing import List, Optional


class UpstreamMessage(BaseModel):
    """A role/content pair sent to or received from the provider."""

    role: str
    content: Optional[str] = ""


class UpstreamChatRequest(BaseModel):
    """Request body for the provider's chat-completions endpoint."""

    model: str
    stream: bool = False
    messages: List[UpstreamMessage] = Field(default_factory=list)


class UpstreamChoice(BaseModel):
    message: Optional[UpstreamMessage] = None
    finish_reason: Optional[str] = None


class UpstreamChatResponse(BaseModel):
    """Buffered response body. Only the first choice is consumed."""

    id: Optional[str] = None
    choices: List[UpstreamChoice] = Field(default_factory=list)


class UpstreamDelta(BaseModel):
    content: Optional[str] = None


class UpstreamStreamChoice(BaseModel):
    delta: Optional[UpstreamDelta] = None


class UpstreamStreamFrame(BaseModel):
    """One decoded `data:` frame of a streaming response."""

    choices: List[UpstreamStreamChoice] = Field(default_factory=list)

    def fragment(self) -> Optional[str]:
        """Text carried by choices[0].delta.content, if any."""
        if not self.choices or self.choices[0].delta is None:
            return None
        return self.choices[0].delta.content
