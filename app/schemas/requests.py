"""Pydantic schemas for API requests."""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional


class CamelModel(BaseModel):
    """Accepts camelCase JSON keys as well as snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatRequest(CamelModel):
    """Request for a chat completion."""

    prompt: str = Field(..., description="User prompt (may be empty)")
    context: Optional[str] = Field(None, description="Optional context text")
    conversation_id: Optional[int] = Field(
        None,
        description="Conversation identifier (optional, a new conversation is created if not provided)",
    )


class ConversationCreateRequest(CamelModel):
    """Request to create a new conversation."""

    title: Optional[str] = Field(None, description="Conversation title")


class ConversationUpdateRequest(CamelModel):
    """Request to rename a conversation."""

    title: Optional[str] = Field(None, description="New title (unchanged when omitted)")


class NovelRequest(CamelModel):
    """Request to create or update a novel."""

    title: Optional[str] = Field(None, description="Novel title")
    description: Optional[str] = Field(None, max_length=1000, description="Short description")


class ChapterRequest(CamelModel):
    """Request to create or update a chapter."""

    title: Optional[str] = Field(None, description="Chapter title")
    content: Optional[str] = Field(None, description="Chapter text")
