"""Pydantic schemas for API responses."""
from pydantic import BaseModel, Field


class MetaEvent(BaseModel):
    """Payload of the one-time `meta` SSE event of a new conversation."""

    conversationId: int = Field(..., description="Identifier of the created conversation")
    title: str = Field(..., description="Resolved conversation title")


class DeleteResponse(BaseModel):
    """Acknowledgement of a deletion."""

    message: str = Field(..., description="Outcome message")
