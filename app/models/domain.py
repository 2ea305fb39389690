"""Domain records persisted by the stores."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    """Author of a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"


class Record(BaseModel):
    """Base for stored rows; camelCase on the wire, snake_case in the database."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Conversation(Record):
    """A titled, timestamped thread of chat messages."""

    id: int
    title: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Message(Record):
    """One immutable chat turn within a conversation."""

    id: int
    conversation_id: int
    role: Role
    content: str = ""
    created_at: Optional[datetime] = None


class Novel(Record):
    id: int
    title: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Chapter(Record):
    id: int
    novel_id: int
    title: Optional[str] = None
    content: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
