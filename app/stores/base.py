"""
Store interfaces.

Defines the persistence contracts the chat flow and the CRUD routers depend on.
All identifiers are numeric and assigned by the store on insert.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from app.models.domain import Chapter, Conversation, Message, Novel, Role


class ConversationStore(ABC):
    """Registry of conversation metadata."""

    @abstractmethod
    async def create(self, title: str) -> int:
        """
        Create a conversation.

        Args:
            title: Conversation title

        Returns:
            Identifier of the new conversation
        """

    @abstractmethod
    async def get(self, conversation_id: int) -> Optional[Conversation]:
        """Get a conversation by ID, or None if it does not exist."""

    @abstractmethod
    async def touch(self, conversation_id: int) -> None:
        """Refresh a conversation's updated-at timestamp."""

    @abstractmethod
    async def list(self) -> List[Conversation]:
        """List conversations, most recently updated first."""

    @abstractmethod
    async def update_title(self, conversation_id: int, title: str) -> Optional[Conversation]:
        """Rename a conversation. Returns the updated row, or None if missing."""

    @abstractmethod
    async def delete(self, conversation_id: int) -> bool:
        """Delete a conversation. Returns False if it did not exist."""


class MessageStore(ABC):
    """Append-only log of chat turns keyed by conversation."""

    @abstractmethod
    async def append(self, conversation_id: int, role: Role, content: str) -> int:
        """
        Append a message to a conversation.

        Args:
            conversation_id: Owning conversation ID
            role: Message role
            content: Message content

        Returns:
            Identifier of the new message
        """

    @abstractmethod
    async def list_by_conversation(self, conversation_id: int) -> List[Message]:
        """List a conversation's messages in insertion order."""

    @abstractmethod
    async def delete_by_conversation(self, conversation_id: int) -> None:
        """Delete every message of a conversation."""


class NovelStore(ABC):
    @abstractmethod
    async def list(self) -> List[Novel]:
        ...

    @abstractmethod
    async def get(self, novel_id: int) -> Optional[Novel]:
        ...

    @abstractmethod
    async def create(self, title: Optional[str], description: Optional[str]) -> Novel:
        ...

    @abstractmethod
    async def update(
        self,
        novel_id: int,
        title: Optional[str],
        description: Optional[str],
    ) -> Optional[Novel]:
        ...

    @abstractmethod
    async def delete(self, novel_id: int) -> bool:
        ...


class ChapterStore(ABC):
    @abstractmethod
    async def list_by_novel(self, novel_id: int) -> List[Chapter]:
        ...

    @abstractmethod
    async def get(self, chapter_id: int) -> Optional[Chapter]:
        ...

    @abstractmethod
    async def create(
        self,
        novel_id: int,
        title: Optional[str],
        content: Optional[str],
    ) -> Chapter:
        ...

    @abstractmethod
    async def update(
        self,
        chapter_id: int,
        title: Optional[str],
        content: Optional[str],
    ) -> Optional[Chapter]:
        ...

    @abstractmethod
    async def delete(self, chapter_id: int) -> bool:
        ...
