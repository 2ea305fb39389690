"""Supabase-backed stores for novels, chapters, conversations and messages."""
import asyncio
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any, Dict, List, Optional

from supabase import create_client, Client

from app.config import settings
from app.models.domain import Chapter, Conversation, Message, Novel, Role
from app.stores.base import ChapterStore, ConversationStore, MessageStore, NovelStore

logger = logging.getLogger(__name__)

NOVELS_TABLE = "novels"
CHAPTERS_TABLE = "chapters"
CONVERSATIONS_TABLE = "conversations"
MESSAGES_TABLE = "messages"


@lru_cache()
def get_supabase() -> Client:
    """Get the shared Supabase client."""
    return create_client(
        settings.supabase_url,
        settings.supabase_key,
    )


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class SupabaseTable:
    """Base for stores backed by a single PostgREST table."""

    table_name: str

    def __init__(self, client: Optional[Client] = None):
        """Initialize with an explicit client or the shared one."""
        self.client: Client = client or get_supabase()

    def table(self):
        return self.client.table(self.table_name)

    async def _execute(self, query) -> List[Dict[str, Any]]:
        """
        Run a query builder off the event loop.

        The Supabase client is synchronous, so each request is executed in a
        worker thread.

        Returns:
            Returned rows (empty list when none)
        """
        result = await asyncio.to_thread(query.execute)
        return result.data if result.data else []


class SupabaseConversationStore(SupabaseTable, ConversationStore):
    """Conversation registry over the `conversations` table."""

    table_name = CONVERSATIONS_TABLE

    async def create(self, title: str) -> int:
        rows = await self._execute(
            self.table().insert({"title": title})
        )
        if not rows:
            raise RuntimeError("Conversation insert returned no row")
        conversation_id = int(rows[0]["id"])
        logger.debug(f"Created conversation {conversation_id}")
        return conversation_id

    async def get(self, conversation_id: int) -> Optional[Conversation]:
        rows = await self._execute(
            self.table().select("*").eq("id", conversation_id).limit(1)
        )
        return Conversation.model_validate(rows[0]) if rows else None

    async def touch(self, conversation_id: int) -> None:
        await self._execute(
            self.table().update({"updated_at": _utcnow()}).eq("id", conversation_id)
        )

    async def list(self) -> List[Conversation]:
        rows = await self._execute(
            self.table().select("*").order("updated_at", desc=True)
        )
        return [Conversation.model_validate(row) for row in rows]

    async def update_title(self, conversation_id: int, title: str) -> Optional[Conversation]:
        rows = await self._execute(
            self.table()
            .update({"title": title, "updated_at": _utcnow()})
            .eq("id", conversation_id)
        )
        return Conversation.model_validate(rows[0]) if rows else None

    async def delete(self, conversation_id: int) -> bool:
        rows = await self._execute(
            self.table().delete().eq("id", conversation_id)
        )
        return len(rows) > 0


class SupabaseMessageStore(SupabaseTable, MessageStore):
    """Append-only message log over the `messages` table."""

    table_name = MESSAGES_TABLE

    async def append(self, conversation_id: int, role: Role, content: str) -> int:
        rows = await self._execute(
            self.table().insert({
                "conversation_id": conversation_id,
                "role": Role(role).value,
                "content": content,
            })
        )
        if not rows:
            raise RuntimeError("Message insert returned no row")
        return int(rows[0]["id"])

    async def list_by_conversation(self, conversation_id: int) -> List[Message]:
        # Identity ids increase monotonically, so they encode insertion order.
        rows = await self._execute(
            self.table()
            .select("*")
            .eq("conversation_id", conversation_id)
            .order("id", desc=False)
        )
        return [Message.model_validate(row) for row in rows]

    async def delete_by_conversation(self, conversation_id: int) -> None:
        await self._execute(
            self.table().delete().eq("conversation_id", conversation_id)
        )


class SupabaseNovelStore(SupabaseTable, NovelStore):
    table_name = NOVELS_TABLE

    async def list(self) -> List[Novel]:
        rows = await self._execute(self.table().select("*").order("id"))
        return [Novel.model_validate(row) for row in rows]

    async def get(self, novel_id: int) -> Optional[Novel]:
        rows = await self._execute(
            self.table().select("*").eq("id", novel_id).limit(1)
        )
        return Novel.model_validate(rows[0]) if rows else None

    async def create(self, title: Optional[str], description: Optional[str]) -> Novel:
        rows = await self._execute(
            self.table().insert({"title": title, "description": description})
        )
        if not rows:
            raise RuntimeError("Novel insert returned no row")
        return Novel.model_validate(rows[0])

    async def update(
        self,
        novel_id: int,
        title: Optional[str],
        description: Optional[str],
    ) -> Optional[Novel]:
        rows = await self._execute(
            self.table()
            .update({"title": title, "description": description, "updated_at": _utcnow()})
            .eq("id", novel_id)
        )
        return Novel.model_validate(rows[0]) if rows else None

    async def delete(self, novel_id: int) -> bool:
        # Chapters belong to their novel and go with it.
        await self._execute(
            self.client.table(CHAPTERS_TABLE).delete().eq("novel_id", novel_id)
        )
        rows = await self._execute(self.table().delete().eq("id", novel_id))
        return len(rows) > 0


class SupabaseChapterStore(SupabaseTable, ChapterStore):
    table_name = CHAPTERS_TABLE

    async def list_by_novel(self, novel_id: int) -> List[Chapter]:
        rows = await self._execute(
            self.table().select("*").eq("novel_id", novel_id).order("id")
        )
        return [Chapter.model_validate(row) for row in rows]

    async def get(self, chapter_id: int) -> Optional[Chapter]:
        rows = await self._execute(
            self.table().select("*").eq("id", chapter_id).limit(1)
        )
        return Chapter.model_validate(rows[0]) if rows else None

    async def create(
        self,
        novel_id: int,
        title: Optional[str],
        content: Optional[str],
    ) -> Chapter:
        rows = await self._execute(
            self.table().insert({"novel_id": novel_id, "title": title, "content": content})
        )
        if not rows:
            raise RuntimeError("Chapter insert returned no row")
        return Chapter.model_validate(rows[0])

    async def update(
        self,
        chapter_id: int,
        title: Optional[str],
        content: Optional[str],
    ) -> Optional[Chapter]:
        rows = await self._execute(
            self.table()
            .update({"title": title, "content": content, "updated_at": _utcnow()})
            .eq("id", chapter_id)
        )
        return Chapter.model_validate(rows[0]) if rows else None

    async def delete(self, chapter_id: int) -> bool:
        rows = await self._execute(self.table().delete().eq("id", chapter_id))
        return len(rows) > 0
