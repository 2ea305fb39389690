"""Pytest configuration and fixtures."""
import json
import os
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

# Settings are read at import time; provide a complete test environment.
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault(
    "SUPABASE_SERVICE_ROLE_KEY",
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.eyJyb2xlIjoic2VydmljZV9yb2xlIn0.dGVzdA",
)
os.environ.setdefault("LLM_API_URL", "https://llm.test/chat/completions")
os.environ.setdefault("LLM_API_KEY", "test-key")
os.environ.setdefault("LLM_MODEL", "test-model")

import httpx
import pytest

from app.models.domain import Chapter, Conversation, Message, Novel, Role
from app.services.chat_service import ChatService
from app.services.llm_client import LLMClient
from app.stores.base import ChapterStore, ConversationStore, MessageStore, NovelStore


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryConversationStore(ConversationStore):
    """Conversation store fake keeping rows in a dict."""

    def __init__(self):
        self.rows: Dict[int, Conversation] = {}
        self._next_id = 1

    async def create(self, title: str) -> int:
        conversation_id = self._next_id
        self._next_id += 1
        now = _now()
        self.rows[conversation_id] = Conversation(
            id=conversation_id, title=title, created_at=now, updated_at=now
        )
        return conversation_id

    async def get(self, conversation_id: int) -> Optional[Conversation]:
        return self.rows.get(conversation_id)

    async def touch(self, conversation_id: int) -> None:
        row = self.rows[conversation_id]
        self.rows[conversation_id] = row.model_copy(update={"updated_at": _now()})

    async def list(self) -> List[Conversation]:
        return sorted(self.rows.values(), key=lambda c: c.updated_at, reverse=True)

    async def update_title(self, conversation_id: int, title: str) -> Optional[Conversation]:
        row = self.rows.get(conversation_id)
        if row is None:
            return None
        row = row.model_copy(update={"title": title, "updated_at": _now()})
        self.rows[conversation_id] = row
        return row

    async def delete(self, conversation_id: int) -> bool:
        return self.rows.pop(conversation_id, None) is not None


class InMemoryMessageStore(MessageStore):
    """Message store fake; rejects messages for unknown conversations."""

    def __init__(self, conversations: Optional[InMemoryConversationStore] = None):
        self.conversations = conversations
        self.rows: List[Message] = []
        self._next_id = 1

    async def append(self, conversation_id: int, role: Role, content: str) -> int:
        if self.conversations is not None and conversation_id not in self.conversations.rows:
            raise LookupError(f"Conversation {conversation_id} does not exist")
        message_id = self._next_id
        self._next_id += 1
        self.rows.append(
            Message(
                id=message_id,
                conversation_id=conversation_id,
                role=role,
                content=content,
                created_at=_now(),
            )
        )
        return message_id

    async def list_by_conversation(self, conversation_id: int) -> List[Message]:
        return [m for m in self.rows if m.conversation_id == conversation_id]

    async def delete_by_conversation(self, conversation_id: int) -> None:
        self.rows = [m for m in self.rows if m.conversation_id != conversation_id]


class InMemoryNovelStore(NovelStore):
    def __init__(self):
        self.rows: Dict[int, Novel] = {}
        self._next_id = 1

    async def list(self) -> List[Novel]:
        return list(self.rows.values())

    async def get(self, novel_id: int) -> Optional[Novel]:
        return self.rows.get(novel_id)

    async def create(self, title: Optional[str], description: Optional[str]) -> Novel:
        novel = Novel(id=self._next_id, title=title, description=description, created_at=_now())
        self.rows[novel.id] = novel
        self._next_id += 1
        return novel

    async def update(self, novel_id, title, description) -> Optional[Novel]:
        if novel_id not in self.rows:
            return None
        novel = self.rows[novel_id].model_copy(
            update={"title": title, "description": description, "updated_at": _now()}
        )
        self.rows[novel_id] = novel
        return novel

    async def delete(self, novel_id: int) -> bool:
        return self.rows.pop(novel_id, None) is not None


class InMemoryChapterStore(ChapterStore):
    def __init__(self):
        self.rows: Dict[int, Chapter] = {}
        self._next_id = 1

    async def list_by_novel(self, novel_id: int) -> List[Chapter]:
        return [c for c in self.rows.values() if c.novel_id == novel_id]

    async def get(self, chapter_id: int) -> Optional[Chapter]:
        return self.rows.get(chapter_id)

    async def create(self, novel_id, title, content) -> Chapter:
        chapter = Chapter(id=self._next_id, novel_id=novel_id, title=title, content=content)
        self.rows[chapter.id] = chapter
        self._next_id += 1
        return chapter

    async def update(self, chapter_id, title, content) -> Optional[Chapter]:
        if chapter_id not in self.rows:
            return None
        chapter = self.rows[chapter_id].model_copy(update={"title": title, "content": content})
        self.rows[chapter_id] = chapter
        return chapter

    async def delete(self, chapter_id: int) -> bool:
        return self.rows.pop(chapter_id, None) is not None


def sse_body(*payloads: str) -> bytes:
    """Encode upstream `data:` frames the way a provider streams them."""
    return "".join(f"data: {payload}\n\n" for payload in payloads).encode("utf-8")


def delta(content: Optional[str]) -> str:
    """JSON stream frame carrying one content delta."""
    return json.dumps({"choices": [{"delta": {"content": content}}]})


def parse_sse(text: str) -> List[Tuple[Optional[str], str]]:
    """Split a downstream SSE body into (event, data) pairs."""
    events = []
    for block in text.split("\n\n"):
        if not block:
            continue
        event = None
        data_lines = []
        for line in block.split("\n"):
            if line.startswith("event: "):
                event = line[len("event: "):]
            elif line.startswith("data: "):
                data_lines.append(line[len("data: "):])
        events.append((event, "\n".join(data_lines)))
    return events


@pytest.fixture
def conversation_store() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture
def message_store(conversation_store) -> InMemoryMessageStore:
    return InMemoryMessageStore(conversation_store)


@pytest.fixture
def novel_store() -> InMemoryNovelStore:
    return InMemoryNovelStore()


@pytest.fixture
def chapter_store() -> InMemoryChapterStore:
    return InMemoryChapterStore()


@pytest.fixture
def upstream_requests() -> List[httpx.Request]:
    """Requests received by the stubbed provider."""
    return []


@pytest.fixture
def make_llm_client(upstream_requests) -> Callable[..., LLMClient]:
    """Build an LLMClient whose provider is a handler function."""

    def factory(handler: Callable[[httpx.Request], httpx.Response]) -> LLMClient:
        def recording_handler(request: httpx.Request) -> httpx.Response:
            upstream_requests.append(request)
            return handler(request)

        return LLMClient(transport=httpx.MockTransport(recording_handler))

    return factory


@pytest.fixture
def make_chat_service(conversation_store, message_store, make_llm_client):
    """Build a ChatService over the in-memory stores and a stubbed provider."""

    def factory(handler, **kwargs) -> ChatService:
        return ChatService(
            conversations=conversation_store,
            messages=message_store,
            llm_client=make_llm_client(handler),
            **kwargs,
        )

    return factory
