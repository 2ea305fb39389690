"""FastAPI dependencies providing stores and the chat service."""
from functools import lru_cache

from app.clients.supabase import (
    SupabaseChapterStore,
    SupabaseConversationStore,
    SupabaseMessageStore,
    SupabaseNovelStore,
)
from app.services.chat_service import ChatService
from app.stores.base import ChapterStore, ConversationStore, MessageStore, NovelStore


@lru_cache()
def get_conversation_store() -> ConversationStore:
    return SupabaseConversationStore()


@lru_cache()
def get_message_store() -> MessageStore:
    return SupabaseMessageStore()


@lru_cache()
def get_novel_store() -> NovelStore:
    return SupabaseNovelStore()


@lru_cache()
def get_chapter_store() -> ChapterStore:
    return SupabaseChapterStore()


@lru_cache()
def get_chat_service() -> ChatService:
    """Get the process-wide chat service (owns the streaming task pool)."""
    return ChatService(
        conversations=get_conversation_store(),
        messages=get_message_store(),
    )
