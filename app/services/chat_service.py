"""Chat orchestration: conversation resolution, persistence and streaming."""
import asyncio
import logging
from typing import Dict, List, Optional, Set
from weakref import WeakValueDictionary

from app.config import settings
from app.models.domain import Message, Role
from app.schemas.requests import ChatRequest
from app.services.llm_client import LLMClient
from app.services.stream_relay import StreamRelay
from app.stores.base import ConversationStore, MessageStore

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Conversation"
TITLE_MAX_LENGTH = 20
TITLE_ELLIPSIS = "..."


def derive_title(prompt: Optional[str]) -> str:
    """
    Derive a conversation title from its first prompt.

    Args:
        prompt: First user prompt (may be None or empty)

    Returns:
        The prompt itself, its first 20 characters plus an ellipsis when
        longer, or the placeholder title when empty
    """
    if not prompt:
        return DEFAULT_TITLE
    if len(prompt) > TITLE_MAX_LENGTH:
        return prompt[:TITLE_MAX_LENGTH] + TITLE_ELLIPSIS
    return prompt


def to_upstream_messages(history: List[Message]) -> List[Dict[str, str]]:
    """Convert persisted messages to role/content pairs, preserving order."""
    return [{"role": Role(msg.role).value, "content": msg.content} for msg in history]


class ChatService:
    """Runs buffered and streaming chat turns against the upstream model."""

    def __init__(
        self,
        conversations: ConversationStore,
        messages: MessageStore,
        llm_client: Optional[LLMClient] = None,
        max_concurrent_streams: Optional[int] = None,
        stream_idle_timeout: Optional[float] = None,
        relay_queue_size: int = 256,
    ):
        self.conversations = conversations
        self.messages = messages
        self.llm_client = llm_client or LLMClient()
        self.stream_idle_timeout = (
            stream_idle_timeout if stream_idle_timeout is not None else settings.stream_idle_timeout
        )
        self.relay_queue_size = relay_queue_size
        self._slots = asyncio.Semaphore(max_concurrent_streams or settings.max_concurrent_streams)
        self._tasks: Set[asyncio.Task] = set()
        self._locks: "WeakValueDictionary[int, asyncio.Lock]" = WeakValueDictionary()

    async def chat(self, request: ChatRequest) -> str:
        """
        Handle a buffered chat request.

        Nothing is persisted; the prompt alone is sent as the history.

        Returns:
            Upstream content, or a degrade message if the call failed
        """
        return await self.llm_client.complete(
            [{"role": Role.USER.value, "content": request.prompt or ""}]
        )

    def stream_chat(self, request: ChatRequest) -> StreamRelay:
        """
        Start a streaming chat turn in the background.

        Must be called from a running event loop. Returns immediately with
        the relay the HTTP response drains.
        """
        relay = StreamRelay(
            idle_timeout=self.stream_idle_timeout,
            max_pending=self.relay_queue_size,
        )
        task = asyncio.create_task(self._run_stream(request, relay))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        relay.attach(task)
        return relay

    @property
    def active_streams(self) -> int:
        """Number of streaming turns still running or waiting for a slot."""
        return len(self._tasks)

    def _conversation_lock(self, conversation_id: int) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock

    async def _resolve_conversation(self, request: ChatRequest, relay: StreamRelay) -> int:
        if request.conversation_id is not None:
            return request.conversation_id

        title = derive_title(request.prompt)
        conversation_id = await self.conversations.create(title)
        logger.info(f"Created conversation {conversation_id} ({title!r})")
        await relay.send_meta(conversation_id, title)
        return conversation_id

    async def _run_stream(self, request: ChatRequest, relay: StreamRelay) -> None:
        async with self._slots:
            try:
                await relay.start()
                conversation_id = await self._resolve_conversation(request, relay)

                # Turns on the same conversation are serialized so history
                # reads never interleave with another turn's appends.
                async with self._conversation_lock(conversation_id):
                    await self.messages.append(conversation_id, Role.USER, request.prompt or "")

                    history = await self.messages.list_by_conversation(conversation_id)
                    fragments: List[str] = []
                    async for fragment in self.llm_client.complete_stream(
                        to_upstream_messages(history)
                    ):
                        fragments.append(fragment)
                        await relay.send(fragment)

                    content = "".join(fragments)
                    if content:
                        await self.messages.append(conversation_id, Role.ASSISTANT, content)
                        await self.conversations.touch(conversation_id)
                    else:
                        logger.warning(f"Upstream returned no content for conversation {conversation_id}")

                await relay.complete()
            except asyncio.CancelledError:
                logger.info("Streaming chat turn cancelled")
                raise
            except Exception as e:
                logger.error(f"Streaming chat request failed: {e}", exc_info=True)
                await relay.fail(e)

    async def aclose(self) -> None:
        """Cancel in-flight streaming turns and wait for them to finish."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} in-flight streaming chat turn(s)")

    async def wait_closed(self) -> None:
        """Wait for every streaming turn started so far to finish."""
        tasks = list(self._tasks)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
