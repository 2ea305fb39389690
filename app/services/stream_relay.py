"""Bridge between a chat turn running in the background and its SSE response."""
import asyncio
import json
import logging
from typing import Any, AsyncGenerator, Optional, Tuple

from app.schemas.responses import MetaEvent

logger = logging.getLogger(__name__)

META_EVENT = "meta"
ERROR_EVENT = "error"

_START = "start"
_META = "meta"
_DATA = "data"
_END = "end"
_ERROR = "error"


def format_sse(data: str, event: Optional[str] = None) -> str:
    """
    Encode one server-sent event.

    Multi-line payloads are split over several `data:` lines so the client
    reassembles them with their newlines intact.
    """
    lines = []
    if event:
        lines.append(f"event: {event}")
    normalized = data.replace("\r\n", "\n").replace("\r", "\n")
    for part in normalized.split("\n"):
        lines.append(f"data: {part}")
    return "\n".join(lines) + "\n\n"


class StreamRelay:
    """Queue-backed downstream channel for one streaming chat turn.

    The producer side (send_meta/send/complete/fail) is driven by the chat
    service; the consumer side (events) is handed to the HTTP response. The
    queue is bounded, so a slow client applies backpressure to the producer.
    """

    def __init__(self, idle_timeout: float = 60.0, max_pending: int = 256):
        self.idle_timeout = idle_timeout
        self.queue: asyncio.Queue[Tuple[str, Any]] = asyncio.Queue(maxsize=max_pending)
        self._finished = False
        self._closed = False
        self._producer: Optional[asyncio.Task] = None

    @property
    def finished(self) -> bool:
        """True once complete() or fail() was called."""
        return self._finished

    def attach(self, task: asyncio.Task) -> None:
        """Bind the producing task so it is cancelled if the channel closes early."""
        self._producer = task

    async def _put(self, item: Tuple[str, Any]) -> None:
        if self._closed:
            return
        await self.queue.put(item)

    async def start(self) -> None:
        """Mark the turn as admitted; the idle timeout only runs from here on."""
        await self._put((_START, None))

    async def send_meta(self, conversation_id: int, title: str) -> None:
        """Announce a newly created conversation."""
        meta = MetaEvent(conversationId=conversation_id, title=title)
        await self._put((_META, meta.model_dump()))

    async def send(self, fragment: str) -> None:
        """Forward one text fragment. Empty fragments are dropped."""
        if fragment:
            await self._put((_DATA, fragment))

    async def complete(self) -> None:
        """Close the channel successfully."""
        if self._finished:
            return
        self._finished = True
        await self._put((_END, None))

    async def fail(self, exc: BaseException) -> None:
        """Close the channel with an error, after any fragments already sent."""
        if self._finished:
            return
        self._finished = True
        await self._put((_ERROR, str(exc) or type(exc).__name__))

    async def events(self) -> AsyncGenerator[str, None]:
        """
        Yield SSE-encoded frames until the channel closes.

        Yields:
            A `meta` event, unnamed data events and, on failure, a final
            `error` event
        """
        started = False
        try:
            while True:
                # A turn still queued for a concurrency slot is not idle
                timeout = self.idle_timeout if started else None
                try:
                    kind, payload = await asyncio.wait_for(self.queue.get(), timeout=timeout)
                except asyncio.TimeoutError:
                    logger.warning(f"Stream idle for {self.idle_timeout}s, closing")
                    yield format_sse(json.dumps({"detail": "Stream timed out"}), event=ERROR_EVENT)
                    break

                if kind == _START:
                    started = True
                    continue
                if kind == _END:
                    break
                if kind == _ERROR:
                    yield format_sse(json.dumps({"detail": payload}, ensure_ascii=False), event=ERROR_EVENT)
                    break
                if kind == _META:
                    yield format_sse(json.dumps(payload, ensure_ascii=False), event=META_EVENT)
                else:
                    yield format_sse(payload)
        finally:
            self._closed = True
            # Unblock a producer waiting on a full queue, including one that
            # is already inside complete() or fail().
            while not self.queue.empty():
                self.queue.get_nowait()
            if self._producer is not None and not self._finished and not self._producer.done():
                logger.info("Downstream closed before the chat turn finished, cancelling it")
                self._producer.cancel()
