"""AI chat endpoints."""
import logging
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, StreamingResponse
from app.schemas.requests import ChatRequest
from app.services.chat_service import ChatService
from app.dependencies import get_chat_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/chat", response_class=PlainTextResponse)
async def chat(
    request: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> PlainTextResponse:
    """
    Handle a buffered chat request.

    Always answers 200: upstream failures come back as an error message in
    the body.

    Args:
        request: Chat request with prompt and optional context

    Returns:
        Plain-text assistant reply
    """
    content = await chat_service.chat(request)
    return PlainTextResponse(content)


@router.post("/chat/stream")
async def chat_stream(
    request: ChatRequest,
    chat_service: ChatService = Depends(get_chat_service),
) -> StreamingResponse:
    """
    Handle a streaming chat request (SSE).

    The turn runs in the background; this handler returns as soon as the
    channel is open. The stream carries an optional `meta` event for a new
    conversation, then one data event per text fragment, and ends with an
    `error` event if the turn fails.

    Args:
        request: Chat request with prompt and optional conversationId

    Returns:
        StreamingResponse with SSE events
    """
    logger.info(
        f"Streaming chat for conversation {request.conversation_id}"
        if request.conversation_id is not None
        else "Streaming chat for a new conversation"
    )
    relay = chat_service.stream_chat(request)
    return StreamingResponse(
        relay.events(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
