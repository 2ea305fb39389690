"""Conversation management endpoints."""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from app.dependencies import get_conversation_store, get_message_store
from app.models.domain import Conversation, Message
from app.schemas.requests import ConversationCreateRequest, ConversationUpdateRequest
from app.schemas.responses import DeleteResponse
from app.services.chat_service import DEFAULT_TITLE
from app.stores.base import ConversationStore, MessageStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


async def _require_conversation(conversation_id: int, conversations: ConversationStore) -> Conversation:
    conversation = await conversations.get(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@router.get("", response_model=List[Conversation])
async def list_conversations(
    conversations: ConversationStore = Depends(get_conversation_store),
) -> List[Conversation]:
    """List conversations, most recently updated first."""
    return await conversations.list()


@router.post("", response_model=Conversation)
async def create_conversation(
    request: ConversationCreateRequest,
    conversations: ConversationStore = Depends(get_conversation_store),
) -> Conversation:
    """
    Create a new conversation.

    Args:
        request: Conversation creation request (empty title gets a placeholder)

    Returns:
        Created conversation
    """
    conversation_id = await conversations.create(request.title or DEFAULT_TITLE)
    return await _require_conversation(conversation_id, conversations)


@router.get("/{conversation_id}", response_model=Conversation)
async def get_conversation(
    conversation_id: int,
    conversations: ConversationStore = Depends(get_conversation_store),
) -> Conversation:
    """Get a conversation by ID."""
    return await _require_conversation(conversation_id, conversations)


@router.put("/{conversation_id}", response_model=Conversation)
async def update_conversation(
    conversation_id: int,
    request: ConversationUpdateRequest,
    conversations: ConversationStore = Depends(get_conversation_store),
) -> Conversation:
    """Rename a conversation. An omitted title leaves it unchanged."""
    conversation = await _require_conversation(conversation_id, conversations)
    if request.title is None:
        return conversation
    updated = await conversations.update_title(conversation_id, request.title)
    if updated is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return updated


@router.delete("/{conversation_id}", response_model=DeleteResponse)
async def delete_conversation(
    conversation_id: int,
    conversations: ConversationStore = Depends(get_conversation_store),
    messages: MessageStore = Depends(get_message_store),
) -> DeleteResponse:
    """Delete a conversation together with its messages."""
    await _require_conversation(conversation_id, conversations)
    await messages.delete_by_conversation(conversation_id)
    if not await conversations.delete(conversation_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    logger.info(f"Deleted conversation {conversation_id}")
    return DeleteResponse(message="Conversation deleted successfully")


@router.get("/{conversation_id}/messages", response_model=List[Message])
async def list_messages(
    conversation_id: int,
    conversations: ConversationStore = Depends(get_conversation_store),
    messages: MessageStore = Depends(get_message_store),
) -> List[Message]:
    """List a conversation's messages in creation order."""
    await _require_conversation(conversation_id, conversations)
    return await messages.list_by_conversation(conversation_id)
