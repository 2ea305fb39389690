"""Novel management endpoints."""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from app.dependencies import get_novel_store
from app.models.domain import Novel
from app.schemas.requests import NovelRequest
from app.schemas.responses import DeleteResponse
from app.stores.base import NovelStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/novels", tags=["novels"])


@router.get("", response_model=List[Novel])
async def list_novels(novels: NovelStore = Depends(get_novel_store)) -> List[Novel]:
    """List all novels."""
    return await novels.list()


@router.post("", response_model=Novel)
async def create_novel(
    request: NovelRequest,
    novels: NovelStore = Depends(get_novel_store),
) -> Novel:
    """Create a novel."""
    novel = await novels.create(request.title, request.description)
    logger.info(f"Created novel {novel.id}")
    return novel


@router.get("/{novel_id}", response_model=Novel)
async def get_novel(novel_id: int, novels: NovelStore = Depends(get_novel_store)) -> Novel:
    """Get a novel by ID."""
    novel = await novels.get(novel_id)
    if novel is None:
        raise HTTPException(status_code=404, detail="Novel not found")
    return novel


@router.put("/{novel_id}", response_model=Novel)
async def update_novel(
    novel_id: int,
    request: NovelRequest,
    novels: NovelStore = Depends(get_novel_store),
) -> Novel:
    """Replace a novel's title and description."""
    novel = await novels.update(novel_id, request.title, request.description)
    if novel is None:
        raise HTTPException(status_code=404, detail="Novel not found")
    return novel


@router.delete("/{novel_id}", response_model=DeleteResponse)
async def delete_novel(novel_id: int, novels: NovelStore = Depends(get_novel_store)) -> DeleteResponse:
    """Delete a novel and its chapters."""
    if not await novels.delete(novel_id):
        raise HTTPException(status_code=404, detail="Novel not found")
    return DeleteResponse(message="Novel deleted successfully")
