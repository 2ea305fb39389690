"""Chapter management endpoints."""
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException
from app.dependencies import get_chapter_store, get_novel_store
from app.models.domain import Chapter
from app.schemas.requests import ChapterRequest
from app.schemas.responses import DeleteResponse
from app.stores.base import ChapterStore, NovelStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chapters"])


async def _require_novel(novel_id: int, novels: NovelStore) -> None:
    if await novels.get(novel_id) is None:
        raise HTTPException(status_code=404, detail="Novel not found")


@router.get("/novels/{novel_id}/chapters", response_model=List[Chapter])
async def list_chapters(
    novel_id: int,
    chapters: ChapterStore = Depends(get_chapter_store),
) -> List[Chapter]:
    """List a novel's chapters."""
    return await chapters.list_by_novel(novel_id)


@router.post("/novels/{novel_id}/chapters", response_model=Chapter)
async def create_chapter(
    novel_id: int,
    request: ChapterRequest,
    chapters: ChapterStore = Depends(get_chapter_store),
    novels: NovelStore = Depends(get_novel_store),
) -> Chapter:
    """Add a chapter to an existing novel."""
    await _require_novel(novel_id, novels)
    chapter = await chapters.create(novel_id, request.title, request.content)
    logger.info(f"Created chapter {chapter.id} in novel {novel_id}")
    return chapter


@router.get("/chapters/{chapter_id}", response_model=Chapter)
async def get_chapter(
    chapter_id: int,
    chapters: ChapterStore = Depends(get_chapter_store),
) -> Chapter:
    """Get a chapter by ID."""
    chapter = await chapters.get(chapter_id)
    if chapter is None:
        raise HTTPException(status_code=404, detail="Chapter not found")
    return chapter


@router.put("/chapters/{chapter_id}", response_model=Chapter)
async def update_chapter(
    chapter_id: int,
    request: ChapterRequest,
    chapters: ChapterStore = Depends(get_chapter_store),
) -> Chapter:
    """Replace a chapter's title and content."""
    chapter = await chapters.update(chapter_id, request.title, request.content)
    if chapter is None:
        raise HTTPException(status_code=404, detail="Chapter not found")
    return chapter


@router.delete("/chapters/{chapter_id}", response_model=DeleteResponse)
async def delete_chapter(
    chapter_id: int,
    chapters: ChapterStore = Depends(get_chapter_store),
) -> DeleteResponse:
    """Delete a chapter."""
    if not await chapters.delete(chapter_id):
        raise HTTPException(status_code=404, detail="Chapter not found")
    return DeleteResponse(message="Chapter deleted successfully")
