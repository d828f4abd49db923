from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_active_user
from app.models.note import Note, NoteVisibility
from app.models.user import User
from app.schemas.note import NoteCreate, NoteUpdate, NoteResponse, NotePage
from app.services import notes as note_service

router = APIRouter()


async def build_note_response(note: Note, db: AsyncSession) -> NoteResponse:
    """Convert a loaded note to its response, tags as labels"""
    return NoteResponse(
        id=note.id,
        title=note.title,
        content=note.content,
        tags=note_service.tags_to_labels(note.tags),
        visibility=note.visibility,
        owner_id=note.owner_id,
        owner_email=note.owner.email if note.owner else None,
        shared_with=await note_service.shared_with_emails(db, note),
        created_at=note.created_at,
        updated_at=note.updated_at
    )


async def build_note_page(notes: List[Note], total: int, page: int, size: int, db: AsyncSession) -> NotePage:
    items = [await build_note_response(note, db) for note in notes]
    return NotePage(items=items, total=total, page=page, size=size)


@router.post("/", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
async def create_note(
    note: NoteCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a new private note"""
    db_note = await note_service.create_note(
        db,
        current_user.email,
        title=note.title,
        content=note.content,
        tags=note.tags or [],
    )
    return await build_note_response(db_note, db)


@router.get("/", response_model=NotePage)
async def search_notes(
    query: Optional[str] = Query(None, description="Search text in title and content"),
    tag: Optional[str] = Query(None, description="Only notes carrying this tag"),
    visibility: Optional[NoteVisibility] = Query(None, description="Only notes with this visibility"),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Search the current user's own notes, most recently updated first"""
    notes, total = await note_service.search_notes(
        db,
        current_user.email,
        query=query,
        tag=tag,
        visibility_filter=visibility,
        page=page,
        size=size,
    )
    return await build_note_page(notes, total, page, size, db)


@router.get("/shared", response_model=NotePage)
async def get_shared_notes(
    query: Optional[str] = Query(None, description="Search text in title and content"),
    tag: Optional[str] = Query(None, description="Only notes carrying this tag"),
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Get notes shared with the current user"""
    notes, total = await note_service.list_shared_with_me(
        db, current_user.email, query=query, tag=tag, page=page, size=size
    )
    return await build_note_page(notes, total, page, size, db)


@router.get("/tags", response_model=List[str])
async def get_all_tags(
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Get all tags used on the current user's own notes"""
    return await note_service.list_tags(db, current_user.email)


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(
    note_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Get a note the current user owns, was shared, or that is public"""
    note = await note_service.get_note(db, note_id, current_user.email)
    return await build_note_response(note, db)


@router.put("/{note_id}", response_model=NoteResponse)
async def update_note(
    note_id: int,
    note_update: NoteUpdate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Update a note (only owner)"""
    update_data = note_update.model_dump(exclude_unset=True)
    if "visibility" in update_data:
        update_data["new_visibility"] = update_data.pop("visibility")

    note = await note_service.update_note(db, note_id, current_user.email, **update_data)
    return await build_note_response(note, db)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Delete a note with its shares and public links (only owner)"""
    await note_service.delete_note(db, note_id, current_user.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
