from typing import List, Optional
from fastapi import APIRouter, Body, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.security import get_current_active_user
from app.models.public_link import PublicLink
from app.models.user import User
from app.schemas.note import PublicNoteResponse
from app.schemas.public_link import PublicLinkCreate, PublicLinkResponse
from app.services import notes as note_service
from app.services import public_links as link_service

# Authenticated management under /notes/{note_id}/...
router = APIRouter()
# Revocation by link id under /public-links
links_router = APIRouter()
# Anonymous token lookup, mounted at settings.PUBLIC_LINK_PREFIX
public_router = APIRouter()


def to_link_response(link: PublicLink) -> PublicLinkResponse:
    return PublicLinkResponse(
        id=link.id,
        note_id=link.note_id,
        token=link.token,
        full_url=f"{settings.PUBLIC_LINK_PREFIX}/{link.token}",
        created_at=link_service.to_utc(link.created_at),
        expires_at=link_service.to_utc(link.expires_at),
    )


@router.post("/{note_id}/share/public", response_model=PublicLinkResponse, status_code=status.HTTP_201_CREATED)
async def create_public_link(
    note_id: int,
    payload: Optional[PublicLinkCreate] = Body(None),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Generate a public link for a note (only owner); the note becomes PUBLIC"""
    expires_at = payload.expires_at if payload else None
    link = await link_service.create_public_link(db, note_id, current_user.email, expires_at)
    return to_link_response(link)


@router.get("/{note_id}/public-links", response_model=List[PublicLinkResponse])
async def list_public_links(
    note_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """List every public link issued for a note (only owner)"""
    links = await link_service.list_public_links(db, note_id, current_user.email)
    return [to_link_response(link) for link in links]


@links_router.delete("/{link_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_public_link(
    link_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Revoke a public link (only owner); visibility is unchanged"""
    await link_service.delete_public_link(db, link_id, current_user.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@public_router.get("/{token}", response_model=PublicNoteResponse)
async def get_public_note(token: str, db: AsyncSession = Depends(get_db)):
    """Read a note through its public link; 404 if unknown, 410 if expired"""
    note = await link_service.resolve_public_token(db, token)
    return PublicNoteResponse(
        id=note.id,
        title=note.title,
        content=note.content,
        visibility=note.visibility,
        tags=note_service.tags_to_labels(note.tags),
        owner_email=note.owner.email if note.owner else None,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )
