from typing import List
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import get_current_active_user
from app.models.note_share import NoteShare
from app.models.user import User
from app.schemas.share import ShareCreate, ShareResponse
from app.services import shares as share_service

router = APIRouter()


def to_share_response(share: NoteShare) -> ShareResponse:
    return ShareResponse(
        id=share.id,
        note_id=share.note_id,
        shared_with_email=share.shared_with_user.email,
        permission=share.permission,
        created_at=share.created_at,
    )


@router.post("/{note_id}/share/user", response_model=ShareResponse, status_code=status.HTTP_201_CREATED)
async def share_note(
    note_id: int,
    payload: ShareCreate,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Share a note with another user by email (only owner) - read-only access"""
    share = await share_service.create_share(db, note_id, current_user.email, payload.email)
    return to_share_response(share)


@router.get("/{note_id}/shares", response_model=List[ShareResponse])
async def list_note_shares(
    note_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """List the users a readable note is shared with"""
    shares = await share_service.list_shares(db, note_id, current_user.email)
    return [to_share_response(share) for share in shares]


@router.delete("/shares/{share_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unshare_note(
    share_id: int,
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Remove a user's access to a note (only owner); visibility is unchanged"""
    await share_service.delete_share(db, share_id, current_user.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
