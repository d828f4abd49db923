"""Share registry: per-user read grants on a note."""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import ConflictError, NotFoundError
from app.models.note_share import NoteShare, SharePermission
from app.services import access, identity, visibility
from app.services.notes import load_note

logger = logging.getLogger(__name__)


async def _load_share(db: AsyncSession, share_id: int) -> NoteShare:
    result = await db.execute(
        select(NoteShare)
        .options(selectinload(NoteShare.note), selectinload(NoteShare.shared_with_user))
        .where(NoteShare.id == share_id)
        .execution_options(populate_existing=True)
    )
    share = result.scalar_one_or_none()
    if share is None:
        raise NotFoundError("Share not found")
    return share


async def create_share(
    db: AsyncSession,
    note_id: int,
    principal: str,
    target_email: str,
) -> NoteShare:
    """Grant ``target_email`` read access and mark the note SHARED.

    Checks run in order: the caller owns the note, the target user exists,
    and the pair is not already shared. The unique constraint on
    (note_id, shared_with_user_id) backs the last check under concurrency.
    """
    owner_id = await identity.resolve_user_id(db, principal)
    note = await load_note(db, note_id)
    access.ensure_owner(note, owner_id, "share this note")

    target = await identity.find_user(db, target_email)
    if target is None:
        raise NotFoundError("User to share with not found")

    existing = await db.execute(
        select(NoteShare.id).where(
            NoteShare.note_id == note_id,
            NoteShare.shared_with_user_id == target.id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Note already shared with this user")

    target_id = target.id
    share = NoteShare(
        note_id=note.id,
        shared_with_user_id=target_id,
        permission=SharePermission.READ,
    )
    db.add(share)
    visibility.force_shared(note)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Concurrent share of note %s with user %s rejected", note_id, target_id)
        raise ConflictError("Note already shared with this user")

    logger.info("Note %s shared with user %s", note_id, target_id)
    return await _load_share(db, share.id)


async def delete_share(db: AsyncSession, share_id: int, principal: str) -> None:
    """Revoke a share; the note's visibility is left as it is"""
    owner_id = await identity.resolve_user_id(db, principal)
    share = await _load_share(db, share_id)
    access.ensure_owner(share.note, owner_id, "delete this share")

    await db.delete(share)
    await db.commit()

    logger.info("Share %s on note %s revoked", share_id, share.note_id)


async def list_shares(db: AsyncSession, note_id: int, principal: str) -> List[NoteShare]:
    """Shares of a note, for any caller who can read it"""
    user_id = await identity.resolve_user_id(db, principal)
    note = await load_note(db, note_id)
    await access.ensure_can_read(db, note, user_id)

    result = await db.execute(
        select(NoteShare)
        .options(selectinload(NoteShare.shared_with_user))
        .where(NoteShare.note_id == note_id)
        .order_by(NoteShare.id)
    )
    return list(result.scalars().all())
