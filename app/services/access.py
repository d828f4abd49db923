"""Read-access decisions for authenticated callers."""

from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ForbiddenError
from app.models.note import Note, NoteVisibility
from app.models.note_share import NoteShare


def is_owner(note: Note, user_id: int) -> bool:
    return note.owner_id == user_id


def can_read(note: Note, user_id: int, shared_with_ids: Iterable[int]) -> bool:
    """Owner, then share grant, then PUBLIC visibility; anything else is denied.

    The PUBLIC check reads the visibility field only. Whether a public link
    still exists or has expired matters for token lookups, not here.
    """
    if is_owner(note, user_id):
        return True
    if user_id in set(shared_with_ids):
        return True
    return note.visibility == NoteVisibility.PUBLIC


async def shared_with_ids(db: AsyncSession, note_id: int) -> List[int]:
    result = await db.execute(
        select(NoteShare.shared_with_user_id).where(NoteShare.note_id == note_id)
    )
    return list(result.scalars().all())


async def ensure_can_read(db: AsyncSession, note: Note, user_id: int) -> None:
    if is_owner(note, user_id):
        return
    if not can_read(note, user_id, await shared_with_ids(db, note.id)):
        raise ForbiddenError("You don't have access to this note")


def ensure_owner(note: Note, user_id: int, action: str) -> None:
    if not is_owner(note, user_id):
        raise ForbiddenError(f"You don't have permission to {action}")
