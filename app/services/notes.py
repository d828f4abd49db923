"""Note directory: CRUD and search over notes, gated by the access engine."""

import logging
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import NotFoundError
from app.models.note import Note, NoteVisibility
from app.models.note_share import NoteShare
from app.models.note_tag import note_tags
from app.models.public_link import PublicLink
from app.models.tag import Tag
from app.models.user import User
from app.services import access, identity, visibility

logger = logging.getLogger(__name__)

_UNSET = object()


def normalize_tag(label: str) -> str:
    return label.strip().lower()


async def get_or_create_tags(tag_labels: Iterable[str], db: AsyncSession) -> List[Tag]:
    """Get existing tags or create new ones, dropping blanks and duplicates"""
    tags = []
    seen = set()
    for label in tag_labels or []:
        label = normalize_tag(label)
        if not label or label in seen:
            continue
        seen.add(label)

        result = await db.execute(select(Tag).where(Tag.label == label))
        tag = result.scalar_one_or_none()

        if not tag:
            tag = Tag(label=label)
            db.add(tag)
            await db.flush()  # Flush to get the ID

        tags.append(tag)

    return tags


def tags_to_labels(tags) -> List[str]:
    if not tags:
        return []
    return sorted(tag.label for tag in tags)


async def load_note(db: AsyncSession, note_id: int) -> Note:
    """Fetch a note with its tags and owner, refreshing any stale state"""
    result = await db.execute(
        select(Note)
        .options(selectinload(Note.tags), selectinload(Note.owner))
        .where(Note.id == note_id)
        .execution_options(populate_existing=True)
    )
    note = result.scalar_one_or_none()
    if note is None:
        raise NotFoundError("Note not found")
    return note


async def shared_with_emails(db: AsyncSession, note: Note) -> List[str]:
    """Emails of users the note is shared with, excluding the owner"""
    result = await db.execute(
        select(User.email)
        .join(NoteShare, NoteShare.shared_with_user_id == User.id)
        .where(NoteShare.note_id == note.id, User.id != note.owner_id)
        .order_by(User.email)
    )
    return list(result.scalars().all())


async def create_note(
    db: AsyncSession,
    principal: str,
    title: str,
    content: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
) -> Note:
    owner = await identity.resolve_user(db, principal)

    db_note = Note(
        title=title,
        content=content,
        owner_id=owner.id,
        visibility=visibility.initial_visibility(),
    )
    db_note.tags = await get_or_create_tags(tags or [], db)

    db.add(db_note)
    await db.commit()

    logger.info("User %s created note %s", owner.id, db_note.id)
    return await load_note(db, db_note.id)


async def get_note(db: AsyncSession, note_id: int, principal: str) -> Note:
    user_id = await identity.resolve_user_id(db, principal)
    note = await load_note(db, note_id)
    await access.ensure_can_read(db, note, user_id)
    return note


async def update_note(
    db: AsyncSession,
    note_id: int,
    principal: str,
    title: Optional[str] = None,
    content=_UNSET,
    tags: Optional[Iterable[str]] = None,
    new_visibility: Optional[NoteVisibility] = None,
) -> Note:
    """Owner-only partial update; ``None`` leaves a field untouched"""
    user_id = await identity.resolve_user_id(db, principal)
    note = await load_note(db, note_id)
    access.ensure_owner(note, user_id, "update this note")

    if title is not None:
        note.title = title
    if content is not _UNSET:
        note.content = content
    if tags is not None:
        note.tags = await get_or_create_tags(tags, db)
    if new_visibility is not None:
        visibility.set_visibility(note, new_visibility)

    await db.commit()
    return await load_note(db, note_id)


async def delete_note(db: AsyncSession, note_id: int, principal: str) -> None:
    """Delete a note together with its shares, public links and tag links"""
    user_id = await identity.resolve_user_id(db, principal)
    note = await load_note(db, note_id)
    access.ensure_owner(note, user_id, "delete this note")

    await db.execute(delete(NoteShare).where(NoteShare.note_id == note_id))
    await db.execute(delete(PublicLink).where(PublicLink.note_id == note_id))
    await db.execute(delete(note_tags).where(note_tags.c.note_id == note_id))
    await db.execute(delete(Note).where(Note.id == note_id))
    await db.commit()

    logger.info("User %s deleted note %s", user_id, note_id)


def _apply_filters(stmt, query: Optional[str], tag: Optional[str], visibility_filter: Optional[NoteVisibility]):
    if query:
        stmt = stmt.where(
            or_(
                Note.title.ilike(f"%{query}%"),
                Note.content.ilike(f"%{query}%"),
            )
        )
    if tag and normalize_tag(tag):
        stmt = stmt.where(Note.tags.any(Tag.label == normalize_tag(tag)))
    if visibility_filter is not None:
        stmt = stmt.where(Note.visibility == visibility_filter)
    return stmt


async def _paginate(db: AsyncSession, stmt, page: int, size: int) -> Tuple[List[Note], int]:
    total = await db.scalar(select(func.count()).select_from(stmt.subquery()))
    result = await db.execute(
        stmt.options(selectinload(Note.tags), selectinload(Note.owner))
        .order_by(Note.updated_at.desc(), Note.id.desc())
        .offset(page * size)
        .limit(size)
    )
    return list(result.scalars().all()), total or 0


async def search_notes(
    db: AsyncSession,
    principal: str,
    query: Optional[str] = None,
    tag: Optional[str] = None,
    visibility_filter: Optional[NoteVisibility] = None,
    page: int = 0,
    size: int = 10,
) -> Tuple[List[Note], int]:
    """Search the caller's own notes, newest update first"""
    user_id = await identity.resolve_user_id(db, principal)
    stmt = _apply_filters(select(Note).where(Note.owner_id == user_id), query, tag, visibility_filter)
    return await _paginate(db, stmt, page, size)


async def list_shared_with_me(
    db: AsyncSession,
    principal: str,
    query: Optional[str] = None,
    tag: Optional[str] = None,
    page: int = 0,
    size: int = 10,
) -> Tuple[List[Note], int]:
    user_id = await identity.resolve_user_id(db, principal)
    stmt = (
        select(Note)
        .join(NoteShare, NoteShare.note_id == Note.id)
        .where(NoteShare.shared_with_user_id == user_id)
    )
    stmt = _apply_filters(stmt, query, tag, None)
    return await _paginate(db, stmt, page, size)


async def list_tags(db: AsyncSession, principal: str) -> List[str]:
    """Tag labels used on the caller's own notes"""
    user_id = await identity.resolve_user_id(db, principal)
    result = await db.execute(
        select(Tag.label)
        .join(note_tags, note_tags.c.tag_id == Tag.id)
        .join(Note, Note.id == note_tags.c.note_id)
        .where(Note.owner_id == user_id)
        .distinct()
        .order_by(Tag.label)
    )
    return list(result.scalars().all())
