"""Public link registry: unguessable tokens granting anonymous read access."""

import logging
import secrets
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.errors import ConflictError, ExpiredError, NotFoundError
from app.models.note import Note
from app.models.public_link import TOKEN_LENGTH, PublicLink
from app.services import access, identity, visibility
from app.services.notes import load_note

logger = logging.getLogger(__name__)


def generate_token() -> str:
    """Generate a 32 character hex token from 128 cryptographically random bits"""
    return secrets.token_hex(TOKEN_LENGTH // 2)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize to an aware UTC datetime; naive values are taken as UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


async def _load_link(db: AsyncSession, link_id: int) -> PublicLink:
    result = await db.execute(
        select(PublicLink)
        .options(selectinload(PublicLink.note))
        .where(PublicLink.id == link_id)
        .execution_options(populate_existing=True)
    )
    link = result.scalar_one_or_none()
    if link is None:
        raise NotFoundError("Public link not found")
    return link


async def create_public_link(
    db: AsyncSession,
    note_id: int,
    principal: str,
    expires_at: Optional[datetime] = None,
) -> PublicLink:
    """Issue a new public link for a note and mark the note PUBLIC.

    Earlier links for the same note are left in place, so several valid
    tokens may coexist. The token is generated once here and never changes.
    A token collision is reported as a ConflictError the caller may retry.
    """
    owner_id = await identity.resolve_user_id(db, principal)
    note = await load_note(db, note_id)
    access.ensure_owner(note, owner_id, "create a public link for this note")

    link = PublicLink(
        note_id=note.id,
        token=generate_token(),
        expires_at=to_utc(expires_at),
    )
    db.add(link)
    visibility.force_public(note)

    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning("Public link token collision for note %s", note_id)
        raise ConflictError("Could not allocate a unique public link token, please retry")

    logger.info("Public link %s issued for note %s (expires_at=%s)", link.id, note_id, link.expires_at)
    return await _load_link(db, link.id)


async def resolve_public_token(db: AsyncSession, token: str) -> Note:
    """Return the note behind ``token`` without any ownership check.

    Raises NotFoundError when no link carries the token and ExpiredError
    when the link exists but the current instant is after ``expires_at``.
    """
    result = await db.execute(select(PublicLink).where(PublicLink.token == token))
    link = result.scalar_one_or_none()
    if link is None:
        raise NotFoundError("Public link not found")

    if link.is_expired():
        logger.info("Expired public link %s requested", link.id)
        raise ExpiredError("Public link has expired", to_utc(link.expires_at))

    return await load_note(db, link.note_id)


async def delete_public_link(db: AsyncSession, link_id: int, principal: str) -> None:
    """Revoke a public link; the note's visibility is left as it is"""
    owner_id = await identity.resolve_user_id(db, principal)
    link = await _load_link(db, link_id)
    access.ensure_owner(link.note, owner_id, "delete this public link")

    await db.delete(link)
    await db.commit()

    logger.info("Public link %s on note %s revoked", link_id, link.note_id)


async def list_public_links(db: AsyncSession, note_id: int, principal: str) -> List[PublicLink]:
    owner_id = await identity.resolve_user_id(db, principal)
    note = await load_note(db, note_id)
    access.ensure_owner(note, owner_id, "view public links of this note")

    result = await db.execute(
        select(PublicLink).where(PublicLink.note_id == note_id).order_by(PublicLink.id)
    )
    return list(result.scalars().all())
