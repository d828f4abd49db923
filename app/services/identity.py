"""Map an authenticated principal (an email address) to a user."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError
from app.models.user import User


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def find_user(db: AsyncSession, principal: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == normalize_email(principal)))
    return result.scalar_one_or_none()


async def resolve_user(db: AsyncSession, principal: str) -> User:
    """Return the user behind ``principal`` or raise NotFoundError"""
    user = await find_user(db, principal)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def resolve_user_id(db: AsyncSession, principal: str) -> int:
    user = await resolve_user(db, principal)
    return user.id
