from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_

from app.core.database import get_db
from app.core.security import get_current_active_user
from app.models.user import User
from app.schemas.user import UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_active_user)):
    """Get current user information"""
    return current_user


@router.get("/search", response_model=List[UserResponse])
async def search_users(
    query: str = Query(..., description="Search text in email"),
    current_user: User = Depends(get_current_active_user),
    db: AsyncSession = Depends(get_db)
):
    """Search users to share notes with"""
    if not query or len(query.strip()) < 2:
        return []

    search_term = f"%{query.strip().lower()}%"

    result = await db.execute(
        select(User).where(
            and_(
                User.is_active.is_(True),
                User.id != current_user.id,  # Exclude current user
                User.email.ilike(search_term)
            )
        ).order_by(User.email).limit(10)
    )

    return result.scalars().all()
