from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    verify_token,
    get_password_hash,
    get_current_user
)
from app.core.config import settings
from app.core.redis_client import get_redis
from app.models.user import User
from app.schemas.auth import Token, RefreshRequest
from app.schemas.user import UserCreate, UserResponse
from app.services import identity

router = APIRouter()


async def issue_tokens(user: User, redis_client) -> dict:
    """Create an access/refresh pair and register both in Redis"""
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": user.email}, expires_delta=access_token_expires
    )
    refresh_token = create_refresh_token(data={"sub": user.email})

    await redis_client.setex(
        f"access_token:{user.id}",
        settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        access_token
    )
    await redis_client.setex(
        f"refresh_token:{user.id}",
        settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        refresh_token
    )

    return {
        "access_token": access_token,
        "refresh_token": refresh_token,
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        "user": UserResponse.model_validate(user),
    }


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(user: UserCreate, db: AsyncSession = Depends(get_db)):
    """Register a new user"""
    email = identity.normalize_email(user.email)
    if await identity.find_user(db, email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    db_user = User(
        email=email,
        hashed_password=get_password_hash(user.password)
    )
    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)

    return db_user


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
    redis_client=Depends(get_redis),
):
    """Login with email (sent as the OAuth2 username field) and return JWT tokens"""
    user = await identity.find_user(db, form_data.username)

    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user"
        )

    return await issue_tokens(user, redis_client)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db),
    redis_client=Depends(get_redis),
):
    """Exchange a registered refresh token for a fresh token pair"""
    claims = verify_token(payload.refresh_token, "refresh")

    user = await identity.find_user(db, claims["sub"])
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )

    stored_refresh_token = await redis_client.get(f"refresh_token:{user.id}")
    if not stored_refresh_token or stored_refresh_token != payload.refresh_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid refresh token"
        )

    return await issue_tokens(user, redis_client)


@router.post("/logout")
async def logout(current_user: User = Depends(get_current_user), redis_client=Depends(get_redis)):
    """Logout user by removing tokens from Redis"""
    await redis_client.delete(f"access_token:{current_user.id}")
    await redis_client.delete(f"refresh_token:{current_user.id}")

    return {"message": "Successfully logged out"}
