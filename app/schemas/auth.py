from pydantic import BaseModel
from typing import Optional

from app.schemas.user import UserResponse


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: Optional[UserResponse] = None


class RefreshRequest(BaseModel):
    refresh_token: str
