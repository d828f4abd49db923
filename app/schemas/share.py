from pydantic import BaseModel, EmailStr
from datetime import datetime
from typing import Optional

from app.models.note_share import SharePermission


class ShareCreate(BaseModel):
    email: EmailStr


class ShareResponse(BaseModel):
    id: int
    note_id: int
    shared_with_email: str
    permission: SharePermission
    created_at: Optional[datetime] = None
