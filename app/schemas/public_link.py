from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class PublicLinkCreate(BaseModel):
    expires_at: Optional[datetime] = None  # None means the link never expires


class PublicLinkResponse(BaseModel):
    id: int
    note_id: int
    token: str
    full_url: str
    created_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
