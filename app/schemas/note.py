from pydantic import BaseModel, Field
from datetime import datetime
from typing import Annotated, Optional, List

from app.models.note import NoteVisibility

# Matches the width of tags.label
TagLabel = Annotated[str, Field(max_length=50)]


class NoteBase(BaseModel):
    title: str = Field(..., min_length=3, max_length=255)
    content: Optional[str] = Field(None, max_length=50000)
    tags: Optional[List[TagLabel]] = []


class NoteCreate(NoteBase):
    pass


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=255)
    content: Optional[str] = Field(None, max_length=50000)
    tags: Optional[List[TagLabel]] = None
    # Applied as requested, whatever shares or links exist
    visibility: Optional[NoteVisibility] = None


class NoteResponse(NoteBase):
    id: int
    visibility: NoteVisibility
    owner_id: int
    owner_email: Optional[str] = None
    shared_with: Optional[List[str]] = []  # Emails of users who can read this note (excluding owner)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicNoteResponse(BaseModel):
    """Read-only projection served to anonymous public link holders"""
    id: int
    title: str
    content: Optional[str] = None
    visibility: NoteVisibility
    tags: List[str] = []
    owner_email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NotePage(BaseModel):
    items: List[NoteResponse]
    total: int
    page: int
    size: int
