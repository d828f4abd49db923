import enum

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.database import Base


class NoteVisibility(str, enum.Enum):
    """How a note is currently exposed beyond its owner.

    The column is a denormalized cache: granting a share or a public link
    overwrites it, revoking one leaves it untouched.
    """
    PRIVATE = "PRIVATE"
    SHARED = "SHARED"
    PUBLIC = "PUBLIC"


class Note(Base):
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    visibility = Column(
        Enum(NoteVisibility, name="note_visibility", native_enum=False, length=20),
        nullable=False,
        default=NoteVisibility.PRIVATE,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    owner = relationship("User", back_populates="notes")
    # Children are removed explicitly by the note service, never by the ORM
    shares = relationship("NoteShare", back_populates="note", passive_deletes=True)
    public_links = relationship("PublicLink", back_populates="note", passive_deletes=True)
    tags = relationship("Tag", secondary="note_tags", back_populates="notes")
