import enum

from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.core.database import Base


class SharePermission(str, enum.Enum):
    READ = "READ"


class NoteShare(Base):
    __tablename__ = "note_shares"
    __table_args__ = (
        UniqueConstraint("note_id", "shared_with_user_id", name="uq_note_shares_note_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    note_id = Column(Integer, ForeignKey("notes.id", ondelete="CASCADE"), nullable=False, index=True)
    shared_with_user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    permission = Column(
        Enum(SharePermission, name="share_permission", native_enum=False, length=20),
        nullable=False,
        default=SharePermission.READ,
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    note = relationship("Note", back_populates="shares")
    shared_with_user = relationship("User", back_populates="shared_notes")
