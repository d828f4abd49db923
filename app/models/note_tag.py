from sqlalchemy import Column, Integer, ForeignKey, Table
from app.core.database import Base

# Unordered, unique set of tag labels per note; rows are removed with the note
note_tags = Table(
    'note_tags',
    Base.metadata,
    Column('note_id', Integer, ForeignKey('notes.id', ondelete='CASCADE'), primary_key=True),
    Column('tag_id', Integer, ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True, index=True)
)
