from .user import User
from .note import Note, NoteVisibility
from .note_share import NoteShare, SharePermission
from .public_link import PublicLink
from .tag import Tag
from .note_tag import note_tags

__all__ = [
    "User", "Note", "NoteVisibility", "NoteShare", "SharePermission",
    "PublicLink", "Tag", "note_tags",
]
