from .user import UserCreate, UserResponse
from .note import NoteCreate, NoteUpdate, NoteResponse, NotePage, PublicNoteResponse
from .share import ShareCreate, ShareResponse
from .public_link import PublicLinkCreate, PublicLinkResponse
from .auth import Token, RefreshRequest

__all__ = [
    "UserCreate", "UserResponse",
    "NoteCreate", "NoteUpdate", "NoteResponse", "NotePage", "PublicNoteResponse",
    "ShareCreate", "ShareResponse",
    "PublicLinkCreate", "PublicLinkResponse",
    "Token", "RefreshRequest",
]
