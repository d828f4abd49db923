"""Transitions of a note's ``visibility`` field.

Visibility is not derived from the grant tables. Each granting action
overwrites it with the state tied to that action, and revoking a grant
leaves it as it was. A note can therefore read PUBLIC after its last
public link is gone, or PRIVATE while shares still exist (explicit update).
"""

import logging

from app.core.errors import BadRequestError
from app.models.note import Note, NoteVisibility

logger = logging.getLogger(__name__)


def initial_visibility() -> NoteVisibility:
    return NoteVisibility.PRIVATE


def _transition(note: Note, target: NoteVisibility, reason: str) -> None:
    previous = note.visibility
    note.visibility = target
    if previous != target:
        logger.info(
            "Note %s visibility %s -> %s (%s)",
            note.id,
            previous.value if previous is not None else None,
            target.value,
            reason,
        )


def force_shared(note: Note) -> None:
    """A share was granted; overwrites PUBLIC as well as PRIVATE"""
    _transition(note, NoteVisibility.SHARED, "share granted")


def force_public(note: Note) -> None:
    """A public link was issued; overwrites SHARED as well as PRIVATE"""
    _transition(note, NoteVisibility.PUBLIC, "public link issued")


def set_visibility(note: Note, visibility: NoteVisibility) -> None:
    """Explicit owner update, applied as requested without checking grants"""
    try:
        target = NoteVisibility(visibility)
    except ValueError:
        raise BadRequestError(f"Unknown visibility: {visibility}")
    _transition(note, target, "explicit update")
