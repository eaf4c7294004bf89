"""Permission checks on a loaded note. Pure functions, no IO."""

from typing import Optional
from uuid import UUID

from .models.collaborator import EDIT_PERMISSIONS, Permission
from .models.note import Note


def permission_for(note: Note, user_id: UUID) -> Optional[str]:
    """Effective permission of ``user_id`` on ``note``; ``None`` means no access."""
    if note.owner_id == user_id:
        return Permission.OWNER.value
    collaborator = note.find_collaborator(user_id)
    return collaborator.permission if collaborator else None


def can_edit(note: Note, user_id: UUID) -> bool:
    """Owner always; collaborators only with write or owner permission."""
    return permission_for(note, user_id) in EDIT_PERMISSIONS


def can_view(note: Note, user_id: UUID) -> bool:
    return permission_for(note, user_id) is not None
