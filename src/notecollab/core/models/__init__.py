"""
Database models for NoteCollab.

Models included:
    - User: reference to an identity managed elsewhere
    - Note: the collaboratively edited document
    - Collaborator: per-note access grants
    - NoteVersion: version ledger entries used for undo/redo
"""

from .base import BaseModel
from .collaborator import EDIT_PERMISSIONS, Collaborator, Permission
from .note import ContentType, Note
from .user import User
from .version import NoteVersion

__all__ = [
    "BaseModel",
    "User",
    "Note",
    "ContentType",
    "Collaborator",
    "Permission",
    "EDIT_PERMISSIONS",
    "NoteVersion",
]
