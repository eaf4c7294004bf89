"""Python client for NoteCollab: REST calls, the real-time channel and auto-save."""

from .api import NoteCollabAPIError, NoteCollabClient
from .autosave import DebouncedSaver
from .editor import CollaborativeEditor
from .realtime import CollaborationSession

__all__ = [
    "NoteCollabClient",
    "NoteCollabAPIError",
    "CollaborationSession",
    "CollaborativeEditor",
    "DebouncedSaver",
]
