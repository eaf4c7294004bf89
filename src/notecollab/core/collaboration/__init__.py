"""Real-time collaboration: presence, edit relay and the session manager."""

from .manager import CollaborationManager, Connection
from .presence import JoinResult, PresenceEntry, PresenceRegistry
from .relay import LastWriterWinsRelay, UpdateRelay

__all__ = [
    "CollaborationManager",
    "Connection",
    "JoinResult",
    "PresenceEntry",
    "PresenceRegistry",
    "LastWriterWinsRelay",
    "UpdateRelay",
]
