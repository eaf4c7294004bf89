"""
Pydantic schemas for validating and documenting API requests and responses.

REST bodies (notes, sharing, versions, common envelopes) and the frames of
the real-time channel.
"""

from .common import ErrorResponse, HealthCheckResponse, PaginationResponse, SuccessResponse
from .notes import (
    CollaboratorResponse,
    FavoriteResponse,
    NoteCreate,
    NoteListItem,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
)
from .realtime import (
    CursorUpdatePayload,
    Frame,
    JoinNotePayload,
    NoteUpdatedEvent,
    NoteUpdatePayload,
    PresenceInfo,
)
from .sharing import JoinRequest, ShareCodeRequest, ShareCodeResponse
from .versions import VersionSavedResponse, VersionStateResponse

__all__ = [
    # Note schemas
    "NoteCreate",
    "NoteUpdate",
    "NoteResponse",
    "NoteListItem",
    "NoteListResponse",
    "CollaboratorResponse",
    "FavoriteResponse",
    # Sharing schemas
    "ShareCodeRequest",
    "ShareCodeResponse",
    "JoinRequest",
    # Version schemas
    "VersionSavedResponse",
    "VersionStateResponse",
    # Real-time frames
    "Frame",
    "JoinNotePayload",
    "NoteUpdatePayload",
    "CursorUpdatePayload",
    "NoteUpdatedEvent",
    "PresenceInfo",
    # Common schemas
    "PaginationResponse",
    "SuccessResponse",
    "ErrorResponse",
    "HealthCheckResponse",
]
