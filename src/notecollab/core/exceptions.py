"""Domain errors raised by the service layer.

They subclass ``HTTPException`` so routers can let them propagate; the
application handler renders them as ``ErrorResponse`` bodies.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class NoteCollabError(HTTPException):
    """Base class for every domain error."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Unexpected error"
    retryable: bool = False

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(status_code=type(self).status_code, detail=self.message)

    @property
    def error_type(self) -> str:
        return type(self).__name__


class ValidationError(NoteCollabError):
    """Bad input shape, e.g. an empty title."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class NoHistoryError(NoteCollabError):
    """Undo/redo requested with nothing to move to."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "No version available"
    retryable = True


class ForbiddenError(NoteCollabError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to edit this note"


class NoteNotFoundError(NoteCollabError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Note not found"


class InvalidShareCodeError(NoteCollabError):
    """No note with that code, or the code expired."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Invalid or expired share code"


class ShareCodeExhaustedError(NoteCollabError):
    """Every generated share code collided with an existing one."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to generate unique share code"
    retryable = True
