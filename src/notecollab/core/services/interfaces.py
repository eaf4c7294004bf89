"""
Service interfaces for NoteCollab application.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List
from uuid import UUID

from ..schemas.common import HealthCheckResponse
from ..schemas.notes import (
    CollaboratorResponse, FavoriteResponse, NoteCreate, NoteListResponse,
    NoteResponse, NoteUpdate
)
from ..schemas.sharing import ShareCodeResponse
from ..schemas.versions import VersionSavedResponse, VersionStateResponse


class INoteService(ABC):
    """Note service for CRUD operations."""

    @abstractmethod
    async def create_note(self, user_id: UUID, request: NoteCreate) -> NoteResponse:
        """Create new note owned by the user."""
        pass

    @abstractmethod
    async def get_note(self, note_id: UUID, user_id: UUID) -> NoteResponse:
        """Get note visible to the user."""
        pass

    @abstractmethod
    async def list_notes(
        self,
        user_id: UUID,
        page: int = 1,
        per_page: int = 50,
        favorites_only: bool = False
    ) -> NoteListResponse:
        """List owned and collaborated notes."""
        pass

    @abstractmethod
    async def update_note(self, note_id: UUID, user_id: UUID, request: NoteUpdate) -> NoteResponse:
        """Partial update, owner only."""
        pass

    @abstractmethod
    async def delete_note(self, note_id: UUID, user_id: UUID) -> bool:
        """Delete note, owner only."""
        pass

    @abstractmethod
    async def toggle_favorite(self, note_id: UUID, user_id: UUID) -> FavoriteResponse:
        """Flip the favorite flag."""
        pass


class IVersionService(ABC):
    """Version ledger operations."""

    @abstractmethod
    async def save_version(self, note_id: UUID, user_id: UUID) -> VersionSavedResponse:
        """Snapshot the current title and content."""
        pass

    @abstractmethod
    async def checkpoint_and_update(
        self, note_id: UUID, user_id: UUID, request: NoteUpdate
    ) -> NoteResponse:
        """Snapshot, then apply the update, in one transaction."""
        pass

    @abstractmethod
    async def undo(self, note_id: UUID, user_id: UUID) -> VersionStateResponse:
        """Restore the entry under the cursor."""
        pass

    @abstractmethod
    async def redo(self, note_id: UUID, user_id: UUID) -> VersionStateResponse:
        """Restore the entry after the cursor."""
        pass


class ISharingService(ABC):
    """Share-code collaboration."""

    @abstractmethod
    async def generate_share_code(
        self, note_id: UUID, user_id: UUID, expires_in_days: int = 7
    ) -> ShareCodeResponse:
        """Create a fresh share code for an owned note."""
        pass

    @abstractmethod
    async def join_by_share_code(self, share_code: str, user_id: UUID) -> NoteResponse:
        """Add the user as a write collaborator."""
        pass

    @abstractmethod
    async def stop_sharing(self, note_id: UUID, user_id: UUID) -> bool:
        """Revoke the code and remove every collaborator."""
        pass

    @abstractmethod
    async def list_collaborators(self, note_id: UUID, user_id: UUID) -> List[CollaboratorResponse]:
        """Collaborators of a visible note."""
        pass


class IHealthService(ABC):
    """Health check service."""

    @abstractmethod
    async def get_health_status(self) -> HealthCheckResponse:
        """Get app health status."""
        pass

    @abstractmethod
    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        pass

    @abstractmethod
    async def check_redis_health(self) -> Dict[str, Any]:
        """Check Redis connection."""
        pass
