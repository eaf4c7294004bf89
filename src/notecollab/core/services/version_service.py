"""Version ledger service.

Every ledger operation reloads the note while holding its lock, mutates it,
and commits before releasing the lock, so concurrent saves, undos and redos
on the same note apply one after another.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..access import can_edit
from ..exceptions import ForbiddenError, NoteNotFoundError
from ..ledger import VersionLedger
from ..locks import KeyedLocks, get_note_locks
from ..logging import get_logger
from ..models.note import Note
from ..repositories.note_repository import NoteRepository
from ..schemas.notes import NoteResponse, NoteUpdate
from ..schemas.versions import VersionSavedResponse, VersionStateResponse
from .interfaces import IVersionService
from .note_service import NoteService, apply_update, clean_title

logger = get_logger("services.versions")


class VersionService(IVersionService):
    """Save, checkpoint, undo and redo on a note's ledger."""

    def __init__(
        self,
        session: AsyncSession,
        locks: Optional[KeyedLocks] = None,
        ledger: Optional[VersionLedger] = None,
    ):
        self.session = session
        self.locks = locks or get_note_locks()
        self.ledger = ledger or VersionLedger(get_settings().max_versions)
        self.note_repo = NoteRepository(session)
        self.note_service = NoteService(session, locks=self.locks)

    async def save_version(self, note_id: UUID, user_id: UUID) -> VersionSavedResponse:
        async with self.locks.hold(note_id):
            note = await self._load_editable(note_id, user_id)
            self.ledger.record(note, user_id)
            note = await self.note_repo.save(note)

        logger.info(
            "Version saved",
            extra={"note_id": str(note_id), "user_id": str(user_id), "cursor": note.current_version},
        )
        return VersionSavedResponse(
            note_id=note.id,
            current_version=note.current_version,
            total_versions=len(note.versions),
        )

    async def checkpoint_and_update(
        self, note_id: UUID, user_id: UUID, request: NoteUpdate
    ) -> NoteResponse:
        """Record the current state, then apply ``request``. One commit."""
        if request.title is not None:
            # reject before anything is recorded
            clean_title(request.title)
        async with self.locks.hold(note_id):
            note = await self._load_editable(note_id, user_id)
            self.ledger.record(note, user_id)
            apply_update(note, request)
            note.mark_edited(user_id)
            note = await self.note_repo.save(note)

        logger.info("Checkpoint and update", extra={"note_id": str(note_id), "user_id": str(user_id)})
        return await self.note_service.to_response(note, user_id)

    async def undo(self, note_id: UUID, user_id: UUID) -> VersionStateResponse:
        async with self.locks.hold(note_id):
            note = await self._load_editable(note_id, user_id)
            self.ledger.undo(note)
            note.mark_edited(user_id)
            note = await self.note_repo.save(note)

        logger.info(
            "Undo", extra={"note_id": str(note_id), "user_id": str(user_id), "cursor": note.current_version}
        )
        return self._state(note)

    async def redo(self, note_id: UUID, user_id: UUID) -> VersionStateResponse:
        async with self.locks.hold(note_id):
            note = await self._load_editable(note_id, user_id)
            self.ledger.redo(note)
            note.mark_edited(user_id)
            note = await self.note_repo.save(note)

        logger.info(
            "Redo", extra={"note_id": str(note_id), "user_id": str(user_id), "cursor": note.current_version}
        )
        return self._state(note)

    async def _load_editable(self, note_id: UUID, user_id: UUID) -> Note:
        note = await self.note_repo.get_by_id(note_id)
        if not note:
            raise NoteNotFoundError()
        if not can_edit(note, user_id):
            raise ForbiddenError()
        return note

    def _state(self, note: Note) -> VersionStateResponse:
        return VersionStateResponse(
            id=note.id,
            title=note.title,
            content=note.content,
            current_version=note.current_version,
            total_versions=len(note.versions),
            can_undo=self.ledger.can_undo(note),
            can_redo=self.ledger.can_redo(note),
        )
