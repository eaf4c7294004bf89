"""Sharing service implementation."""

import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..access import can_view
from ..exceptions import InvalidShareCodeError, NoteNotFoundError, ShareCodeExhaustedError
from ..locks import KeyedLocks, get_note_locks
from ..logging import get_logger
from ..models.collaborator import Collaborator, Permission
from ..repositories.note_repository import NoteRepository
from ..repositories.user_repository import UserRepository
from ..schemas.notes import CollaboratorResponse, NoteResponse
from ..schemas.sharing import ShareCodeResponse
from .interfaces import ISharingService
from .note_service import NoteService, build_collaborators

logger = get_logger("services.sharing")

SHARE_CODE_ALPHABET = string.ascii_letters + string.digits


def random_share_code(length: int = 8) -> str:
    return "".join(secrets.choice(SHARE_CODE_ALPHABET) for _ in range(length))


class SharingService(ISharingService):
    """Share codes grant write collaboration to whoever redeems them."""

    def __init__(
        self,
        session: AsyncSession,
        locks: Optional[KeyedLocks] = None,
        code_factory: Optional[Callable[[int], str]] = None,
    ):
        self.session = session
        self.settings = get_settings()
        self.locks = locks or get_note_locks()
        self.code_factory = code_factory or random_share_code
        self.note_repo = NoteRepository(session)
        self.user_repo = UserRepository(session)
        self.note_service = NoteService(session, locks=self.locks)

    async def generate_share_code(
        self, note_id: UUID, user_id: UUID, expires_in_days: Optional[int] = None
    ) -> ShareCodeResponse:
        """Replace the note's share code with a fresh, unused one."""
        if expires_in_days is None:
            expires_in_days = self.settings.share_code_default_expiry_days

        async with self.locks.hold(note_id):
            note = await self.note_repo.get_by_id_and_owner(note_id, user_id)
            if not note:
                raise NoteNotFoundError("Note not found or you do not have permission to share it")

            share_code = None
            for _ in range(self.settings.share_code_max_attempts):
                candidate = self.code_factory(self.settings.share_code_length)
                if not await self.note_repo.share_code_exists(candidate):
                    share_code = candidate
                    break
            if share_code is None:
                logger.error(
                    "Share code generation exhausted",
                    extra={"note_id": str(note_id), "attempts": self.settings.share_code_max_attempts},
                )
                raise ShareCodeExhaustedError()

            note.share_code = share_code
            note.share_code_expires_at = datetime.now(timezone.utc) + timedelta(days=expires_in_days)
            note.is_shared = True
            note = await self.note_repo.save(note)

        logger.info("Share code generated", extra={"note_id": str(note_id), "user_id": str(user_id)})
        return ShareCodeResponse(
            note_id=note.id, share_code=note.share_code, expires_at=note.share_code_expires_at
        )

    async def join_by_share_code(self, share_code: str, user_id: UUID) -> NoteResponse:
        """Join a shared note. Joining again, or as the owner, changes nothing."""
        note = await self.note_repo.get_by_valid_share_code(share_code)
        if not note:
            raise InvalidShareCodeError()

        async with self.locks.hold(note.id):
            # reload under the lock: the code may have been revoked meanwhile
            note = await self.note_repo.get_by_valid_share_code(share_code)
            if not note:
                raise InvalidShareCodeError()

            if not note.is_owned_by(user_id) and note.find_collaborator(user_id) is None:
                note.collaborators.append(
                    Collaborator(user_id=user_id, permission=Permission.WRITE.value)
                )
                note = await self.note_repo.save(note)
                logger.info(
                    "Collaborator joined", extra={"note_id": str(note.id), "user_id": str(user_id)}
                )

        return await self.note_service.to_response(note, user_id)

    async def stop_sharing(self, note_id: UUID, user_id: UUID) -> bool:
        """Revoke the code and drop every collaborator."""
        async with self.locks.hold(note_id):
            note = await self.note_repo.get_by_id_and_owner(note_id, user_id)
            if not note:
                raise NoteNotFoundError(
                    "Note not found or you do not have permission to stop sharing"
                )
            note.is_shared = False
            note.share_code = None
            note.share_code_expires_at = None
            note.collaborators.clear()
            await self.note_repo.save(note)

        logger.info("Sharing stopped", extra={"note_id": str(note_id), "user_id": str(user_id)})
        return True

    async def list_collaborators(self, note_id: UUID, user_id: UUID) -> List[CollaboratorResponse]:
        note = await self.note_repo.get_by_id(note_id)
        if not note or not can_view(note, user_id):
            raise NoteNotFoundError()
        users = await self.user_repo.get_many(c.user_id for c in note.collaborators)
        return build_collaborators(note, users)
