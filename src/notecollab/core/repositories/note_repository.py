"""Note repository for database operations."""

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..models.collaborator import Collaborator
from ..models.note import Note

logger = logging.getLogger(__name__)


class NoteRepository:
    """Repository for note database operations.

    Notes are always loaded with their collaborators and versions so the
    ledger and access checks never hit a lazy load.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _select_note(self):
        # populate_existing: a reload under the note lock must see the latest row
        return (
            select(Note)
            .options(selectinload(Note.collaborators), selectinload(Note.versions))
            .execution_options(populate_existing=True)
        )

    async def create_note(self, note_data: dict) -> Note:
        """Create new note."""
        note = Note(**note_data)
        self.session.add(note)
        await self.session.commit()
        await self.session.refresh(note)
        return note

    async def get_by_id(self, note_id: UUID) -> Optional[Note]:
        stmt = self._select_note().where(Note.id == note_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id_and_owner(self, note_id: UUID, owner_id: UUID) -> Optional[Note]:
        """Get note by ID if owned by user."""
        stmt = self._select_note().where(and_(Note.id == note_id, Note.owner_id == owner_id))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_accessible(self, note_id: UUID, user_id: UUID) -> Optional[Note]:
        """Get note if the user owns it or collaborates on it."""
        collaborator_ids = select(Collaborator.note_id).where(Collaborator.user_id == user_id)
        stmt = self._select_note().where(
            and_(
                Note.id == note_id,
                or_(Note.owner_id == user_id, Note.id.in_(collaborator_ids)),
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_valid_share_code(
        self, share_code: str, now: Optional[datetime] = None
    ) -> Optional[Note]:
        """Get note by share code, skipping expired codes."""
        now = now or datetime.now(timezone.utc)
        stmt = self._select_note().where(
            and_(Note.share_code == share_code, Note.share_code_expires_at > now)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def share_code_exists(self, share_code: str) -> bool:
        stmt = select(func.count(Note.id)).where(Note.share_code == share_code)
        result = await self.session.execute(stmt)
        return (result.scalar() or 0) > 0

    async def list_accessible(
        self,
        user_id: UUID,
        page: int = 1,
        per_page: int = 50,
        favorites_only: bool = False,
    ) -> tuple[List[Note], int]:
        """Notes owned by or shared with the user, most recently edited first."""
        offset = (page - 1) * per_page

        collaborator_ids = select(Collaborator.note_id).where(Collaborator.user_id == user_id)
        condition = or_(Note.owner_id == user_id, Note.id.in_(collaborator_ids))
        if favorites_only:
            condition = and_(condition, Note.is_favorite.is_(True))

        count_stmt = select(func.count(Note.id)).where(condition)
        total_result = await self.session.execute(count_stmt)
        total_count = total_result.scalar() or 0

        stmt = (
            self._select_note()
            .where(condition)
            .order_by(desc(Note.last_edited_at), desc(Note.created_at))
            .offset(offset)
            .limit(per_page)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total_count

    async def save(self, note: Note) -> Note:
        """Commit pending changes on an already loaded note."""
        await self.session.commit()
        await self.session.refresh(note, ["collaborators", "versions"])
        return note

    async def delete_note(self, note_id: UUID, owner_id: UUID) -> bool:
        """Delete note if owned by user."""
        note = await self.get_by_id_and_owner(note_id, owner_id)
        if not note:
            logger.warning(f"Note {note_id} not found or not owned by user {owner_id}")
            return False

        await self.session.delete(note)
        await self.session.commit()
        logger.info(f"Deleted note {note_id}")
        return True
