"""Note service implementation."""

from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..access import can_edit, can_view, permission_for
from ..exceptions import NoteNotFoundError, ValidationError
from ..locks import KeyedLocks, get_note_locks
from ..logging import get_logger
from ..models.note import Note
from ..models.user import User
from ..repositories.note_repository import NoteRepository
from ..repositories.user_repository import UserRepository
from ..schemas.notes import (
    CollaboratorResponse,
    FavoriteResponse,
    NoteCreate,
    NoteListItem,
    NoteListResponse,
    NoteResponse,
    NoteUpdate,
)
from .interfaces import INoteService

logger = get_logger("services.notes")


def clean_title(title: Optional[str]) -> str:
    """Trimmed title; blank titles are rejected."""
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required")
    return title


def apply_update(note: Note, request: NoteUpdate) -> None:
    """Copy the fields present in ``request`` onto the note."""
    if request.title is not None:
        note.title = clean_title(request.title)
    if request.content is not None:
        note.content = request.content
    if request.tags is not None:
        note.tags = request.tags
    if request.content_type is not None:
        note.content_type = request.content_type.value
    if request.folder is not None:
        note.folder = request.folder or None


class NoteService(INoteService):
    """Note CRUD with owner/collaborator visibility."""

    def __init__(self, session: AsyncSession, locks: Optional[KeyedLocks] = None):
        self.session = session
        self.settings = get_settings()
        self.locks = locks or get_note_locks()
        self.note_repo = NoteRepository(session)
        # owner and collaborator names for responses
        self.user_repo = UserRepository(session)

    async def create_note(self, user_id: UUID, request: NoteCreate) -> NoteResponse:
        """Create new note with an empty ledger."""
        note_data = {
            "title": clean_title(request.title),
            "content": request.content or "",
            "tags": request.tags or [],
            "content_type": request.content_type.value,
            "folder": request.folder,
            "owner_id": user_id,
            "last_edited_by_id": user_id,
        }
        note = await self.note_repo.create_note(note_data)
        logger.info("Note created", extra={"note_id": str(note.id), "user_id": str(user_id)})
        return await self.to_response(note, user_id)

    async def get_note(self, note_id: UUID, user_id: UUID) -> NoteResponse:
        """Get note by ID.

        Owners and collaborators can read it. Anyone else gets a 404 so the
        existence of the note is not leaked.
        """
        note = await self.note_repo.get_accessible(note_id, user_id)
        if not note:
            raise NoteNotFoundError()
        return await self.to_response(note, user_id)

    async def list_notes(
        self,
        user_id: UUID,
        page: int = 1,
        per_page: int = 50,
        favorites_only: bool = False,
    ) -> NoteListResponse:
        """List owned and collaborated notes, most recently edited first."""
        if page < 1:
            page = 1
        if per_page < 1 or per_page > self.settings.max_page_size:
            per_page = self.settings.default_page_size

        notes, total_count = await self.note_repo.list_accessible(
            user_id, page, per_page, favorites_only
        )
        items = [self._to_list_item(note, user_id) for note in notes]
        return NoteListResponse.create(items=items, total=total_count, page=page, per_page=per_page)

    async def update_note(self, note_id: UUID, user_id: UUID, request: NoteUpdate) -> NoteResponse:
        """Partial update. Collaborators go through ``checkpoint_and_update``."""
        async with self.locks.hold(note_id):
            note = await self.note_repo.get_by_id_and_owner(note_id, user_id)
            if not note:
                raise NoteNotFoundError()
            apply_update(note, request)
            note.mark_edited(user_id)
            note = await self.note_repo.save(note)

        logger.info("Note updated", extra={"note_id": str(note_id), "user_id": str(user_id)})
        return await self.to_response(note, user_id)

    async def delete_note(self, note_id: UUID, user_id: UUID) -> bool:
        """Delete note together with its collaborators and ledger."""
        async with self.locks.hold(note_id):
            deleted = await self.note_repo.delete_note(note_id, user_id)
        if not deleted:
            raise NoteNotFoundError()
        return True

    async def toggle_favorite(self, note_id: UUID, user_id: UUID) -> FavoriteResponse:
        async with self.locks.hold(note_id):
            note = await self.note_repo.get_accessible(note_id, user_id)
            if not note:
                raise NoteNotFoundError()
            note.is_favorite = not note.is_favorite
            note = await self.note_repo.save(note)
        return FavoriteResponse(note_id=note.id, is_favorite=note.is_favorite)

    async def to_response(self, note: Note, current_user_id: UUID) -> NoteResponse:
        """Convert note model to response as seen by ``current_user_id``."""
        users = await self.user_repo.get_many(
            [note.owner_id] + [c.user_id for c in note.collaborators]
        )
        return build_note_response(note, current_user_id, users)

    def _to_list_item(self, note: Note, current_user_id: UUID) -> NoteListItem:
        return NoteListItem(
            id=note.id,
            title=note.title,
            content_preview=note.preview,
            tags=list(note.tags or []),
            owner_id=note.owner_id,
            is_owned=note.is_owned_by(current_user_id),
            can_edit=can_edit(note, current_user_id),
            is_favorite=note.is_favorite,
            is_shared=note.is_shared,
            last_edited_at=note.last_edited_at,
            created_at=note.created_at,
            updated_at=note.updated_at,
        )


def build_collaborators(note: Note, users: Dict[UUID, User]) -> List[CollaboratorResponse]:
    result = []
    for collaborator in note.collaborators:
        user = users.get(collaborator.user_id)
        result.append(
            CollaboratorResponse(
                user_id=collaborator.user_id,
                username=user.username if user else None,
                display_name=user.display_name if user else None,
                permission=collaborator.permission,
                joined_at=collaborator.joined_at,
            )
        )
    return result


def build_note_response(note: Note, current_user_id: UUID, users: Dict[UUID, User]) -> NoteResponse:
    owner = users.get(note.owner_id)
    is_owner = note.is_owned_by(current_user_id)
    return NoteResponse(
        id=note.id,
        title=note.title,
        content=note.content or "",
        tags=list(note.tags or []),
        content_type=note.content_type,
        folder=note.folder,
        owner_id=note.owner_id,
        owner_username=owner.username if owner else None,
        permission=permission_for(note, current_user_id),
        can_edit=can_edit(note, current_user_id),
        is_favorite=note.is_favorite,
        is_shared=note.is_shared,
        share_code=note.share_code if is_owner else None,
        share_code_expires_at=note.share_code_expires_at if is_owner else None,
        collaborators=build_collaborators(note, users) if can_view(note, current_user_id) else [],
        current_version=note.current_version,
        total_versions=len(note.versions),
        last_edited_by_id=note.last_edited_by_id,
        last_edited_at=note.last_edited_at,
        created_at=note.created_at,
        updated_at=note.updated_at,
    )
