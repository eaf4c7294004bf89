"""Version ledger API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db_session
from ..core.services import VersionService
from ..core.schemas.common import SuccessResponse
from ..core.schemas.notes import NoteResponse, NoteUpdate
from ..core.schemas.versions import VersionSavedResponse, VersionStateResponse
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/notes", tags=["versions"])


@router.post("/{note_id}/version", response_model=SuccessResponse[VersionSavedResponse])
async def save_version(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """Snapshot the note's current title and content."""
    version_service = VersionService(session)
    saved = await version_service.save_version(note_id, current_user_id)
    return SuccessResponse(message="Version saved successfully", data=saved)


@router.post("/{note_id}/checkpoint", response_model=SuccessResponse[NoteResponse])
async def checkpoint_and_update(
    note_id: UUID,
    request: NoteUpdate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """Save a version, then apply the update. Open to owner and writers."""
    version_service = VersionService(session)
    note = await version_service.checkpoint_and_update(note_id, current_user_id, request)
    return SuccessResponse(message="Note updated successfully", data=note)


@router.post("/{note_id}/undo", response_model=SuccessResponse[VersionStateResponse])
async def undo(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    version_service = VersionService(session)
    state = await version_service.undo(note_id, current_user_id)
    return SuccessResponse(message="Undo successful", data=state)


@router.post("/{note_id}/redo", response_model=SuccessResponse[VersionStateResponse])
async def redo(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    version_service = VersionService(session)
    state = await version_service.redo(note_id, current_user_id)
    return SuccessResponse(message="Redo successful", data=state)
