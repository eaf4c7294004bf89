"""Share-code API endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db_session
from ..core.services import SharingService
from ..core.schemas.common import SuccessResponse
from ..core.schemas.notes import NoteResponse
from ..core.schemas.sharing import JoinRequest, ShareCodeRequest, ShareCodeResponse
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/notes", tags=["sharing"])


@router.post("/join", response_model=SuccessResponse[NoteResponse])
async def join_shared_note(
    request: JoinRequest,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """Become a write collaborator of the note behind a share code."""
    sharing_service = SharingService(session)
    note = await sharing_service.join_by_share_code(request.share_code, current_user_id)
    return SuccessResponse(message="Successfully joined shared note", data=note)


@router.post("/{note_id}/share", response_model=SuccessResponse[ShareCodeResponse])
async def generate_share_code(
    note_id: UUID,
    request: Optional[ShareCodeRequest] = Body(default=None),
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """Generate a share code for an owned note."""
    request = request or ShareCodeRequest()
    sharing_service = SharingService(session)
    share = await sharing_service.generate_share_code(
        note_id, current_user_id, request.expires_in_days
    )
    return SuccessResponse(message="Share code generated successfully", data=share)


@router.delete("/{note_id}/share", response_model=SuccessResponse)
async def stop_sharing(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """Revoke the share code and remove all collaborators."""
    sharing_service = SharingService(session)
    await sharing_service.stop_sharing(note_id, current_user_id)
    return SuccessResponse(message="Note sharing stopped successfully")
