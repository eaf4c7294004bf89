"""Notes API endpoints."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..database import get_db_session
from ..core.services import NoteService, SharingService
from ..core.schemas.common import SuccessResponse
from ..core.schemas.notes import (
    CollaboratorResponse, FavoriteResponse, NoteCreate, NoteListResponse,
    NoteResponse, NoteUpdate
)
from ..middleware.auth import get_current_user_id

router = APIRouter(prefix="/notes", tags=["notes"])


@router.post("/", response_model=SuccessResponse[NoteResponse], status_code=201)
async def create_note(
    request: NoteCreate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """Create a new note."""
    note_service = NoteService(session)
    note = await note_service.create_note(current_user_id, request)
    return SuccessResponse(message="Note created successfully", data=note)


@router.get("/", response_model=SuccessResponse[NoteListResponse])
async def list_notes(
    page: int = Query(1, ge=1),
    per_page: int = Query(50, ge=1, le=100),
    favorites: bool = Query(False, description="Only favorite notes"),
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """List owned and shared notes."""
    note_service = NoteService(session)
    notes = await note_service.list_notes(
        user_id=current_user_id,
        page=page,
        per_page=per_page,
        favorites_only=favorites
    )
    return SuccessResponse(message="Notes retrieved successfully", data=notes)


@router.get("/{note_id}", response_model=SuccessResponse[NoteResponse])
async def get_note(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """Get a specific note."""
    note_service = NoteService(session)
    note = await note_service.get_note(note_id, current_user_id)
    return SuccessResponse(message="Note retrieved successfully", data=note)


@router.put("/{note_id}", response_model=SuccessResponse[NoteResponse])
async def update_note(
    note_id: UUID,
    request: NoteUpdate,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """Update a note (owner only)."""
    note_service = NoteService(session)
    note = await note_service.update_note(note_id, current_user_id, request)
    return SuccessResponse(message="Note updated successfully", data=note)


@router.delete("/{note_id}", response_model=SuccessResponse)
async def delete_note(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """Delete a note (owner only)."""
    note_service = NoteService(session)
    await note_service.delete_note(note_id, current_user_id)
    return SuccessResponse(message="Note deleted successfully")


@router.post("/{note_id}/favorite", response_model=SuccessResponse[FavoriteResponse])
async def toggle_favorite(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """Flip the favorite flag."""
    note_service = NoteService(session)
    result = await note_service.toggle_favorite(note_id, current_user_id)
    message = "Note added to favorites" if result.is_favorite else "Note removed from favorites"
    return SuccessResponse(message=message, data=result)


@router.get("/{note_id}/collaborators", response_model=SuccessResponse[List[CollaboratorResponse]])
async def list_collaborators(
    note_id: UUID,
    current_user_id: UUID = Depends(get_current_user_id),
    session: AsyncSession = Depends(get_db_session)
):
    """Collaborators of a note the caller can see."""
    sharing_service = SharingService(session)
    collaborators = await sharing_service.list_collaborators(note_id, current_user_id)
    return SuccessResponse(message="Collaborators retrieved successfully", data=collaborators)
