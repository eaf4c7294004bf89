"""Version ledger schemas."""

import uuid

from pydantic import BaseModel, Field


class VersionSavedResponse(BaseModel):
    note_id: uuid.UUID
    current_version: int = Field(description="Cursor after the save")
    total_versions: int


class VersionStateResponse(BaseModel):
    """Note fields after an undo or redo."""

    id: uuid.UUID
    title: str
    content: str
    current_version: int
    total_versions: int
    can_undo: bool
    can_redo: bool
