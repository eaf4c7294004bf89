"""
Note schemas.

Request bodies are validated here before they reach the services; the
"title must not be blank" rule lives in the service so it surfaces as a
400 ``ValidationError`` like the rest of the domain errors.
"""

import re
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.note import ContentType
from .common import PaginationResponse

_TAG_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    cleaned: List[str] = []
    for tag in tags:
        tag = tag.strip().lower()
        if not tag:
            continue
        if len(tag) > 30 or not _TAG_PATTERN.match(tag):
            raise ValueError("Tags can only contain letters, numbers, hyphens, and underscores")
        if tag not in cleaned:
            cleaned.append(tag)
    return cleaned


class NoteCreate(BaseModel):
    """Note creation request schema."""

    title: str = Field(max_length=200, description="Note title")
    content: str = Field(default="", description="Note body")
    tags: List[str] = Field(default_factory=list, max_length=20, description="Note tags")
    content_type: ContentType = Field(default=ContentType.PLAIN)
    folder: Optional[str] = Field(default=None, max_length=100)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v) or []

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Sprint retro",
                "content": "What went well...",
                "tags": ["team", "retro"],
                "content_type": "markdown",
            }
        }
    )


class NoteUpdate(BaseModel):
    """Partial update: only fields that are set get applied."""

    title: Optional[str] = Field(default=None, max_length=200)
    content: Optional[str] = Field(default=None)
    tags: Optional[List[str]] = Field(default=None, max_length=20)
    content_type: Optional[ContentType] = Field(default=None)
    folder: Optional[str] = Field(default=None, max_length=100)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _clean_tags(v)


class CollaboratorResponse(BaseModel):
    user_id: uuid.UUID
    username: Optional[str] = None
    display_name: Optional[str] = None
    permission: str
    joined_at: datetime


class NoteResponse(BaseModel):
    """Full note as seen by the requesting user."""

    id: uuid.UUID
    title: str
    content: str
    tags: List[str]
    content_type: str
    folder: Optional[str] = None

    owner_id: uuid.UUID
    owner_username: Optional[str] = None
    permission: Optional[str] = Field(default=None, description="Requesting user's permission")
    can_edit: bool

    is_favorite: bool
    is_shared: bool
    share_code: Optional[str] = Field(default=None, description="Only exposed to the owner")
    share_code_expires_at: Optional[datetime] = None
    collaborators: List[CollaboratorResponse] = Field(default_factory=list)

    current_version: int
    total_versions: int

    last_edited_by_id: Optional[uuid.UUID] = None
    last_edited_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class NoteListItem(BaseModel):
    id: uuid.UUID
    title: str
    content_preview: str
    tags: List[str]
    owner_id: uuid.UUID
    is_owned: bool
    can_edit: bool
    is_favorite: bool
    is_shared: bool
    last_edited_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


NoteListResponse = PaginationResponse[NoteListItem]


class FavoriteResponse(BaseModel):
    note_id: uuid.UUID
    is_favorite: bool
