"""
Real-time channel payloads.

Frames on the wire are ``{"event": <name>, "data": <payload>}`` with
camelCase keys, matching what browser clients already send.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

# client -> server
JOIN_NOTE = "join-note"
LEAVE_NOTE = "leave-note"
NOTE_UPDATE = "note-update"
CURSOR_UPDATE = "cursor-update"

# server -> client
ACTIVE_USERS = "active-users"
USER_JOINED = "user-joined"
USER_LEFT = "user-left"
NOTE_UPDATED = "note-updated"
CURSOR_UPDATED = "cursor-updated"


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _require_text(value: Any) -> str:
    if value is None:
        raise ValueError("value is required")
    value = str(value).strip()
    if not value:
        raise ValueError("value is required")
    return value


class Frame(_Payload):
    """Envelope of every message."""

    event: str = Field(min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)


class JoinNotePayload(_Payload):
    document_id: str = Field(validation_alias=AliasChoices("documentId", "noteId", "document_id"))
    user_id: str = Field(validation_alias=AliasChoices("userId", "user_id"))
    user_name: str = Field(default="Anonymous", validation_alias=AliasChoices("userName", "user_name"))

    @field_validator("document_id", "user_id", mode="before")
    @classmethod
    def required_text(cls, v):
        return _require_text(v)

    @field_validator("user_name", mode="before")
    @classmethod
    def default_name(cls, v):
        name = str(v).strip() if v is not None else ""
        return name or "Anonymous"


class NoteUpdatePayload(_Payload):
    document_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("documentId", "noteId", "document_id")
    )
    content: str = Field(default="")
    title: str = Field(default="")
    user_id: str = Field(validation_alias=AliasChoices("userId", "user_id"))
    user_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("userName", "user_name"))

    @field_validator("user_id", mode="before")
    @classmethod
    def required_text(cls, v):
        return _require_text(v)

    @field_validator("content", "title", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return "" if v is None else v


class CursorUpdatePayload(_Payload):
    document_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("documentId", "noteId", "document_id")
    )
    position: Any = None
    user_id: str = Field(validation_alias=AliasChoices("userId", "user_id"))
    user_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("userName", "user_name"))

    @field_validator("user_id", mode="before")
    @classmethod
    def required_text(cls, v):
        return _require_text(v)


class _Outgoing(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class PresenceInfo(_Outgoing):
    user_id: str = Field(serialization_alias="userId")
    user_name: str = Field(serialization_alias="userName")
    connection_id: str = Field(serialization_alias="connectionId")


class NoteUpdatedEvent(_Outgoing):
    content: str
    title: str
    user_id: str = Field(serialization_alias="userId")
    user_name: str = Field(serialization_alias="userName")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CursorUpdatedEvent(_Outgoing):
    position: Any = None
    user_id: str = Field(serialization_alias="userId")
    user_name: str = Field(serialization_alias="userName")
    connection_id: str = Field(serialization_alias="connectionId")
