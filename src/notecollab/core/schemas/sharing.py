"""
Share-code schemas.

A share code grants write collaboration on a note to whoever redeems it
before it expires.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ShareCodeRequest(BaseModel):
    """Body of ``POST /notes/{id}/share``."""

    expires_in_days: int = Field(
        default=7, ge=1, le=365, description="Days until the code expires"
    )


class ShareCodeResponse(BaseModel):
    note_id: uuid.UUID
    share_code: str
    expires_at: datetime


class JoinRequest(BaseModel):
    """Body of ``POST /notes/join``."""

    share_code: str = Field(min_length=1, max_length=32, description="Code received from the owner")

    @field_validator("share_code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Share code is required")
        return v

    model_config = ConfigDict(json_schema_extra={"example": {"share_code": "aB3dE9xZ"}})
