# Collaborator entries embedded in a note
import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel, utcnow
from .types import GUID

if TYPE_CHECKING:
    from .note import Note


class Permission(str, Enum):
    """Permission levels a collaborator can hold."""

    READ = "read"
    WRITE = "write"
    OWNER = "owner"


# levels that may mutate the note
EDIT_PERMISSIONS = frozenset({Permission.WRITE.value, Permission.OWNER.value})


class Collaborator(BaseModel):
    """A user granted access to someone else's note."""

    __tablename__ = "note_collaborators"

    note_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    permission: Mapped[str] = mapped_column(
        String(20), default=Permission.WRITE.value, nullable=False
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    note: Mapped["Note"] = relationship("Note", back_populates="collaborators")

    __table_args__ = (
        UniqueConstraint("note_id", "user_id", name="uq_collaborators_note_user"),
        CheckConstraint(
            "permission IN ('read', 'write', 'owner')", name="ck_collaborators_permission"
        ),
        Index("idx_collaborators_note_id", "note_id"),
        Index("idx_collaborators_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Collaborator(note_id={self.note_id}, user_id={self.user_id}, permission={self.permission})>"

    @property
    def can_edit(self) -> bool:
        return self.permission in EDIT_PERMISSIONS
