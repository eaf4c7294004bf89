# Immutable title/content snapshots forming a note's version ledger
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel, utcnow
from .types import GUID

if TYPE_CHECKING:
    from .note import Note


class NoteVersion(BaseModel):
    """One ledger entry. ``sequence`` orders entries of a note chronologically."""

    __tablename__ = "note_versions"

    note_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("notes.id", ondelete="CASCADE"), nullable=False
    )
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    author_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    note: Mapped["Note"] = relationship("Note", back_populates="versions")

    __table_args__ = (
        UniqueConstraint("note_id", "sequence", name="uq_note_versions_note_sequence"),
        Index("idx_note_versions_note_id", "note_id"),
    )

    def __repr__(self) -> str:
        return f"<NoteVersion(note_id={self.note_id}, sequence={self.sequence})>"
