# Note model - the collaboratively edited document
import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.orm import attributes as orm_attributes

from .base import BaseModel, utcnow
from .types import GUID, StringListType

if TYPE_CHECKING:
    from .collaborator import Collaborator
    from .version import NoteVersion


class ContentType(str, Enum):
    """How the note body should be rendered."""

    PLAIN = "plain"
    MARKDOWN = "markdown"
    HTML = "html"


class Note(BaseModel):
    """Note with its collaborator set and version ledger embedded."""

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    tags: Mapped[Optional[List[str]]] = mapped_column(StringListType, nullable=True)
    content_type: Mapped[str] = mapped_column(
        String(20), default=ContentType.PLAIN.value, nullable=False
    )
    folder: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )

    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # sharing
    is_shared: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    share_code: Mapped[Optional[str]] = mapped_column(String(32), unique=True, nullable=True)
    share_code_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # ledger cursor, -1 until the first version is recorded
    current_version: Mapped[int] = mapped_column(Integer, default=-1, nullable=False)

    last_edited_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        GUID(), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    last_edited_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    collaborators: Mapped[List["Collaborator"]] = relationship(
        "Collaborator",
        back_populates="note",
        cascade="all, delete-orphan",
        lazy="selectin",
        doc="Users granted access besides the owner",
    )

    versions: Mapped[List["NoteVersion"]] = relationship(
        "NoteVersion",
        back_populates="note",
        cascade="all, delete-orphan",
        order_by="NoteVersion.sequence",
        lazy="selectin",
        doc="Version ledger, oldest first",
    )

    __table_args__ = (
        Index("idx_notes_owner_id", "owner_id"),
        Index("idx_notes_owner_created", "owner_id", "created_at"),
        Index("idx_notes_is_shared", "is_shared"),
        Index("idx_notes_last_edited_at", "last_edited_at"),
        CheckConstraint("length(title) <= 200", name="ck_notes_title_len"),
        CheckConstraint(
            "content_type IN ('plain', 'markdown', 'html')", name="ck_notes_content_type"
        ),
    )

    def __repr__(self) -> str:
        truncated = self.title if len(self.title) <= 30 else (self.title[:30] + "...")
        return f"<Note(title='{truncated}', owner_id={self.owner_id})>"

    @property
    def preview(self) -> str:
        """First 200 characters of the body."""
        content = self.content or ""
        if len(content) <= 200:
            return content
        return content[:197] + "..."

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        return self.owner_id == user_id

    def find_collaborator(self, user_id: uuid.UUID) -> Optional["Collaborator"]:
        """Collaborator entry for the user, if any."""
        for collaborator in self.collaborators:
            if collaborator.user_id == user_id:
                return collaborator
        return None

    def mark_edited(self, user_id: uuid.UUID) -> None:
        """Stamp last editor and edit time."""
        self.last_edited_by_id = user_id
        self.last_edited_at = utcnow()


# New notes start with loaded, empty collections so the ledger never
# triggers an implicit lazy load under asyncio.
@event.listens_for(Note, "init", propagate=True)
def _init_note_collections(target, args, kwargs):
    if "collaborators" not in kwargs:
        orm_attributes.set_committed_value(target, "collaborators", [])
    if "versions" not in kwargs:
        orm_attributes.set_committed_value(target, "versions", [])
    if "current_version" not in kwargs:
        target.current_version = -1
    if "content" not in kwargs:
        target.content = ""
    if "is_favorite" not in kwargs:
        target.is_favorite = False
    if "is_shared" not in kwargs:
        target.is_shared = False
