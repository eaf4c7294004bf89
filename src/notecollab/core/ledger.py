"""
Version ledger: bounded, linear undo/redo history embedded in a note.

The ledger is the note's ``versions`` collection (oldest first) plus the
``current_version`` cursor. Only :meth:`VersionLedger.record` appends; undo and
redo just move the cursor and copy an entry back into the live fields. Entries
ahead of the cursor are never truncated, so a redo after an unsaved edit can
bring back an older snapshot.

Cursor range is ``-1 <= cursor <= len(versions) - 1``; -1 means "nothing left
to undo".
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from .exceptions import NoHistoryError
from .models.note import Note
from .models.version import NoteVersion

MAX_VERSIONS = 50


@dataclass(frozen=True)
class LedgerPosition:
    """State of a note right after an undo or redo."""

    title: str
    content: str
    cursor: int
    total: int


class VersionLedger:
    """Operates on a note whose ``versions`` collection is loaded."""

    def __init__(self, max_versions: int = MAX_VERSIONS):
        if max_versions < 1:
            raise ValueError("max_versions must be at least 1")
        self.max_versions = max_versions

    def record(self, note: Note, author_id: Optional[UUID]) -> NoteVersion:
        """Snapshot the live title/content as the newest entry."""
        versions = note.versions
        while len(versions) >= self.max_versions:
            # delete-orphan cascade removes the row on flush
            versions.pop(0)

        next_sequence = versions[-1].sequence + 1 if versions else 0
        entry = NoteVersion(
            sequence=next_sequence,
            title=note.title,
            content=note.content or "",
            author_id=author_id,
        )
        versions.append(entry)
        note.current_version = len(versions) - 1
        return entry

    def undo(self, note: Note) -> LedgerPosition:
        """Restore the entry under the cursor, then step the cursor back."""
        versions = note.versions
        cursor = note.current_version
        if not versions or cursor < 0:
            raise NoHistoryError("No version to undo to")
        if cursor >= len(versions):
            # stale cursor after an external trim; clamp to newest entry
            cursor = len(versions) - 1

        self._restore(note, versions[cursor])
        note.current_version = max(-1, cursor - 1)
        return self._position(note)

    def redo(self, note: Note) -> LedgerPosition:
        """Step the cursor forward and restore that entry."""
        versions = note.versions
        if note.current_version >= len(versions) - 1:
            raise NoHistoryError("No version to redo to")

        note.current_version = min(len(versions) - 1, note.current_version + 1)
        self._restore(note, versions[note.current_version])
        return self._position(note)

    def can_undo(self, note: Note) -> bool:
        return bool(note.versions) and note.current_version >= 0

    def can_redo(self, note: Note) -> bool:
        return note.current_version < len(note.versions) - 1

    @staticmethod
    def _restore(note: Note, entry: NoteVersion) -> None:
        note.title = entry.title
        note.content = entry.content

    @staticmethod
    def _position(note: Note) -> LedgerPosition:
        return LedgerPosition(
            title=note.title,
            content=note.content,
            cursor=note.current_version,
            total=len(note.versions),
        )
