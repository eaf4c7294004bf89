"""
Edit relay policy.

The session manager hands every incoming ``note-update`` to an
``UpdateRelay`` and broadcasts whatever it returns. The default policy is
last-writer-wins: the update is forwarded untouched and the latest frame a
client applies simply replaces its title and content. A merging policy
(OT, CRDT) can be plugged in here without touching presence or the ledger.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..schemas.realtime import NoteUpdatedEvent, NoteUpdatePayload
from .presence import PresenceEntry


class UpdateRelay(ABC):
    """Turns an incoming edit into the event the rest of the room receives."""

    @abstractmethod
    def on_update(
        self, sender: PresenceEntry, payload: NoteUpdatePayload
    ) -> Optional[NoteUpdatedEvent]:
        """Return the event to broadcast, or ``None`` to suppress it."""

    def on_room_closed(self, document_id: str) -> None:
        """Called when the last connection leaves a room."""


class LastWriterWinsRelay(UpdateRelay):
    """Forward every edit as-is, stamped with the server receipt time."""

    def on_update(
        self, sender: PresenceEntry, payload: NoteUpdatePayload
    ) -> Optional[NoteUpdatedEvent]:
        return NoteUpdatedEvent(
            content=payload.content,
            title=payload.title,
            user_id=payload.user_id,
            user_name=payload.user_name or sender.user_name,
        )
