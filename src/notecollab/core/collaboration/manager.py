"""
Collaboration session manager.

Owns the live connections of the real-time channel and turns incoming
events into presence changes and room broadcasts. Every broadcast for a
room is sent while holding that room's lock, so the other occupants see
updates in the order the server received them.
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from ..logging import get_logger
from ..schemas.realtime import (
    ACTIVE_USERS,
    CURSOR_UPDATE,
    CURSOR_UPDATED,
    JOIN_NOTE,
    LEAVE_NOTE,
    NOTE_UPDATE,
    NOTE_UPDATED,
    USER_JOINED,
    USER_LEFT,
    CursorUpdatedEvent,
    CursorUpdatePayload,
    Frame,
    JoinNotePayload,
    NoteUpdatePayload,
    PresenceInfo,
)
from .presence import PresenceEntry, PresenceRegistry
from .relay import LastWriterWinsRelay, UpdateRelay

logger = get_logger("collaboration.manager")

Authorizer = Callable[[str, str], Awaitable[bool]]


class Connection(Protocol):
    """What the manager needs from a transport connection."""

    id: str

    async def send_json(self, data: Dict[str, Any]) -> None: ...


def _presence(entry: PresenceEntry) -> Dict[str, Any]:
    return PresenceInfo(
        user_id=entry.user_id, user_name=entry.user_name, connection_id=entry.connection_id
    ).to_wire()


class CollaborationManager:
    """Routes real-time events between the connections of each note room."""

    def __init__(
        self,
        registry: Optional[PresenceRegistry] = None,
        relay: Optional[UpdateRelay] = None,
        authorizer: Optional[Authorizer] = None,
    ):
        self.registry = registry or PresenceRegistry()
        self.relay = relay or LastWriterWinsRelay()
        self.authorizer = authorizer
        self._connections: Dict[str, Connection] = {}

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def connect(self, connection: Connection) -> None:
        self._connections[connection.id] = connection
        logger.info("Connection opened", extra={"connection_id": connection.id})

    async def dispatch(self, connection_id: str, message: Any) -> None:
        """Route one raw frame received from ``connection_id``."""
        try:
            frame = Frame.model_validate(message)
        except PydanticValidationError:
            logger.warning("Dropping malformed frame", extra={"connection_id": connection_id})
            return

        if frame.event == JOIN_NOTE:
            await self.join_note(connection_id, frame.data)
        elif frame.event == NOTE_UPDATE:
            await self.note_update(connection_id, frame.data)
        elif frame.event == CURSOR_UPDATE:
            await self.cursor_update(connection_id, frame.data)
        elif frame.event == LEAVE_NOTE:
            await self.leave_note(connection_id)
        else:
            logger.warning(
                "Dropping unknown event",
                extra={"connection_id": connection_id, "event": frame.event},
            )

    async def join_note(self, connection_id: str, data: Dict[str, Any]) -> bool:
        """
        Put the connection in the room of ``data['documentId']``.

        The joiner receives ``active-users`` with the other occupants, the
        others receive ``user-joined``. Returns False when the event was dropped.
        """
        if connection_id not in self._connections:
            logger.warning("Join from unknown connection", extra={"connection_id": connection_id})
            return False
        try:
            payload = JoinNotePayload.model_validate(data)
        except PydanticValidationError as e:
            logger.warning(
                "Dropping malformed join-note",
                extra={"connection_id": connection_id, "errors": e.error_count()},
            )
            return False

        if self.authorizer is not None:
            try:
                allowed = await self.authorizer(payload.document_id, payload.user_id)
            except Exception as e:
                logger.error(
                    "Join access check failed",
                    extra={
                        "connection_id": connection_id,
                        "document_id": payload.document_id,
                        "error": str(e),
                    },
                )
                return False
            if not allowed:
                logger.warning(
                    "Join refused",
                    extra={
                        "connection_id": connection_id,
                        "document_id": payload.document_id,
                        "user_id": payload.user_id,
                    },
                )
                return False

        previous_room = self.registry.room_of(connection_id)
        if previous_room is not None and previous_room != payload.document_id:
            await self._leave_room(connection_id)

        failed: List[str] = []
        async with self.registry.room_lock(payload.document_id):
            result = await self.registry.join(
                connection_id, payload.document_id, payload.user_id, payload.user_name
            )
            failed += await self._broadcast(
                result.others, USER_JOINED, _presence(result.entry)
            )
            joiner = self._connections.get(connection_id)
            if joiner is not None and not await self._send(
                joiner, ACTIVE_USERS, [_presence(e) for e in result.others]
            ):
                failed.append(connection_id)

        logger.info(
            "Connection joined note",
            extra={
                "connection_id": connection_id,
                "document_id": payload.document_id,
                "user_id": payload.user_id,
                "occupants": len(result.others) + 1,
            },
        )
        await self._drop_failed(failed)
        return True

    async def note_update(self, connection_id: str, data: Dict[str, Any]) -> bool:
        """Relay an edit to every other occupant of the sender's room."""
        entry = self.registry.entry_for(connection_id)
        if entry is None:
            logger.warning("note-update before join", extra={"connection_id": connection_id})
            return False
        try:
            payload = NoteUpdatePayload.model_validate(data)
        except PydanticValidationError:
            logger.warning("Dropping malformed note-update", extra={"connection_id": connection_id})
            return False
        if payload.document_id and payload.document_id != entry.document_id:
            logger.warning(
                "note-update for a room the connection is not in",
                extra={"connection_id": connection_id, "document_id": payload.document_id},
            )
            return False

        event = self.relay.on_update(entry, payload)
        if event is None:
            return True

        failed: List[str] = []
        async with self.registry.room_lock(entry.document_id):
            others = self._others(entry)
            failed += await self._broadcast(others, NOTE_UPDATED, event.to_wire())
        await self._drop_failed(failed)
        return True

    async def cursor_update(self, connection_id: str, data: Dict[str, Any]) -> bool:
        entry = self.registry.entry_for(connection_id)
        if entry is None:
            return False
        try:
            payload = CursorUpdatePayload.model_validate(data)
        except PydanticValidationError:
            logger.debug("Dropping malformed cursor-update", extra={"connection_id": connection_id})
            return False

        event = CursorUpdatedEvent(
            position=payload.position,
            user_id=payload.user_id,
            user_name=payload.user_name or entry.user_name,
            connection_id=connection_id,
        )
        failed: List[str] = []
        async with self.registry.room_lock(entry.document_id):
            failed += await self._broadcast(self._others(entry), CURSOR_UPDATED, event.to_wire())
        await self._drop_failed(failed)
        return True

    async def leave_note(self, connection_id: str) -> None:
        """Leave the current room but keep the connection open."""
        await self._leave_room(connection_id)

    async def disconnect(self, connection_id: str) -> None:
        """Forget the connection and tell its room it left. Idempotent."""
        connection = self._connections.pop(connection_id, None)
        await self._leave_room(connection_id)
        if connection is not None:
            logger.info("Connection closed", extra={"connection_id": connection_id})

    async def _leave_room(self, connection_id: str) -> Optional[PresenceEntry]:
        entry = self.registry.entry_for(connection_id)
        if entry is None:
            return None

        failed: List[str] = []
        async with self.registry.room_lock(entry.document_id):
            removed = await self.registry.leave(connection_id)
            if removed is None:
                return None
            remaining = self.registry.occupants_of(removed.document_id)
            failed += await self._broadcast(remaining, USER_LEFT, _presence(removed))

        if not self.registry.occupants_of(removed.document_id):
            self.relay.on_room_closed(removed.document_id)
        await self._drop_failed(failed)
        return removed

    def _others(self, entry: PresenceEntry) -> List[PresenceEntry]:
        return [
            e for e in self.registry.occupants_of(entry.document_id)
            if e.connection_id != entry.connection_id
        ]

    async def _broadcast(
        self, recipients: List[PresenceEntry], event: str, data: Any
    ) -> List[str]:
        """Send to each recipient in order. Returns the ids whose send failed."""
        failed = []
        for recipient in recipients:
            connection = self._connections.get(recipient.connection_id)
            if connection is None:
                continue
            if not await self._send(connection, event, data):
                failed.append(recipient.connection_id)
        return failed

    async def _send(self, connection: Connection, event: str, data: Any) -> bool:
        try:
            await connection.send_json({"event": event, "data": data})
            return True
        except Exception as e:
            logger.warning(
                "Send failed, dropping connection",
                extra={"connection_id": connection.id, "event": event, "error": str(e)},
            )
            return False

    async def _drop_failed(self, connection_ids: List[str]) -> None:
        # called outside any room lock; disconnect takes room locks itself
        for connection_id in connection_ids:
            await self.disconnect(connection_id)
