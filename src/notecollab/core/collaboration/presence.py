"""
Presence registry: which connection sits in which note room.

A connection belongs to at most one room. The registry keeps two indexes
(connection -> entry, room -> connections) behind an ``asyncio.Lock`` for the
indexes and one lock per room. The room lock is exposed so the session
manager can broadcast under the same lock that covered the registry change.
"""

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, List, Optional

from ..locks import KeyedLocks
from ..logging import get_logger

logger = get_logger("collaboration.presence")


@dataclass(frozen=True)
class PresenceEntry:
    """Ephemeral record of a connection participating in a room."""

    connection_id: str
    document_id: str
    user_id: str
    user_name: str


@dataclass
class JoinResult:
    entry: PresenceEntry
    others: List[PresenceEntry] = field(default_factory=list)
    # set when the connection was moved out of another room
    previous: Optional[PresenceEntry] = None


class PresenceRegistry:
    """In-memory presence tracking for one server process."""

    def __init__(self):
        self._by_connection: Dict[str, PresenceEntry] = {}
        self._rooms: Dict[str, Dict[str, PresenceEntry]] = {}
        self._room_locks = KeyedLocks()
        self._index_lock = asyncio.Lock()

    @asynccontextmanager
    async def room_lock(self, document_id: str) -> AsyncIterator[None]:
        """Serialize registry changes and broadcasts for one room."""
        async with self._room_locks.hold(document_id):
            yield

    async def join(
        self, connection_id: str, document_id: str, user_id: str, user_name: str
    ) -> JoinResult:
        """Put the connection in ``document_id``, leaving its previous room first."""
        previous = None
        async with self._index_lock:
            current = self._by_connection.get(connection_id)
            if current is not None and current.document_id != document_id:
                previous = self._remove(connection_id)

            entry = PresenceEntry(connection_id, document_id, user_id, user_name)
            self._by_connection[connection_id] = entry
            self._rooms.setdefault(document_id, {})[connection_id] = entry
            others = [e for cid, e in self._rooms[document_id].items() if cid != connection_id]

        logger.debug(
            "Connection joined room",
            extra={"connection_id": connection_id, "document_id": document_id, "occupants": len(others) + 1},
        )
        return JoinResult(entry=entry, others=others, previous=previous)

    async def leave(self, connection_id: str) -> Optional[PresenceEntry]:
        """Drop the connection's presence. Returns the removed entry, or None."""
        async with self._index_lock:
            removed = self._remove(connection_id)
        if removed is not None:
            logger.debug(
                "Connection left room",
                extra={"connection_id": connection_id, "document_id": removed.document_id},
            )
        return removed

    def occupants_of(self, document_id: str) -> List[PresenceEntry]:
        return list(self._rooms.get(document_id, {}).values())

    def room_of(self, connection_id: str) -> Optional[str]:
        entry = self._by_connection.get(connection_id)
        return entry.document_id if entry else None

    def entry_for(self, connection_id: str) -> Optional[PresenceEntry]:
        return self._by_connection.get(connection_id)

    def rooms(self) -> List[str]:
        return list(self._rooms)

    @property
    def room_lock_count(self) -> int:
        return len(self._room_locks)

    def __len__(self) -> int:
        return len(self._by_connection)

    def _remove(self, connection_id: str) -> Optional[PresenceEntry]:
        entry = self._by_connection.pop(connection_id, None)
        if entry is None:
            return None
        room = self._rooms.get(entry.document_id)
        if room is not None:
            room.pop(connection_id, None)
            if not room:
                del self._rooms[entry.document_id]
        return entry
