"""WebSocket side of the collaboration client."""

import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
from urllib.parse import urlencode

import websockets

from ..core.logging import get_logger
from ..core.schemas.realtime import (
    ACTIVE_USERS,
    CURSOR_UPDATE,
    JOIN_NOTE,
    LEAVE_NOTE,
    NOTE_UPDATE,
    USER_JOINED,
    USER_LEFT,
)

logger = get_logger("client.realtime")

Handler = Callable[[Any], Union[None, Awaitable[None]]]


class CollaborationSession:
    """
    One connection to ``/ws``. Register handlers with :meth:`on`, then run
    :meth:`listen` as a task. Occupants of the joined room are tracked in
    :attr:`collaborators` keyed by connection id.
    """

    def __init__(self, url: str = "ws://localhost:8000/ws", token: Optional[str] = None):
        self.url = f"{url}?{urlencode({'token': token})}" if token else url
        self.websocket = None
        self.note_id: Optional[str] = None
        self.user_id: Optional[str] = None
        self.user_name: Optional[str] = None
        self.collaborators: Dict[str, Dict[str, Any]] = {}
        self._handlers: Dict[str, List[Handler]] = {}

    async def connect(self) -> None:
        self.websocket = await websockets.connect(self.url)
        logger.info("Connected", extra={"url": self.url.split("?")[0]})

    async def close(self) -> None:
        if self.websocket is not None:
            await self.websocket.close()
            self.websocket = None
            logger.info("Disconnected")

    def on(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    async def join(self, note_id: str, user_id: str, user_name: str = "Anonymous") -> None:
        self.note_id, self.user_id, self.user_name = note_id, user_id, user_name
        self.collaborators.clear()
        await self._send(JOIN_NOTE, {"documentId": note_id, "userId": user_id, "userName": user_name})

    async def leave(self) -> None:
        await self._send(LEAVE_NOTE, {})
        self.note_id = None
        self.collaborators.clear()

    async def send_update(self, title: str, content: str) -> None:
        await self._send(NOTE_UPDATE, {
            "documentId": self.note_id,
            "title": title,
            "content": content,
            "userId": self.user_id,
            "userName": self.user_name,
        })

    async def send_cursor(self, position: Any) -> None:
        await self._send(CURSOR_UPDATE, {
            "documentId": self.note_id,
            "position": position,
            "userId": self.user_id,
            "userName": self.user_name,
        })

    async def listen(self) -> None:
        """Dispatch incoming frames until the connection closes."""
        try:
            async for raw in self.websocket:
                await self.handle_frame(raw)
        except websockets.exceptions.ConnectionClosed as e:
            logger.info("Connection closed by server", extra={"code": e.code})

    async def handle_frame(self, raw: Union[str, bytes]) -> None:
        try:
            frame = json.loads(raw)
            event, data = frame["event"], frame.get("data")
        except (ValueError, KeyError, TypeError):
            logger.warning("Ignoring malformed frame")
            return

        self._track_presence(event, data)
        for handler in self._handlers.get(event, []):
            result = handler(data)
            if asyncio.iscoroutine(result):
                await result

    def _track_presence(self, event: str, data: Any) -> None:
        if event == ACTIVE_USERS and isinstance(data, list):
            self.collaborators = {u["connectionId"]: u for u in data if "connectionId" in u}
        elif event == USER_JOINED and isinstance(data, dict) and "connectionId" in data:
            self.collaborators[data["connectionId"]] = data
        elif event == USER_LEFT and isinstance(data, dict):
            self.collaborators.pop(data.get("connectionId"), None)

    async def _send(self, event: str, data: Dict[str, Any]) -> None:
        if self.websocket is None:
            raise RuntimeError("Not connected")
        await self.websocket.send(json.dumps({"event": event, "data": data}))
