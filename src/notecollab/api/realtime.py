"""Real-time collaboration WebSocket endpoint."""

import json
import uuid
from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..config import get_settings
from ..core.collaboration import CollaborationManager
from ..core.logging import get_logger
from ..core.repositories import NoteRepository
from ..database import AsyncSessionLocal
from ..security import get_user_id_from_token

logger = get_logger("api.realtime")

router = APIRouter(tags=["realtime"])


class WebSocketConnection:
    """Adapts a Starlette WebSocket to the manager's ``Connection``."""

    def __init__(self, websocket: WebSocket, user_id: Optional[UUID] = None):
        self.id = uuid.uuid4().hex
        self.websocket = websocket
        # set when the socket was opened with a valid token
        self.user_id = user_id

    async def send_json(self, data: Dict[str, Any]) -> None:
        await self.websocket.send_json(data)


class NoteAccessAuthorizer:
    """Allows a join only for the note's owner or collaborators."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def __call__(self, document_id: str, user_id: str) -> bool:
        try:
            note_id = UUID(document_id)
            uid = UUID(user_id)
        except ValueError:
            return False
        async with self.session_factory() as session:
            note = await NoteRepository(session).get_accessible(note_id, uid)
        return note is not None


_manager: Optional[CollaborationManager] = None


def get_collaboration_manager() -> CollaborationManager:
    """Process-wide manager; presence is per server process."""
    global _manager
    if _manager is None:
        _manager = CollaborationManager(authorizer=NoteAccessAuthorizer(AsyncSessionLocal))
    return _manager


@router.websocket("/ws")
async def collaboration_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None, description="JWT access token"),
    manager: CollaborationManager = Depends(get_collaboration_manager),
):
    """
    Frames are JSON ``{"event": ..., "data": {...}}``.

    With a token, ``join-note`` must carry the token's user id. Tokenless
    sockets are only accepted in development, where the note access check
    alone decides.
    """
    user_id = None
    if token is None and get_settings().environment != "development":
        logger.warning("Refusing tokenless socket")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    if token is not None:
        user_id = await get_user_id_from_token(token)
        if user_id is None:
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

    await websocket.accept()
    connection = WebSocketConnection(websocket, user_id)
    manager.connect(connection)

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                logger.warning("Dropping non-JSON frame", extra={"connection_id": connection.id})
                continue
            if user_id is not None and not _matches_token_user(message, user_id):
                logger.warning(
                    "Dropping frame for another user", extra={"connection_id": connection.id}
                )
                continue
            await manager.dispatch(connection.id, message)
    except WebSocketDisconnect as e:
        logger.debug("Socket closed by peer", extra={"connection_id": connection.id, "code": e.code})
    finally:
        await manager.disconnect(connection.id)


def _matches_token_user(message: Any, user_id: UUID) -> bool:
    if not isinstance(message, dict) or not isinstance(message.get("data"), dict):
        # let the manager log malformed frames
        return True
    claimed = message["data"].get("userId", message["data"].get("user_id"))
    return claimed is None or str(claimed) == str(user_id)
