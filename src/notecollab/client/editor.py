"""Live note editing: broadcast every keystroke, persist on idle."""

from typing import Any, Callable, Dict, Optional

from ..core.logging import get_logger
from ..core.schemas.realtime import NOTE_UPDATED
from .autosave import DebouncedSaver, ErrorCallback, SaveFunc
from .realtime import CollaborationSession

logger = get_logger("client.editor")


class CollaborativeEditor:
    """
    Local title/content of one note kept in sync with the room.

    Remote ``note-updated`` frames overwrite the local state (last writer
    wins) and are not saved again; only local edits are persisted.
    """

    def __init__(
        self,
        session: CollaborationSession,
        save: SaveFunc,
        interval: Optional[float] = None,
        on_error: Optional[ErrorCallback] = None,
        on_remote_change: Optional[Callable[[Dict[str, Any]], None]] = None,
    ):
        self.session = session
        self.saver = DebouncedSaver(save, interval=interval, on_error=on_error)
        self.on_remote_change = on_remote_change
        self.title = ""
        self.content = ""
        session.on(NOTE_UPDATED, self._apply_remote)

    async def open(self, note: Dict[str, Any], user_id: str, user_name: str) -> None:
        self.title = note.get("title", "")
        self.content = note.get("content", "")
        await self.session.join(str(note["id"]), user_id, user_name)

    async def edit(self, title: Optional[str] = None, content: Optional[str] = None) -> None:
        if title is not None:
            self.title = title
        if content is not None:
            self.content = content
        await self.session.send_update(self.title, self.content)
        self.saver.schedule({"title": self.title, "content": self.content})

    async def close(self) -> None:
        await self.saver.flush()

    def _apply_remote(self, data: Dict[str, Any]) -> None:
        self.title = data.get("title", self.title)
        self.content = data.get("content", self.content)
        logger.debug("Applied remote edit", extra={"from_user": data.get("userId")})
        if self.on_remote_change is not None:
            self.on_remote_change(data)
