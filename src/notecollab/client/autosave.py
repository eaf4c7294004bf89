"""
Debounced auto-save.

Edits arrive far more often than they should be persisted. ``DebouncedSaver``
keeps only the latest state and saves it once the editor has been idle for
``interval`` seconds, ``autosave_interval_seconds`` from settings unless
given. A save already in flight is never cancelled; a newer edit just
schedules the next one.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from ..config import get_settings
from ..core.logging import get_logger

logger = get_logger("client.autosave")

SaveFunc = Callable[[Dict[str, Any]], Awaitable[Any]]
ErrorCallback = Callable[[Exception], None]


class DebouncedSaver:
    def __init__(
        self,
        save: SaveFunc,
        interval: Optional[float] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        if interval is None:
            interval = get_settings().autosave_interval_seconds
        if interval < 0:
            raise ValueError("interval must not be negative")
        self.save = save
        self.interval = interval
        self.on_error = on_error
        self._pending: Optional[Dict[str, Any]] = None
        self._last_saved: Optional[Dict[str, Any]] = None
        self._timer: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def pending(self) -> Optional[Dict[str, Any]]:
        return self._pending

    @property
    def last_saved(self) -> Optional[Dict[str, Any]]:
        return self._last_saved

    def schedule(self, state: Dict[str, Any]) -> None:
        """Remember ``state`` and restart the idle timer."""
        self._pending = dict(state)
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._wait_then_save())

    async def flush(self) -> None:
        """Save the pending state now and wait for every save in flight."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
        self._start_save()
        if self._in_flight:
            await asyncio.gather(*self._in_flight, return_exceptions=True)

    async def close(self) -> None:
        await self.flush()

    async def _wait_then_save(self) -> None:
        await asyncio.sleep(self.interval)
        self._start_save()

    def _start_save(self) -> None:
        state, self._pending = self._pending, None
        if state is None or state == self._last_saved:
            return
        task = asyncio.get_running_loop().create_task(self._save(state))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _save(self, state: Dict[str, Any]) -> None:
        try:
            await self.save(state)
        except Exception as e:
            logger.warning("Auto-save failed", extra={"error": str(e)})
            # keep it unsaved so the next cycle retries, unless a newer edit arrived
            if self._pending is None:
                self._pending = state
            if self.on_error is not None:
                self.on_error(e)
            return
        self._last_saved = state
        logger.debug("Auto-saved", extra={"keys": sorted(state)})
