"""API routers for NoteCollab."""

from .health import router as health_router
from .notes import router as notes_router
from .realtime import router as realtime_router
from .sharing import router as sharing_router
from .versions import router as versions_router

__all__ = ["notes_router", "sharing_router", "versions_router", "health_router", "realtime_router"]
