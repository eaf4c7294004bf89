"""
Service layer interfaces and implementations.

Services take an ``AsyncSession``, build their repositories, and raise the
domain errors from ``core.exceptions``.
"""

from .interfaces import (
    IHealthService,
    INoteService,
    ISharingService,
    IVersionService,
)

from .health_service import HealthService
from .note_service import NoteService
from .sharing_service import SharingService
from .version_service import VersionService

__all__ = [
    # Interfaces
    "INoteService",
    "ISharingService",
    "IVersionService",
    "IHealthService",

    # Implementations
    "NoteService",
    "SharingService",
    "VersionService",
    "HealthService",
]
