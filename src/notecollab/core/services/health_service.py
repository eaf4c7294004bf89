"""Health service implementation."""

import asyncio
from typing import TYPE_CHECKING, Any, Dict, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import get_settings
from ..redis_client import RedisClient, get_redis_client
from ..schemas.common import HealthCheckResponse
from .interfaces import IHealthService

if TYPE_CHECKING:
    from ..collaboration import CollaborationManager


class HealthService(IHealthService):
    """Health check service implementation."""

    def __init__(
        self,
        session: AsyncSession,
        redis_client: Optional[RedisClient] = None,
        collaboration: Optional["CollaborationManager"] = None,
    ):
        self.session = session
        self.settings = get_settings()
        self.redis_client = redis_client or get_redis_client()
        self.collaboration = collaboration

    async def get_health_status(self) -> HealthCheckResponse:
        """Database is required; Redis only degrades token revocation."""
        db_health = await self.check_database_health()
        redis_health = await self.check_redis_health()

        overall_status = "healthy"
        if not db_health["connected"]:
            overall_status = "unhealthy"
        elif not redis_health["connected"]:
            overall_status = "degraded"

        checks = {"database": db_health, "redis": redis_health}
        if self.collaboration is not None:
            checks["realtime"] = self.check_realtime()

        return HealthCheckResponse(
            status=overall_status,
            version=self.settings.app_version,
            checks=checks,
        )

    async def check_database_health(self) -> Dict[str, Any]:
        """Check DB connection."""
        try:
            start_time = asyncio.get_running_loop().time()
            result = await self.session.execute(text("SELECT 1"))
            result.scalar()
            response_time = (asyncio.get_running_loop().time() - start_time) * 1000

            return {
                "connected": True,
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
            }
        except Exception as e:
            return {
                "connected": False,
                "status": "unhealthy",
                "error": str(e),
                "response_time_ms": 0.0,
            }

    async def check_redis_health(self) -> Dict[str, Any]:
        """Check Redis connection."""
        try:
            start_time = asyncio.get_running_loop().time()
            connected = await self.redis_client.ping()
            response_time = (asyncio.get_running_loop().time() - start_time) * 1000
        except Exception as e:
            return {
                "connected": False,
                "status": "unhealthy",
                "error": str(e),
                "response_time_ms": None,
            }

        return {
            "connected": connected,
            "status": "healthy" if connected else "unavailable",
            "response_time_ms": round(response_time, 2) if connected else None,
        }

    def check_realtime(self) -> Dict[str, Any]:
        registry = self.collaboration.registry
        return {
            "status": "healthy",
            "connections": self.collaboration.connection_count,
            "joined": len(registry),
            "rooms": len(registry.rooms()),
        }
