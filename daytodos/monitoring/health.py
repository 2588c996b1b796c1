"""
Health checks for liveness/readiness probes.

Checks:
- Store connectivity (SQLite file reachable, tables present)
"""
from typing import Any, Dict

import structlog
from sqlalchemy import select, text

from daytodos.config import get_settings
from daytodos.storage.connection import get_session_factory
from daytodos.storage.models import BucketItem

logger = structlog.get_logger(__name__)


class HealthCheckError(Exception):
    """Raised when health check fails."""

    pass


class HealthCheck:
    """Health check service for the embedded store."""

    def __init__(self) -> None:
        self.settings = get_settings()

    async def check_database(self) -> Dict[str, Any]:
        """
        Check that the store answers queries and the bucket table exists.

        Returns:
            Dict[str, Any]: Database health status

        Raises:
            HealthCheckError: If database check fails
        """
        try:
            session_factory = get_session_factory()
            async with session_factory() as db:
                result = await db.execute(text("SELECT 1"))
                result.scalar()
                await db.execute(select(BucketItem.key).limit(1))

                return {
                    "status": "healthy",
                    "service": "database",
                    "message": "Store connection successful",
                }

        except Exception as e:
            logger.error("database_health_check_failed", error=str(e))
            raise HealthCheckError(f"Database health check failed: {str(e)}") from e

    async def check_all(self) -> Dict[str, Any]:
        """
        Run every check and report overall status.

        Returns:
            Dict[str, Any]: Overall health status with individual checks
        """
        checks: Dict[str, Any] = {}
        healthy = True

        try:
            checks["database"] = await self.check_database()
        except HealthCheckError as e:
            healthy = False
            checks["database"] = {"status": "unhealthy", "service": "database", "message": str(e)}

        return {
            "status": "healthy" if healthy else "unhealthy",
            "checks": checks,
        }

    async def liveness(self) -> Dict[str, Any]:
        """Liveness probe: the process is up and serving requests."""
        return {"status": "healthy", "message": "Service is alive"}

    async def readiness(self) -> Dict[str, Any]:
        """Readiness probe: the store is usable."""
        return await self.check_all()
