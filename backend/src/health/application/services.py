from dataclasses import dataclass
from typing import Any

from shared.infrastructure.database import DRIVER_ERRORS, DatabaseGateway
from shared.infrastructure.logger import AppLogger, get_logger
from users.domain.repository import UNKNOWN_COUNT, UserRepository


@dataclass
class HealthReport:
    healthy: bool
    user_count: int = UNKNOWN_COUNT
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if not self.healthy:
            return {"status": "unhealthy", "database": "disconnected", "error": self.error}
        return {"status": "healthy", "database": "connected", "user_count": self.user_count}


class HealthReporter:
    """Combines a gateway ping with the user count.

    A failed ping makes the service unhealthy. A failed count only degrades the
    report to ``user_count=-1``.
    """

    def __init__(self, gateway: DatabaseGateway, users: UserRepository, log: AppLogger | None = None):
        self.gateway = gateway
        self.users = users
        self.log = log or get_logger("health")

    async def check(self) -> HealthReport:
        try:
            await self.gateway.ping()
        except DRIVER_ERRORS as exc:
            self.log.error("Database ping failed", error=exc)
            return HealthReport(healthy=False, error=str(exc))

        user_count = await self.users.count_all()
        self.log.info("System healthy", user_count=user_count)
        return HealthReport(healthy=True, user_count=user_count)
