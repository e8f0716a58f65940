import time
from collections.abc import Callable
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel

_PROCESS_STARTED_AT = time.monotonic()


class HealthStatus(StrEnum):
    UP = "UP"
    DOWN = "DOWN"


class DependencyHealth(BaseModel):
    status: HealthStatus


class HealthCheckOutput(BaseModel):
    status: HealthStatus
    timestamp: str
    uptime: int
    database: DependencyHealth | None = None


class HealthCheckUseCase:
    """Report liveness, and database readiness when a probe is supplied."""

    def __init__(self, database_probe: Callable[[], bool] | None = None):
        self._database_probe = database_probe

    async def execute(self, check_dependencies: bool = False) -> HealthCheckOutput:
        output = HealthCheckOutput(
            status=HealthStatus.UP,
            timestamp=datetime.now(UTC).isoformat(),
            uptime=int(time.monotonic() - _PROCESS_STARTED_AT),
        )

        if check_dependencies and self._database_probe is not None:
            db_status = HealthStatus.UP if self._database_probe() else HealthStatus.DOWN
            output.database = DependencyHealth(status=db_status)
            if db_status is HealthStatus.DOWN:
                output.status = HealthStatus.DOWN

        return output
