"""Health check endpoints router for monitoring service availability."""

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.accounts.api.http.deps import get_health_check_use_case
from src.accounts.core.use_cases import (
    HealthCheckOutput,
    HealthCheckUseCase,
    HealthStatus,
)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthCheckOutput)
async def health(
    use_case: HealthCheckUseCase = Depends(get_health_check_use_case),
) -> HealthCheckOutput:
    """Liveness probe; does not check dependencies."""
    return await use_case.execute()


@router.get("/ready", response_model=None)
async def readiness(
    use_case: HealthCheckUseCase = Depends(get_health_check_use_case),
) -> HealthCheckOutput | JSONResponse:
    """Readiness probe; returns 503 when the database is unreachable."""
    result = await use_case.execute(check_dependencies=True)
    if result.status is HealthStatus.DOWN:
        return JSONResponse(status_code=503, content=result.model_dump(mode="json"))
    return result
