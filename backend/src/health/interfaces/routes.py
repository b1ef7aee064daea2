from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from health.application.services import HealthReporter
from shared.dependencies import get_health_reporter
from shared.infrastructure.logger import get_logger

router = APIRouter(tags=["health"])

log = get_logger("health.routes")


@router.get("/health")
async def health_check(reporter: HealthReporter = Depends(get_health_reporter)):
    log.info("Checking system health")
    report = await reporter.check()
    if not report.healthy:
        return JSONResponse(status_code=503, content=report.to_dict())
    return report.to_dict()
