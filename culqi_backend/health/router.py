from fastapi import APIRouter
from fastapi.responses import JSONResponse
from starlette.status import HTTP_200_OK, HTTP_503_SERVICE_UNAVAILABLE

from culqi_backend.utils import resolve_instance

from .services import HealthReport, HealthService

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthReport)
def health(
    health_service: HealthService = resolve_instance(HealthService),
) -> HealthReport:
    return health_service.report()


@router.get("/live")
def liveness() -> dict[str, str]:
    return {"status": "alive"}


@router.get("/ready")
async def readiness(
    health_service: HealthService = resolve_instance(HealthService),
) -> JSONResponse:
    report = await health_service.readiness()

    return JSONResponse(
        status_code=HTTP_200_OK if report.ready else HTTP_503_SERVICE_UNAVAILABLE,
        content=report.model_dump(mode="json"),
    )
