import time
from enum import Enum

import inject
from pydantic import BaseModel

from culqi_backend.circuitbreaker.services import CircuitBreakerService
from culqi_backend.config.models import AppConfig
from culqi_backend.culqi.client import CulqiClient
from culqi_backend.version.models import VersionInfo


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class DependencyCheck(BaseModel):
    status: HealthStatus
    message: str


class HealthReport(BaseModel):
    status: HealthStatus
    service: str = "culqi-payment-processor"
    version: str
    environment: str
    uptime: float


class ReadinessReport(BaseModel):
    ready: bool
    dependencies: dict[str, DependencyCheck]


class HealthService:
    @inject.autoparams()
    def __init__(
        self,
        app_config: AppConfig,
        version_info: VersionInfo,
        culqi_client: CulqiClient,
        circuit_breaker: CircuitBreakerService,
    ) -> None:
        self.app_config = app_config
        self.version_info = version_info
        self.culqi_client = culqi_client
        self.circuit_breaker = circuit_breaker
        self.started_at = time.time()

    def report(self) -> HealthReport:
        return HealthReport(
            status=HealthStatus.HEALTHY,
            version=self.version_info.version,
            environment=self.app_config.env.value,
            uptime=round(time.time() - self.started_at, 3),
        )

    async def readiness(self) -> ReadinessReport:
        dependencies = {
            "circuit_breaker": self.__check_circuit(),
            "culqi_api": await self.__check_culqi(),
        }

        return ReadinessReport(
            ready=all(
                check.status == HealthStatus.HEALTHY
                for check in dependencies.values()
            ),
            dependencies=dependencies,
        )

    def __check_circuit(self) -> DependencyCheck:
        circuit = self.circuit_breaker.get_circuit(CulqiClient.CIRCUIT_ID)

        if circuit.is_open_at(self.circuit_breaker.clock()):
            return DependencyCheck(
                status=HealthStatus.UNHEALTHY,
                message=f"Circuit is open after {circuit.fail_count} failures",
            )

        return DependencyCheck(status=HealthStatus.HEALTHY, message="Circuit is closed")

    async def __check_culqi(self) -> DependencyCheck:
        if await self.culqi_client.ping():
            return DependencyCheck(
                status=HealthStatus.HEALTHY, message="Culqi API is reachable"
            )

        return DependencyCheck(
            status=HealthStatus.UNHEALTHY, message="Cannot reach Culqi API"
        )
