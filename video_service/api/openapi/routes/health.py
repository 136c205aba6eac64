"""Health check endpoints."""

import asyncio
from enum import Enum

from fastapi import APIRouter
from pydantic import BaseModel, Field

from video_service.api.dependencies import FactoryDep, SettingsDep
from video_service.commons.infrastructure.blob.base import HealthStatus as ProbeResult
from video_service.infrastructure.video import probe_ffmpeg

router = APIRouter()


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status of a single component."""

    name: str = Field(description="Component name")
    status: HealthStatus = Field(description="Component health status")
    message: str | None = Field(default=None, description="Additional details")
    latency_ms: float | None = Field(default=None, description="Probe latency")


class HealthResponse(BaseModel):
    """Health check response."""

    status: HealthStatus = Field(description="Overall health status")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment")
    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Individual component health",
    )


class LivenessResponse(BaseModel):
    """Simple liveness response."""

    status: str = Field(default="ok")


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    ready: bool = Field(description="Whether the service is ready to accept requests")
    checks: dict[str, bool] = Field(
        default_factory=dict,
        description="Individual readiness checks",
    )


def _component(name: str, result: ProbeResult | BaseException) -> ComponentHealth:
    if isinstance(result, BaseException):
        return ComponentHealth(
            name=name,
            status=HealthStatus.UNHEALTHY,
            message=str(result),
        )
    return ComponentHealth(
        name=name,
        status=HealthStatus.HEALTHY if result.healthy else HealthStatus.UNHEALTHY,
        message=result.message,
        latency_ms=round(result.latency_ms, 2),
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Get overall health status of the service and its components.",
)
async def health_check(
    settings: SettingsDep,
    factory: FactoryDep,
) -> HealthResponse:
    """Check health of all service components."""
    blob_result, store_result = await asyncio.gather(
        factory.get_blob_storage().health_check(),
        factory.get_metadata_store().health_check(),
        return_exceptions=True,
    )

    components = [
        _component("blob_storage", blob_result),
        _component("metadata_store", store_result),
    ]

    ffmpeg_path = settings.transcoder.ffmpeg_path
    ffmpeg_found = probe_ffmpeg(ffmpeg_path)
    components.append(
        ComponentHealth(
            name="transcoder",
            status=HealthStatus.HEALTHY if ffmpeg_found else HealthStatus.UNHEALTHY,
            message=f"ffmpeg: {ffmpeg_path}",
        )
    )

    unhealthy_count = sum(1 for c in components if c.status == HealthStatus.UNHEALTHY)
    if unhealthy_count == 0:
        overall_status = HealthStatus.HEALTHY
    elif unhealthy_count >= 2:
        overall_status = HealthStatus.UNHEALTHY
    else:
        overall_status = HealthStatus.DEGRADED

    return HealthResponse(
        status=overall_status,
        version=settings.app.version,
        environment=settings.app.environment,
        components=components,
    )


@router.get(
    "/health/live",
    response_model=LivenessResponse,
    summary="Liveness probe",
    description="Simple liveness check for Kubernetes probes.",
)
async def liveness() -> LivenessResponse:
    """Simple liveness check - just verifies the app is running."""
    return LivenessResponse(status="ok")


@router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    description="Readiness check for Kubernetes probes.",
)
async def readiness(
    settings: SettingsDep,
    factory: FactoryDep,
) -> ReadinessResponse:
    """Check if service is ready to accept requests.

    Providers must be constructible and the ffmpeg binary must resolve.
    """
    checks: dict[str, bool] = {}

    try:
        factory.get_blob_storage()
        checks["blob_storage"] = True
    except ValueError:
        checks["blob_storage"] = False

    try:
        factory.get_video_repository()
        checks["metadata_store"] = True
    except ValueError:
        checks["metadata_store"] = False

    checks["transcoder"] = probe_ffmpeg(settings.transcoder.ffmpeg_path)

    return ReadinessResponse(ready=all(checks.values()), checks=checks)
