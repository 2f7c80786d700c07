"""
Health Check Routes
===================

Endpoints for health monitoring and service status.

Includes:
- Basic health check
- Readiness probe
- Detailed status information
"""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from a11y_announcer.config import Settings, get_settings
from a11y_announcer.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get(
    "",
    summary="Basic health check",
    response_description="Service health status",
)
async def health_check() -> dict[str, str]:
    """
    Basic health check endpoint.

    Returns:
        Simple status message indicating service is running.
    """
    return {"status": "healthy", "timestamp": _now()}


@router.get(
    "/ready",
    summary="Readiness probe",
    response_description="Service readiness status",
)
async def readiness_check(request: Request) -> dict[str, Any]:
    """
    Readiness probe.

    Checks that the accessibility service exists and its output queue
    is draining.

    Returns:
        Readiness status and component health.

    Raises:
        HTTPException: If service is not ready.
    """
    service = getattr(request.app.state, "service", None)
    checks: dict[str, bool] = {
        "service_created": service is not None,
        "queue_draining": bool(service is not None and service.is_running),
    }

    if not all(checks.values()):
        logger.warning("Accessibility service not ready", checks=checks)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "status": "not_ready",
                "checks": checks,
            },
        )

    return {
        "status": "ready",
        "checks": checks,
        "timestamp": _now(),
    }


@router.get(
    "/live",
    summary="Liveness probe",
    response_description="Service liveness status",
)
async def liveness_check() -> dict[str, str]:
    """
    Liveness probe for process supervisors.

    Returns:
        Simple alive status.
    """
    return {"status": "alive"}


@router.get(
    "/info",
    summary="Service information",
    response_description="Detailed service information",
)
async def service_info(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """
    Get detailed service information.

    Returns:
        Service version, configuration, and pipeline status.
    """
    from a11y_announcer import __version__

    service = getattr(request.app.state, "service", None)
    return {
        "service": "a11y-announcer",
        "version": __version__,
        "environment": settings.server.environment,
        "config": {
            "dedup_window": settings.channel.dedup_window,
            "queue_drain_interval": settings.queue.queue_drain_interval,
            "speech_backend": settings.output.speech_backend,
            "clipboard_backend": settings.output.clipboard_backend,
            "debug_mode": settings.server.debug,
        },
        "status": service.get_status() if service is not None else None,
        "timestamp": _now(),
    }
