# WORKFLOW: Health check endpoints for monitoring and operational status.
# Used by: Load balancers, monitoring systems, container probes
# Endpoints:
# 1. /healthz - Basic health check (always returns healthy)
# 2. /readyz - Readiness check against the price store
# 3. /livez - Liveness check for Kubernetes probes
#
# Readiness flow: Readiness check -> SELECT 1 on the engine -> Ready/Not ready

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from db.session import check_db_connection

router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/healthz")
async def health_check(request: Request):
    """
    Basic health check endpoint.

    Returns:
        Health status of the API
    """
    app_settings = request.app.state.settings
    return {
        "status": "healthy",
        "timestamp": _now(),
        "version": app_settings.version,
        "environment": app_settings.environment
    }


@router.get("/readyz")
def readiness_check(request: Request):
    """
    Readiness check endpoint.

    The service is ready when the database answers a trivial query.
    """
    checks = {"database": check_db_connection(request.app.state.engine)}
    is_ready = all(checks.values())

    return JSONResponse(
        status_code=200 if is_ready else 503,
        content={
            "status": "ready" if is_ready else "not_ready",
            "timestamp": _now(),
            "checks": checks,
            "version": request.app.state.settings.version
        },
    )


@router.get("/livez")
async def liveness_check():
    """Liveness check used by Kubernetes liveness probes."""
    return {
        "status": "alive",
        "timestamp": _now()
    }
