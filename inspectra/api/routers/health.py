"""Health check endpoints for inspectra.

Provides Kubernetes-compatible health probes:
- /health: Basic health check
- /health/live: Liveness probe (is the app running?)
- /health/ready: Readiness probe (is the app ready to serve traffic?)

Checks:
- Document store connectivity
- Disk space
- Memory usage
"""

import time
from datetime import datetime, timezone
from typing import Any, Dict

import psutil
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from inspectra import __version__
from inspectra.api.deps import get_store
from inspectra.core.config import get_settings
from inspectra.store.base import DocumentStore

router = APIRouter(tags=["health"])

# Critical thresholds; warning levels come from settings
DISK_CRITICAL_PERCENT = 95
MEMORY_CRITICAL_PERCENT = 95


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _grade(percent_used: float, warning: float, critical: float) -> str:
    if percent_used >= critical:
        return "critical"
    if percent_used >= warning:
        return "warning"
    return "healthy"


def check_store(store: DocumentStore) -> Dict[str, Any]:
    """Check the document store answers a read."""
    try:
        start = time.perf_counter()
        projects = store.get_all("projects")
        return {
            "status": "healthy",
            "backend": type(store).__name__,
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
            "projects": len(projects),
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }


def _usage_check(sample, warning: float, critical: float, free_key: str, free_attr: str) -> Dict[str, Any]:
    try:
        usage = sample()
    except Exception as e:
        return {"status": "unknown", "error": str(e)}
    gib = 1024 ** 3
    return {
        "status": _grade(usage.percent, warning, critical),
        "total_gb": round(usage.total / gib, 2),
        free_key: round(getattr(usage, free_attr) / gib, 2),
        "percent_used": usage.percent,
    }


def check_disk() -> Dict[str, Any]:
    """Usage of the filesystem holding the working directory."""
    return _usage_check(
        lambda: psutil.disk_usage("."),
        get_settings().disk_warning_percent, DISK_CRITICAL_PERCENT, "free_gb", "free",
    )


def check_memory() -> Dict[str, Any]:
    return _usage_check(
        psutil.virtual_memory,
        get_settings().memory_warning_percent, MEMORY_CRITICAL_PERCENT, "available_gb", "available",
    )

@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if the application is running.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "timestamp": _now(),
    }


@router.get("/health/live")
async def liveness_probe():
    """
    Kubernetes liveness probe.

    Must stay fast and independent of the store.
    """
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "alive",
            "timestamp": _now(),
        },
    )


@router.get("/health/ready")
async def readiness_probe(store: DocumentStore = Depends(get_store)):
    """
    Kubernetes readiness probe.

    Returns 503 when the store is unreachable or a resource is critical.
    Warnings are reported but keep the instance in rotation.
    """
    checks = {
        "store": check_store(store),
        "disk": check_disk(),
        "memory": check_memory(),
    }

    failed = [
        name for name, check in checks.items()
        if check["status"] in ("unhealthy", "critical")
    ]

    if failed:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "checks": checks,
                "failed": failed,
                "timestamp": _now(),
            },
        )

    degraded = any(check["status"] == "warning" for check in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "degraded" if degraded else "ready",
            "checks": checks,
            "timestamp": _now(),
        },
    )
