"""Audit logging middleware for FastAPI.

Logs every API request with:
- Actor identity (from the identity headers)
- Action performed (HTTP method mapped to an action name)
- Resource type and ID (from the path)
- Response status and duration
- Client IP address
"""

import logging
import time
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("inspectra.audit")


# Map HTTP methods to action names
METHOD_TO_ACTION = {
    "GET": "read",
    "POST": "create",
    "PUT": "update",
    "PATCH": "update",
    "DELETE": "delete",
}

# Paths that should not be logged (health checks, docs)
EXCLUDED_PATHS = {
    "/health",
    "/health/live",
    "/health/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
    "/favicon.ico",
}

# Trailing path segments naming an action rather than a resource
ACTION_SEGMENTS = {"approve", "reject", "submit", "book", "complete", "close", "read", "assign"}


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # Take the first IP (original client)
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def extract_resource_info(path: str) -> tuple[str, Optional[str]]:
    """
    Extract resource type and ID from request path.

    ``/api/approvals/trip/TRIP-1/approve`` gives ``("trip", "TRIP-1")``.

    Returns:
        Tuple of (resource_type, resource_id)
    """
    parts = [p for p in path.strip("/").split("/") if p]

    if parts and parts[0] == "api":
        parts = parts[1:]

    if not parts:
        return "api", None

    if parts[0] == "approvals" and len(parts) > 1:
        parts = parts[1:]

    resource_type = parts[0]
    resource_id = None
    if len(parts) > 1 and parts[1] not in ACTION_SEGMENTS and parts[1] not in ("pending", "batch"):
        resource_id = parts[1]

    return resource_type, resource_id


def determine_level(status_code: int, method: str) -> int:
    """Determine log level based on response status and method."""
    if status_code >= 500:
        return logging.ERROR
    elif status_code >= 400:
        return logging.WARNING
    elif method in ("POST", "DELETE", "PATCH", "PUT"):
        return logging.INFO
    return logging.DEBUG


class AuditMiddleware(BaseHTTPMiddleware):
    """
    Middleware that writes one audit log line per API request.

    The audit context is also left on ``request.state.audit_context``.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        request_id = str(uuid.uuid4())[:8]
        start_time = time.time()

        resource_type, resource_id = extract_resource_info(request.url.path)
        action = METHOD_TO_ACTION.get(request.method, request.method.lower())
        last_segment = request.url.path.rstrip("/").rsplit("/", 1)[-1]
        if request.method == "POST" and last_segment in ACTION_SEGMENTS:
            action = last_segment

        response = await call_next(request)

        duration_ms = int((time.time() - start_time) * 1000)

        # Set by get_current_actor
        actor = getattr(request.state, "actor", None)
        actor_id = actor.id if actor else request.headers.get("x-user-id")

        request.state.audit_context = {
            "request_id": request_id,
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "actor_id": actor_id,
            "ip_address": get_client_ip(request),
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }

        logger.log(
            determine_level(response.status_code, request.method),
            "[%s] %s %s %s%s by %s -> %d (%dms)",
            request_id,
            action,
            resource_type,
            request.method + " " + request.url.path,
            f" [{resource_id}]" if resource_id else "",
            actor_id or "anonymous",
            response.status_code,
            duration_ms,
        )

        return response
