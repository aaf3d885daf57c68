from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status

from inspectra.core.approval.service import ApprovalService
from inspectra.core.config import get_settings
from inspectra.core.entities import Actor
from inspectra.services.notifications import NotificationService
from inspectra.services.projects import ProjectService
from inspectra.store.base import DocumentStore


def get_store(request: Request) -> DocumentStore:
    """Document store dependency, created once per application."""
    return request.app.state.store


def get_notification_service(store: DocumentStore = Depends(get_store)) -> NotificationService:
    return NotificationService(store, get_settings().dashboard_url)


def get_approval_service(
    store: DocumentStore = Depends(get_store),
    notifications: NotificationService = Depends(get_notification_service),
) -> ApprovalService:
    return ApprovalService(store, notifier=notifications)


def get_project_service(store: DocumentStore = Depends(get_store)) -> ProjectService:
    return ProjectService(store)


def get_current_actor(
    request: Request,
    x_user_id: Optional[str] = Header(None),
    x_user_name: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> Actor:
    """Identify the caller from the identity headers set by the gateway."""
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    actor = Actor(id=x_user_id.strip(), name=x_user_name or x_user_id, role=x_user_role)
    # Picked up by the audit middleware
    request.state.actor = actor
    return actor
