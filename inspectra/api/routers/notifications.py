"""In-app notification API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from inspectra.api.deps import get_current_actor, get_notification_service
from inspectra.api.errors import HANDLED_ERRORS, to_http_exception
from inspectra.api.schemas.common import CamelModel
from inspectra.core.entities import Actor
from inspectra.services.notifications import NotificationService

router = APIRouter(prefix="/notifications", tags=["notifications"])


# Schemas
class NotificationResponse(CamelModel):
    id: str
    user_id: str
    title: str
    description: str
    link: Optional[str] = None
    timestamp: str
    is_read: bool


class NotificationListResponse(CamelModel):
    items: List[NotificationResponse]
    unread: int


class ClearResponse(BaseModel):
    cleared: int


# Endpoints
@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    service: NotificationService = Depends(get_notification_service),
    actor: Actor = Depends(get_current_actor),
):
    """List the caller's notifications, newest first."""
    items = [NotificationResponse.model_validate(n) for n in service.list_for_user(actor.id)]
    return NotificationListResponse(items=items, unread=sum(1 for n in items if not n.is_read))


@router.post("/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: str,
    service: NotificationService = Depends(get_notification_service),
    actor: Actor = Depends(get_current_actor),
):
    try:
        return NotificationResponse.model_validate(service.mark_as_read(notification_id, actor.id))
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)


@router.delete("", response_model=ClearResponse)
async def clear_notifications(
    service: NotificationService = Depends(get_notification_service),
    actor: Actor = Depends(get_current_actor),
):
    """Delete all of the caller's notifications."""
    return ClearResponse(cleared=service.clear_all(actor.id))
