"""In-app notifications for approval events.

Handles:
- Telling the next approver that a request is waiting on them
- Telling the requester when a request is approved or rejected
- Per-user listing, read markers and clearing
"""

import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from jinja2 import Template

from inspectra.core.approval.evaluator import next_stage
from inspectra.core.approval.stages import StageList, normalize_id
from inspectra.core.approval.states import RequestKind
from inspectra.store.base import DocumentNotFoundError, DocumentStore

logger = logging.getLogger(__name__)

COLLECTION = "notifications"


class NotificationEventType(str, Enum):
    APPROVAL_PENDING = "approval_pending"
    REQUEST_APPROVED = "request_approved"
    REQUEST_REJECTED = "request_rejected"


TEMPLATES = {
    NotificationEventType.APPROVAL_PENDING: {
        "title": "{{ label }} awaiting your approval",
        "description": (
            "{{ label }} {{ request.id }}{% if request.project %} for {{ request.project }}{% endif %}"
            " is waiting on you as {{ stage.role_name or 'approver' }}."
        ),
    },
    NotificationEventType.REQUEST_APPROVED: {
        "title": "{{ label }} approved",
        "description": "{{ label }} {{ request.id }} has been approved.",
    },
    NotificationEventType.REQUEST_REJECTED: {
        "title": "{{ label }} rejected",
        "description": (
            "{{ label }} {{ request.id }} was rejected"
            "{% if entry.comments %}: {{ entry.comments }}{% endif %}"
        ),
    },
}

LABELS = {
    RequestKind.TRIP: "Trip request",
    RequestKind.REPORT: "Report",
}

LINKS = {
    RequestKind.TRIP: "/trips/{id}/summary",
    RequestKind.REPORT: "/reports/{id}",
}


class NotificationService:
    """Stores notifications as documents in the ``notifications`` collection."""

    def __init__(self, store: DocumentStore, dashboard_url: str = ""):
        self.store = store
        self.dashboard_url = dashboard_url.rstrip("/")

    def add_notification(
        self,
        user_id: Any,
        title: str,
        description: str,
        *,
        link: Optional[str] = None,
    ) -> Dict[str, Any]:
        notification_id = str(uuid.uuid4())
        data = {
            "id": notification_id,
            "userId": normalize_id(user_id),
            "title": title,
            "description": description,
            "link": link,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "isRead": False,
        }
        self.store.set(COLLECTION, notification_id, data)
        logger.debug("Notification %s queued for user %s", notification_id, data["userId"])
        return data

    def list_for_user(self, user_id: Any) -> List[Dict[str, Any]]:
        """Notifications for a user, newest first."""
        docs = self.store.find(COLLECTION, userId=normalize_id(user_id))
        return sorted((doc.data for doc in docs), key=lambda n: n["timestamp"], reverse=True)

    def unread_count(self, user_id: Any) -> int:
        return sum(1 for n in self.list_for_user(user_id) if not n["isRead"])

    def mark_as_read(self, notification_id: str, user_id: Any) -> Dict[str, Any]:
        doc = self.store.get(COLLECTION, notification_id)
        if doc is None or doc.data.get("userId") != normalize_id(user_id):
            raise DocumentNotFoundError(COLLECTION, notification_id)
        return self.store.update(COLLECTION, notification_id, {"isRead": True}).data

    def clear_all(self, user_id: Any) -> int:
        docs = self.store.find(COLLECTION, userId=normalize_id(user_id))
        for doc in docs:
            self.store.delete(COLLECTION, doc.id)
        return len(docs)

    def request_transitioned(self, request, stages: StageList) -> None:
        """Notify whoever has to act next, or the requester on an outcome."""
        entry = request.approval_history[-1] if request.approval_history else None
        stage = next_stage(request, stages)
        if stage is not None and stage.approver_id:
            self._send(NotificationEventType.APPROVAL_PENDING, stage.approver_id, request, stage=stage, entry=entry)
            return

        status = request.status.value
        if status == "Approved":
            event = NotificationEventType.REQUEST_APPROVED
        elif status == "Rejected":
            event = NotificationEventType.REQUEST_REJECTED
        else:
            return
        if request.requester_id:
            self._send(event, request.requester_id, request, entry=entry)

    def _send(self, event: NotificationEventType, user_id: str, request, **context: Any) -> None:
        template = TEMPLATES[event]
        values = {"label": LABELS[request.kind], "request": request, **context}
        link = LINKS[request.kind].format(id=request.id)
        self.add_notification(
            user_id,
            Template(template["title"]).render(**values),
            Template(template["description"]).render(**values),
            link=f"{self.dashboard_url}{link}",
        )
