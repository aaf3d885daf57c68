"""Append-only approval history."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .stages import normalize_id
from .states import ActionStatus, CLEARING_ACTIONS, RequestKind


@dataclass(frozen=True)
class ApprovalAction:
    """A single submit/approve/reject entry recorded against a request."""

    actor_id: Optional[str]
    actor_name: str
    status: ActionStatus
    timestamp: str
    comments: Optional[str] = None
    actor_role: Optional[str] = None

    @classmethod
    def create(
        cls,
        actor_id: Any,
        actor_name: str,
        status: ActionStatus,
        *,
        comments: Optional[str] = None,
        actor_role: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "ApprovalAction":
        moment = now or datetime.now(timezone.utc)
        return cls(
            actor_id=normalize_id(actor_id),
            actor_name=actor_name,
            status=ActionStatus(status),
            timestamp=moment.isoformat(),
            comments=comments,
            actor_role=actor_role,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApprovalAction":
        return cls(
            actor_id=normalize_id(data.get("actorId")),
            actor_name=data.get("actorName", ""),
            status=ActionStatus(data["status"]),
            timestamp=data.get("timestamp", ""),
            comments=data.get("comments"),
            actor_role=data.get("actorRole"),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "actorId": self.actor_id,
            "actorName": self.actor_name,
            "status": self.status.value,
            "timestamp": self.timestamp,
        }
        if self.comments is not None:
            data["comments"] = self.comments
        if self.actor_role is not None:
            data["actorRole"] = self.actor_role
        return data


History = Tuple[ApprovalAction, ...]


def parse_history(raw: Optional[Iterable[Dict[str, Any]]]) -> History:
    return tuple(ApprovalAction.from_dict(item) for item in raw or [])


def dump_history(history: Iterable[ApprovalAction]) -> List[Dict[str, Any]]:
    return [action.to_dict() for action in history]


def append_action(history: History, action: ApprovalAction) -> History:
    """Return a new history with ``action`` at the end."""
    return tuple(history) + (action,)


def cleared_stage_count(history: Iterable[ApprovalAction], kind: RequestKind) -> int:
    """Number of stages cleared so far."""
    clearing = CLEARING_ACTIONS[kind]
    return sum(1 for action in history if action.status.value in clearing)


def has_rejection(history: Iterable[ApprovalAction]) -> bool:
    return any(action.status is ActionStatus.REJECTED for action in history)
