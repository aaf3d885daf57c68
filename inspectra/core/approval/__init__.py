"""Approval workflow module for inspectra.

Implements sequential approval chains for trip requests and inspection
reports. The service layer lives in ``inspectra.core.approval.service``.
"""

from .states import (
    ActionStatus,
    ReportStatus,
    RequestKind,
    Transition,
    TripStatus,
    VALID_TRANSITIONS,
)
from .stages import ApprovalStage, normalize_id
from .history import ApprovalAction
from .errors import (
    AlreadyTerminalError,
    ApprovalError,
    InvalidTransitionError,
    MissingWorkflowError,
    NotNextApproverError,
    WorkflowLockedError,
)
from .evaluator import is_pending_for, is_pending_for_project, next_stage, record_action, workflow_for
from .machine import RequestLifecycle

__all__ = [
    "ActionStatus",
    "AlreadyTerminalError",
    "ApprovalAction",
    "ApprovalError",
    "ApprovalStage",
    "InvalidTransitionError",
    "MissingWorkflowError",
    "NotNextApproverError",
    "ReportStatus",
    "RequestKind",
    "RequestLifecycle",
    "Transition",
    "TripStatus",
    "VALID_TRANSITIONS",
    "WorkflowLockedError",
    "is_pending_for",
    "is_pending_for_project",
    "next_stage",
    "normalize_id",
    "record_action",
    "workflow_for",
]
