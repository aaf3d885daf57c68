"""Sequential approval evaluator.

Pure functions over snapshots. A request clears its stages strictly in
order: the number of clearing entries in its history is the index of the
stage waiting for action. Nothing here reads or writes storage.
"""

import dataclasses
from datetime import datetime
from typing import Any, Optional

from .errors import (
    AlreadyTerminalError,
    InvalidTransitionError,
    MissingWorkflowError,
    NotNextApproverError,
)
from .history import ApprovalAction, append_action, cleared_stage_count
from .stages import ApprovalStage, StageList, build_review_stages, normalize_id
from .states import (
    APPROVAL_CLOSED_STATES,
    ActionStatus,
    INTERMEDIATE_STATE,
    RequestKind,
    STATUS_ENUMS,
    TripStatus,
    is_pending,
)


def has_assigned_reviewers(request) -> bool:
    return bool(getattr(request, "reviewer_id", None) and getattr(request, "approver_id", None))


def workflow_for(request, project) -> StageList:
    """Stage list governing ``request``.

    Reports with an assigned reviewer and approver use that two-stage
    chain; everything else uses the project's workflow for its kind.
    """
    if request.kind is RequestKind.REPORT and has_assigned_reviewers(request):
        return build_review_stages(request.reviewer_id, request.approver_id)
    if project is None:
        return ()
    return project.workflow(request.kind)


def next_stage(request, stages: StageList) -> Optional[ApprovalStage]:
    """Stage awaiting action, or None when nothing is pending."""
    if not stages or not is_pending(request.kind, request.status):
        return None
    cleared = cleared_stage_count(request.approval_history, request.kind)
    if cleared >= len(stages):
        return None
    return stages[cleared]


def is_pending_for(request, stages: StageList, user_id: Any) -> bool:
    """True if ``user_id`` is the approver the request is waiting on."""
    stage = next_stage(request, stages)
    if stage is None:
        return False
    return stage.approver_id is not None and stage.approver_id == normalize_id(user_id)


def is_pending_for_project(request, project, user_id: Any) -> bool:
    return is_pending_for(request, workflow_for(request, project), user_id)


def record_action(
    request,
    stages: StageList,
    actor_id: Any,
    actor_name: str,
    status: ActionStatus,
    comments: Optional[str] = None,
    *,
    actor_role: Optional[str] = None,
    now: Optional[datetime] = None,
):
    """Record an approve/reject decision and derive the new status.

    Returns a new request; ``request`` itself is left untouched.

    Raises:
        AlreadyTerminalError: the chain is already resolved
        InvalidTransitionError: the request has not been submitted, or
            ``status`` is not a decision
        MissingWorkflowError: no stages are configured
        NotNextApproverError: ``actor_id`` is not the pending approver
    """
    status = ActionStatus(status)
    kind = request.kind
    current = request.status.value

    if current in APPROVAL_CLOSED_STATES:
        raise AlreadyTerminalError(current, request.id)
    if not is_pending(kind, current):
        raise InvalidTransitionError(
            f"Cannot record {status.value} on a request in status {current}",
            current, status.value, request.id,
        )
    if status not in (ActionStatus.APPROVED, ActionStatus.REVIEWED, ActionStatus.REJECTED):
        raise InvalidTransitionError(
            f"{status.value} is not an approval decision",
            current, status.value, request.id,
        )
    if not stages:
        raise MissingWorkflowError("No approval workflow is configured", request.id)

    stage = next_stage(request, stages)
    actor = normalize_id(actor_id)
    if stage is None or stage.approver_id != actor:
        raise NotNextApproverError(actor, stage.approver_id if stage else None, request.id)

    status_type = STATUS_ENUMS[kind]
    if status is ActionStatus.REJECTED:
        entry_status = ActionStatus.REJECTED
        new_status = status_type(TripStatus.REJECTED.value)
    else:
        cleared = cleared_stage_count(request.approval_history, kind) + 1
        final = cleared == len(stages)
        if final:
            entry_status = ActionStatus.APPROVED
            new_status = status_type(TripStatus.APPROVED.value)
        else:
            intermediate = INTERMEDIATE_STATE[kind]
            entry_status = ActionStatus.REVIEWED if kind is RequestKind.REPORT else ActionStatus.APPROVED
            new_status = status_type(intermediate)

    action = ApprovalAction.create(
        actor, actor_name, entry_status,
        comments=comments, actor_role=actor_role, now=now,
    )
    return dataclasses.replace(
        request,
        status=new_status,
        approval_history=append_action(request.approval_history, action),
    )
