"""Approval workflow API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends

from inspectra.api.deps import get_approval_service, get_current_actor
from inspectra.api.errors import HANDLED_ERRORS, to_http_exception
from inspectra.api.schemas.common import (
    ActionRequest,
    ApprovalActionResponse,
    BatchActionRequest,
    BatchActionResponse,
    CamelModel,
    ReportResponse,
    RequestResponse,
    TripResponse,
)
from inspectra.core.approval.service import ApprovalService
from inspectra.core.approval.states import RequestKind
from inspectra.core.entities import Actor

router = APIRouter(prefix="/approvals", tags=["approvals"])


# Schemas
class PendingApprovalsResponse(CamelModel):
    trips: List[TripResponse] = []
    reports: List[ReportResponse] = []


def _serialize(request) -> RequestResponse:
    if request.kind is RequestKind.TRIP:
        return TripResponse.model_validate(request)
    return ReportResponse.model_validate(request)


# Endpoints
@router.get("/pending", response_model=PendingApprovalsResponse)
async def list_pending_approvals(
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
    kind: Optional[RequestKind] = None,
):
    """List requests whose current stage is waiting on the caller."""
    response = PendingApprovalsResponse()
    if kind in (None, RequestKind.TRIP):
        response.trips = [_serialize(t) for t in service.pending_for_user(RequestKind.TRIP, actor.id)]
    if kind in (None, RequestKind.REPORT):
        response.reports = [_serialize(r) for r in service.pending_for_user(RequestKind.REPORT, actor.id)]
    return response


# Batch routes are declared first so "batch" is never read as a request id
@router.post("/{kind}/batch/approve", response_model=BatchActionResponse)
async def batch_approve(
    kind: RequestKind,
    batch: BatchActionRequest,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Approve multiple requests in a batch."""
    result = service.batch_approve(kind, batch.request_ids, actor, batch.comment)
    return BatchActionResponse(**result)


@router.post("/{kind}/batch/reject", response_model=BatchActionResponse)
async def batch_reject(
    kind: RequestKind,
    batch: BatchActionRequest,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Reject multiple requests in a batch."""
    result = service.batch_reject(kind, batch.request_ids, actor, batch.comment)
    return BatchActionResponse(**result)


@router.get("/{kind}/{request_id}/history", response_model=List[ApprovalActionResponse])
async def get_approval_history(
    kind: RequestKind,
    request_id: str,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Get the approval history of a request, oldest entry first."""
    try:
        history = service.get_history(kind, request_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return [ApprovalActionResponse.model_validate(h) for h in history]


@router.post("/{kind}/{request_id}/approve", response_model=RequestResponse)
async def approve_request(
    kind: RequestKind,
    request_id: str,
    action: ActionRequest,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Approve the stage currently waiting on the caller."""
    try:
        request = service.approve(kind, request_id, actor, action.comment)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return _serialize(request)


@router.post("/{kind}/{request_id}/reject", response_model=RequestResponse)
async def reject_request(
    kind: RequestKind,
    request_id: str,
    action: ActionRequest,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Reject a request at the stage currently waiting on the caller."""
    try:
        request = service.reject(kind, request_id, actor, action.comment)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return _serialize(request)
