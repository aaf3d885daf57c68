"""Inspection report API endpoints."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field

from inspectra.api.deps import get_approval_service, get_current_actor
from inspectra.api.errors import HANDLED_ERRORS, to_http_exception
from inspectra.api.schemas.common import ActionRequest, CamelModel, ReportResponse, UserId
from inspectra.core.approval.service import ApprovalService
from inspectra.core.approval.states import ReportStatus, RequestKind
from inspectra.core.entities import Actor

router = APIRouter(prefix="/reports", tags=["reports"])


# Schemas
class ReportCreate(CamelModel):
    report_number: str = Field(..., min_length=1)
    job_location: str = ""
    line_type: str = ""
    job_type: str = "Other"
    qty_joint: int = Field(default=0, ge=0)
    project: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class AssignApproversRequest(CamelModel):
    report_ids: List[str] = Field(..., min_length=1)
    reviewer_id: UserId = Field(..., min_length=1)
    approver_id: UserId = Field(..., min_length=1)


class AssignApproversResponse(CamelModel):
    submitted: List[str] = []
    failed: List[dict] = []


# Endpoints
@router.get("", response_model=List[ReportResponse])
async def list_reports(
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
    status_filter: Optional[ReportStatus] = Query(None, alias="status"),
    project: Optional[str] = None,
):
    """List reports, optionally filtered by status or project."""
    reports = service.reports.list()
    if status_filter:
        reports = [r for r in reports if r.status is status_filter]
    if project:
        reports = [r for r in reports if r.project == project]
    return [ReportResponse.model_validate(r) for r in reports]


@router.post("", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def create_report(
    body: ReportCreate,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Create a draft report authored by the caller."""
    try:
        report = service.create_report(actor, **body.model_dump())
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return ReportResponse.model_validate(report)


@router.post("/assign", response_model=AssignApproversResponse)
async def assign_approvers(
    body: AssignApproversRequest,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Assign a reviewer and an approver to reports and submit them."""
    try:
        result = service.assign_report_approvers(
            body.report_ids, body.reviewer_id, body.approver_id, actor
        )
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return AssignApproversResponse(**result)


@router.get("/{report_id}", response_model=ReportResponse)
async def get_report(
    report_id: str,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Get a specific report."""
    try:
        return ReportResponse.model_validate(service.get_request(RequestKind.REPORT, report_id))
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)


@router.post("/{report_id}/submit", response_model=ReportResponse)
async def submit_report(
    report_id: str,
    action: ActionRequest,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Submit a draft report through its project's report workflow."""
    try:
        report = service.submit(RequestKind.REPORT, report_id, actor, action.comment)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return ReportResponse.model_validate(report)
