"""Common schemas for the inspectra API.

Payloads use camelCase keys on the wire, matching the stored documents.
Snake_case field names are accepted on input as well.
"""

from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from inspectra.core.approval.stages import normalize_id
from inspectra.core.approval.states import ActionStatus, ReportStatus, TripStatus


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Older clients send numeric user ids
UserId = Annotated[str, BeforeValidator(normalize_id)]


class StageSchema(CamelModel):
    stage_index: int = 0
    role_name: str
    approver_id: UserId


class StageCreate(CamelModel):
    role_name: str = Field(..., min_length=1)
    approver_id: UserId = Field(..., min_length=1)


class ApprovalActionResponse(CamelModel):
    actor_id: str
    actor_name: str
    actor_role: Optional[str] = None
    status: ActionStatus
    timestamp: str
    comments: Optional[str] = None


class TripResponse(CamelModel):
    id: str
    employee_id: Optional[str]
    employee_name: str
    destination: str
    purpose: str
    start_date: str
    end_date: str
    estimated_budget: float
    status: TripStatus
    project: Optional[str]
    position: Optional[str]
    division: Optional[str]
    approval_history: List[ApprovalActionResponse]
    version: int


class ReportResponse(CamelModel):
    id: str
    report_number: str
    job_location: str
    line_type: str
    job_type: str
    qty_joint: int
    status: ReportStatus
    project: Optional[str]
    creation_date: str
    reviewer_id: Optional[str]
    approver_id: Optional[str]
    approval_history: List[ApprovalActionResponse]
    details: Dict[str, Any]
    version: int


RequestResponse = Union[TripResponse, ReportResponse]


class ActionRequest(BaseModel):
    comment: Optional[str] = None


class BatchActionRequest(CamelModel):
    request_ids: List[str] = Field(..., min_length=1)
    comment: Optional[str] = None


class BatchActionResponse(BaseModel):
    approved: List[str] = []
    rejected: List[str] = []
    failed: List[dict] = []


class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str
