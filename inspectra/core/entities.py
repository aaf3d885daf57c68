"""Domain records stored as documents.

Each record maps to one document: ``to_document`` produces the stored
camelCase payload, ``from_document`` rebuilds the record from a payload
and the document version held by the store.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional

from inspectra.core.approval.history import History, dump_history, parse_history
from inspectra.core.approval.stages import StageList, dump_stages, normalize_id, parse_stages
from inspectra.core.approval.states import RequestKind, ReportStatus, TripStatus


@dataclass(frozen=True)
class Actor:
    """The user performing an action."""

    id: str
    name: str
    role: Optional[str] = None


@dataclass(frozen=True)
class Project:
    """A contract project and the approval chains it defines."""

    id: str
    name: str
    client: str = ""
    contract_number: str = ""
    branch_id: str = ""
    trip_approval_workflow: StageList = ()
    report_approval_workflow: StageList = ()
    version: int = 0

    collection: ClassVar[str] = "projects"

    def workflow(self, kind: RequestKind) -> StageList:
        if RequestKind(kind) is RequestKind.TRIP:
            return self.trip_approval_workflow
        return self.report_approval_workflow

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any], version: int = 0) -> "Project":
        return cls(
            id=doc_id,
            name=data.get("name", ""),
            client=data.get("client", ""),
            contract_number=data.get("contractNumber", ""),
            branch_id=data.get("branchId", ""),
            trip_approval_workflow=parse_stages(data.get("tripApprovalWorkflow")),
            report_approval_workflow=parse_stages(data.get("reportApprovalWorkflow")),
            version=version,
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "client": self.client,
            "contractNumber": self.contract_number,
            "branchId": self.branch_id,
            "tripApprovalWorkflow": dump_stages(self.trip_approval_workflow),
            "reportApprovalWorkflow": dump_stages(self.report_approval_workflow),
        }


@dataclass(frozen=True)
class TripRequest:
    """A business trip request."""

    id: str
    employee_id: Optional[str]
    employee_name: str = ""
    destination: str = ""
    purpose: str = ""
    start_date: str = ""
    end_date: str = ""
    estimated_budget: float = 0
    status: TripStatus = TripStatus.DRAFT
    approval_history: History = ()
    project: Optional[str] = None
    position: Optional[str] = None
    division: Optional[str] = None
    version: int = 0

    kind: ClassVar[RequestKind] = RequestKind.TRIP
    collection: ClassVar[str] = "trips"

    @property
    def requester_id(self) -> Optional[str]:
        return self.employee_id

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any], version: int = 0) -> "TripRequest":
        return cls(
            id=doc_id,
            employee_id=normalize_id(data.get("employeeId")),
            employee_name=data.get("employeeName", ""),
            destination=data.get("destination", ""),
            purpose=data.get("purpose", ""),
            start_date=data.get("startDate", ""),
            end_date=data.get("endDate", ""),
            estimated_budget=data.get("estimatedBudget", 0),
            status=TripStatus(data.get("status", TripStatus.DRAFT.value)),
            approval_history=parse_history(data.get("approvalHistory")),
            project=data.get("project"),
            position=data.get("position"),
            division=data.get("division"),
            version=version,
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "destination": self.destination,
            "purpose": self.purpose,
            "startDate": self.start_date,
            "endDate": self.end_date,
            "estimatedBudget": self.estimated_budget,
            "status": self.status.value,
            "approvalHistory": dump_history(self.approval_history),
            "project": self.project,
            "position": self.position,
            "division": self.division,
        }


@dataclass(frozen=True)
class ReportItem:
    """An inspection report (PT, MT, UT, RT, flash report...)."""

    id: str
    report_number: str = ""
    job_location: str = ""
    line_type: str = ""
    job_type: str = "Other"
    qty_joint: int = 0
    status: ReportStatus = ReportStatus.DRAFT
    project: Optional[str] = None
    creation_date: str = ""
    reviewer_id: Optional[str] = None
    approver_id: Optional[str] = None
    approval_history: History = ()
    details: Dict[str, Any] = field(default_factory=dict)
    version: int = 0

    kind: ClassVar[RequestKind] = RequestKind.REPORT
    collection: ClassVar[str] = "reports"

    @property
    def requester_id(self) -> Optional[str]:
        # The author is whoever recorded the first entry
        return self.approval_history[0].actor_id if self.approval_history else None

    @classmethod
    def from_document(cls, doc_id: str, data: Dict[str, Any], version: int = 0) -> "ReportItem":
        details = data.get("details") or {}
        return cls(
            id=doc_id,
            report_number=data.get("reportNumber", ""),
            job_location=data.get("jobLocation", ""),
            line_type=data.get("lineType", ""),
            job_type=data.get("jobType", "Other"),
            qty_joint=int(data.get("qtyJoint", 0) or 0),
            status=ReportStatus(data.get("status", ReportStatus.DRAFT.value)),
            # Older reports only name their project inside the details block
            project=data.get("project") or details.get("project"),
            creation_date=data.get("creationDate", ""),
            reviewer_id=normalize_id(data.get("reviewerId")),
            approver_id=normalize_id(data.get("approverId")),
            approval_history=parse_history(data.get("approvalHistory")),
            details=dict(details),
            version=version,
        )

    def to_document(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "reportNumber": self.report_number,
            "jobLocation": self.job_location,
            "lineType": self.line_type,
            "jobType": self.job_type,
            "qtyJoint": self.qty_joint,
            "status": self.status.value,
            "project": self.project,
            "creationDate": self.creation_date,
            "reviewerId": self.reviewer_id,
            "approverId": self.approver_id,
            "approvalHistory": dump_history(self.approval_history),
            "details": dict(self.details),
        }


REQUEST_TYPES = {
    RequestKind.TRIP: TripRequest,
    RequestKind.REPORT: ReportItem,
}
