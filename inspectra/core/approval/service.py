"""Approval service for trip requests and inspection reports.

Provides the high-level API over the evaluator and lifecycle machine,
including persistence through the document store and notifications.
"""

import dataclasses
import logging
import uuid
from datetime import date
from typing import Any, Dict, List, Optional, Union

from inspectra.core.entities import Actor, ReportItem, TripRequest
from inspectra.store.base import DocumentStore
from inspectra.store.repositories import (
    DocumentRepository,
    ProjectRepository,
    ReportRepository,
    TripRepository,
)

from .errors import InvalidTransitionError, MissingWorkflowError
from .evaluator import is_pending_for, workflow_for
from .history import ApprovalAction
from .machine import RequestLifecycle
from .stages import StageList, normalize_id
from .states import ActionStatus, ReportStatus, RequestKind, Transition, TripStatus

logger = logging.getLogger(__name__)

Request = Union[TripRequest, ReportItem]


class ApprovalService:
    """
    High-level service for approval chains.

    Handles:
    - Creating trips and reports in Draft
    - Submission and reviewer/approver assignment
    - Approve/reject with conditional writes
    - Pending lists per approver
    - Batch operations
    - Trip booking, completion and closing
    """

    def __init__(self, store: DocumentStore, notifier=None):
        """
        Args:
            store: Document store holding projects, trips and reports
            notifier: Optional NotificationService told about every transition
        """
        self.store = store
        self.projects = ProjectRepository(store)
        self.trips = TripRepository(store)
        self.reports = ReportRepository(store)
        self.notifier = notifier

    def repository(self, kind: RequestKind) -> DocumentRepository:
        return self.trips if RequestKind(kind) is RequestKind.TRIP else self.reports

    def get_request(self, kind: RequestKind, request_id: str) -> Request:
        return self.repository(kind).require(request_id)

    def stages_for(self, request: Request) -> StageList:
        return workflow_for(request, self.projects.by_name(request.project))

    # ------------------------------------------------------------------
    # Creation and submission
    # ------------------------------------------------------------------

    def create_trip(self, actor: Actor, *, submit: bool = False, **fields: Any) -> TripRequest:
        """Create a trip request in Draft, optionally submitting it right away.

        With ``submit`` the trip is stored already submitted, so a project
        without a trip workflow stores nothing.

        Raises:
            MissingWorkflowError: ``submit`` was asked for and no stages are configured
        """
        trip_id = fields.pop("id", None) or f"TRIP-{uuid.uuid4().hex[:8].upper()}"
        fields.setdefault("employee_id", actor.id)
        fields.setdefault("employee_name", actor.name)
        fields["employee_id"] = normalize_id(fields["employee_id"])
        trip = TripRequest(
            id=trip_id,
            status=TripStatus.DRAFT,
            approval_history=(ApprovalAction.create(actor.id, actor.name, ActionStatus.DRAFT,
                                                    actor_role=actor.role),),
            **fields,
        )
        stages: StageList = ()
        if submit:
            stages = self.stages_for(trip)
            trip = RequestLifecycle(trip, stages).transition(
                Transition.SUBMIT,
                actor_id=actor.id,
                actor_name=actor.name,
                actor_role=actor.role,
                comment="Submitted for approval",
            )
        trip = self.trips.create(trip)
        logger.info("Trip %s created by %s in %s", trip.id, actor.id, trip.status.value)
        if submit:
            self._notify(trip, stages)
        return trip

    def create_report(self, actor: Actor, **fields: Any) -> ReportItem:
        """Create a report in Draft."""
        report_id = fields.pop("id", None) or f"REP-{uuid.uuid4().hex[:10].upper()}"
        fields.setdefault("creation_date", date.today().isoformat())
        for key in ("reviewer_id", "approver_id"):
            if key in fields:
                fields[key] = normalize_id(fields[key])
        report = ReportItem(
            id=report_id,
            status=ReportStatus.DRAFT,
            approval_history=(ApprovalAction.create(actor.id, actor.name, ActionStatus.DRAFT,
                                                    comments="Initial draft.", actor_role=actor.role),),
            **fields,
        )
        report = self.reports.create(report)
        logger.info("Report %s created by %s", report.id, actor.id)
        return report

    def submit(self, kind: RequestKind, request_id: str, actor: Actor, comment: Optional[str] = None) -> Request:
        """Send a Draft into its approval chain.

        Raises:
            MissingWorkflowError: no stages are configured, so submission is blocked
        """
        return self._transition(
            kind, request_id, Transition.SUBMIT, actor,
            comment=comment or "Submitted for approval",
        )

    def submit_trip(self, trip_id: str, actor: Actor, comment: Optional[str] = None) -> TripRequest:
        return self.submit(RequestKind.TRIP, trip_id, actor, comment)

    def assign_report_approvers(
        self,
        report_ids: List[str],
        reviewer_id: Any,
        approver_id: Any,
        actor: Actor,
    ) -> Dict[str, Any]:
        """
        Assign a reviewer and an approver to a batch of reports and submit them.

        Returns:
            Summary with ``submitted`` ids and ``failed`` entries
        """
        reviewer, approver = normalize_id(reviewer_id), normalize_id(approver_id)
        if not reviewer or not approver:
            raise MissingWorkflowError("Both a reviewer and an approver are required")

        results: Dict[str, Any] = {"submitted": [], "failed": []}
        for report_id in report_ids:
            try:
                report = self.reports.require(report_id)
                if report.status is ReportStatus.DRAFT:
                    report = self.reports.save(
                        _replace(report, reviewer_id=reviewer, approver_id=approver)
                    )
                    self.submit(RequestKind.REPORT, report.id, actor)
                elif report.status is ReportStatus.SUBMITTED and not _has_decision(report):
                    # Nobody has acted yet, so the chain can still be re-pointed
                    report = self.reports.save(
                        _replace(report, reviewer_id=reviewer, approver_id=approver)
                    )
                    self._notify(report)
                else:
                    raise InvalidTransitionError(
                        f"Cannot assign approvers to a report in status {report.status.value}",
                        report.status.value, "assign", report.id,
                    )
                results["submitted"].append(report_id)
            except Exception as e:
                logger.warning("Assignment failed for report %s: %s", report_id, e)
                results["failed"].append({"id": report_id, "error": str(e)})
        return results

    # ------------------------------------------------------------------
    # Decisions
    # ------------------------------------------------------------------

    def approve(self, kind: RequestKind, request_id: str, actor: Actor, comment: Optional[str] = None) -> Request:
        """Clear the pending stage. The last stage approves the request."""
        return self._transition(kind, request_id, Transition.APPROVE, actor, comment=comment)

    def reject(self, kind: RequestKind, request_id: str, actor: Actor, comment: Optional[str] = None) -> Request:
        """Reject the request at its current stage. Rejection is final."""
        return self._transition(kind, request_id, Transition.REJECT, actor, comment=comment)

    def batch_approve(
        self,
        kind: RequestKind,
        request_ids: List[str],
        actor: Actor,
        comment: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Approve multiple requests in a batch.

        Returns:
            Summary of results
        """
        results: Dict[str, Any] = {"approved": [], "failed": []}
        for request_id in request_ids:
            try:
                self.approve(kind, request_id, actor, comment)
                results["approved"].append(request_id)
            except Exception as e:
                results["failed"].append({"id": request_id, "error": str(e)})
        return results

    def batch_reject(
        self,
        kind: RequestKind,
        request_ids: List[str],
        actor: Actor,
        comment: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Reject multiple requests in a batch.

        Returns:
            Summary of results
        """
        results: Dict[str, Any] = {"rejected": [], "failed": []}
        for request_id in request_ids:
            try:
                self.reject(kind, request_id, actor, comment)
                results["rejected"].append(request_id)
            except Exception as e:
                results["failed"].append({"id": request_id, "error": str(e)})
        return results

    # ------------------------------------------------------------------
    # Trip lifecycle after approval
    # ------------------------------------------------------------------

    def book_trip(self, trip_id: str, actor: Actor, comment: Optional[str] = None) -> TripRequest:
        return self._transition(RequestKind.TRIP, trip_id, Transition.BOOK, actor, comment=comment)

    def complete_trip(self, trip_id: str, actor: Actor, comment: Optional[str] = None) -> TripRequest:
        return self._transition(RequestKind.TRIP, trip_id, Transition.COMPLETE, actor, comment=comment)

    def close_trip(self, trip_id: str, actor: Actor, comment: Optional[str] = None) -> TripRequest:
        return self._transition(RequestKind.TRIP, trip_id, Transition.CLOSE, actor, comment=comment)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def pending_for_user(self, kind: RequestKind, user_id: Any) -> List[Request]:
        """Requests of ``kind`` currently waiting on ``user_id``."""
        projects = {p.name: p for p in self.projects.list()}
        return [
            request for request in self.repository(kind).list()
            if is_pending_for(request, workflow_for(request, projects.get(request.project)), user_id)
        ]

    def is_pending_for(self, kind: RequestKind, request_id: str, user_id: Any) -> bool:
        request = self.get_request(kind, request_id)
        return is_pending_for(request, self.stages_for(request), user_id)

    def get_history(self, kind: RequestKind, request_id: str) -> List[ApprovalAction]:
        return list(self.get_request(kind, request_id).approval_history)

    # ------------------------------------------------------------------

    def _transition(
        self,
        kind: RequestKind,
        request_id: str,
        transition: Transition,
        actor: Actor,
        *,
        comment: Optional[str] = None,
    ) -> Request:
        repository = self.repository(kind)
        request = repository.require(request_id)
        stages = self.stages_for(request)

        machine = RequestLifecycle(request, stages)
        updated = machine.transition(
            transition,
            actor_id=actor.id,
            actor_name=actor.name,
            actor_role=actor.role,
            comment=comment,
        )

        # Conditional on the version read above; a concurrent decision fails here
        saved = repository.save(updated)
        self._notify(saved, stages)
        return saved

    def _notify(self, request: Request, stages: Optional[StageList] = None) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.request_transitioned(request, stages if stages is not None else self.stages_for(request))
        except Exception:
            logger.exception("Notification failed for %s %s", request.kind.value, request.id)


def _has_decision(request: Request) -> bool:
    decisions = {ActionStatus.REVIEWED, ActionStatus.APPROVED, ActionStatus.REJECTED}
    return any(action.status in decisions for action in request.approval_history)


def _replace(record, **changes):
    return dataclasses.replace(record, **changes)
