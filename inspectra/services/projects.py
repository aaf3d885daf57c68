"""Project records and their approval workflows.

Stage lists may only change while no request of the same kind that
references the project is waiting in its approval chain.
"""

import dataclasses
import logging
import uuid
from typing import Any, List, Optional

from inspectra.core.approval.errors import WorkflowLockedError
from inspectra.core.approval.evaluator import has_assigned_reviewers
from inspectra.core.approval.stages import (
    StageList,
    add_stage,
    parse_stages,
    remove_stage,
    set_stage_approver,
)
from inspectra.core.approval.states import RequestKind, is_pending
from inspectra.core.entities import Project
from inspectra.store.base import DocumentStore
from inspectra.store.repositories import ProjectRepository, ReportRepository, TripRepository

logger = logging.getLogger(__name__)


class ProjectService:
    """Creates projects and edits their trip/report approval chains."""

    def __init__(self, store: DocumentStore):
        self.projects = ProjectRepository(store)
        self.trips = TripRepository(store)
        self.reports = ReportRepository(store)

    def list_projects(self) -> List[Project]:
        return self.projects.list()

    def get_project(self, project_id: str) -> Project:
        return self.projects.require(project_id)

    def create_project(
        self,
        name: str,
        *,
        project_id: Optional[str] = None,
        client: str = "",
        contract_number: str = "",
        branch_id: str = "",
        trip_approval_workflow: Optional[List[dict]] = None,
        report_approval_workflow: Optional[List[dict]] = None,
    ) -> Project:
        if not name:
            raise ValueError("Project name is required")
        # Requests reference projects by name
        if self.projects.by_name(name) is not None:
            raise ValueError(f"A project named {name!r} already exists")
        project = Project(
            id=project_id or str(uuid.uuid4()),
            name=name,
            client=client,
            contract_number=contract_number,
            branch_id=branch_id,
            trip_approval_workflow=parse_stages(trip_approval_workflow),
            report_approval_workflow=parse_stages(report_approval_workflow),
        )
        return self.projects.create(project)

    def add_stage(self, project_id: str, kind: RequestKind, role_name: str, approver_id: Any) -> Project:
        kind = RequestKind(kind)
        project = self._unlocked(project_id, kind)
        return self._save_workflow(project, kind, add_stage(project.workflow(kind), role_name, approver_id))

    def remove_stage(self, project_id: str, kind: RequestKind, stage_index: int) -> Project:
        kind = RequestKind(kind)
        project = self._unlocked(project_id, kind)
        return self._save_workflow(project, kind, remove_stage(project.workflow(kind), stage_index))

    def set_stage_approver(self, project_id: str, kind: RequestKind, stage_index: int, approver_id: Any) -> Project:
        kind = RequestKind(kind)
        project = self._unlocked(project_id, kind)
        return self._save_workflow(
            project, kind, set_stage_approver(project.workflow(kind), stage_index, approver_id)
        )

    def in_flight_requests(self, project: Project, kind: RequestKind) -> List[str]:
        """Ids of requests of ``kind`` still moving through this project's chain."""
        kind = RequestKind(kind)
        repository = self.trips if kind is RequestKind.TRIP else self.reports
        return [
            request.id for request in repository.list()
            if request.project == project.name and is_pending(kind, request.status)
            and not has_assigned_reviewers(request)
        ]

    def _unlocked(self, project_id: str, kind: RequestKind) -> Project:
        project = self.projects.require(project_id)
        self._check_lock(project, kind)
        return project

    def _check_lock(self, project: Project, kind: RequestKind) -> None:
        blocking = self.in_flight_requests(project, kind)
        if blocking:
            raise WorkflowLockedError(
                f"{kind.value} workflow of {project.name} is in use by {len(blocking)} pending request(s)"
            )

    def _save_workflow(self, project: Project, kind: RequestKind, stages: StageList) -> Project:
        field = "trip_approval_workflow" if kind is RequestKind.TRIP else "report_approval_workflow"
        saved = self.projects.save(dataclasses.replace(project, **{field: stages}))
        try:
            # A request may have been submitted between the first check and the save
            self._check_lock(saved, kind)
        except WorkflowLockedError:
            self.projects.save(dataclasses.replace(saved, **{field: project.workflow(kind)}))
            logger.warning("Reverted %s workflow edit on %s: a request was submitted meanwhile",
                           kind.value, project.name)
            raise
        logger.info("Project %s %s workflow now has %d stage(s)", project.name, kind.value, len(stages))
        return saved
