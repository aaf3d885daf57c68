"""Project and approval workflow API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import Field

from inspectra.api.deps import get_current_actor, get_project_service
from inspectra.api.errors import HANDLED_ERRORS, to_http_exception
from inspectra.api.schemas.common import CamelModel, StageCreate, StageSchema, UserId
from inspectra.core.approval.states import RequestKind
from inspectra.core.entities import Actor
from inspectra.services.projects import ProjectService

router = APIRouter(prefix="/projects", tags=["projects"])


# Schemas
class ProjectCreate(CamelModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=255)
    client: str = ""
    contract_number: str = ""
    branch_id: str = ""
    trip_approval_workflow: List[StageCreate] = Field(default_factory=list)
    report_approval_workflow: List[StageCreate] = Field(default_factory=list)


class ProjectResponse(CamelModel):
    id: str
    name: str
    client: str
    contract_number: str
    branch_id: str
    trip_approval_workflow: List[StageSchema]
    report_approval_workflow: List[StageSchema]
    version: int


class StageApproverUpdate(CamelModel):
    approver_id: UserId = Field(..., min_length=1)


def _stage_documents(stages: List[StageCreate]) -> List[dict]:
    return [stage.model_dump(by_alias=True) for stage in stages]


# Endpoints
@router.get("", response_model=List[ProjectResponse])
async def list_projects(
    service: ProjectService = Depends(get_project_service),
    actor: Actor = Depends(get_current_actor),
):
    """List all projects with their approval workflows."""
    return [ProjectResponse.model_validate(p) for p in service.list_projects()]


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    service: ProjectService = Depends(get_project_service),
    actor: Actor = Depends(get_current_actor),
):
    """Create a project, optionally with initial workflows."""
    try:
        project = service.create_project(
            body.name,
            project_id=body.id,
            client=body.client,
            contract_number=body.contract_number,
            branch_id=body.branch_id,
            trip_approval_workflow=_stage_documents(body.trip_approval_workflow),
            report_approval_workflow=_stage_documents(body.report_approval_workflow),
        )
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return ProjectResponse.model_validate(project)


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    service: ProjectService = Depends(get_project_service),
    actor: Actor = Depends(get_current_actor),
):
    """Get a specific project."""
    try:
        return ProjectResponse.model_validate(service.get_project(project_id))
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)


@router.post("/{project_id}/workflows/{kind}/stages", response_model=ProjectResponse)
async def add_stage(
    project_id: str,
    kind: RequestKind,
    body: StageCreate,
    service: ProjectService = Depends(get_project_service),
    actor: Actor = Depends(get_current_actor),
):
    """Append a stage to the end of the trip or report workflow."""
    try:
        project = service.add_stage(project_id, kind, body.role_name, body.approver_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return ProjectResponse.model_validate(project)


@router.patch("/{project_id}/workflows/{kind}/stages/{stage_index}", response_model=ProjectResponse)
async def change_stage_approver(
    project_id: str,
    kind: RequestKind,
    stage_index: int,
    body: StageApproverUpdate,
    service: ProjectService = Depends(get_project_service),
    actor: Actor = Depends(get_current_actor),
):
    """Point an existing stage at a different approver."""
    try:
        project = service.set_stage_approver(project_id, kind, stage_index, body.approver_id)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return ProjectResponse.model_validate(project)


@router.delete("/{project_id}/workflows/{kind}/stages/{stage_index}", response_model=ProjectResponse)
async def remove_stage(
    project_id: str,
    kind: RequestKind,
    stage_index: int,
    service: ProjectService = Depends(get_project_service),
    actor: Actor = Depends(get_current_actor),
):
    """Remove a stage; later stages move up one position."""
    try:
        project = service.remove_stage(project_id, kind, stage_index)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return ProjectResponse.model_validate(project)
