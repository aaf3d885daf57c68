"""Trip request API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import Field

from inspectra.api.deps import get_approval_service, get_current_actor
from inspectra.api.errors import HANDLED_ERRORS, to_http_exception
from inspectra.api.schemas.common import ActionRequest, CamelModel, TripResponse
from inspectra.core.approval.service import ApprovalService
from inspectra.core.approval.states import RequestKind, TripStatus
from inspectra.core.entities import Actor

router = APIRouter(prefix="/trips", tags=["trips"])


# Schemas
class TripCreate(CamelModel):
    destination: str = Field(..., min_length=1)
    purpose: str = ""
    start_date: str = ""
    end_date: str = ""
    estimated_budget: float = Field(default=0, ge=0)
    project: Optional[str] = None
    position: Optional[str] = None
    division: Optional[str] = None
    submit: bool = False


# Endpoints
@router.get("", response_model=List[TripResponse])
async def list_trips(
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
    status_filter: Optional[TripStatus] = Query(None, alias="status"),
    mine: bool = False,
):
    """List trip requests, optionally only the caller's own."""
    trips = service.trips.list()
    if status_filter:
        trips = [t for t in trips if t.status is status_filter]
    if mine:
        trips = [t for t in trips if t.employee_id == actor.id]
    return [TripResponse.model_validate(t) for t in trips]


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def create_trip(
    body: TripCreate,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Create a trip request for the caller, submitting it if asked."""
    fields = body.model_dump(exclude={"submit"})
    try:
        trip = service.create_trip(actor, submit=body.submit, **fields)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return TripResponse.model_validate(trip)


@router.get("/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: str,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Get a specific trip request."""
    try:
        return TripResponse.model_validate(service.get_request(RequestKind.TRIP, trip_id))
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)


@router.post("/{trip_id}/submit", response_model=TripResponse)
async def submit_trip(
    trip_id: str,
    action: ActionRequest,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Send a draft trip into its project's approval chain."""
    try:
        trip = service.submit(RequestKind.TRIP, trip_id, actor, action.comment)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return TripResponse.model_validate(trip)


@router.post("/{trip_id}/book", response_model=TripResponse)
async def book_trip(
    trip_id: str,
    action: ActionRequest,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    """Mark an approved trip as booked."""
    try:
        trip = service.book_trip(trip_id, actor, action.comment)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return TripResponse.model_validate(trip)


@router.post("/{trip_id}/complete", response_model=TripResponse)
async def complete_trip(
    trip_id: str,
    action: ActionRequest,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    try:
        trip = service.complete_trip(trip_id, actor, action.comment)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return TripResponse.model_validate(trip)


@router.post("/{trip_id}/close", response_model=TripResponse)
async def close_trip(
    trip_id: str,
    action: ActionRequest,
    service: ApprovalService = Depends(get_approval_service),
    actor: Actor = Depends(get_current_actor),
):
    try:
        trip = service.close_trip(trip_id, actor, action.comment)
    except HANDLED_ERRORS as e:
        raise to_http_exception(e)
    return TripResponse.model_validate(trip)
