"""Translation of domain errors into HTTP responses."""

from fastapi import HTTPException, status

from inspectra.core.approval.errors import (
    AlreadyTerminalError,
    InvalidTransitionError,
    MissingWorkflowError,
    NotNextApproverError,
    WorkflowLockedError,
)
from inspectra.store.base import ConcurrentModificationError, DocumentNotFoundError

STATUS_CODES = (
    (MissingWorkflowError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (NotNextApproverError, status.HTTP_403_FORBIDDEN),
    (AlreadyTerminalError, status.HTTP_409_CONFLICT),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (WorkflowLockedError, status.HTTP_409_CONFLICT),
    (DocumentNotFoundError, status.HTTP_404_NOT_FOUND),
    (ConcurrentModificationError, status.HTTP_409_CONFLICT),
)

HANDLED_ERRORS = tuple(error for error, _ in STATUS_CODES) + (ValueError, IndexError)


def to_http_exception(exc: Exception) -> HTTPException:
    """Map an approval or store error to the matching HTTPException."""
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
