"""Approval workflow errors.

All of these are caller-visible validation failures. None of them is
transient, so none is retried.
"""

from typing import Optional


class ApprovalError(Exception):
    """Base class for approval workflow errors."""

    def __init__(self, message: str, request_id: Optional[str] = None):
        super().__init__(message)
        self.request_id = request_id


class MissingWorkflowError(ApprovalError):
    """Raised when no approval stages are configured for a request."""


class NotNextApproverError(ApprovalError):
    """Raised when someone other than the pending approver acts."""

    def __init__(self, actor_id: str, expected_id: Optional[str], request_id: Optional[str] = None):
        super().__init__(
            f"User {actor_id} is not the pending approver"
            + (f" (expected {expected_id})" if expected_id else ""),
            request_id,
        )
        self.actor_id = actor_id
        self.expected_id = expected_id


class AlreadyTerminalError(ApprovalError):
    """Raised when acting on a request whose approval chain is closed."""

    def __init__(self, status: str, request_id: Optional[str] = None):
        super().__init__(f"Request is already {status}", request_id)
        self.status = status


class InvalidTransitionError(ApprovalError):
    """Raised when a lifecycle transition is not defined for the current status."""

    def __init__(self, message: str, from_state: str, transition: str, request_id: Optional[str] = None):
        super().__init__(message, request_id)
        self.from_state = from_state
        self.transition = transition


class WorkflowLockedError(ApprovalError):
    """Raised when editing a stage list that in-flight requests depend on."""
