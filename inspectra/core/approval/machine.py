"""Request lifecycle state machine.

Applies transitions from the lifecycle table to a request snapshot.
Approve and reject are handed to the sequential evaluator; every other
transition has a fixed target status.
"""

import dataclasses
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .errors import AlreadyTerminalError, InvalidTransitionError, MissingWorkflowError
from .evaluator import record_action
from .history import ApprovalAction, append_action
from .stages import StageList
from .states import (
    APPROVAL_CLOSED_STATES,
    ActionStatus,
    STATUS_ENUMS,
    TERMINAL_STATES,
    Transition,
    can_transition,
    get_transition_rule,
)

logger = logging.getLogger(__name__)

# History status written for each fixed-target transition
TRANSITION_ACTION_STATUS = {
    Transition.SUBMIT: ActionStatus.SUBMITTED,
    Transition.BOOK: ActionStatus.BOOKED,
    Transition.COMPLETE: ActionStatus.COMPLETED,
    Transition.CLOSE: ActionStatus.CLOSED,
}

Callback = Callable[[Any, ApprovalAction], None]


class RequestLifecycle:
    """
    Drives one request through its lifecycle.

    Holds the latest snapshot; each successful transition replaces it
    with a new snapshot carrying the appended history entry.
    """

    def __init__(self, request, stages: StageList = ()):
        """
        Args:
            request: TripRequest or ReportItem snapshot
            stages: Stage list governing the request's approval chain
        """
        self._request = request
        self.stages = tuple(stages)
        self._callbacks: Dict[Transition, List[Callback]] = {}

    @property
    def request(self):
        return self._request

    @property
    def state(self) -> str:
        return self._request.status.value

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def can_perform(self, transition: Transition) -> bool:
        return can_transition(self._request.kind, self.state, transition)

    def get_available_transitions(self) -> List[Transition]:
        return [t for t in Transition if self.can_perform(t)]

    def transition(
        self,
        transition: Transition,
        *,
        actor_id: Any,
        actor_name: str,
        comment: Optional[str] = None,
        actor_role: Optional[str] = None,
        now: Optional[datetime] = None,
    ):
        """
        Perform a transition and return the new request snapshot.

        Raises:
            AlreadyTerminalError: approve/reject on a resolved chain
            InvalidTransitionError: transition not defined from the current status
            MissingWorkflowError: submitting without configured stages
            NotNextApproverError: approve/reject by someone other than the pending approver
        """
        kind = self._request.kind
        if transition in (Transition.APPROVE, Transition.REJECT) and self.state in APPROVAL_CLOSED_STATES:
            raise AlreadyTerminalError(self.state, self._request.id)

        rule = get_transition_rule(kind, self.state, transition)
        if rule is None:
            raise InvalidTransitionError(
                f"Cannot perform {transition.value} from status {self.state}",
                self.state, transition.value, self._request.id,
            )

        if transition is Transition.APPROVE or transition is Transition.REJECT:
            status = ActionStatus.APPROVED if transition is Transition.APPROVE else ActionStatus.REJECTED
            updated = record_action(
                self._request, self.stages, actor_id, actor_name, status, comment,
                actor_role=actor_role, now=now,
            )
        else:
            if transition is Transition.SUBMIT and not self.stages:
                raise MissingWorkflowError(
                    "Approval workflow is not configured for this project", self._request.id
                )
            action = ApprovalAction.create(
                actor_id, actor_name, TRANSITION_ACTION_STATUS[transition],
                comments=comment, actor_role=actor_role, now=now,
            )
            updated = dataclasses.replace(
                self._request,
                status=STATUS_ENUMS[kind](rule.to_state),
                approval_history=append_action(self._request.approval_history, action),
            )

        logger.info(
            "%s %s: %s -> %s by %s",
            kind.value, self._request.id, self.state, updated.status.value, actor_id,
        )
        self._request = updated
        self._execute_callbacks(transition, updated.approval_history[-1])
        return updated

    def register_callback(self, transition: Transition, callback: Callback) -> None:
        """Register a function called with (request, entry) after ``transition``."""
        self._callbacks.setdefault(transition, []).append(callback)

    def _execute_callbacks(self, transition: Transition, entry: ApprovalAction) -> None:
        for callback in self._callbacks.get(transition, []):
            try:
                callback(self._request, entry)
            except Exception:
                # Side effects never undo a recorded transition
                logger.exception("Callback error for %s on %s", transition.value, self._request.id)
