"""Request statuses and lifecycle transitions.

Trip requests:

    ┌───────┐ submit ┌─────────┐ approve (last stage) ┌──────────┐
    │ DRAFT │───────►│ PENDING │─────────────────────►│ APPROVED │
    └───────┘        └────┬────┘                      └────┬─────┘
                          │ ▲ approve (more stages)        │ book
                          │ └──────┘                  ┌────▼───┐
                          │ reject                    │ BOOKED │
                     ┌────▼─────┐                     └────┬───┘
                     │ REJECTED │                          │ complete
                     └──────────┘                   ┌──────▼────┐  close  ┌────────┐
                                                    │ COMPLETED │────────►│ CLOSED │
                                                    └───────────┘         └────────┘

Reports follow the same chain with SUBMITTED as the entry status and
REVIEWED as the intermediate status between stages.
"""

from enum import Enum
from typing import Dict, FrozenSet, NamedTuple, Optional, Set, Tuple


class RequestKind(str, Enum):
    """Kinds of requests that go through an approval chain."""

    TRIP = "trip"
    REPORT = "report"


class TripStatus(str, Enum):
    """Statuses of a trip request."""

    DRAFT = "Draft"
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    BOOKED = "Booked"
    COMPLETED = "Completed"
    CLOSED = "Closed"


class ReportStatus(str, Enum):
    """Statuses of an inspection report."""

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    REVIEWED = "Reviewed"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ActionStatus(str, Enum):
    """Status recorded on an approval history entry."""

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    PENDING = "Pending"  # legacy submission marker
    REVIEWED = "Reviewed"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    BOOKED = "Booked"
    COMPLETED = "Completed"
    CLOSED = "Closed"


class Transition(str, Enum):
    """Actions that move a request between statuses."""

    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    BOOK = "book"
    COMPLETE = "complete"
    CLOSE = "close"


class TransitionRule(NamedTuple):
    """A valid lifecycle transition.

    ``to_state`` is None for APPROVE: the sequential evaluator decides
    whether the chain advances or completes.
    """
    kind: RequestKind
    from_state: str
    transition: Transition
    to_state: Optional[str]


TRANSITION_RULES: list[TransitionRule] = [
    # Trip chain
    TransitionRule(RequestKind.TRIP, TripStatus.DRAFT.value, Transition.SUBMIT, TripStatus.PENDING.value),
    TransitionRule(RequestKind.TRIP, TripStatus.PENDING.value, Transition.APPROVE, None),
    TransitionRule(RequestKind.TRIP, TripStatus.PENDING.value, Transition.REJECT, TripStatus.REJECTED.value),
    # Trip post-approval lifecycle
    TransitionRule(RequestKind.TRIP, TripStatus.APPROVED.value, Transition.BOOK, TripStatus.BOOKED.value),
    TransitionRule(RequestKind.TRIP, TripStatus.BOOKED.value, Transition.COMPLETE, TripStatus.COMPLETED.value),
    TransitionRule(RequestKind.TRIP, TripStatus.COMPLETED.value, Transition.CLOSE, TripStatus.CLOSED.value),
    # Report chain
    TransitionRule(RequestKind.REPORT, ReportStatus.DRAFT.value, Transition.SUBMIT, ReportStatus.SUBMITTED.value),
    TransitionRule(RequestKind.REPORT, ReportStatus.SUBMITTED.value, Transition.APPROVE, None),
    TransitionRule(RequestKind.REPORT, ReportStatus.REVIEWED.value, Transition.APPROVE, None),
    TransitionRule(RequestKind.REPORT, ReportStatus.SUBMITTED.value, Transition.REJECT, ReportStatus.REJECTED.value),
    TransitionRule(RequestKind.REPORT, ReportStatus.REVIEWED.value, Transition.REJECT, ReportStatus.REJECTED.value),
]

TRANSITION_TARGETS: Dict[Tuple[RequestKind, str, Transition], TransitionRule] = {}
VALID_TRANSITIONS: Dict[Tuple[RequestKind, str], Set[Transition]] = {}

for rule in TRANSITION_RULES:
    TRANSITION_TARGETS[(rule.kind, rule.from_state, rule.transition)] = rule
    VALID_TRANSITIONS.setdefault((rule.kind, rule.from_state), set()).add(rule.transition)


# Statuses in which the approval chain is still open
PENDING_STATES: Dict[RequestKind, FrozenSet[str]] = {
    RequestKind.TRIP: frozenset({TripStatus.PENDING.value}),
    RequestKind.REPORT: frozenset({ReportStatus.SUBMITTED.value, ReportStatus.REVIEWED.value}),
}

# History statuses that clear one stage
CLEARING_ACTIONS: Dict[RequestKind, FrozenSet[str]] = {
    RequestKind.TRIP: frozenset({ActionStatus.APPROVED.value}),
    RequestKind.REPORT: frozenset({ActionStatus.REVIEWED.value, ActionStatus.APPROVED.value}),
}

# Status a request keeps while later stages are outstanding
INTERMEDIATE_STATE: Dict[RequestKind, str] = {
    RequestKind.TRIP: TripStatus.PENDING.value,
    RequestKind.REPORT: ReportStatus.REVIEWED.value,
}

# No further transition is defined from these
TERMINAL_STATES: FrozenSet[str] = frozenset({
    TripStatus.APPROVED.value,
    TripStatus.REJECTED.value,
    TripStatus.CLOSED.value,
})

# The approval chain can no longer be acted on from these
APPROVAL_CLOSED_STATES: FrozenSet[str] = TERMINAL_STATES | frozenset({
    TripStatus.BOOKED.value,
    TripStatus.COMPLETED.value,
})

STATUS_ENUMS = {
    RequestKind.TRIP: TripStatus,
    RequestKind.REPORT: ReportStatus,
}


def can_transition(kind: RequestKind, from_state: str, transition: Transition) -> bool:
    """Check if a transition is valid from the given status."""
    return transition in VALID_TRANSITIONS.get((kind, _value(from_state)), set())


def get_transition_rule(kind: RequestKind, from_state: str, transition: Transition) -> Optional[TransitionRule]:
    """Get the rule for a kind/status/action combination."""
    return TRANSITION_TARGETS.get((kind, _value(from_state), transition))


def get_target_state(kind: RequestKind, from_state: str, transition: Transition) -> Optional[str]:
    """Get the fixed target status for a transition, if it has one."""
    rule = get_transition_rule(kind, from_state, transition)
    return rule.to_state if rule else None


def is_pending(kind: RequestKind, status: str) -> bool:
    return _value(status) in PENDING_STATES[kind]


def _value(status) -> str:
    return status.value if isinstance(status, Enum) else str(status)
