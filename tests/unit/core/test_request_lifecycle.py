"""Tests for the request lifecycle state machine."""

import pytest

from inspectra.core.approval.errors import (
    AlreadyTerminalError,
    InvalidTransitionError,
    MissingWorkflowError,
    NotNextApproverError,
)
from inspectra.core.approval.machine import RequestLifecycle
from inspectra.core.approval.states import ActionStatus, ReportStatus, Transition, TripStatus

from tests.factories import create_report, create_trip, make_action, make_stages

STAGES = make_stages(["7", "12"])


def _approve(machine, user_id, comment=None):
    return machine.transition(Transition.APPROVE, actor_id=user_id, actor_name=f"User {user_id}", comment=comment)


class TestRequestLifecycle:
    """Test the lifecycle machine."""

    def test_initial_state(self):
        machine = RequestLifecycle(create_trip(status=TripStatus.DRAFT), STAGES)
        assert machine.state == "Draft"
        assert not machine.is_terminal

    def test_available_transitions(self):
        machine = RequestLifecycle(create_trip(status=TripStatus.PENDING), STAGES)
        transitions = machine.get_available_transitions()

        assert Transition.APPROVE in transitions
        assert Transition.REJECT in transitions
        assert Transition.BOOK not in transitions

    def test_full_trip_lifecycle(self):
        """Draft -> Pending -> Pending -> Approved -> Booked -> Completed -> Closed."""
        machine = RequestLifecycle(create_trip(status=TripStatus.DRAFT), STAGES)

        machine.transition(Transition.SUBMIT, actor_id="3", actor_name="Rina")
        assert machine.state == "Pending"

        _approve(machine, "7")
        assert machine.state == "Pending"

        _approve(machine, "12")
        assert machine.state == "Approved"
        assert machine.is_terminal

        for transition, expected in [
            (Transition.BOOK, "Booked"),
            (Transition.COMPLETE, "Completed"),
            (Transition.CLOSE, "Closed"),
        ]:
            machine.transition(transition, actor_id="3", actor_name="Rina")
            assert machine.state == expected

        statuses = [a.status for a in machine.request.approval_history]
        assert statuses == [
            ActionStatus.SUBMITTED, ActionStatus.APPROVED, ActionStatus.APPROVED,
            ActionStatus.BOOKED, ActionStatus.COMPLETED, ActionStatus.CLOSED,
        ]

    def test_submit_without_workflow(self):
        machine = RequestLifecycle(create_trip(status=TripStatus.DRAFT), ())

        with pytest.raises(MissingWorkflowError):
            machine.transition(Transition.SUBMIT, actor_id="3", actor_name="Rina")
        assert machine.state == "Draft"

    def test_invalid_transition(self):
        machine = RequestLifecycle(create_trip(status=TripStatus.DRAFT), STAGES)

        with pytest.raises(InvalidTransitionError) as exc_info:
            machine.transition(Transition.BOOK, actor_id="3", actor_name="Rina")

        assert exc_info.value.from_state == "Draft"
        assert exc_info.value.transition == "book"

    def test_reject_without_comment(self):
        machine = RequestLifecycle(create_trip(status=TripStatus.PENDING), STAGES)

        machine.transition(Transition.REJECT, actor_id="7", actor_name="Budi")

        assert machine.state == "Rejected"
        assert machine.request.approval_history[-1].comments is None

    def test_reject_is_final(self):
        machine = RequestLifecycle(create_trip(status=TripStatus.PENDING), STAGES)
        machine.transition(Transition.REJECT, actor_id="7", actor_name="Budi", comment="Not budgeted")

        assert machine.state == "Rejected"
        with pytest.raises(AlreadyTerminalError):
            _approve(machine, "12")

    @pytest.mark.parametrize("status", [TripStatus.BOOKED, TripStatus.CLOSED])
    def test_decisions_after_approval_are_already_terminal(self, status):
        machine = RequestLifecycle(create_trip(status=status), STAGES)

        with pytest.raises(AlreadyTerminalError):
            machine.transition(Transition.REJECT, actor_id="12", actor_name="Sari", comment="late")

    def test_wrong_approver(self):
        machine = RequestLifecycle(create_trip(status=TripStatus.PENDING), STAGES)

        with pytest.raises(NotNextApproverError):
            _approve(machine, "12")
        assert machine.request.approval_history == ()

    def test_report_chain_uses_reviewed(self):
        report = create_report(status=ReportStatus.DRAFT)
        machine = RequestLifecycle(report, STAGES)

        machine.transition(Transition.SUBMIT, actor_id="3", actor_name="Rina")
        assert machine.state == "Submitted"
        _approve(machine, "7")
        assert machine.state == "Reviewed"
        _approve(machine, "12", comment="Looks good")
        assert machine.state == "Approved"
        assert machine.request.approval_history[-1].comments == "Looks good"


class TestCallbacks:
    def test_callback_receives_request_and_entry(self):
        seen = []
        machine = RequestLifecycle(create_trip(status=TripStatus.PENDING), STAGES)
        machine.register_callback(Transition.APPROVE, lambda request, entry: seen.append((request.id, entry.actor_id)))

        _approve(machine, "7")

        assert seen == [(machine.request.id, "7")]

    def test_failing_callback_does_not_undo_transition(self):
        def explode(request, entry):
            raise RuntimeError("mail server down")

        machine = RequestLifecycle(
            create_trip(status=TripStatus.PENDING, history=[make_action("7", ActionStatus.APPROVED)]),
            STAGES,
        )
        machine.register_callback(Transition.APPROVE, explode)

        updated = _approve(machine, "12")

        assert updated.status is TripStatus.APPROVED
        assert machine.state == "Approved"
