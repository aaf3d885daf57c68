"""Tests for in-app notifications."""

import dataclasses

import pytest

from inspectra.core.approval.states import ActionStatus, ReportStatus, TripStatus
from inspectra.store.base import DocumentNotFoundError

from tests.factories import create_report, create_trip, make_action, make_stages

STAGES = make_stages(["7", "12"], ["Supervisor", "Manager"])


class TestNotificationService:
    def test_add_and_list_newest_first(self, notification_service, store):
        first = notification_service.add_notification("7", "First", "one")
        second = notification_service.add_notification(7, "Second", "two")
        store.update("notifications", first["id"], {"timestamp": "2024-03-01T08:00:00+00:00"})
        store.update("notifications", second["id"], {"timestamp": "2024-03-01T09:00:00+00:00"})

        titles = [n["title"] for n in notification_service.list_for_user("7")]

        assert titles == ["Second", "First"]
        assert notification_service.unread_count("7") == 2

    def test_mark_as_read(self, notification_service):
        note = notification_service.add_notification("7", "Title", "Body")

        updated = notification_service.mark_as_read(note["id"], "7")

        assert updated["isRead"] is True
        assert notification_service.unread_count("7") == 0

    def test_cannot_read_someone_elses(self, notification_service):
        note = notification_service.add_notification("7", "Title", "Body")

        with pytest.raises(DocumentNotFoundError):
            notification_service.mark_as_read(note["id"], "12")

    def test_clear_all_only_touches_one_user(self, notification_service):
        notification_service.add_notification("7", "a", "a")
        notification_service.add_notification("7", "b", "b")
        notification_service.add_notification("12", "c", "c")

        assert notification_service.clear_all("7") == 2
        assert notification_service.list_for_user("7") == []
        assert len(notification_service.list_for_user("12")) == 1


class TestTransitionNotifications:
    def test_next_approver_told_with_role(self, notification_service):
        trip = dataclasses.replace(
            create_trip(history=[make_action("7", ActionStatus.APPROVED)]),
            project="Pertamina RU V",
        )

        notification_service.request_transitioned(trip, STAGES)

        [note] = notification_service.list_for_user("12")
        assert note["title"] == "Trip request awaiting your approval"
        assert "as Manager" in note["description"]
        assert "for Pertamina RU V" in note["description"]
        assert note["link"] == f"https://inspectra.test/trips/{trip.id}/summary"

    def test_rejection_goes_to_requester_with_reason(self, notification_service):
        trip = create_trip(
            status=TripStatus.REJECTED,
            history=[make_action("7", ActionStatus.REJECTED, comments="Budget cap reached")],
        )

        notification_service.request_transitioned(trip, STAGES)

        [note] = notification_service.list_for_user(trip.employee_id)
        assert note["title"] == "Trip request rejected"
        assert note["description"].endswith(": Budget cap reached")

    def test_report_author_told_on_approval(self, notification_service):
        report = create_report(
            status=ReportStatus.APPROVED,
            history=[
                make_action("3", ActionStatus.DRAFT),
                make_action("7", ActionStatus.REVIEWED),
                make_action("12", ActionStatus.APPROVED),
            ],
        )

        notification_service.request_transitioned(report, STAGES)

        [note] = notification_service.list_for_user("3")
        assert note["title"] == "Report approved"
        assert note["link"].endswith(f"/reports/{report.id}")

    def test_nothing_sent_for_draft(self, notification_service):
        notification_service.request_transitioned(create_trip(status=TripStatus.DRAFT), STAGES)

        assert notification_service.list_for_user("3") == []
        assert notification_service.list_for_user("7") == []
