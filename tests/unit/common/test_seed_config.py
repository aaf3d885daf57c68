"""Tests for seed file loading and store seeding."""

import dataclasses
import textwrap

import pytest
import yaml

from inspectra.common.config import (
    load_config,
    load_typed_config,
    parse_project_config,
    parse_stage_config,
)
from inspectra.core.approval.states import ReportStatus, RequestKind, TripStatus
from inspectra.core.approval.service import ApprovalService
from inspectra.db.seed import seed_from_file
from inspectra.store.repositories import ProjectRepository, TripRepository

SEED = textwrap.dedent("""
    projects:
      - name: Pertamina RU V
        id: proj-ru5
        client: ${SEED_CLIENT}
        trip_workflow:
          - role_name: Supervisor
            approver_id: 7
          - role_name: Manager
            approver_id: "12"
        report_workflow:
          - roleName: QA Lead
            approverId: 20
    trips:
      - id: TRIP-0001
        employeeId: "3"
        employeeName: Rina
        destination: Balikpapan
        status: Pending
        project: Pertamina RU V
        approvalHistory:
          - actorId: "3"
            actorName: Rina
            status: Submitted
            timestamp: "2024-03-01T08:00:00+00:00"
          - actorId: "7"
            actorName: Budi
            status: Approved
            timestamp: "2024-03-01T09:00:00+00:00"
    reports:
      - id: REP-0001
        reportNumber: PT-0001
        status: Draft
        project: Pertamina RU V
""")


@pytest.fixture
def seed_file(tmp_path, monkeypatch):
    monkeypatch.setenv("SEED_CLIENT", "Pertamina")
    path = tmp_path / "seed.yaml"
    path.write_text(SEED)
    return str(path)


class TestLoadConfig:
    def test_env_vars_expanded(self, seed_file):
        config = load_config(seed_file)
        assert config["projects"][0]["client"] == "Pertamina"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == {}

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(TypeError):
            load_config(str(path))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("projects: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_config(str(path))


class TestParseConfig:
    def test_typed_config(self, seed_file):
        config = load_typed_config(seed_file)

        [project] = config.projects
        assert project.id == "proj-ru5"
        assert [s.approver_id for s in project.trip_workflow] == ["7", "12"]
        assert project.report_workflow[0].role_name == "QA Lead"
        assert len(config.trips) == 1
        assert len(config.reports) == 1

    def test_stage_without_approver(self):
        with pytest.raises(ValueError):
            parse_stage_config({"role_name": "Manager"})

    def test_project_without_name(self):
        with pytest.raises(ValueError):
            parse_project_config({"client": "Nobody"})

    def test_workflow_documents(self):
        project = parse_project_config({
            "name": "X",
            "trip_workflow": [{"role_name": "A", "approver_id": 1}, {"role_name": "B", "approver_id": 2}],
        })
        assert project.workflow_documents(project.trip_workflow) == [
            {"stageIndex": 0, "roleName": "A", "approverId": "1"},
            {"stageIndex": 1, "roleName": "B", "approverId": "2"},
        ]


class TestSeedStore:
    def test_seed_from_file(self, store, seed_file):
        counts = seed_from_file(store, seed_file)

        assert counts == {"projects": 1, "trips": 1, "reports": 1}
        project = ProjectRepository(store).by_name("Pertamina RU V")
        assert [s.approver_id for s in project.trip_approval_workflow] == ["7", "12"]

        service = ApprovalService(store)
        trip = service.get_request(RequestKind.TRIP, "TRIP-0001")
        assert trip.status is TripStatus.PENDING
        assert service.is_pending_for(RequestKind.TRIP, trip.id, "12")
        assert service.get_request(RequestKind.REPORT, "REP-0001").status is ReportStatus.DRAFT

    def test_seeding_is_idempotent(self, store, seed_file):
        seed_from_file(store, seed_file)
        trips = TripRepository(store)
        trips.save(dataclasses.replace(trips.require("TRIP-0001"), destination="Dumai"))

        counts = seed_from_file(store, seed_file)

        assert counts == {"projects": 1, "trips": 0, "reports": 0}
        assert TripRepository(store).require("TRIP-0001").destination == "Dumai"
