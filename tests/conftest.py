"""Pytest configuration and shared fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from inspectra.api.main import create_app
from inspectra.core.approval.service import ApprovalService
from inspectra.core.config import Settings
from inspectra.services.notifications import NotificationService
from inspectra.services.projects import ProjectService
from inspectra.store.memory import MemoryDocumentStore
from inspectra.store.sql import SqlDocumentStore

from tests.factories import create_project, make_actor


@pytest.fixture
def memory_store():
    """Empty in-process document store."""
    return MemoryDocumentStore()


@pytest.fixture
def sql_engine():
    """SQLite in-memory engine shared across connections."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def sql_store(sql_engine):
    return SqlDocumentStore(sql_engine)


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Run a test against every store backend."""
    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("sql_store")


@pytest.fixture
def notification_service(store):
    return NotificationService(store, "https://inspectra.test")


@pytest.fixture
def approval_service(store, notification_service):
    return ApprovalService(store, notifier=notification_service)


@pytest.fixture
def project_service(store):
    return ProjectService(store)


@pytest.fixture
def project(store):
    """Project whose trip and report chains go to user 7, then user 12."""
    return create_project(store, name="Pertamina RU V", approvers=("7", "12"), report_approvers=("7", "12"))


@pytest.fixture
def requester():
    return make_actor("3", "Rina", "Inspector")


@pytest.fixture
def first_approver():
    return make_actor("7", "Budi", "Supervisor")


@pytest.fixture
def second_approver():
    return make_actor("12", "Sari", "Manager")


@pytest.fixture
def test_settings(tmp_path):
    return Settings(store_backend="memory", log_dir=str(tmp_path / "logs"), log_to_file=False)


@pytest.fixture
def client(memory_store, test_settings):
    """API client backed by an in-memory store."""
    app = create_app(store=memory_store, settings=test_settings)
    with TestClient(app) as c:
        yield c

