"""Tests for the document store backends.

Every test runs against both the in-memory and the SQLite-backed store.
"""

import threading

import pytest

from inspectra.store.base import ChangeType, ConcurrentModificationError, DocumentNotFoundError


class TestDocumentStore:
    """Behaviour shared by all store backends."""

    def test_set_and_get(self, store):
        doc = store.set("trips", "T-1", {"status": "Draft", "destination": "Dumai"})

        assert doc.version == 1
        fetched = store.get("trips", "T-1")
        assert fetched.data == {"status": "Draft", "destination": "Dumai"}
        assert fetched.version == 1

    def test_get_missing(self, store):
        assert store.get("trips", "nope") is None
        with pytest.raises(DocumentNotFoundError):
            store.require("trips", "nope")

    def test_set_overwrites_unless_merge(self, store):
        store.set("trips", "T-1", {"status": "Draft", "destination": "Dumai"})

        store.set("trips", "T-1", {"status": "Pending"}, merge=True)
        assert store.get("trips", "T-1").data == {"status": "Pending", "destination": "Dumai"}

        doc = store.set("trips", "T-1", {"status": "Closed"})
        assert doc.data == {"status": "Closed"}
        assert doc.version == 3

    def test_update_merges_and_bumps_version(self, store):
        store.set("trips", "T-1", {"status": "Pending", "destination": "Dumai"})

        doc = store.update("trips", "T-1", {"status": "Approved"})

        assert doc.version == 2
        assert doc.data == {"status": "Approved", "destination": "Dumai"}

    def test_update_missing(self, store):
        with pytest.raises(DocumentNotFoundError):
            store.update("trips", "nope", {"status": "Approved"})

    def test_update_with_stale_version(self, store):
        store.set("trips", "T-1", {"status": "Pending"})
        store.update("trips", "T-1", {"status": "Approved"}, expected_version=1)

        with pytest.raises(ConcurrentModificationError) as exc_info:
            store.update("trips", "T-1", {"status": "Rejected"}, expected_version=1)

        assert exc_info.value.expected == 1
        assert store.get("trips", "T-1").data["status"] == "Approved"

    def test_get_all_ordered_by_id(self, store):
        for doc_id in ("b", "c", "a"):
            store.set("projects", doc_id, {"name": doc_id})
        store.set("trips", "x", {})

        assert [d.id for d in store.get_all("projects")] == ["a", "b", "c"]

    def test_find(self, store):
        store.set("notifications", "1", {"userId": "7", "isRead": False})
        store.set("notifications", "2", {"userId": "12", "isRead": False})
        store.set("notifications", "3", {"userId": "7", "isRead": True})

        assert [d.id for d in store.find("notifications", userId="7")] == ["1", "3"]
        assert [d.id for d in store.find("notifications", userId="7", isRead=False)] == ["1"]

    def test_delete(self, store):
        store.set("trips", "T-1", {})
        assert store.delete("trips", "T-1") is True
        assert store.delete("trips", "T-1") is False
        assert store.get("trips", "T-1") is None

    def test_returned_data_is_a_copy(self, store):
        store.set("trips", "T-1", {"approvalHistory": [{"status": "Submitted"}]})

        doc = store.get("trips", "T-1")
        doc.data["approvalHistory"].append({"status": "Approved"})

        assert len(store.get("trips", "T-1").data["approvalHistory"]) == 1

    def test_subscribe(self, store):
        events = []
        unsubscribe = store.subscribe("trips", events.append)

        store.set("trips", "T-1", {"status": "Draft"})
        store.update("trips", "T-1", {"status": "Pending"})
        store.set("projects", "P-1", {})
        store.delete("trips", "T-1")
        unsubscribe()
        store.set("trips", "T-2", {})

        assert [e.change_type for e in events] == [ChangeType.ADDED, ChangeType.MODIFIED, ChangeType.REMOVED]
        assert events[1].document.data == {"status": "Pending"}

    def test_failing_listener_does_not_break_writes(self, store):
        def explode(event):
            raise RuntimeError("listener crashed")

        store.subscribe("trips", explode)
        doc = store.set("trips", "T-1", {"status": "Draft"})

        assert doc.version == 1


class TestMemoryStoreConcurrency:
    def test_only_one_conditional_write_wins(self, memory_store):
        memory_store.set("trips", "T-1", {"status": "Pending"})
        barrier = threading.Barrier(8)
        outcomes = []

        def writer(n):
            barrier.wait()
            try:
                memory_store.update("trips", "T-1", {"status": f"writer-{n}"}, expected_version=1)
                outcomes.append("ok")
            except ConcurrentModificationError:
                outcomes.append("conflict")

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert outcomes.count("ok") == 1
        assert outcomes.count("conflict") == 7
        assert memory_store.get("trips", "T-1").version == 2


@pytest.mark.db
class TestSqlStore:
    def test_schema_created_once(self, sql_engine):
        from inspectra.store.sql import SqlDocumentStore

        first = SqlDocumentStore(sql_engine)
        first.set("projects", "P-1", {"name": "Alpha"})
        second = SqlDocumentStore(sql_engine)

        assert second.get("projects", "P-1").data == {"name": "Alpha"}

    def test_json_payload_round_trip(self, sql_store):
        payload = {
            "tripApprovalWorkflow": [{"stageIndex": 0, "roleName": "Supervisor", "approverId": "7"}],
            "estimatedBudget": 1250000.5,
            "project": None,
        }
        sql_store.set("projects", "P-1", payload)

        assert sql_store.get("projects", "P-1").data == payload
