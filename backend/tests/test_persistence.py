import json
import os

import pytest
import requests

from faqflow.errors import PersistenceError
from faqflow.persistence.dispatcher import SaveDispatcher
from faqflow.persistence.gateway import FileSnapshotGateway, HttpSnapshotGateway
from faqflow.session import EditorSession

from backend.tests.fakes import BlockingGateway, FailingGateway, InMemoryGateway


SNAPSHOT = [{"id": "a", "type": "card", "data": {"title": "A", "level": 1}}]


class _FakeResponse:
    def __init__(self, status_code: int, body):
        self.status_code = status_code
        self._body = body

    def json(self):
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"HTTP {self.status_code}", response=self)


# ---------------- File gateway ----------------


def test_file_gateway_writes_envelope(tmp_path):
    path = tmp_path / "nested" / "faqs.json"
    gateway = FileSnapshotGateway(path)

    result = gateway.save(SNAPSHOT)

    assert result == {"success": True, "message": "FAQs updated successfully"}
    assert json.loads(path.read_text(encoding="utf-8")) == {"faqs": SNAPSHOT}
    assert gateway.load() == SNAPSHOT


def test_file_gateway_missing_file_loads_empty(tmp_path):
    assert FileSnapshotGateway(tmp_path / "absent.json").load() == []


def test_file_gateway_unreadable_file_raises(tmp_path):
    path = tmp_path / "faqs.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PersistenceError):
        FileSnapshotGateway(path).load()


def test_file_gateway_without_write_permission(tmp_path, monkeypatch):
    monkeypatch.setattr(os, "access", lambda *args, **kwargs: False)

    with pytest.raises(PersistenceError) as excinfo:
        FileSnapshotGateway(tmp_path / "faqs.json").save(SNAPSHOT)

    assert excinfo.value.message == "No write permission on snapshot directory"


def test_file_gateway_unserializable_snapshot(tmp_path):
    with pytest.raises(PersistenceError) as excinfo:
        FileSnapshotGateway(tmp_path / "faqs.json").save([{"id": object()}])

    assert excinfo.value.message == "Error writing file"


# ---------------- HTTP gateway ----------------


def test_http_gateway_posts_envelope(monkeypatch):
    calls = []

    def fake_post(url, json=None, timeout=None):
        calls.append((url, json, timeout))
        return _FakeResponse(200, {"success": True, "message": "FAQs updated successfully"})

    monkeypatch.setattr(requests, "post", fake_post)

    result = HttpSnapshotGateway("http://faqs.local/api/", timeout=3).save(SNAPSHOT)

    assert result["success"] is True
    assert calls == [("http://faqs.local/api/faqs", {"faqs": SNAPSHOT}, 3)]


def test_http_gateway_surfaces_server_error(monkeypatch):
    monkeypatch.setattr(
        requests,
        "post",
        lambda *a, **k: _FakeResponse(500, {"success": False, "error": "disk full"}),
    )

    with pytest.raises(PersistenceError) as excinfo:
        HttpSnapshotGateway("http://faqs.local").save(SNAPSHOT)

    assert excinfo.value.detail == "disk full"


def test_http_gateway_network_failure(monkeypatch):
    def boom(*args, **kwargs):
        raise requests.exceptions.ConnectionError("refused")

    monkeypatch.setattr(requests, "get", boom)

    with pytest.raises(PersistenceError):
        HttpSnapshotGateway("http://faqs.local").load()


def test_http_gateway_loads_envelope(monkeypatch):
    monkeypatch.setattr(requests, "get", lambda *a, **k: _FakeResponse(200, {"faqs": SNAPSHOT}))

    assert HttpSnapshotGateway("http://faqs.local").load() == SNAPSHOT


# ---------------- Dispatcher ----------------


def test_dispatcher_saves_in_background():
    gateway = InMemoryGateway()
    dispatcher = SaveDispatcher(gateway)

    dispatcher.submit(SNAPSHOT)
    result = dispatcher.flush(timeout=5)
    dispatcher.close()

    assert result.skipped is False
    assert gateway.saved == [SNAPSHOT]
    assert dispatcher.last_error is None
    assert dispatcher.last_saved_at is not None


def test_dispatcher_skips_superseded_saves():
    gateway = BlockingGateway()
    dispatcher = SaveDispatcher(gateway)

    first = dispatcher.submit([{"id": "v1"}])
    assert gateway.started.wait(timeout=5)
    second = dispatcher.submit([{"id": "v2"}])
    third = dispatcher.submit([{"id": "v3"}])
    gateway.release.set()

    assert dispatcher.flush(timeout=5).skipped is False
    dispatcher.close()

    assert first.result().skipped is False
    assert second.result().skipped is True
    assert third.result().generation == 3
    assert gateway.saved == [[{"id": "v1"}], [{"id": "v3"}]]


def test_dispatcher_failure_is_reported_not_raised_on_submit():
    errors = []
    dispatcher = SaveDispatcher(FailingGateway(), on_error=errors.append)

    future = dispatcher.submit(SNAPSHOT)
    with pytest.raises(PersistenceError):
        dispatcher.flush(timeout=5)
    dispatcher.close()

    assert isinstance(future.exception(), PersistenceError)
    assert isinstance(dispatcher.last_error, PersistenceError)
    assert dispatcher.last_error.detail == "disk full"
    assert errors == [dispatcher.last_error]


def test_dispatcher_flush_without_saves():
    dispatcher = SaveDispatcher(InMemoryGateway())

    assert dispatcher.flush() is None
    dispatcher.close()


# ---------------- Session ----------------


def test_session_mutations_queue_saves(session, gateway):
    session.hydrate()
    root = session.mutator.create_node(1, "Root")
    session.mutator.create_node(2, "Child", parent_id=root)
    session.dispatcher.flush(timeout=5)

    assert gateway.saved[-1] == session.snapshot()
    assert len(gateway.saved[-1]) == 2


def test_failed_save_keeps_memory_graph():
    errors = []
    session = EditorSession(gateway=FailingGateway(), on_save_error=errors.append)

    node_id = session.mutator.create_node(1, "Kept")
    with pytest.raises(PersistenceError):
        session.dispatcher.flush(timeout=5)
    session.dispatcher.close()

    assert session.store.has(node_id)
    assert errors and errors[0].message == "Error writing file"
    assert session.stats()["last_save_error"] == "Error writing file: disk full"


def test_session_hydrates_once():
    gateway = InMemoryGateway(SNAPSHOT)

    with EditorSession(gateway=gateway) as session:
        report = session.hydrate()
        assert report.nodes == 1
        assert session.metadata["loaded_cards"] == 1
        with pytest.raises(RuntimeError):
            session.hydrate()

    assert len(session.store) == 0


def test_session_hydrate_failure_leaves_store_empty():
    session = EditorSession(gateway=FailingGateway())

    with pytest.raises(PersistenceError):
        session.hydrate()

    assert len(session.store) == 0
    session.discard()


def test_dispatcher_drain_waits_without_raising():
    errors = []
    dispatcher = SaveDispatcher(FailingGateway(), on_error=errors.append)

    future = dispatcher.submit(SNAPSHOT)
    dispatcher.drain(timeout=5)

    assert future.done()
    dispatcher.close()
    assert len(errors) == 1


def test_session_adopt_replaces_forest_without_saving(session, gateway):
    session.mutator.create_node(1, "Old")
    session.dispatcher.flush(timeout=5)
    saves = len(gateway.saved)

    report = session.adopt(SNAPSHOT)

    assert report.nodes == 1
    assert session.store.ids() == ["a"]
    assert session.metadata["loaded_cards"] == 1
    session.dispatcher.drain(timeout=5)
    assert len(gateway.saved) == saves


def test_session_adopt_malformed_keeps_forest(session):
    kept = session.mutator.create_node(1, "Kept")

    with pytest.raises(PersistenceError):
        session.adopt([{"data": {"title": "no id"}}])

    assert session.store.ids() == [kept]
