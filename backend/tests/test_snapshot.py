import json

import pytest

from faqflow.errors import PersistenceError
from faqflow.graph.graph_builder import GraphBuilder
from faqflow.graph.graph_query import TreeQueryEngine
from faqflow.graph.graph_store import GraphStore
from faqflow.persistence.gateway import FileSnapshotGateway
from faqflow.persistence.snapshot import (
    decode_record,
    from_snapshot,
    to_snapshot,
    unwrap,
    wrap,
)


def _card(node_id, title, **data):
    return {"id": node_id, "type": "card", "data": {"title": title, **data}}


def _hydrate(records):
    store = GraphStore()
    report = GraphBuilder(store).load(from_snapshot(records))
    return store, report


def test_snapshot_round_trip_keeps_every_field(engine, store, tmp_path):
    root = engine.create_node(
        1,
        "Billing",
        description="How invoices work",
        url="https://example.com/billing",
        subtitle={"text": "start here"},
        display_config={"isEnabledOnNonBusinessDay": True, "enabledOnChannels": ["web", "app"]},
        extra={"tags": ["money"], "html": "<p>hi</p>", "multimedia": {"kind": "video"}},
    )
    engine.create_node(2, "Refunds", 2, parent_id=root, content="Ask support")
    engine.create_node(2, "Invoices", 1, parent_id=root, status="Published")

    gateway = FileSnapshotGateway(tmp_path / "faqs.json")
    gateway.save(to_snapshot(store))
    reloaded, report = _hydrate(gateway.load())

    assert report.repairs == []
    assert to_snapshot(reloaded) == to_snapshot(store)
    assert reloaded.edge_count() == store.edge_count()
    assert TreeQueryEngine(reloaded).check_invariants() == []


def test_encoded_record_shape(engine, store):
    root = engine.create_node(1, "Root", extra={"tags": ["t"]})
    child = engine.create_node(3, "Child", parent_id=root)

    records = {r["id"]: r for r in to_snapshot(store)}

    assert records[root] == {
        "id": root,
        "type": "card",
        "data": {
            "tags": ["t"],
            "title": "Root",
            "level": 1,
            "order": 0,
            "status": "Draft",
            "children": [child],
        },
    }
    assert records[child]["data"]["parent"] == root
    json.dumps(records)


def test_nested_records_are_flattened():
    records = [
        _card(
            "root",
            "Root",
            level=1,
            children=[
                _card("a", "A", level=2, order=2),
                _card("b", "B", level=2, order=1, childrens=[_card("c", "C", level=3)]),
            ],
        )
    ]

    store, report = _hydrate(records)

    assert store.ids() == ["root", "a", "b", "c"]
    assert store.get("root").children == ("a", "b")
    assert store.get("c").parent_id == "b"
    assert store.edge_count() == 3
    assert report.repairs == []


def test_unknown_data_keys_land_in_extra():
    node = decode_record(_card("x", "X", level=1, lang="es", html="<b>"))

    assert node.payload.extra == {"lang": "es", "html": "<b>"}
    assert node.status == "Draft"
    assert node.order == 0


def test_decode_rejects_record_without_id():
    with pytest.raises(PersistenceError):
        decode_record({"data": {"title": "nameless"}})


def test_envelope_wrap_and_unwrap():
    records = [_card("x", "X")]

    assert wrap(records) == {"faqs": records}
    assert unwrap({"faqs": records}) == records
    assert unwrap(records) == records
    with pytest.raises(PersistenceError):
        unwrap({"cards": []})


def test_builder_settles_disagreeing_relations():
    records = [
        _card("x", "X", level=1, children=["y", "ghost"]),
        _card("z", "Z", level=1),
        _card("y", "Y", level=2, parent="z"),
        _card("w", "W", level=2, parent="x"),
    ]

    store, report = _hydrate(records)

    assert store.get("y").parent_id == "z"
    assert store.get("z").children == ("y",)
    assert store.get("x").children == ("w",)
    assert any("ghost" in r for r in report.repairs)
    assert TreeQueryEngine(store).check_invariants() == []


def test_builder_breaks_cycles():
    records = [
        _card("a", "A", level=1, parent="b"),
        _card("b", "B", level=2, parent="a"),
    ]

    store, report = _hydrate(records)

    assert store.get("a").parent_id is None
    assert store.get("b").parent_id == "a"
    assert any("cycle" in r for r in report.repairs)
    assert TreeQueryEngine(store).check_invariants() == []


def test_builder_skips_duplicate_ids():
    records = [_card("a", "First", level=1), _card("a", "Second", level=1)]

    store, report = _hydrate(records)

    assert len(store) == 1
    assert store.get("a").title == "First"
    assert report.repairs == ["duplicate id a skipped"]


def test_builder_keeps_dangling_parent_as_orphan():
    store, _ = _hydrate([_card("a", "A", level=2, parent="gone")])

    assert [n.id for n in TreeQueryEngine(store).orphans()] == ["a"]


def test_relations_survive_reload_after_edits_with_lookalike_keys(engine, store, tmp_path):
    a = engine.create_node(1, "A", extra={"parentLabel": "top", "childrenCount": 0})
    b = engine.create_node(2, "B", extra={"descriptionHtml": "<p>opaque</p>"})
    engine.update_node(a, {"childrens": [b], "parentId": b, "legacyOrder": 4})

    gateway = FileSnapshotGateway(tmp_path / "faqs.json")
    gateway.save(to_snapshot(store))
    reloaded, _ = _hydrate(gateway.load())

    assert reloaded.get(b).parent_id is None
    assert reloaded.get(a).children == ()
    assert reloaded.get(a).payload.extra == {
        "parentLabel": "top",
        "childrenCount": 0,
        "legacyOrder": 4,
    }
    assert reloaded.get(b).payload.extra == {"descriptionHtml": "<p>opaque</p>"}
    assert reloaded.get(b).payload.description is None


def test_decode_rejects_malformed_children():
    with pytest.raises(PersistenceError):
        from_snapshot([_card("a", "A", children="b")])
    with pytest.raises(PersistenceError):
        from_snapshot([{"id": "a", "data": "not a mapping"}])
