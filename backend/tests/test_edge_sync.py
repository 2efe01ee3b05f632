import pytest

from faqflow.errors import NotFoundError
from faqflow.graph.edge_sync import EdgeSynchronizer
from faqflow.graph.graph_schema import CardContent, Edge, Node


def _fan(engine, n: int):
    parent = engine.create_node(1, "Parent")
    kids = [engine.create_node(2, f"Kid {i}", parent_id=parent) for i in range(n)]
    return parent, kids


def test_single_child_has_no_slot(engine, store):
    parent, (kid,) = _fan(engine, 1)

    assert store.get_edge(parent, kid).source_slot is None


def test_fan_out_assigns_slots_in_sibling_order(engine, store):
    parent, kids = _fan(engine, 3)

    slots = [store.get_edge(parent, k).source_slot for k in kids]
    assert slots == [0, 1, 2]

    engine.update_node(kids[0], {"order": 10})

    slots = [store.get_edge(parent, k).source_slot for k in kids]
    assert slots == [2, 0, 1]


def test_slots_collapse_when_fan_out_ends(engine, store):
    parent, kids = _fan(engine, 2)

    engine.delete_node(kids[1])

    assert store.get_edge(parent, kids[0]).source_slot is None


def test_relation_edge_color_follows_child_level(engine, store):
    parent, (kid,) = _fan(engine, 1)

    assert store.get_edge(parent, kid).color == "#10b981"


def test_link_is_idempotent(engine, store):
    parent, (kid,) = _fan(engine, 1)
    sync = EdgeSynchronizer(store)

    sync.link(parent, kid)
    sync.link(parent, kid)

    assert store.edge_count() == 1


def test_unlink_keeps_plain_connections(engine, store):
    a = engine.create_node(1, "A")
    b = engine.create_node(2, "B")
    engine.connect(a, b)

    assert EdgeSynchronizer(store).unlink(a, b) is None
    assert store.get_edge(a, b).kind == "connection"


def test_reconcile_rebuilds_relation_edges_from_records(store):
    store.put_node(
        Node(id="p", level=1, order=0, payload=CardContent(title="P"), children=("c", "d"))
    )
    store.put_node(Node(id="c", level=2, order=1, payload=CardContent(title="C"), parent_id="p"))
    store.put_node(Node(id="d", level=2, order=0, payload=CardContent(title="D"), parent_id="p"))
    sync = EdgeSynchronizer(store)

    assert sync.reconcile() == {"added": 2, "removed": 0}
    assert store.get_edge("p", "d").source_slot == 0
    assert store.get_edge("p", "c").source_slot == 1

    store.put_node(store.get("d").with_parent(None))
    store.put_node(store.get("p").with_children(("c",)))

    assert sync.reconcile() == {"added": 0, "removed": 1}
    assert not store.has_edge("p", "d")
    assert store.get_edge("p", "c").source_slot is None


def test_reconcile_upgrades_connection_to_relation(store):
    store.put_node(Node(id="p", level=1, order=0, payload=CardContent(title="P"), children=("c",)))
    store.put_node(Node(id="c", level=3, order=0, payload=CardContent(title="C"), parent_id="p"))
    sync = EdgeSynchronizer(store)
    sync.add_connection("p", "c")

    sync.reconcile()

    assert store.get_edge("p", "c").kind == "relation"
    assert store.edge_count() == 1


def test_edges_to_unknown_cards_are_refused(engine, store):
    b = engine.create_node(2, "B")
    sync = EdgeSynchronizer(store)

    with pytest.raises(NotFoundError):
        sync.add_connection("ghost", b)
    with pytest.raises(NotFoundError):
        sync.link("ghost", b)
    with pytest.raises(NotFoundError):
        store.put_edge(Edge.create(source=b, target="ghost", kind="connection", color="#000"))

    assert store.edge_count() == 0
    assert [n.id for n in store.list()] == [b]
