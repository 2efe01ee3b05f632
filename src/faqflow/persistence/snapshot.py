from __future__ import annotations

from numbers import Real
from typing import Any, Dict, List, Mapping, Optional

from faqflow.errors import PersistenceError
from faqflow.graph.graph_schema import (
    RECORD_KEYS,
    CardContent,
    CardStatus,
    DisplayConfig,
    Node,
)
from faqflow.graph.graph_store import GraphStore


Record = Dict[str, Any]

# Everything else in a record's data is carried through `extra` untouched.
KNOWN_KEYS = RECORD_KEYS


def wrap(snapshot: List[Record]) -> Dict[str, Any]:
    return {"faqs": snapshot}


def unwrap(payload: Any) -> List[Record]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, Mapping) and isinstance(payload.get("faqs"), list):
        return payload["faqs"]
    raise PersistenceError("snapshot payload must be a list or {'faqs': [...]}")


# ---------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------


def encode_node(node: Node) -> Record:
    payload = node.payload
    data: Dict[str, Any] = dict(payload.extra)
    data.update(
        {
            "title": payload.title,
            "level": node.level,
            "order": node.order,
            "status": node.status,
            "children": list(node.children),
        }
    )
    for key, value in (
        ("description", payload.description),
        ("url", payload.url),
        ("content", payload.content),
        ("subtitle", payload.subtitle),
        ("parent", node.parent_id),
    ):
        if value is not None:
            data[key] = value
    if payload.display_config is not None:
        data["displayConfig"] = payload.display_config.to_dict()

    return {"id": node.id, "type": "card", "data": data}


def to_snapshot(store: GraphStore) -> List[Record]:
    """
    Full snapshot of the store in insertion order.

    Only the tree travels; explicit connections are session state.
    """
    return [encode_node(node) for node in store.list()]


# ---------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------


def _number(value: Any, default: float = 0) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        return default
    return value


def _child_entries(record: Mapping[str, Any]) -> List[Any]:
    data = record.get("data") or {}
    entries: List[Any] = []
    for key in ("children", "childrens"):
        value = data.get(key) or []
        if not isinstance(value, list):
            raise PersistenceError(
                f"{key} of {record['id']!r} must be a list",
                detail=repr(value)[:200],
            )
        entries.extend(value)
    return entries


def decode_record(record: Mapping[str, Any], parent_id: Optional[str] = None) -> Node:
    if not isinstance(record, Mapping) or "id" not in record:
        raise PersistenceError("malformed snapshot record", detail=repr(record)[:200])

    data = record.get("data") or {}
    if not isinstance(data, Mapping):
        raise PersistenceError("malformed snapshot record", detail=repr(record)[:200])
    declared_parent = data.get("parent", data.get("parentId"))
    children = [
        c["id"] if isinstance(c, Mapping) else str(c)
        for c in _child_entries(record)
        if not isinstance(c, Mapping) or "id" in c
    ]
    display = data.get("displayConfig")

    return Node(
        id=str(record["id"]),
        level=data.get("level"),
        order=_number(data.get("order")),
        status=data.get("status", CardStatus.DRAFT.value),
        parent_id=declared_parent if declared_parent else parent_id,
        children=tuple(children),
        payload=CardContent(
            title=str(data.get("title") or ""),
            description=data.get("description"),
            url=data.get("url"),
            content=data.get("content"),
            subtitle=data.get("subtitle"),
            display_config=(
                DisplayConfig.from_dict(display) if isinstance(display, Mapping) else None
            ),
            extra={k: v for k, v in data.items() if k not in KNOWN_KEYS},
        ),
    )


def from_snapshot(records: List[Record]) -> List[Node]:
    """
    Decode records into flat nodes.

    Accepts flat records (children as id lists, linked by `parent`)
    and nested records (children embedded as full records), or any
    mix. Nested children are emitted right after their parent with
    `parent` pointing at it.
    """
    nodes: List[Node] = []

    def visit(record: Mapping[str, Any], parent_id: Optional[str]) -> None:
        node = decode_record(record, parent_id)
        nodes.append(node)
        for child in _child_entries(record):
            if isinstance(child, Mapping):
                visit(child, node.id)

    for record in records:
        visit(record, None)

    return nodes
