from __future__ import annotations

import logging
from dataclasses import replace
from numbers import Real
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from faqflow.config.settings import MutationConfig
from faqflow.errors import CycleError, NotFoundError, ValidationError
from faqflow.graph.edge_sync import EdgeSynchronizer
from faqflow.graph.graph_query import TreeQueryEngine
from faqflow.graph.graph_schema import (
    LEVELS,
    RECORD_KEYS,
    DisplayConfig,
    Edge,
    Node,
)
from faqflow.graph.graph_store import GraphStore


logger = logging.getLogger("faqflow.mutation")

RELATIONAL_KEYS = frozenset(
    {"id", "parent_id", "parentId", "parent", "children", "childrens"}
)
CONTENT_KEYS = frozenset(
    {"title", "description", "url", "content", "subtitle", "display_config"}
)


def _check_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("title is required")
    return title.strip()


def _check_level(level: Any) -> int:
    if isinstance(level, bool) or level not in LEVELS:
        raise ValidationError(f"level must be one of {list(LEVELS)}, got {level!r}")
    return int(level)


def _check_order(order: Any) -> float:
    if isinstance(order, bool) or not isinstance(order, Real):
        raise ValidationError(f"order must be a number, got {order!r}")
    return order


def _check_extra(value: Any) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValidationError(f"extra must be a mapping, got {value!r}")
    clashes = sorted(set(value) & RECORD_KEYS)
    if clashes:
        raise ValidationError(f"extra may not use reserved keys {clashes}")
    return dict(value)


def _coerce_display_config(value: Any) -> Optional[DisplayConfig]:
    if value is None or isinstance(value, DisplayConfig):
        return value
    if isinstance(value, Mapping):
        return DisplayConfig.from_dict(dict(value))
    raise ValidationError(f"display_config must be a mapping, got {value!r}")


class MutationEngine:
    """
    The single choke point for structural edits.

    Each operation validates everything it needs before writing, so a
    raised error leaves the store exactly as it was. After a commit the
    optional `on_commit` hook is called with the store; the editor
    session uses it to queue a snapshot save.
    """

    def __init__(
        self,
        *,
        store: GraphStore,
        edges: Optional[EdgeSynchronizer] = None,
        config: Optional[MutationConfig] = None,
        on_commit: Optional[Callable[[GraphStore], Any]] = None,
    ) -> None:
        self.store = store
        self.edges = edges or EdgeSynchronizer(store)
        self.config = config or MutationConfig()
        self.on_commit = on_commit
        self.query = TreeQueryEngine(store)

    # ------------------------------------------------------------------
    # Create / update / delete
    # ------------------------------------------------------------------

    def create_node(
        self,
        level: int,
        title: str,
        order: float = 0,
        *,
        parent_id: Optional[str] = None,
        description: Optional[str] = None,
        url: Optional[str] = None,
        content: Optional[str] = None,
        subtitle: Optional[Dict[str, Any]] = None,
        display_config: Any = None,
        status: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> str:
        title = _check_title(title)
        level = _check_level(level)
        order = _check_order(order)
        display_config = _coerce_display_config(display_config)
        extra = _check_extra(extra)
        if parent_id is not None:
            self.store.get(parent_id)

        node = Node.create(
            level,
            title,
            order,
            description=description,
            url=url,
            content=content,
            subtitle=subtitle,
            display_config=display_config,
            extra=extra,
        )
        if status is not None:
            node = replace(node, status=status)
        self.store.put_node(node)

        if parent_id is not None:
            self._attach(node.id, parent_id)

        logger.info("created %s (level=%s, parent=%s)", node.id, level, parent_id)
        self._commit()
        return node.id

    def update_node(self, node_id: str, fields: Mapping[str, Any]) -> Node:
        """
        Merge non-relational fields into a card.

        Relational keys are ignored; unknown keys land in the opaque
        `extra` mapping.
        """
        node = self.store.get(node_id)
        payload = node.payload
        content_changes: Dict[str, Any] = {}
        extra = dict(payload.extra)
        level, order, status = node.level, node.order, node.status

        for key, value in fields.items():
            if key in RELATIONAL_KEYS:
                continue
            if key == "displayConfig":
                key = "display_config"
            if key == "title":
                content_changes["title"] = _check_title(value)
            elif key == "display_config":
                content_changes["display_config"] = _coerce_display_config(value)
            elif key in CONTENT_KEYS:
                content_changes[key] = value
            elif key == "level":
                level = _check_level(value)
            elif key == "order":
                order = _check_order(value)
            elif key == "status":
                status = value
            elif key == "extra":
                extra.update(_check_extra(value))
            else:
                extra[key] = value

        updated = replace(
            node,
            level=level,
            order=order,
            status=status,
            payload=replace(payload, extra=extra, **content_changes),
        )
        self.store.put_node(updated)

        if level != node.level:
            self.edges.recolor(node_id)
        if order != node.order and self.store.parent_of(node_id) is not None:
            self.edges.reslot(node.parent_id)

        logger.info("updated %s (%s)", node_id, ", ".join(sorted(fields)) or "no fields")
        if self.config.save_on_update:
            self._commit()
        return updated

    def delete_node(self, node_id: str) -> List[str]:
        """
        Delete a card and every edge touching it.

        Children follow the configured delete policy. Returns the ids
        that were removed (more than one only under `cascade`).
        """
        node = self.store.get(node_id)
        policy = self.config.delete_policy

        self._detach(node)

        removed: List[str] = []
        if policy == "cascade":
            for descendant in reversed(self.query.descendants(node_id)):
                self.edges.drop_node(descendant)
                removed.append(descendant)

        self.edges.drop_node(node_id)
        removed.append(node_id)

        if policy == "promote":
            grandparent = (
                node.parent_id
                if node.parent_id is not None and self.store.has(node.parent_id)
                else None
            )
            for child_id in node.children:
                if not self.store.has(child_id):
                    continue
                child = self.store.get(child_id)
                self.store.put_node(child.with_parent(grandparent))
                if grandparent is not None:
                    self._append_child(grandparent, child_id)
                    self.edges.link(grandparent, child_id)

        logger.info("deleted %s (policy=%s, removed=%s)", node_id, policy, len(removed))
        self._commit()
        return removed

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    def set_parent(self, child_id: str, new_parent_id: Optional[str]) -> bool:
        """
        Move a card under a new parent, or make it a root with None.

        Returns False when the card already had that parent.
        """
        child = self.store.get(child_id)
        if new_parent_id is not None:
            self.store.get(new_parent_id)
            if self.query.is_self_or_descendant(new_parent_id, child_id):
                raise CycleError(child_id, new_parent_id)

        if child.parent_id == new_parent_id:
            return False

        self._detach(child)
        if new_parent_id is None:
            self.store.put_node(self.store.get(child_id).with_parent(None))
        else:
            self._attach(child_id, new_parent_id)

        logger.info("set parent of %s: %s -> %s", child_id, child.parent_id, new_parent_id)
        self._commit()
        return True

    def add_child(self, parent_id: str, child_id: str) -> bool:
        return self.set_parent(child_id, parent_id)

    def remove_child(self, parent_id: str, child_id: str) -> bool:
        self.store.get(parent_id)
        child = self.store.get(child_id)
        if child.parent_id != parent_id:
            raise NotFoundError(
                f"{child_id!r} is not a child of {parent_id!r}",
                ref=child_id,
            )
        return self.set_parent(child_id, None)

    def reorder_children(
        self,
        parent_id: Optional[str],
        child_ids: Sequence[str],
    ) -> None:
        """
        Assign order 0..n-1 to a sibling set in the given sequence.

        `parent_id=None` reorders the roots.
        """
        if parent_id is None:
            siblings = [n.id for n in self.query.roots()]
        else:
            siblings = [c.id for c in self.store.children_of(parent_id)]

        if len(set(child_ids)) != len(child_ids) or set(child_ids) != set(siblings):
            raise ValidationError(
                "reorder must list every sibling exactly once"
            )

        for index, child_id in enumerate(child_ids):
            node = self.store.get(child_id)
            if node.order != index:
                self.store.put_node(replace(node, order=index))

        if parent_id is not None:
            self.edges.reslot(parent_id)

        logger.info("reordered %s children of %s", len(child_ids), parent_id or "<roots>")
        self._commit()

    # ------------------------------------------------------------------
    # Explicit connections
    # ------------------------------------------------------------------

    def connect(
        self,
        source: str,
        target: str,
        *,
        as_child: bool = False,
        source_slot: Optional[int] = None,
        target_slot: Optional[int] = None,
    ) -> Edge:
        self.store.get(source)
        self.store.get(target)
        if source == target:
            raise ValidationError("a card cannot be connected to itself")

        if as_child:
            self.add_child(source, target)
            return self.store.get_edge(source, target)

        edge = self.edges.add_connection(
            source,
            target,
            source_slot=source_slot,
            target_slot=target_slot,
        )
        logger.info("connected %s -> %s (%s)", source, target, edge.kind)
        return edge

    def disconnect(self, edge_id: str) -> None:
        """
        Remove an edge; a relation edge also dissolves the relation.
        """
        relation = self.edges.relation_for(edge_id)
        if relation is not None:
            self.remove_child(*relation)
            return

        edge = self.store.find_edge(edge_id)
        self.edges.remove_connection(edge.source, edge.target)
        logger.info("disconnected %s", edge_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _attach(self, child_id: str, parent_id: str) -> None:
        self.store.put_node(self.store.get(child_id).with_parent(parent_id))
        self._append_child(parent_id, child_id)
        self.edges.link(parent_id, child_id)

    def _append_child(self, parent_id: str, child_id: str) -> None:
        parent = self.store.get(parent_id)
        if child_id not in parent.children:
            self.store.put_node(parent.with_children(parent.children + (child_id,)))

    def _detach(self, node: Node) -> None:
        old = node.parent_id
        if old is None or not self.store.has(old):
            return
        parent = self.store.get(old)
        self.store.put_node(
            parent.with_children(tuple(c for c in parent.children if c != node.id))
        )
        self.edges.unlink(old, node.id)

    def _commit(self) -> None:
        if self.on_commit is not None:
            self.on_commit(self.store)
