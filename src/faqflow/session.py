from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from faqflow.config.settings import FaqflowConfig
from faqflow.errors import PersistenceError
from faqflow.graph.edge_sync import EdgeSynchronizer
from faqflow.graph.graph_builder import GraphBuilder, LoadReport
from faqflow.graph.graph_mutator import MutationEngine
from faqflow.graph.graph_query import TreeQueryEngine
from faqflow.graph.graph_schema import Node
from faqflow.graph.graph_store import GraphStore
from faqflow.layout.tree_layout import Position, layout
from faqflow.persistence.dispatcher import SaveDispatcher
from faqflow.persistence.gateway import SnapshotGateway
from faqflow.persistence.snapshot import Record, from_snapshot, to_snapshot


class EditorSession:
    """
    One editing session: hydrate -> mutate -> persist -> discard.

    Owns the store and everything wired to it. There is no module-level
    graph; whoever needs the forest gets a session.
    """

    def __init__(
        self,
        *,
        gateway: SnapshotGateway,
        config: Optional[FaqflowConfig] = None,
        on_save_error: Optional[Callable[[PersistenceError], Any]] = None,
    ) -> None:
        self.config = config or FaqflowConfig()
        self.gateway = gateway
        self.metadata: Dict[str, Any] = {}

        self.store = GraphStore()
        self.edges = EdgeSynchronizer(self.store)
        self.query = TreeQueryEngine(self.store)
        self.dispatcher = SaveDispatcher(gateway, on_error=on_save_error)
        self.mutator = MutationEngine(
            store=self.store,
            edges=self.edges,
            config=self.config.mutation,
            on_commit=self._request_save,
        )

        self._hydrated = False
        self._discarded = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def hydrate(self) -> LoadReport:
        """
        Fill the store from the gateway. Allowed once per session.

        Raises PersistenceError if the snapshot cannot be read or
        decoded; the store is then left empty.
        """
        if self._hydrated:
            raise RuntimeError("session already hydrated")
        self._hydrated = True

        return self._build(from_snapshot(self.gateway.load()))

    def adopt(self, records: List[Record]) -> LoadReport:
        """
        Replace the live forest with an externally written snapshot.

        Records are decoded before the store is touched, so a malformed
        snapshot raises PersistenceError and changes nothing. No save is
        requested: the snapshot is already durable.
        """
        nodes = from_snapshot(records)
        self.store.clear()
        return self._build(nodes)

    def discard(self) -> None:
        if self._discarded:
            return
        self._discarded = True
        self.dispatcher.close()
        self.store.clear()
        logging.getLogger("faqflow.session").info("session discarded")

    def __enter__(self) -> "EditorSession":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.discard()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def layout(self) -> Dict[str, Position]:
        return layout(self.store, self.config.layout)

    def snapshot(self) -> List[Record]:
        return to_snapshot(self.store)

    def stats(self) -> Dict[str, Any]:
        last_error = self.dispatcher.last_error
        return {
            "nodes": self.store.node_count(),
            "edges": self.store.edge_count(),
            "roots": len(self.query.roots()),
            "orphans": len(self.query.orphans()),
            "last_save_error": str(last_error) if last_error else None,
        }

    # ------------------------------------------------------------------

    def _build(self, nodes: List[Node]) -> LoadReport:
        report = GraphBuilder(self.store, self.edges).load(nodes)
        self.metadata["loaded_cards"] = report.nodes
        self.metadata["load_repairs"] = list(report.repairs)
        return report

    def _request_save(self, store: GraphStore) -> None:
        self.dispatcher.submit(to_snapshot(store))
