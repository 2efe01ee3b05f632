from __future__ import annotations

from typing import List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from contextlib import asynccontextmanager

from backend.app.main import create_app
from backend.app.config import AppConfig
from backend.app.dependencies import get_gateway, get_session

from faqflow.config.settings import FaqflowConfig, MutationConfig
from faqflow.graph.edge_sync import EdgeSynchronizer
from faqflow.graph.graph_mutator import MutationEngine
from faqflow.graph.graph_query import TreeQueryEngine
from faqflow.graph.graph_store import GraphStore
from faqflow.persistence.gateway import SnapshotGateway
from faqflow.session import EditorSession

from backend.tests.fakes import InMemoryGateway


@pytest.fixture()
def store() -> GraphStore:
    return GraphStore()


@pytest.fixture()
def commits() -> List[int]:
    return []


@pytest.fixture()
def engine(store: GraphStore, commits: List[int]) -> MutationEngine:
    return MutationEngine(
        store=store,
        edges=EdgeSynchronizer(store),
        on_commit=lambda s: commits.append(s.node_count()),
    )


@pytest.fixture()
def make_engine(store: GraphStore):
    def _make(policy: str = "orphan") -> MutationEngine:
        return MutationEngine(
            store=store,
            config=MutationConfig(delete_policy=policy),
        )

    return _make


@pytest.fixture()
def query(store: GraphStore) -> TreeQueryEngine:
    return TreeQueryEngine(store)


@pytest.fixture()
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture()
def session(gateway: InMemoryGateway):
    editor = EditorSession(gateway=gateway, config=FaqflowConfig())
    yield editor
    editor.discard()


@pytest.fixture()
def make_client():
    clients = []

    def _make(*, session: EditorSession, gateway: SnapshotGateway) -> TestClient:
        @asynccontextmanager
        async def _no_lifespan(_: FastAPI):
            yield

        app = create_app(AppConfig())
        app.router.lifespan_context = _no_lifespan
        app.dependency_overrides[get_session] = lambda: session
        app.dependency_overrides[get_gateway] = lambda: gateway

        client = TestClient(app)
        client.__enter__()
        clients.append((app, client))
        return client

    yield _make

    for app, client in clients:
        client.__exit__(None, None, None)
        app.dependency_overrides.clear()


@pytest.fixture()
def client(make_client, session: EditorSession, gateway: InMemoryGateway):
    return make_client(session=session, gateway=gateway)
