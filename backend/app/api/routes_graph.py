from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from faqflow.graph.graph_schema import Edge, Node, level_label
from faqflow.layout.tree_layout import Position
from faqflow.session import EditorSession

from backend.app.api.schemas import (
    AddChildRequest,
    ChangedResponse,
    ConnectRequest,
    DeletedResponse,
    GraphEdge,
    GraphExportResponse,
    GraphNode,
    GraphStatsResponse,
    NodeCreateRequest,
    NodeCreatedResponse,
    PersistenceStatusResponse,
    ReorderRequest,
    SetParentRequest,
)
from backend.app.dependencies import get_session

# Handlers are coroutines with no await inside, so the event loop runs each
# one to completion and edits to the session never interleave.
router = APIRouter()


def _node_out(node: Node, position: Position | None) -> GraphNode:
    payload = node.payload
    return GraphNode(
        id=node.id,
        title=payload.title,
        level=node.level,
        label=level_label(node.level),
        color=node.color,
        order=node.order,
        status=node.status,
        parent_id=node.parent_id,
        children=list(node.children),
        position=position.to_dict() if position else {"x": 0.0, "y": 0.0},
        description=payload.description,
        url=payload.url,
        content=payload.content,
        subtitle=payload.subtitle,
        displayConfig=(
            payload.display_config.to_dict() if payload.display_config else None
        ),
        extra=payload.extra,
    )


def _edge_out(edge: Edge) -> GraphEdge:
    return GraphEdge(
        id=edge.id,
        source=edge.source,
        target=edge.target,
        kind=edge.kind,
        color=edge.color,
        source_slot=edge.source_slot,
        target_slot=edge.target_slot,
    )


# ---------------- Views ----------------


@router.get("/stats", response_model=GraphStatsResponse)
async def graph_stats(session: EditorSession = Depends(get_session)):
    return GraphStatsResponse(**session.stats(), metadata=session.metadata)


@router.get("/export", response_model=GraphExportResponse)
async def graph_export(session: EditorSession = Depends(get_session)):
    positions = session.layout()
    return GraphExportResponse(
        nodes=[_node_out(n, positions.get(n.id)) for n in session.store.list()],
        edges=[_edge_out(e) for e in session.store.edges()],
    )


@router.get("/layout")
async def graph_layout(session: EditorSession = Depends(get_session)):
    return {node_id: pos.to_dict() for node_id, pos in session.layout().items()}


@router.get("/persistence", response_model=PersistenceStatusResponse)
async def persistence_status(session: EditorSession = Depends(get_session)):
    error = session.dispatcher.last_error
    saved_at = session.dispatcher.last_saved_at
    return PersistenceStatusResponse(
        ok=error is None,
        last_error=str(error) if error else None,
        last_saved_at=saved_at.isoformat() if saved_at else None,
    )


# ---------------- Nodes ----------------


@router.post("/nodes", response_model=NodeCreatedResponse, status_code=201)
async def create_node(
    request: NodeCreateRequest,
    session: EditorSession = Depends(get_session),
):
    node_id = session.mutator.create_node(
        request.level,
        request.title,
        request.order,
        parent_id=request.parent_id,
        description=request.description,
        url=request.url,
        content=request.content,
        subtitle=request.subtitle,
        display_config=(
            request.displayConfig.model_dump() if request.displayConfig else None
        ),
        status=request.status,
        extra=request.extra,
    )
    return NodeCreatedResponse(id=node_id)


@router.get("/nodes/{node_id}", response_model=GraphNode)
async def get_node(node_id: str, session: EditorSession = Depends(get_session)):
    node = session.store.get(node_id)
    return _node_out(node, session.layout().get(node_id))


@router.patch("/nodes/{node_id}", response_model=GraphNode)
async def update_node(
    node_id: str,
    fields: Dict[str, Any] = Body(...),
    session: EditorSession = Depends(get_session),
):
    node = session.mutator.update_node(node_id, fields)
    return _node_out(node, session.layout().get(node_id))


@router.delete("/nodes/{node_id}", response_model=DeletedResponse)
async def delete_node(node_id: str, session: EditorSession = Depends(get_session)):
    return DeletedResponse(removed=session.mutator.delete_node(node_id))


# ---------------- Relations ----------------


@router.put("/nodes/{node_id}/parent", response_model=ChangedResponse)
async def set_parent(
    node_id: str,
    request: SetParentRequest,
    session: EditorSession = Depends(get_session),
):
    return ChangedResponse(changed=session.mutator.set_parent(node_id, request.parent_id))


@router.post("/nodes/{node_id}/children", response_model=ChangedResponse)
async def add_child(
    node_id: str,
    request: AddChildRequest,
    session: EditorSession = Depends(get_session),
):
    return ChangedResponse(changed=session.mutator.add_child(node_id, request.child_id))


@router.delete("/nodes/{node_id}/children/{child_id}", response_model=ChangedResponse)
async def remove_child(
    node_id: str,
    child_id: str,
    session: EditorSession = Depends(get_session),
):
    return ChangedResponse(changed=session.mutator.remove_child(node_id, child_id))


@router.post("/reorder", response_model=ChangedResponse)
async def reorder(request: ReorderRequest, session: EditorSession = Depends(get_session)):
    session.mutator.reorder_children(request.parent_id, request.child_ids)
    return ChangedResponse(changed=True)


# ---------------- Edges ----------------


@router.post("/edges", response_model=GraphEdge, status_code=201)
async def connect(request: ConnectRequest, session: EditorSession = Depends(get_session)):
    edge = session.mutator.connect(
        request.source,
        request.target,
        as_child=request.as_child,
        source_slot=request.source_slot,
        target_slot=request.target_slot,
    )
    return _edge_out(edge)


@router.delete("/edges/{edge_id}", response_model=ChangedResponse)
async def disconnect(edge_id: str, session: EditorSession = Depends(get_session)):
    session.mutator.disconnect(edge_id)
    return ChangedResponse(changed=True)
