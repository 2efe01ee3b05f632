from typing import List, Dict, Any, Optional
from pydantic import BaseModel, Field


class DisplayConfigModel(BaseModel):
    isEnabledOnNonBusinessDay: bool = False
    enabledOnChannels: List[str] = Field(default_factory=list)


class NodeCreateRequest(BaseModel):
    level: int
    title: str
    order: float = 0
    parent_id: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    content: Optional[str] = None
    subtitle: Optional[Dict[str, Any]] = None
    displayConfig: Optional[DisplayConfigModel] = None
    status: Optional[str] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


class NodeCreatedResponse(BaseModel):
    id: str


class SetParentRequest(BaseModel):
    parent_id: Optional[str] = None


class AddChildRequest(BaseModel):
    child_id: str


class ConnectRequest(BaseModel):
    source: str
    target: str
    as_child: bool = False
    source_slot: Optional[int] = None
    target_slot: Optional[int] = None


class ReorderRequest(BaseModel):
    parent_id: Optional[str] = None
    child_ids: List[str]


class ChangedResponse(BaseModel):
    changed: bool


class DeletedResponse(BaseModel):
    removed: List[str]


class GraphNode(BaseModel):
    id: str
    title: str
    level: Any
    label: str
    color: str
    order: float
    status: Any
    parent_id: Optional[str]
    children: List[str]
    position: Dict[str, float]
    description: Optional[str] = None
    url: Optional[str] = None
    content: Optional[str] = None
    subtitle: Optional[Dict[str, Any]] = None
    displayConfig: Optional[DisplayConfigModel] = None
    extra: Dict[str, Any] = Field(default_factory=dict)


class GraphEdge(BaseModel):
    id: str
    source: str
    target: str
    kind: str
    color: str
    source_slot: Optional[int] = None
    target_slot: Optional[int] = None


class GraphExportResponse(BaseModel):
    nodes: List[GraphNode]
    edges: List[GraphEdge]


class GraphStatsResponse(BaseModel):
    nodes: int
    edges: int
    roots: int
    orphans: int
    last_save_error: Optional[str] = None
    metadata: Dict[str, Any]


class PersistenceStatusResponse(BaseModel):
    ok: bool
    last_error: Optional[str] = None
    last_saved_at: Optional[str] = None


class FaqsPayload(BaseModel):
    faqs: Optional[List[Dict[str, Any]]] = None


class SaveResponse(BaseModel):
    success: bool
    message: Optional[str] = None
