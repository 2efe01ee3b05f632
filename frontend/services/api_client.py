from typing import Any, Dict, List, Optional

import requests


class ApiError(Exception):
    """
    The backend rejected a request; carries its message.
    """


def _check(r: requests.Response) -> Any:
    if r.status_code >= 400:
        try:
            body = r.json()
            message = body.get("message") or body.get("detail") or r.text
        except ValueError:
            message = r.text
        raise ApiError(f"{r.status_code}: {message}")
    return r.json()


def fetch_graph(api_url: str) -> Dict[str, Any]:
    r = requests.get(f"{api_url}/graph/export", timeout=30)
    return _check(r)


def fetch_graph_stats(api_url: str) -> Dict[str, Any]:
    r = requests.get(f"{api_url}/graph/stats", timeout=20)
    return _check(r)


def fetch_persistence_status(api_url: str) -> Dict[str, Any]:
    r = requests.get(f"{api_url}/graph/persistence", timeout=20)
    return _check(r)


def create_node(api_url: str, payload: Dict[str, Any]) -> str:
    r = requests.post(f"{api_url}/graph/nodes", json=payload, timeout=20)
    return _check(r)["id"]


def update_node(api_url: str, node_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    r = requests.patch(f"{api_url}/graph/nodes/{node_id}", json=fields, timeout=20)
    return _check(r)


def delete_node(api_url: str, node_id: str) -> List[str]:
    r = requests.delete(f"{api_url}/graph/nodes/{node_id}", timeout=20)
    return _check(r)["removed"]


def set_parent(api_url: str, node_id: str, parent_id: Optional[str]) -> bool:
    r = requests.put(
        f"{api_url}/graph/nodes/{node_id}/parent",
        json={"parent_id": parent_id},
        timeout=20,
    )
    return _check(r)["changed"]


def remove_child(api_url: str, parent_id: str, child_id: str) -> bool:
    r = requests.delete(
        f"{api_url}/graph/nodes/{parent_id}/children/{child_id}",
        timeout=20,
    )
    return _check(r)["changed"]


def reorder(api_url: str, parent_id: Optional[str], child_ids: List[str]) -> None:
    r = requests.post(
        f"{api_url}/graph/reorder",
        json={"parent_id": parent_id, "child_ids": child_ids},
        timeout=20,
    )
    _check(r)


def connect(api_url: str, source: str, target: str, *, as_child: bool) -> Dict[str, Any]:
    r = requests.post(
        f"{api_url}/graph/edges",
        json={"source": source, "target": target, "as_child": as_child},
        timeout=20,
    )
    return _check(r)


def disconnect(api_url: str, edge_id: str) -> None:
    r = requests.delete(f"{api_url}/graph/edges/{edge_id}", timeout=20)
    _check(r)
