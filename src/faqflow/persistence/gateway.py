from __future__ import annotations

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List

import requests

from faqflow.errors import PersistenceError
from faqflow.persistence.snapshot import Record, unwrap, wrap


class SnapshotGateway(ABC):
    """
    Durable home of the card snapshot.

    Always receives the full snapshot; there are no partial writes.
    """

    @abstractmethod
    def save(self, snapshot: List[Record]) -> Dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def load(self) -> List[Record]:
        raise NotImplementedError


class FileSnapshotGateway(SnapshotGateway):
    """
    Stores `{"faqs": [...]}` as indented JSON on local disk.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def save(self, snapshot: List[Record]) -> Dict[str, Any]:
        logger = logging.getLogger("faqflow.persistence")
        directory = self.path.parent

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError("Cannot create snapshot directory", detail=str(exc)) from exc

        if not os.access(directory, os.W_OK):
            raise PersistenceError(
                "No write permission on snapshot directory",
                detail=str(directory),
            )

        try:
            self.path.write_text(json.dumps(wrap(snapshot), indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError) as exc:
            raise PersistenceError("Error writing file", detail=str(exc)) from exc

        logger.info("saved %s cards -> %s", len(snapshot), self.path)
        return {"success": True, "message": "FAQs updated successfully"}

    def load(self) -> List[Record]:
        if not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise PersistenceError("Error reading file", detail=str(exc)) from exc
        return unwrap(payload)


class HttpSnapshotGateway(SnapshotGateway):
    """
    Talks to a remote `/faqs` endpoint speaking the same envelope.
    """

    def __init__(self, api_url: str, *, timeout: float = 20.0) -> None:
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def save(self, snapshot: List[Record]) -> Dict[str, Any]:
        url = f"{self.api_url}/faqs"
        try:
            r = requests.post(url, json=wrap(snapshot), timeout=self.timeout)
            r.raise_for_status()
        except requests.exceptions.HTTPError as exc:
            raise PersistenceError(
                "Snapshot save rejected",
                detail=_response_detail(exc.response),
            ) from exc
        except requests.exceptions.RequestException as exc:
            raise PersistenceError("Snapshot save failed", detail=str(exc)) from exc
        return r.json()

    def load(self) -> List[Record]:
        url = f"{self.api_url}/faqs"
        try:
            r = requests.get(url, timeout=self.timeout)
            r.raise_for_status()
        except requests.exceptions.RequestException as exc:
            raise PersistenceError("Snapshot load failed", detail=str(exc)) from exc
        return unwrap(r.json())


def _response_detail(response: Any) -> str:
    if response is None:
        return "no response"
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("error") or body.get("message") or body)
    return str(body)
