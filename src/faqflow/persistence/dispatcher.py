from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from faqflow.errors import PersistenceError
from faqflow.persistence.gateway import SnapshotGateway
from faqflow.persistence.snapshot import Record


@dataclass(frozen=True)
class SaveResult:
    generation: int
    skipped: bool
    response: Optional[Dict[str, Any]] = None
    saved_at: Optional[datetime] = None


class SaveDispatcher:
    """
    Sends snapshots to a gateway off the editing path.

    One worker thread, so saves reach the gateway in submission order.
    A save still queued when a newer snapshot arrives is skipped: only
    the latest snapshot matters. Failures never touch the in-memory
    graph; they are logged, remembered in `last_error`, and handed to
    `on_error`.
    """

    def __init__(
        self,
        gateway: SnapshotGateway,
        *,
        on_error: Optional[Callable[[PersistenceError], Any]] = None,
    ) -> None:
        self.gateway = gateway
        self.on_error = on_error
        self.last_error: Optional[PersistenceError] = None
        self.last_saved_at: Optional[datetime] = None

        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="faqflow-save")
        self._lock = threading.Lock()
        self._generation = 0
        self._latest: Optional[Future] = None

    def submit(self, snapshot: List[Record]) -> Future:
        with self._lock:
            self._generation += 1
            generation = self._generation
            future = self._executor.submit(self._save, generation, snapshot)
            self._latest = future
        future.add_done_callback(self._report)
        return future

    def flush(self, timeout: Optional[float] = None) -> Optional[SaveResult]:
        """
        Wait for the newest save; re-raises its PersistenceError.
        """
        with self._lock:
            latest = self._latest
        if latest is None:
            return None
        return latest.result(timeout=timeout)

    def drain(self, timeout: Optional[float] = None) -> None:
        """
        Wait for queued saves to finish without raising; failures are
        already reported through `last_error`.
        """
        with self._lock:
            latest = self._latest
        if latest is not None:
            wait([latest], timeout=timeout)

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    # ------------------------------------------------------------------

    def _save(self, generation: int, snapshot: List[Record]) -> SaveResult:
        with self._lock:
            superseded = generation < self._generation
        if superseded:
            return SaveResult(generation=generation, skipped=True)

        try:
            response = self.gateway.save(snapshot)
        except PersistenceError:
            raise
        except Exception as exc:
            raise PersistenceError("Snapshot save failed", detail=str(exc)) from exc

        return SaveResult(
            generation=generation,
            skipped=False,
            response=response,
            saved_at=datetime.now(timezone.utc),
        )

    def _report(self, future: Future) -> None:
        logger = logging.getLogger("faqflow.persistence")
        error = future.exception()

        if error is None:
            result = future.result()
            if not result.skipped:
                self.last_error = None
                self.last_saved_at = result.saved_at
            return

        if not isinstance(error, PersistenceError):
            error = PersistenceError("Snapshot save failed", detail=str(error))
        self.last_error = error
        logger.warning("snapshot save failed; in-memory graph kept: %s", error)
        if self.on_error is not None:
            self.on_error(error)
