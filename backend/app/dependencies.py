from functools import lru_cache
import logging
import time

from faqflow.errors import PersistenceError
from faqflow.persistence.gateway import (
    FileSnapshotGateway,
    HttpSnapshotGateway,
    SnapshotGateway,
)
from faqflow.session import EditorSession

from backend.app.config import AppConfig


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


@lru_cache
def get_gateway() -> SnapshotGateway:
    persistence = get_config().faqflow.persistence
    if persistence.api_url:
        return HttpSnapshotGateway(persistence.api_url, timeout=persistence.timeout_s)
    return FileSnapshotGateway(persistence.snapshot_path)


@lru_cache
def get_session() -> EditorSession:
    logger = logging.getLogger("faqflow.startup")
    t0 = time.perf_counter()
    config = get_config()

    session = EditorSession(
        gateway=get_gateway(),
        config=config.faqflow,
    )
    session.metadata["source"] = "backend"

    try:
        report = session.hydrate()
        logger.info(
            "[startup] hydrated %s cards (%s repairs)",
            report.nodes,
            len(report.repairs),
        )
    except PersistenceError as exc:
        session.metadata["load_error"] = str(exc)
        logger.warning("[startup] snapshot load failed, starting empty: %s", exc)

    logger.info("[startup] get_session total %.3fs", time.perf_counter() - t0)
    return session
