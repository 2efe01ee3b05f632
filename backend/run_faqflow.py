import json
import logging
import sys
import time
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from faqflow.persistence.gateway import FileSnapshotGateway  # noqa: E402
from faqflow.session import EditorSession  # noqa: E402

from backend.app.config import AppConfig  # noqa: E402


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger = logging.getLogger("faqflow.run")
    start = time.perf_counter()
    config = AppConfig()

    path = sys.argv[1] if len(sys.argv) > 1 else config.snapshot_path
    with EditorSession(
        gateway=FileSnapshotGateway(path),
        config=config.faqflow,
    ) as session:
        report = session.hydrate()
        logger.info(
            "hydrated %s cards, %s edges from %s in %.3fs",
            report.nodes,
            report.edges,
            path,
            time.perf_counter() - start,
        )

        problems = session.query.check_invariants()
        for problem in problems:
            logger.warning("invariant: %s", problem)
        if not problems:
            logger.info("all structural invariants hold")

        positions = {
            node_id: pos.to_dict() for node_id, pos in session.layout().items()
        }
        logger.info(json.dumps(positions, indent=2))
        logger.info(json.dumps(session.stats(), indent=2))


if __name__ == "__main__":
    main()
