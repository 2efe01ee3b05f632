"""
Snapshot persistence for faqflow.

The core never writes incrementally: after each committed edit the
whole forest is serialized and handed to a gateway, off the editing
path, last write wins.
"""

from faqflow.persistence.snapshot import (
    from_snapshot,
    to_snapshot,
    unwrap,
    wrap,
)
from faqflow.persistence.gateway import (
    SnapshotGateway,
    FileSnapshotGateway,
    HttpSnapshotGateway,
)
from faqflow.persistence.dispatcher import SaveDispatcher, SaveResult

__all__ = [
    "from_snapshot",
    "to_snapshot",
    "unwrap",
    "wrap",
    "SnapshotGateway",
    "FileSnapshotGateway",
    "HttpSnapshotGateway",
    "SaveDispatcher",
    "SaveResult",
]
