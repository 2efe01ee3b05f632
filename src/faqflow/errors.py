from __future__ import annotations

from typing import Optional


class FaqflowError(Exception):
    """
    Base class for every recoverable error raised by faqflow.
    """


class ValidationError(FaqflowError):
    """
    A mutation was rejected because its input is malformed.

    Raised before anything is written; the store is unchanged.
    """


class NotFoundError(FaqflowError):
    """
    A mutation or lookup referenced an unknown node, edge or relation.
    """

    def __init__(self, message: str, *, ref: Optional[str] = None) -> None:
        super().__init__(message)
        self.ref = ref


class CycleError(FaqflowError):
    """
    A reparent would make a node its own ancestor.
    """

    def __init__(self, child_id: str, parent_id: str) -> None:
        super().__init__(
            f"cannot attach {child_id!r} under {parent_id!r}: "
            f"{parent_id!r} is {child_id!r} or one of its descendants"
        )
        self.child_id = child_id
        self.parent_id = parent_id


class PersistenceError(FaqflowError):
    """
    Saving or loading a snapshot failed.

    Never reverses a committed mutation; surfaced to the operator
    as a non-fatal warning.
    """

    def __init__(self, message: str, *, detail: Optional[str] = None) -> None:
        super().__init__(message if detail is None else f"{message}: {detail}")
        self.message = message
        self.detail = detail
