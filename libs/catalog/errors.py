"""Error taxonomy for catalog ordering operations."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    BOUNDARY_VIOLATION = "BOUNDARY_VIOLATION"
    PARTIAL_REORDER_FAILURE = "PARTIAL_REORDER_FAILURE"
    TRANSIENT_FAILURE = "TRANSIENT_FAILURE"
    STALE_SNAPSHOT = "STALE_SNAPSHOT"


class Recovery(str, Enum):
    NONE = "none"
    RETRY = "retry"
    REFETCH = "refetch"


class CatalogStoreError(Exception):
    """Raised by a catalog store when the backing storage fails."""


class CatalogError(Exception):
    """Base exception for catalog operations."""

    kind: ErrorKind
    recovery: Recovery = Recovery.NONE

    def __init__(self, message: str, item_id: Any = None) -> None:
        super().__init__(message)
        self.item_id = item_id


class ItemNotFoundError(CatalogError):
    """Raised when an id is absent from the snapshot or the store."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, item_id: Any) -> None:
        super().__init__(f"Product {item_id} not found", item_id)


class BoundaryViolationError(CatalogError):
    """Raised when a move would push an item past the first or last position."""

    kind = ErrorKind.BOUNDARY_VIOLATION

    def __init__(self, item_id: Any, direction: str) -> None:
        super().__init__(f"Product {item_id} cannot move {direction}", item_id)
        self.direction = direction


class TransientFailureError(CatalogError):
    """Nothing was written; the catalog is unchanged and the action can be retried."""

    kind = ErrorKind.TRANSIENT_FAILURE
    recovery = Recovery.RETRY


class PartialReorderFailureError(CatalogError):
    """One half of a two-step swap was written; the catalog must be re-fetched."""

    kind = ErrorKind.PARTIAL_REORDER_FAILURE
    recovery = Recovery.REFETCH

    def __init__(self, message: str, item_id: Any = None, neighbor_id: Any = None) -> None:
        super().__init__(message, item_id)
        self.neighbor_id = neighbor_id


class StaleSnapshotError(CatalogError):
    """The snapshot used for position arithmetic no longer matches the store."""

    kind = ErrorKind.STALE_SNAPSHOT
    recovery = Recovery.REFETCH
