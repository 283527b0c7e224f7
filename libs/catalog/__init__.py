"""Ordered product catalog: snapshot-based moves over a pluggable store."""

from .errors import (
    BoundaryViolationError,
    CatalogError,
    CatalogStoreError,
    ErrorKind,
    ItemNotFoundError,
    PartialReorderFailureError,
    Recovery,
    StaleSnapshotError,
    TransientFailureError,
)
from .ordering import (
    CatalogSnapshot,
    CatalogState,
    Direction,
    OperationResult,
    OperationStatus,
    OrderedCatalog,
    ReorderMode,
    compute_revision,
    plan_move,
)
from .store import CatalogEntry, CatalogStore, SqlCatalogStore

__all__ = [
    "BoundaryViolationError",
    "CatalogEntry",
    "CatalogError",
    "CatalogSnapshot",
    "CatalogState",
    "CatalogStore",
    "CatalogStoreError",
    "Direction",
    "ErrorKind",
    "ItemNotFoundError",
    "OperationResult",
    "OperationStatus",
    "OrderedCatalog",
    "PartialReorderFailureError",
    "Recovery",
    "ReorderMode",
    "SqlCatalogStore",
    "StaleSnapshotError",
    "TransientFailureError",
    "compute_revision",
    "plan_move",
]
