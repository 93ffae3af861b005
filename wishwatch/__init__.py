"""
WishWatch: track product URLs against a target price.

  models / codec   the item value type and its persisted record
  storage          key-value persistence (SQLite or in-memory)
  status, prices   buy/wait derivation and lenient price text handling
  ingest           URLs shared into the app from the platform
  controller       add / update / delete with write-through persistence
  session          one running session wiring the pieces together
"""
from .controller import AddResult, WishlistController
from .errors import (
    IndexOutOfRange,
    InvalidUrl,
    MalformedRecord,
    StoreUnavailable,
    WishWatchError,
)
from .ingest import IngestionPipeline, QueueShareSource, SharedMedia, ShareSource
from .models import PriceKind, WishItem
from .session import WishlistSession
from .status import Status, evaluate
from .storage import MemoryBackend, SqliteBackend, WishlistStore

__version__ = "0.1.0"

__all__ = [
    "AddResult",
    "WishlistController",
    "IndexOutOfRange",
    "InvalidUrl",
    "MalformedRecord",
    "StoreUnavailable",
    "WishWatchError",
    "IngestionPipeline",
    "QueueShareSource",
    "SharedMedia",
    "ShareSource",
    "PriceKind",
    "WishItem",
    "WishlistSession",
    "Status",
    "evaluate",
    "MemoryBackend",
    "SqliteBackend",
    "WishlistStore",
]
