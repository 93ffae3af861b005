# wishwatch/controller.py
import asyncio
import datetime
from typing import Callable, List, NamedTuple, Optional, Tuple
from urllib.parse import urlparse

from . import codec
from .errors import IndexOutOfRange, InvalidUrl, MalformedRecord, StoreUnavailable
from .ingest import IngestionPipeline
from .logger import get_logger
from .models import PriceKind, WishItem
from .prices import parse_price
from .status import Status, evaluate
from .storage import WishlistStore, now_utc

logger = get_logger(__name__)


class AddResult(NamedTuple):
    item: Optional[WishItem]
    error: Optional[InvalidUrl]

    @property
    def ok(self) -> bool:
        return self.error is None


def is_valid_url(text: str) -> bool:
    """Absolute URL check: both a scheme and an authority must be present."""
    try:
        parsed = urlparse(text)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


class WishlistController:
    """
    Owns the in-memory wishlist and writes it through to the store after
    every mutation. Mutations (and load) are serialized with one lock since
    each one rewrites the full list.

    Once the store reports StoreUnavailable the controller keeps working in
    memory only for the rest of the session and stops writing.
    """

    def __init__(
        self,
        store: WishlistStore,
        inbox: Optional[IngestionPipeline] = None,
        clock: Callable[[], datetime.datetime] = now_utc,
    ):
        self.store = store
        self.inbox = inbox
        self.clock = clock
        self._items: List[WishItem] = []
        self._lock = asyncio.Lock()
        self.memory_only = False
        self.skipped_records = 0
        self.warnings: List[str] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def items(self) -> Tuple[WishItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def status(self, index: int) -> Status:
        return evaluate(self._items[self._check_index(index)])

    def statuses(self) -> List[Status]:
        return [evaluate(it) for it in self._items]

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_index(self, index: int) -> int:
        if isinstance(index, bool) or not isinstance(index, int):
            raise IndexOutOfRange(index, len(self._items))
        if index < 0 or index >= len(self._items):
            raise IndexOutOfRange(index, len(self._items))
        return index

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    async def _persist(self) -> None:
        if self.memory_only:
            logger.debug("Memory-only mode; not writing %d items.", len(self._items))
            return
        try:
            await self.store.save([codec.encode(it) for it in self._items])
        except StoreUnavailable as e:
            self.memory_only = True
            self._warn(f"{e}; changes are kept in memory for this session only.")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def load(self) -> List[WishItem]:
        async with self._lock:
            try:
                records = await self.store.load()
            except StoreUnavailable as e:
                self.memory_only = True
                self._items = []
                self._warn(f"{e}; starting with an empty wishlist in memory only.")
                return []

            items: List[WishItem] = []
            skipped = 0
            for idx, record in enumerate(records):
                try:
                    items.append(codec.decode(record))
                except MalformedRecord as e:
                    skipped += 1
                    logger.warning("Skipping wishlist record #%d: %s", idx, e)
            self._items = items
            self.skipped_records = skipped
            if skipped:
                self._warn(f"Skipped {skipped} unreadable wishlist record(s).")
            logger.info("Loaded %d wishlist items.", len(items))
            return list(items)

    async def add_item(self, raw_url: str, raw_target_text: Optional[str] = "") -> AddResult:
        url = (raw_url or "").strip()
        if not url or not is_valid_url(url):
            err = InvalidUrl(url)
            logger.info("Rejected wishlist URL %r", url)
            return AddResult(None, err)

        target_price = parse_price(raw_target_text)
        async with self._lock:
            item = WishItem(
                url=url,
                added_at=self.clock(),
                current_price=None,
                target_price=target_price,
            )
            self._items.append(item)
            await self._persist()

        if self.inbox is not None:
            self.inbox.clear_staged()
        logger.info("Added %s (target=%s)", item.url, item.target_price)
        return AddResult(item, None)

    async def update_price(self, index: int, raw_price_text: Optional[str]) -> WishItem:
        async with self._lock:
            index = self._check_index(index)
            updated = self._items[index].with_updated_price(
                PriceKind.CURRENT, parse_price(raw_price_text)
            )
            self._items[index] = updated
            await self._persist()
        logger.info("Updated current price of #%d to %s", index, updated.current_price)
        return updated

    async def delete_item(self, index: int) -> WishItem:
        async with self._lock:
            index = self._check_index(index)
            removed = self._items.pop(index)
            await self._persist()
        logger.info("Deleted #%d (%s)", index, removed.url)
        return removed
