"""One running app session: storage, controller and share intake wired together."""

from typing import List, Optional

from .controller import AddResult, WishlistController
from .ingest import IngestionPipeline, ShareSource
from .logger import get_logger
from .models import WishItem
from .report import build_plaintext_summary
from .storage import WishlistStore

logger = get_logger(__name__)


class WishlistSession:
    """
    start() hydrates the wishlist once and then begins listening for shared
    URLs; close() releases the share subscription. Neither raises on storage
    or share failures, those end up in controller.warnings and the log.
    """

    def __init__(
        self,
        store: Optional[WishlistStore] = None,
        share_source: Optional[ShareSource] = None,
    ):
        self.store = store if store is not None else WishlistStore()
        self.pipeline = IngestionPipeline(share_source) if share_source is not None else None
        self.controller = WishlistController(self.store, inbox=self.pipeline)

    async def start(self) -> None:
        items = await self.controller.load()
        logger.info(
            "Session started with %d items%s.",
            len(items), " (memory only)" if self.controller.memory_only else "",
        )
        if self.pipeline is not None:
            await self.pipeline.start()

    async def close(self) -> None:
        if self.pipeline is not None:
            await self.pipeline.close()
        logger.info("Session closed.")

    async def __aenter__(self) -> "WishlistSession":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @property
    def staged_url(self) -> Optional[str]:
        return self.pipeline.staged_url if self.pipeline is not None else None

    @property
    def items(self):
        return self.controller.items

    @property
    def warnings(self) -> List[str]:
        return self.controller.warnings

    async def add_item(self, raw_url: str, raw_target_text: Optional[str] = "") -> AddResult:
        return await self.controller.add_item(raw_url, raw_target_text)

    async def update_price(self, index: int, raw_price_text: Optional[str]) -> WishItem:
        return await self.controller.update_price(index, raw_price_text)

    async def delete_item(self, index: int) -> WishItem:
        return await self.controller.delete_item(index)

    def summary(self) -> str:
        return build_plaintext_summary(self.controller.items)
