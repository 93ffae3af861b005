"""
Intake of URLs shared into the app from the platform share mechanism.

Two sources feed the pipeline: a live stream of notifications while the
app is running, and a one-shot cold-start payload when the app was
launched through a share action. Only the first shared item of each
notification is considered, and only candidates starting with "http" are
staged. Staging is last-write-wins: a newer candidate replaces the old one.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SharedMedia:
    """One shared item; for text and URL shares the payload is in path."""
    path: str


class ShareSource(ABC):
    """The platform share mechanism as seen by the pipeline."""

    @abstractmethod
    async def next_media(self) -> List[SharedMedia]:
        """Wait for the next live notification. May raise on stream errors."""

    @abstractmethod
    async def initial_media(self) -> List[SharedMedia]:
        """Return the cold-start payload, empty if the app was not shared into."""

    @abstractmethod
    async def reset(self) -> None:
        """Acknowledge the cold-start payload so it is never delivered again."""


class QueueShareSource(ShareSource):
    """In-process share source backed by an asyncio queue."""

    def __init__(self, initial: Optional[Sequence[SharedMedia]] = None):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._initial: List[SharedMedia] = list(initial or [])
        self.reset_count = 0

    def share(self, *files: SharedMedia) -> None:
        self._queue.put_nowait(list(files))

    def share_text(self, *texts: str) -> None:
        self.share(*(SharedMedia(t) for t in texts))

    def push_error(self, exc: Exception) -> None:
        self._queue.put_nowait(exc)

    def set_initial(self, files: Sequence[SharedMedia]) -> None:
        self._initial = list(files)

    async def next_media(self) -> List[SharedMedia]:
        event = await self._queue.get()
        if isinstance(event, Exception):
            raise event
        return event

    async def initial_media(self) -> List[SharedMedia]:
        return list(self._initial)

    async def reset(self) -> None:
        self._initial = []
        self.reset_count += 1


def extract_candidate(files: Sequence[SharedMedia]) -> Optional[str]:
    """Trimmed text of the first shared item if it looks like a URL."""
    if not files:
        return None
    path = files[0].path
    if not isinstance(path, str):
        return None
    candidate = path.strip()
    if candidate.startswith("http"):
        return candidate
    return None


class IngestionPipeline:
    def __init__(self, source: ShareSource):
        self.source = source
        self._staged: Optional[str] = None
        self._task: Optional[asyncio.Task] = None
        self._staged_listeners: List[Callable[[str], None]] = []
        self._error_listeners: List[Callable[[Exception], None]] = []

    # ------------------------------------------------------------------
    # Staged URL
    # ------------------------------------------------------------------

    @property
    def staged_url(self) -> Optional[str]:
        return self._staged

    def take_staged(self) -> Optional[str]:
        url, self._staged = self._staged, None
        return url

    def clear_staged(self) -> None:
        self._staged = None

    def add_staged_listener(self, callback: Callable[[str], None]) -> None:
        self._staged_listeners.append(callback)

    def add_error_listener(self, callback: Callable[[Exception], None]) -> None:
        self._error_listeners.append(callback)

    def offer(self, files: Sequence[SharedMedia]) -> Optional[str]:
        """Stage the candidate carried by one notification, if any."""
        candidate = extract_candidate(files)
        if candidate is None:
            if files:
                logger.debug("Ignoring shared item that is not a URL: %r", files[0].path)
            return None
        if len(files) > 1:
            logger.debug("Share carried %d items; using the first.", len(files))
        self._staged = candidate
        logger.info("Staged shared URL: %s", candidate)
        for cb in list(self._staged_listeners):
            try:
                cb(candidate)
            except Exception as e:
                logger.exception("Staged-URL listener failed: %s", e)
        return candidate

    def _report_error(self, exc: Exception) -> None:
        logger.warning("Share stream error: %s", exc)
        for cb in list(self._error_listeners):
            try:
                cb(exc)
            except Exception as e:
                logger.exception("Share error listener failed: %s", e)

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    async def check_initial(self) -> Optional[str]:
        """Consume and acknowledge the cold-start payload."""
        try:
            files = await self.source.initial_media()
        except Exception as e:
            self._report_error(e)
            return None
        if not files:
            return None
        candidate = self.offer(files)
        try:
            await self.source.reset()
        except Exception as e:
            self._report_error(e)
        return candidate

    async def _listen(self) -> None:
        while True:
            try:
                files = await self.source.next_media()
                self.offer(files)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                self._report_error(e)
                # let other tasks run if the source fails without suspending
                await asyncio.sleep(0)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._listen())
        await self.check_initial()

    async def close(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.debug("Share stream subscription released.")
