"""Buy/wait recommendation derived from an item's two prices."""

from enum import Enum

from .models import WishItem


class Status(str, Enum):
    UNKNOWN = "unknown"
    BUY_NOW = "buy_now"
    WAITING = "waiting"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Status.UNKNOWN: "UNKNOWN",
    Status.BUY_NOW: "BUY NOW",
    Status.WAITING: "WAITING",
}


def evaluate(item: WishItem) -> Status:
    """
    UNKNOWN if either price is missing, otherwise BUY_NOW when the current
    price is at or below the target (inclusive) and WAITING above it.
    """
    current = item.current_price
    target = item.target_price
    if current is None or target is None:
        return Status.UNKNOWN
    return Status.BUY_NOW if current <= target else Status.WAITING
