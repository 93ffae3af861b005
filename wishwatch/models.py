# wishwatch/models.py
import datetime
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class PriceKind(str, Enum):
    """Which of the two price fields an update targets."""

    CURRENT = "current"
    TARGET = "target"


@dataclass(frozen=True)
class WishItem:
    """
    One tracked product URL.
    Prices are plain floats; None means the user has not supplied one yet.
    The model does no validation, callers check the URL before building one.
    """
    url: str
    added_at: datetime.datetime
    current_price: Optional[float] = None
    target_price: Optional[float] = None

    def with_updated_price(self, kind: PriceKind, value: Optional[float]) -> "WishItem":
        """Return a copy with only the price field named by *kind* replaced."""
        kind = PriceKind(kind)
        if kind is PriceKind.CURRENT:
            return replace(self, current_price=value)
        return replace(self, target_price=value)
