"""Mapping between WishItem and its flat, JSON-friendly record."""

import datetime
import math
from typing import Any, Dict, Optional

from .errors import MalformedRecord
from .models import WishItem


def encode(item: WishItem) -> Dict[str, Any]:
    return {
        "url": item.url,
        "addedAt": item.added_at.isoformat(),
        "currentPrice": item.current_price,
        "targetPrice": item.target_price,
    }


def _decode_price(record: Dict[str, Any], key: str) -> Optional[float]:
    value = record.get(key)
    if value is None:
        return None
    # bool is an int subclass but never a price
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedRecord(f"{key} must be a number or null, got {type(value).__name__}", record)
    try:
        price = float(value)
    except OverflowError:
        raise MalformedRecord(f"{key} is too large to be a price", record)
    if not math.isfinite(price):
        raise MalformedRecord(f"{key} must be finite, got {price!r}", record)
    return price


def decode(record: Any) -> WishItem:
    """
    Inverse of encode(). Raises MalformedRecord when url is missing or not a
    string, when addedAt is not an ISO-8601 timestamp, or when a price is
    present with a non-numeric type or a value that is not a finite float.
    Absent prices decode as None.
    """
    if not isinstance(record, dict):
        raise MalformedRecord(f"expected an object, got {type(record).__name__}", record)

    url = record.get("url")
    if not isinstance(url, str):
        raise MalformedRecord("url is missing or not a string", record)

    raw_added = record.get("addedAt")
    if not isinstance(raw_added, str):
        raise MalformedRecord("addedAt is missing or not a string", record)
    try:
        added_at = datetime.datetime.fromisoformat(raw_added)
    except ValueError:
        raise MalformedRecord(f"addedAt is not an ISO-8601 timestamp: {raw_added!r}", record)

    return WishItem(
        url=url,
        added_at=added_at,
        current_price=_decode_price(record, "currentPrice"),
        target_price=_decode_price(record, "targetPrice"),
    )
