# wishwatch/prices.py
import math
import os
from typing import Optional

CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "$")

_STRIP_CHARS = {"$", ",", CURRENCY_SYMBOL}


def parse_price(text: Optional[str]) -> Optional[float]:
    """
    Lenient price parsing for user-typed text.
    "$1,234.50" -> 1234.5, "" -> None, "abc" -> None.
    Never raises: anything that is not a finite, non-negative number is None.
    """
    if text is None:
        return None
    raw = text.strip()
    if not raw:
        return None
    for ch in _STRIP_CHARS:
        if ch:
            raw = raw.replace(ch, "")
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def format_money(value: Optional[float]) -> str:
    if value is None:
        return "—"
    return f"{CURRENCY_SYMBOL}{value:.2f}"


def price_input_text(value: Optional[float]) -> str:
    """Prefill text for a price edit prompt."""
    return "" if value is None else f"{value:.2f}"
