from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader

from .models import WishItem
from .prices import format_money
from .status import Status, evaluate

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    trim_blocks=True,
    lstrip_blocks=True,
)


def build_plaintext_summary(items: Sequence[WishItem]) -> str:
    template = env.get_template("wishlist_text.txt")

    rows = []
    buy_now = 0
    for it in items:
        status = evaluate(it)
        if status is Status.BUY_NOW:
            buy_now += 1
        rows.append(
            {
                "label": status.label,
                "url": it.url,
                "current_str": format_money(it.current_price),
                "target_str": format_money(it.target_price),
                "added_str": it.added_at.strftime("%Y-%m-%d"),
            }
        )

    return template.render(count=len(rows), buy_now=buy_now, items=rows)
