from datetime import datetime
from typing import Iterable, List, Literal, Optional, Tuple

from db.models import ServerNotification
from stores.models import CartLineItem, NotificationEntry

SHIPPING_FEE = 500  # flat fee charged on any non-empty cart

NOTIFICATION_ICONS = {
    "follow": "👤",
    "rating": "★",
    "comment": "💬",
    "like": "♥",
}
DEFAULT_NOTIFICATION_ICON = "🔔"


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[str]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table.

    Args:
        headers: List of column headers, or None to use first row as headers.
        rows: List of rows, each a list of strings.
        aligns: List of alignments ('l', 'c', 'r') for each column.
                Defaults to all center ('c').

    Returns:
        str: Markdown formatted table.
    """
    if not rows:
        return ""

    # If no headers, take the first row as header and remove it from rows
    if not headers:
        headers, rows = rows[0], rows[1:]

    headers = [str(h) for h in headers]
    rows = [[str(cell).replace("|", "\\|") for cell in row] for row in rows]

    if aligns is None:
        aligns = ["c"] * len(headers)
    elif len(aligns) != len(headers):
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}

    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(align_map[a] for a in aligns) + " |",
    ]
    lines.extend("| " + " | ".join(row) + " |" for row in rows)
    return "\n".join(lines)


def format_price(amount: int) -> str:
    """2400 -> '¥2,400'"""
    return f"¥{amount:,}"


def compute_totals(items: Iterable[CartLineItem]) -> Tuple[int, int, int]:
    """
    Return (subtotal, shipping_fee, total) for the given cart lines.
    Shipping is waived when the cart is empty.
    """
    subtotal = sum(item.price * item.quantity for item in items)
    shipping = SHIPPING_FEE if subtotal > 0 else 0
    return subtotal, shipping, subtotal + shipping


def format_relative_time(when: datetime, now: Optional[datetime] = None) -> str:
    """Coarse, human readable age of a timestamp, e.g. '3 hours ago'."""
    now = now or datetime.now()
    seconds = int((now - when).total_seconds())
    if seconds < 60:
        return "just now"

    for unit_seconds, unit in ((86400, "day"), (3600, "hour"), (60, "minute")):
        if seconds >= unit_seconds:
            n = seconds // unit_seconds
            if unit == "day" and n >= 7:
                return when.strftime("%Y-%m-%d")
            return f"{n} {unit}{'s' if n != 1 else ''} ago"
    return "just now"


def notification_from_server(
    record: ServerNotification, now: Optional[datetime] = None
) -> NotificationEntry:
    """Map a catalog notification row to what the notification store holds."""
    return NotificationEntry(
        id=record.nid,
        type=record.tag,
        title=record.title,
        content=record.description,
        time=format_relative_time(record.created_at, now),
        unread=record.is_unread,
        icon=NOTIFICATION_ICONS.get(record.icon_type, DEFAULT_NOTIFICATION_ICON),
    )
