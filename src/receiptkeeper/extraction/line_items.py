"""Best-effort extraction of purchased items from receipt text.

Receipts mix item lines with totals, tax and payment lines. Item lines are
recognised by a trailing price; everything that does not look like one is
dropped without raising, since OCR output routinely contains garbage lines.
"""

import re

from receiptkeeper.models import MAX_ITEM_PRICE, MIN_ITEM_PRICE, LineItem
from receiptkeeper.utils.amounts import parse_amount

# Lines containing any of these are never purchased items
BOILERPLATE_KEYWORDS = (
    "total",
    "tax",
    "subtotal",
    "change",
    "cash",
    "credit",
    "visa",
    "mastercard",
)

# "Nails 2 x $3.50", "Milk 2 @ 1.25", "Milk @ 1.25", "Hammer $12.99"
# The quantity must be followed by a separator or whitespace so that the
# leading digits of a price are never taken as a count.
QUANTITY_ITEM_PATTERN = re.compile(
    r"^(?P<name>.+?)\s+(?:(?P<quantity>\d+)\s*(?:[@x]\s*|\s)|[@x]\s*)?"
    r"\$?(?P<amount>[\d,]+\.?\d*)\s*$",
    re.IGNORECASE,
)

# "Hammer 12.99"
SIMPLE_ITEM_PATTERN = re.compile(r"^(?P<name>.+?)\s+\$?(?P<amount>[\d,]+\.?\d*)$")


def is_boilerplate(line: str) -> bool:
    lowered = line.lower()
    return any(keyword in lowered for keyword in BOILERPLATE_KEYWORDS)


def _in_price_range(amount: float | None) -> bool:
    return amount is not None and MIN_ITEM_PRICE < amount < MAX_ITEM_PRICE


def _build_item(name: str, quantity: int, amount: float | None) -> LineItem | None:
    name = name.strip()
    if not name or quantity < 1 or not _in_price_range(amount):
        return None
    return LineItem(
        name=name,
        quantity=quantity,
        unit_price=amount,
        # Quantity is not multiplied in
        total_price=amount,
    )


def parse_line_item(line: str) -> LineItem | None:
    """Parse a single receipt line into a LineItem, or None if it is not one."""
    trimmed = line.strip()
    if is_boilerplate(trimmed):
        return None

    match = QUANTITY_ITEM_PATTERN.match(trimmed)
    if match:
        quantity = match.group("quantity")
        return _build_item(
            match.group("name"),
            int(quantity) if quantity else 1,
            parse_amount(match.group("amount")),
        )

    match = SIMPLE_ITEM_PATTERN.match(trimmed)
    if match:
        return _build_item(match.group("name"), 1, parse_amount(match.group("amount")))

    return None


def extract_line_items(text: str) -> list[LineItem]:
    """
    Extract line items from raw receipt text, preserving their order.

    Duplicate-looking lines are kept as separate items.
    """
    items = []
    for line in text.split("\n"):
        item = parse_line_item(line)
        if item is not None:
            items.append(item)
    return items
