import re
from collections.abc import Sequence

# Merchant names are printed at the top, above address and phone lines
MERCHANT_SCAN_LINES = 5

PHONE_PATTERN = re.compile(r"\d{3}[-.\s]?\d{3}[-.\s]?\d{4}")
ADDRESS_PATTERN = re.compile(r"^\d+\s+\w")


def _looks_like_merchant(line: str) -> bool:
    return (
        len(line) > 2
        and not line[0].isdigit()
        and not PHONE_PATTERN.search(line)
        and not ADDRESS_PATTERN.match(line)
    )


def extract_merchant_name(lines: Sequence[str]) -> str | None:
    """
    Returns the first of the leading lines that reads like a business name.

    Only the first MERCHANT_SCAN_LINES lines are considered. Lines that are too
    short, start with a digit, contain a phone number or look like a street
    address are skipped.
    """
    for line in lines[:MERCHANT_SCAN_LINES]:
        candidate = line.strip()
        if _looks_like_merchant(candidate):
            return candidate
    return None
