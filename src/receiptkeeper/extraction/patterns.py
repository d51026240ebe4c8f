"""Label-driven matchers for receipt totals, taxes and purchase dates.

Each matcher walks an ordered tuple of patterns and stops at the first one
that matches anywhere in the text. Earlier patterns take priority; there is
no scoring between candidate matches.
"""

import re
from datetime import date

from receiptkeeper.utils.amounts import parse_amount
from receiptkeeper.utils.dates import parse_date

# Optional ":" or whitespace, optional "$", then an amount like 1,234.56
_AMOUNT = r"[:\s]*\$?([\d,]+\.?\d*)"

TOTAL_PATTERNS = (
    re.compile(r"\btotal" + _AMOUNT, re.IGNORECASE),
    re.compile(r"\bgrand\s*total" + _AMOUNT, re.IGNORECASE),
    re.compile(r"\bamount\s*due" + _AMOUNT, re.IGNORECASE),
    re.compile(r"\bbalance\s*due" + _AMOUNT, re.IGNORECASE),
)

TAX_PATTERNS = (
    re.compile(r"\btax" + _AMOUNT, re.IGNORECASE),
    re.compile(r"\bsales\s*tax" + _AMOUNT, re.IGNORECASE),
    re.compile(r"\bvat" + _AMOUNT, re.IGNORECASE),
)

DATE_PATTERNS = (
    # 01/15/2024, 1-15-24
    re.compile(r"(?<!\d)(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})(?!\d)"),
    # 2024/01/15, 2024-1-15
    re.compile(r"(?<!\d)(\d{4}[/-]\d{1,2}[/-]\d{1,2})(?!\d)"),
    # Jan 15, 2024 / January 15 2024
    re.compile(
        r"(\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*"
        r"[\s,]+\d{1,2}[\s,]+\d{2,4})",
        re.IGNORECASE,
    ),
)


def _first_match(patterns: tuple[re.Pattern[str], ...], text: str) -> str | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def extract_total(text: str) -> float | None:
    """Return the amount following the highest-priority total label."""
    token = _first_match(TOTAL_PATTERNS, text)
    return parse_amount(token) if token is not None else None


def extract_tax(text: str) -> float | None:
    """Return the amount following the highest-priority tax label."""
    token = _first_match(TAX_PATTERNS, text)
    return parse_amount(token) if token is not None else None


def extract_date(text: str) -> date | None:
    """Return the first date-shaped token, parsed, or None."""
    token = _first_match(DATE_PATTERNS, text)
    return parse_date(token) if token is not None else None
