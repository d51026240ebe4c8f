import re

# Currency symbol and thousands separators removed before parsing
_STRIP_CHARS = re.compile(r"[$,]")

# Leading numeric portion, read the same way a lenient float parser would
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+))")


def parse_amount(text: str) -> float | None:
    """
    Parses a monetary token such as "$1,234.56" into a float.

    Returns None when no number can be read. Negative and zero values are
    returned as-is.
    """
    cleaned = _STRIP_CHARS.sub("", text)
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None
    return float(match.group(1))
