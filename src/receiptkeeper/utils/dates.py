from datetime import date

from dateutil import parser as dateparser


def parse_date(text: str) -> date | None:
    """
    Parses a free-form date token ("01/15/2024", "2024-01-15", "Jan 15, 2024").

    Ambiguous numeric dates are read month first. Returns None instead of
    raising when the token is not a valid calendar date.
    """
    try:
        return dateparser.parse(text).date()
    except (ValueError, OverflowError):
        # dateutil's ParserError is a ValueError subclass
        return None
