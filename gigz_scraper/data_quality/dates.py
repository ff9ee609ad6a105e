from datetime import datetime
from typing import Optional

from dateutil import parser as date_parser

INVALID_DATE = "Invalid Date"
MIDNIGHT_UTC_SUFFIX = "T00:00:00.000+00:00"


def format_date_string_for_mongodb(date_string: Optional[str], current_year: Optional[int] = None) -> str:
    """Turn a listing date without a year (e.g. ``"Friday, October 24"``) into
    ``YYYY-MM-DDT00:00:00.000+00:00``.

    The current year is always appended, so a January show listed in December
    comes out a year early. Empty or unparseable input never raises; it renders
    as ``"Invalid DateT00:00:00.000+00:00"``. So does text that names no month
    and day, such as a bare time of day.
    """
    year = current_year or datetime.now().year
    text = (date_string or "").strip()
    if not text:
        return f"{INVALID_DATE}{MIDNIGHT_UTC_SUFFIX}"

    try:
        parsed = date_parser.parse(f"{text} {year}", default=datetime(year, 1, 1))
        # a month or day missing from the text would be taken from the default
        cross_check = date_parser.parse(f"{text} {year}", default=datetime(year, 2, 2))
    except (ValueError, OverflowError):
        return f"{INVALID_DATE}{MIDNIGHT_UTC_SUFFIX}"

    if (parsed.month, parsed.day) != (cross_check.month, cross_check.day):
        return f"{INVALID_DATE}{MIDNIGHT_UTC_SUFFIX}"

    return f"{parsed.date().isoformat()}{MIDNIGHT_UTC_SUFFIX}"
