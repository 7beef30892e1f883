"""Date parsing utilities."""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

_DAY_FIRST_FORMATS = (
    (re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$"), "%d/%m/%Y"),
    (re.compile(r"^\d{1,2}-\d{1,2}-\d{4}$"), "%d-%m-%Y"),
)


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "15 January 2024", "15/01/2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Numeric dates are read day-first.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)
        elif period == "week":
            return today - timedelta(days=today.weekday() + 7)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)
        elif period == "week":
            return today - timedelta(days=today.weekday())

    parsed = normalize_date(date_str)
    if parsed is None:
        raise ValueError(f"Could not parse date '{date_str}'")
    return parsed


def normalize_date(value: Optional[str]) -> Optional[date]:
    """Parse a statement date, returning None when nothing fits.

    ISO dates are tried first, then explicit DD/MM/YYYY and DD-MM-YYYY,
    then free-form parsing (textual months such as "15 Jan 2025").
    """
    if value is None:
        return None
    value = str(value).strip()
    if not value:
        return None

    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        pass

    for pattern, fmt in _DAY_FIRST_FORMATS:
        if pattern.match(value):
            try:
                return datetime.strptime(value, fmt).date()
            except ValueError:
                return None

    try:
        return date_parser.parse(value, dayfirst=True).date()
    except (ValueError, OverflowError) as e:
        logger.debug("Unparseable date %r: %s", value, e)
        return None
