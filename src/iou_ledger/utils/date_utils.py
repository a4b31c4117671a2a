"""
Date utilities.

Conversions between the date formats used by Baserow (``YYYY-MM-DD``),
Beeminder (``YYYYMMDD`` daystamps and epoch timestamps) and the ledger
(``YYYY.MM.DD``).
"""

import re
from datetime import date, datetime

import pytz
from dateutil import parser

LEDGER_DATE_FORMAT = "%Y.%m.%d"

_DAYSTAMP_RE = re.compile(r"(\d{4})(\d{2})(\d{2})")


def normalize_date(date_str: str) -> str:
    """
    Convert a hyphen-separated date to the ledger's dot-separated form.

    Args:
        date_str: Date string such as ``2025-03-01``.

    Returns:
        Date string such as ``2025.03.01``.
    """
    return date_str.replace("-", ".")


def daystamp_to_date(daystamp: str) -> str:
    """
    Convert a Beeminder daystamp to a ledger date.

    Args:
        daystamp: Daystamp string such as ``20250315``.

    Returns:
        Date string such as ``2025.03.15``.
    """
    return _DAYSTAMP_RE.sub(r"\1.\2.\3", daystamp)


def timestamp_to_date(timestamp: float, timezone_str: str = "UTC") -> str:
    """
    Convert an epoch timestamp to the ledger date in a timezone.

    Args:
        timestamp: Seconds since the epoch.
        timezone_str: Timezone the calendar day is taken in.

    Returns:
        Ledger date string.
    """
    tz = pytz.timezone(timezone_str)
    dt = datetime.fromtimestamp(timestamp, tz=pytz.utc).astimezone(tz)
    return dt.strftime(LEDGER_DATE_FORMAT)


def parse_date(date_str: str) -> date:
    """
    Parse a date in any common notation, ledger form included.

    Args:
        date_str: Date string (``2025.03.15``, ``2025-03-15``, ``March 15 2025``...).

    Returns:
        Parsed date.
    """
    return parser.parse(normalize_date(date_str).replace(".", "-")).date()
