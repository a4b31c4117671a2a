"""
Normalization of external hours data.

Collapses raw Beeminder datapoints into one record per day, sums daily totals
for the manual import tools and builds ledger amount expressions.
"""

import logging
from collections import defaultdict

from iou_ledger.domain.entry import DailyHours, Entry, GoalDatapoint, GoalRecord
from iou_ledger.utils.date_utils import daystamp_to_date, timestamp_to_date
from iou_ledger.utils.parameters import AccountPairConfig

logger = logging.getLogger(__name__)


def format_number(value: float) -> str:
    """
    Render a number the way it appears in ledger amounts.

    Integral values lose their fractional part (``4.0`` -> ``4``); other
    values use the shortest round-tripping representation (``1.5``).
    """
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def format_amount(hours: float, rate: float) -> str:
    """
    Build an amount expression from hours and an hourly rate.

    Args:
        hours: Hours worked.
        rate: Hourly rate.

    Returns:
        Expression such as ``4*35``.
    """
    return f"{format_number(hours)}*{format_number(rate)}"


def collapse_datapoints(datapoints: list[GoalDatapoint]) -> list[GoalRecord]:
    """
    Keep the most recently recorded datapoint for each day.

    Args:
        datapoints: Raw datapoints in API order.

    Returns:
        One goal record per day, newest datapoint first.
    """
    newest_first = sorted(datapoints, key=lambda p: p.timestamp, reverse=True)

    records: dict[str, GoalRecord] = {}
    for point in newest_first:
        date = daystamp_to_date(point.daystamp)
        if date in records:
            logger.debug(
                f"Skipping older datapoint for {date} "
                f"(value={point.value}, kept={records[date].hours})"
            )
            continue
        records[date] = GoalRecord(date=date, hours=point.value)

    logger.info(f"Collapsed {len(datapoints)} datapoints into {len(records)} days")
    return list(records.values())


def sum_datapoints_by_day(
    datapoints: list[GoalDatapoint], timezone_str: str = "UTC"
) -> list[DailyHours]:
    """
    Sum datapoint values per calendar day of their timestamp.

    Args:
        datapoints: Raw datapoints.
        timezone_str: Timezone the calendar day is taken in.

    Returns:
        Daily totals rounded to 2 decimals, newest day first.
    """
    totals: dict[str, float] = defaultdict(float)
    for point in datapoints:
        totals[timestamp_to_date(point.timestamp, timezone_str)] += point.value

    return [
        DailyHours(date=date, hours=round(totals[date], 2))
        for date in sorted(totals, reverse=True)
    ]


def build_entries(
    daily: list[DailyHours],
    rate: float,
    accounts: AccountPairConfig,
    comment: str,
) -> list[Entry]:
    """
    Turn daily totals into ledger entries.

    Args:
        daily: Daily hour totals.
        rate: Hourly rate used in the amount expression.
        accounts: Accounts the entries are written between.
        comment: Comment for every entry.

    Returns:
        Entries newest first.
    """
    entries = [
        Entry(
            date=day.date,
            amount=format_amount(day.hours, rate),
            from_account=accounts.from_account,
            to_account=accounts.to_account,
            comment=comment,
        )
        for day in daily
    ]
    return sorted(entries, key=lambda e: e.date, reverse=True)
