"""
Tab-separated hours parser.

Reads ``hours<TAB>date`` rows pasted from a spreadsheet and sums them per day.
"""

import logging

import pandas as pd

from iou_ledger.domain.entry import DailyHours
from iou_ledger.utils.date_utils import normalize_date

logger = logging.getLogger(__name__)


class HoursTableParser:
    """
    Parser for tab-separated hour tables.

    Rows with non-numeric hours or an empty date are dropped. Hours on the
    same date are summed.
    """

    def _read(self, text: str) -> pd.DataFrame:
        """
        Read the table into a two-column frame.

        Args:
            text: Tab-separated text without a header row.

        Returns:
            DataFrame with ``hours`` (float, NaN when invalid) and ``date`` columns.
        """
        rows: list[dict[str, str]] = []

        for line in text.strip().splitlines():
            fields = line.split("\t")
            rows.append(
                {
                    "hours": fields[0].strip(),
                    "date": fields[1].strip() if len(fields) > 1 else "",
                }
            )

        df = pd.DataFrame(rows, columns=["hours", "date"])
        df["hours"] = pd.to_numeric(df["hours"], errors="coerce")
        return df

    def parse(self, text: str) -> list[DailyHours]:
        """
        Parse tab-separated hours into daily totals.

        Args:
            text: Tab-separated ``hours<TAB>date`` rows.

        Returns:
            Daily totals rounded to 2 decimals, newest first, with ledger dates.
        """
        if not text.strip():
            return []

        df = self._read(text)

        valid = df[df["hours"].notna() & (df["date"] != "")]
        dropped = len(df) - len(valid)
        if dropped:
            logger.warning(f"Dropped {dropped} rows without numeric hours or a date")

        daily = valid.groupby("date", sort=False)["hours"].sum().round(2)

        records = [
            DailyHours(date=normalize_date(str(date)), hours=float(hours))
            for date, hours in daily.items()
        ]
        records.sort(key=lambda r: r.date, reverse=True)

        logger.info(f"Parsed {len(valid)} rows into {len(records)} days")
        return records
