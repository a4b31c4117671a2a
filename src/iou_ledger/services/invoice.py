"""
Invoice service.

Totals billable hours fetched for a client over a date range.
"""

import logging

import pandas as pd

from iou_ledger.domain.entry import InvoiceLine, InvoiceSummary

logger = logging.getLogger(__name__)


class InvoiceService:
    """Service for summarizing invoice lines."""

    def summarize(
        self, client: str, start_date: str, end_date: str, lines: list[InvoiceLine]
    ) -> InvoiceSummary:
        """
        Summarize invoice lines.

        Args:
            client: Client name the lines were fetched for.
            start_date: First day of the range.
            end_date: Last day of the range.
            lines: Invoice lines.

        Returns:
            Summary with total hours and hours per date (oldest first).
        """
        if not lines:
            logger.warning(f"No invoice lines for {client} between {start_date} and {end_date}")
            return InvoiceSummary(client=client, start_date=start_date, end_date=end_date)

        df = pd.DataFrame([line.model_dump() for line in lines])
        df["hours"] = pd.to_numeric(df["hours"], errors="coerce").fillna(0.0)

        by_date = df.groupby("date")["hours"].sum().sort_index()
        total = round(float(df["hours"].sum()), 2)

        logger.info(f"Invoice for {client}: {len(lines)} lines, {total} hours")
        return InvoiceSummary(
            client=client,
            start_date=start_date,
            end_date=end_date,
            lines=lines,
            total_hours=total,
            hours_by_date={str(date): round(float(hours), 2) for date, hours in by_date.items()},
        )
