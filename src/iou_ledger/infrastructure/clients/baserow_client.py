"""
Baserow client implementation.

Fetches billable time rows from a Baserow table, either as timesheet records
for reconciliation or as invoice lines for a client and date range.
"""

import json
import logging
from typing import Any

import requests

from iou_ledger.domain.entry import InvoiceLine, TimesheetRecord
from iou_ledger.infrastructure.clients.http import JsonApiClient
from iou_ledger.utils.parameters import BaserowConfig

logger = logging.getLogger(__name__)

PAGE_SIZE = 200


def _parse_hours(value: Any) -> float:
    """Parse the Hours column, treating empty or non-numeric values as 0."""
    if value in (None, ""):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Non-numeric Hours value {value!r}, using 0")
        return 0.0


def _first_link_value(links: list[dict[str, Any]] | None) -> str:
    """Return the display value of the first linked row, or an empty string."""
    if not links:
        return ""
    return str(links[0].get("value", ""))


class BaserowClient(JsonApiClient):
    """
    Baserow REST client for the time tracking table.

    Authenticates with a database token and follows pagination links.
    """

    service_name = "Baserow"

    def __init__(self, config: BaserowConfig, session: requests.Session | None = None) -> None:
        """
        Initialize Baserow client.

        Args:
            config: Baserow configuration.
            session: Optional requests session.
        """
        super().__init__(config.timeout_seconds, session)
        self.config = config
        self.rows_url = (
            f"https://{config.domain}/api/database/rows/table/{config.table_id}/"
        )

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Token {self.config.api_token}"}

    def _billable_filters(self) -> list[dict[str, str]]:
        return [
            {"type": "higher_than", "field": "Hours", "value": "0"},
            {"type": "boolean", "field": "Billable", "value": "1"},
        ]

    def timesheet_filters(self) -> dict[str, Any]:
        """
        Filter for recent billable rows of the configured user.

        Returns:
            Baserow filter tree.
        """
        return {
            "filter_type": "AND",
            "filters": self._billable_filters()
            + [
                {"type": "link_row_has", "field": "User", "value": str(self.config.user_id)},
                {
                    "type": "date_is_after",
                    "field": "Start",
                    "value": f"{self.config.timezone}?{self.config.lookback_weeks}?nr_weeks_ago",
                },
            ],
            "groups": [],
        }

    def invoice_filters(self, client_name: str, start_date: str, end_date: str) -> dict[str, Any]:
        """
        Filter for billable rows of a client within a date range.

        Args:
            client_name: Client name (substring match).
            start_date: First day, ``YYYY-MM-DD``.
            end_date: Last day, ``YYYY-MM-DD``.

        Returns:
            Baserow filter tree.
        """
        return {
            "filter_type": "AND",
            "filters": self._billable_filters()
            + [
                {"type": "contains", "field": "Client Name", "value": client_name},
                {
                    "type": "date_is_on_or_after",
                    "field": "Start",
                    "value": f"{self.config.timezone}?{start_date}?exact_date",
                },
                {
                    "type": "date_is_on_or_before",
                    "field": "Start",
                    "value": f"{self.config.timezone}?{end_date}?exact_date",
                },
            ],
            "groups": [],
        }

    def list_rows(self, filters: dict[str, Any]) -> list[dict[str, Any]]:
        """
        List all table rows matching a filter tree.

        Args:
            filters: Baserow filter tree.

        Returns:
            Raw rows with user field names.

        Raises:
            ApiClientError: If any page cannot be fetched.
        """
        rows: list[dict[str, Any]] = []
        url: str | None = self.rows_url
        params: dict[str, Any] | None = {
            "user_field_names": "true",
            "size": PAGE_SIZE,
            "filters": json.dumps(filters),
        }

        while url:
            data = self._get_json(url, params)
            rows.extend(data.get("results", []))
            # next links carry the query string already
            url = data.get("next")
            params = None

        logger.info(f"Fetched {len(rows)} rows from Baserow table {self.config.table_id}")
        return rows

    def fetch_timesheet_records(self) -> list[TimesheetRecord]:
        """
        Fetch recent billable hours for the configured user.

        Returns:
            Timesheet records in table order.
        """
        rows = self.list_rows(self.timesheet_filters())
        return [
            TimesheetRecord(
                date=row.get("Date") or "",
                hours=_parse_hours(row.get("Hours")),
                person=_first_link_value(row.get("User")),
            )
            for row in rows
        ]

    def fetch_invoice_lines(
        self, client_name: str, start_date: str, end_date: str
    ) -> list[InvoiceLine]:
        """
        Fetch billable rows for a client within a date range.

        Args:
            client_name: Client name (substring match).
            start_date: First day, ``YYYY-MM-DD``.
            end_date: Last day, ``YYYY-MM-DD``.

        Returns:
            Invoice lines in table order.
        """
        rows = self.list_rows(self.invoice_filters(client_name, start_date, end_date))
        return [
            InvoiceLine(
                date=row.get("Date") or "",
                start=row.get("Start") or "",
                end=row.get("End") or "",
                hours=_parse_hours(row.get("Hours")),
                user=_first_link_value(row.get("User")),
                notes=row.get("Notes") or "",
                client=_first_link_value(row.get("Client")),
            )
            for row in rows
        ]
