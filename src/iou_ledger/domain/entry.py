"""
Ledger domain models.

This module defines the IOU entry that makes up the ledger text, and the
records supplied by the external hours sources.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Entry(BaseModel):
    """
    One IOU line of the ledger.

    Serialized as ``iou[<date>, <amount>, <from>, <to>, "<comment>"]``.
    The ``(date, from, to)`` triple identifies an entry during reconciliation.
    """

    date: str = Field(description="Entry date (YYYY.MM.DD)")
    amount: str = Field(description="Amount expression, kept verbatim (e.g. 2*35)")
    from_account: str = Field(alias="from", description="Account owing the amount")
    to_account: str = Field(alias="to", description="Account owed the amount")
    comment: str = Field("", description="Free-text annotation")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def key(self) -> tuple[str, str, str]:
        """Identity key used to match entries across sources."""
        return (self.date, self.from_account, self.to_account)


class TimesheetRecord(BaseModel):
    """Hours one person logged in Baserow for a date."""

    date: str = Field(description="Baserow date (YYYY-MM-DD)")
    hours: float = 0.0
    person: str = ""


class GoalRecord(BaseModel):
    """Aggregate Beeminder hours for a single date."""

    date: str = Field(description="Ledger date (YYYY.MM.DD)")
    hours: float


class GoalDatapoint(BaseModel):
    """Raw Beeminder datapoint as returned by the API."""

    timestamp: float
    value: float
    daystamp: str = Field(description="Beeminder day (YYYYMMDD)")
    comment: str | None = None
    id: str | None = None


class DailyHours(BaseModel):
    """Hours summed for one calendar day by the manual import tools."""

    date: str
    hours: float


class InvoiceLine(BaseModel):
    """Billable row fetched from Baserow for an invoice."""

    date: str = ""
    start: str = ""
    end: str = ""
    hours: float = 0.0
    user: str = ""
    notes: str = ""
    client: str = ""


class InvoiceSummary(BaseModel):
    """Invoice lines and their totals."""

    client: str
    start_date: str
    end_date: str
    lines: list[InvoiceLine] = Field(default_factory=list)
    total_hours: float = 0.0
    hours_by_date: dict[str, float] = Field(default_factory=dict)


class LedgerSnapshot(BaseModel):
    """Record of a single reconciliation run."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    before_content: str
    after_content: str
    timesheet_records: list[TimesheetRecord] = Field(default_factory=list)
    goal_records: list[GoalRecord] = Field(default_factory=list)
    added: int = 0
    updated: int = 0

    @property
    def changed(self) -> bool:
        """Whether the run produced different ledger text."""
        return self.before_content != self.after_content

    def to_dict(self) -> dict[str, Any]:
        """
        Convert snapshot to a JSON-serializable dictionary.

        Returns:
            Dictionary representation of the snapshot.
        """
        data = self.model_dump()
        data["timestamp"] = self.timestamp.isoformat()
        return data
