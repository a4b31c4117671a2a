"""
Reconciliation service for merging external hours into the ledger.

Matches Baserow and Beeminder records against existing entries by
``(date, from, to)``, updates amounts in place, appends missing entries and
leaves everything dated before the cutoff untouched.
"""

import logging
from dataclasses import dataclass, field

from iou_ledger.domain.entry import Entry, GoalRecord, TimesheetRecord
from iou_ledger.services.normalization import format_amount
from iou_ledger.utils.date_utils import normalize_date
from iou_ledger.utils.parameters import AccountPairConfig, ReconciliationConfig

logger = logging.getLogger(__name__)


@dataclass
class ReconciliationResult:
    """Merged entries and what the merge did to get there."""

    entries: list[Entry] = field(default_factory=list)
    added: int = 0
    updated: int = 0
    skipped: int = 0


class ReconciliationService:
    """
    Service for reconciling source hours against ledger entries.

    Baserow records are written between the timesheet accounts and Beeminder
    records between the goal accounts. Reapplying the same sources to an
    already merged ledger changes nothing.
    """

    def __init__(self, config: ReconciliationConfig) -> None:
        """
        Initialize reconciliation service.

        Args:
            config: Reconciliation rules (rate, cutoff, accounts, comment).
        """
        self.config = config

    def _find_entry(
        self, entries: list[Entry], date: str, accounts: AccountPairConfig
    ) -> Entry | None:
        """
        Find the first entry with the given identity key.

        Args:
            entries: Working set of entries.
            date: Ledger date.
            accounts: Account pair of the source.

        Returns:
            Matching entry, or None.
        """
        key = (date, accounts.from_account, accounts.to_account)
        for entry in entries:
            if entry.key == key:
                return entry
        return None

    def _apply(
        self,
        result: ReconciliationResult,
        date: str,
        hours: float,
        accounts: AccountPairConfig,
        source: str,
    ) -> None:
        """
        Apply one source record to the working set.

        Args:
            result: Result holding the working set and counters.
            date: Normalized ledger date of the record.
            hours: Hours of the record.
            accounts: Account pair of the source.
            source: Source name, for logging.
        """
        amount = format_amount(hours, self.config.rate)

        if date < self.config.cutoff_date:
            logger.debug(
                f"Skipping {source} record for {date}: before cutoff {self.config.cutoff_date}"
            )
            result.skipped += 1
            return

        existing = self._find_entry(result.entries, date, accounts)

        if existing is None:
            logger.debug(f"Adding {source} entry for {date} with amount {amount}")
            result.entries.append(
                Entry(
                    date=date,
                    amount=amount,
                    from_account=accounts.from_account,
                    to_account=accounts.to_account,
                    comment=self.config.default_comment,
                )
            )
            result.added += 1
        elif existing.amount != amount:
            logger.debug(
                f"Updating {source} entry for {date}: {existing.amount} -> {amount}"
            )
            existing.amount = amount
            result.updated += 1

    def reconcile(
        self,
        current: list[Entry],
        timesheet_records: list[TimesheetRecord],
        goal_records: list[GoalRecord],
    ) -> ReconciliationResult:
        """
        Reconcile ledger entries with both sources.

        Args:
            current: Entries parsed from the current ledger.
            timesheet_records: Baserow records, pre-filtered to one contributor.
            goal_records: Beeminder records, at most one per date.

        Returns:
            Result with entries sorted by date descending and change counts.
        """
        result = ReconciliationResult(entries=[entry.model_copy() for entry in current])

        for record in timesheet_records:
            self._apply(
                result,
                normalize_date(record.date),
                record.hours,
                self.config.timesheet_accounts,
                "Baserow",
            )

        for goal in goal_records:
            self._apply(
                result,
                goal.date,
                goal.hours,
                self.config.goal_accounts,
                "Beeminder",
            )

        # stable: same-date entries keep working-set order
        result.entries.sort(key=lambda e: e.date, reverse=True)

        logger.info(
            f"Reconciled {len(current)} entries: {result.added} added, "
            f"{result.updated} updated, {result.skipped} skipped before cutoff"
        )
        return result

    def merge(
        self,
        current: list[Entry],
        timesheet_records: list[TimesheetRecord],
        goal_records: list[GoalRecord],
    ) -> list[Entry]:
        """
        Merge source records into ledger entries.

        Args:
            current: Entries parsed from the current ledger.
            timesheet_records: Baserow records.
            goal_records: Beeminder records.

        Returns:
            Merged entries sorted by date descending.
        """
        return self.reconcile(current, timesheet_records, goal_records).entries
