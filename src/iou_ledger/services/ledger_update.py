"""
Ledger update pipeline.

Fetches hours from Baserow and Beeminder, reconciles them into the current
ledger text and produces a snapshot of the run.
"""

import logging

from iou_ledger.domain.entry import LedgerSnapshot
from iou_ledger.infrastructure.clients.baserow_client import BaserowClient
from iou_ledger.infrastructure.clients.beeminder_client import BeeminderClient
from iou_ledger.infrastructure.parsers.ledger_parser import LedgerParser
from iou_ledger.services.generator import LedgerGenerator
from iou_ledger.services.normalization import collapse_datapoints
from iou_ledger.services.reconciliation import ReconciliationService

logger = logging.getLogger(__name__)


class LedgerUpdateService:
    """Runs one fetch-reconcile-generate pass over a ledger."""

    def __init__(
        self,
        baserow_client: BaserowClient,
        beeminder_client: BeeminderClient,
        reconciliation_service: ReconciliationService,
        parser: LedgerParser | None = None,
        generator: LedgerGenerator | None = None,
    ) -> None:
        self.baserow_client = baserow_client
        self.beeminder_client = beeminder_client
        self.reconciliation_service = reconciliation_service
        self.parser = parser or LedgerParser()
        self.generator = generator or LedgerGenerator()

    def run(self, before_content: str) -> LedgerSnapshot:
        """
        Reconcile the ledger with freshly fetched hours.

        The ledger is parsed before any request is made, so a malformed
        ledger aborts the run without touching the network.

        Args:
            before_content: Current ledger text.

        Returns:
            Snapshot holding the before and after ledger text and the source records.

        Raises:
            MalformedEntryError: If the ledger contains a malformed entry.
            ApiClientError: If either source cannot be fetched.
        """
        entries = self.parser.parse(before_content)
        logger.info(f"Found {len(entries)} entries in current ledger")

        timesheet_records = self.baserow_client.fetch_timesheet_records()
        goal_records = collapse_datapoints(self.beeminder_client.fetch_datapoints())

        result = self.reconciliation_service.reconcile(entries, timesheet_records, goal_records)
        after_content = self.generator.generate(result.entries)

        return LedgerSnapshot(
            before_content=before_content,
            after_content=after_content,
            timesheet_records=timesheet_records,
            goal_records=goal_records,
            added=result.added,
            updated=result.updated,
        )
