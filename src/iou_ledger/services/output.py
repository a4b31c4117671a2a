"""
Output service for writing ledger text, run snapshots and invoices.

Snapshots are appended to a JSONL log, one line per reconciliation run.
"""

import json
import logging
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from iou_ledger.domain.entry import InvoiceSummary, LedgerSnapshot
from iou_ledger.utils.exceptions import OutputError
from iou_ledger.utils.parameters import OutputConfig

logger = logging.getLogger(__name__)


class OutputService:
    """
    Service for writing data to output files.

    Handles ledger text, snapshot logs and invoice CSV output.
    """

    def __init__(self, config: OutputConfig) -> None:
        """
        Initialize output service.

        Args:
            config: Output configuration.
        """
        self.config = config
        self.output_dir = Path(config.dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def snapshot_path(self) -> Path:
        return self.output_dir / self.config.snapshot_log

    def write_ledger(self, text: str, path: Path) -> None:
        """
        Write ledger text exactly as given.

        Args:
            text: Ledger text.
            path: Destination file.

        Raises:
            OutputError: If the file cannot be written.
        """
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as e:
            raise OutputError(f"Failed to write ledger {path}: {e}") from e

        logger.info(f"Wrote ledger to {path}")

    def write_snapshot(self, snapshot: LedgerSnapshot) -> None:
        """
        Append a reconciliation snapshot to the snapshot log.

        Args:
            snapshot: Snapshot of one run.

        Raises:
            OutputError: If the log cannot be written.
        """
        try:
            with open(self.snapshot_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(snapshot.to_dict(), default=str) + "\n")
        except OSError as e:
            raise OutputError(f"Failed to write snapshot log {self.snapshot_path}: {e}") from e

        logger.info(f"Appended snapshot to {self.snapshot_path}")

    def load_latest_snapshot(self) -> LedgerSnapshot | None:
        """
        Load the most recent snapshot from the log.

        Returns:
            Latest snapshot, or None if no run has been recorded.

        Raises:
            OutputError: If the log cannot be read or its last line is not a snapshot.
        """
        if not self.snapshot_path.exists():
            return None

        try:
            with open(self.snapshot_path, encoding="utf-8") as f:
                lines = [line for line in f if line.strip()]
        except OSError as e:
            raise OutputError(f"Failed to read snapshot log {self.snapshot_path}: {e}") from e

        if not lines:
            return None

        try:
            return LedgerSnapshot.model_validate_json(lines[-1])
        except ValidationError as e:
            raise OutputError(f"Corrupt snapshot in {self.snapshot_path}: {e}") from e

    def write_invoice(self, summary: InvoiceSummary) -> Path:
        """
        Write invoice lines to CSV.

        Args:
            summary: Invoice summary.

        Returns:
            Path of the written file.
        """
        invoice_path = self.output_dir / self.config.invoice_csv

        columns = ["date", "start", "end", "hours", "user", "notes", "client"]
        df = pd.DataFrame([line.model_dump() for line in summary.lines], columns=columns)

        df.to_csv(invoice_path, index=False, encoding="utf-8")
        logger.info(f"Wrote {len(df)} invoice lines to {invoice_path}")
        return invoice_path
