"""
Ledger text parser.

Turns ledger source text into IOU entries. Only lines starting with ``iou[``
are entries; every other line (blank lines, comments, account definitions)
is skipped. A malformed entry line fails the whole parse.
"""

import logging
import re
from pathlib import Path

from iou_ledger.domain.entry import Entry
from iou_ledger.utils.exceptions import MalformedEntryError, ParsingError

logger = logging.getLogger(__name__)

ENTRY_PREFIX = "iou["

# iou[<date>, <amount>, <from>, <to>, "<comment>"]
ENTRY_PATTERN = re.compile(
    r'^iou\[([^,]+?),([^,]+?),([^,]+?),([^,]+?),\s*"(.*)"\s*\]$'
)


class LedgerParser:
    """Parser for plain-text IOU ledgers."""

    def parse_line(self, line: str, line_number: int = 1) -> Entry:
        """
        Parse a single entry line.

        Args:
            line: Raw line text, starting with ``iou[`` once stripped.
            line_number: 1-based position of the line, for error reporting.

        Returns:
            Parsed entry with all fields stripped.

        Raises:
            MalformedEntryError: If the line does not match the entry grammar.
        """
        match = ENTRY_PATTERN.match(line.strip())
        if not match:
            raise MalformedEntryError(line, line_number)

        date, amount, from_account, to_account, comment = (
            group.strip() for group in match.groups()
        )
        if not (date and amount and from_account and to_account):
            raise MalformedEntryError(line, line_number)

        return Entry(
            date=date,
            amount=amount,
            from_account=from_account,
            to_account=to_account,
            comment=comment,
        )

    def parse(self, text: str) -> list[Entry]:
        """
        Parse ledger text into entries, in file order.

        Args:
            text: Ledger source text.

        Returns:
            List of entries.

        Raises:
            MalformedEntryError: If any entry line is malformed.
        """
        entries: list[Entry] = []

        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line.strip().startswith(ENTRY_PREFIX):
                continue
            entries.append(self.parse_line(line, line_number))

        logger.debug(f"Parsed {len(entries)} ledger entries")
        return entries

    def parse_file(self, file_path: Path) -> list[Entry]:
        """
        Parse a ledger file.

        Args:
            file_path: Path to a UTF-8 ledger file.

        Returns:
            List of entries.

        Raises:
            ParsingError: If the file cannot be read or contains a malformed entry.
        """
        try:
            text = file_path.read_text(encoding="utf-8")
        except OSError as e:
            raise ParsingError(f"Failed to read ledger file {file_path}: {e}") from e

        entries = self.parse(text)
        logger.info(f"Parsed {len(entries)} entries from {file_path.name}")
        return entries
