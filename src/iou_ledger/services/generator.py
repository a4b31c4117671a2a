"""
Ledger text generator.

Serializes IOU entries back into ledger lines, the inverse of the ledger parser.
"""

import logging
import re

from iou_ledger.domain.entry import Entry

logger = logging.getLogger(__name__)

_DATED_ENTRY_RE = re.compile(r"iou\[(\d{4}\.\d{2}\.\d{2})")


def format_entry(entry: Entry) -> str:
    """
    Format one entry as a ledger line.

    Args:
        entry: Entry to format.

    Returns:
        Line of the form ``iou[<date>, <amount>, <from>, <to>, "<comment>"]``.
    """
    return (
        f"iou[{entry.date}, {entry.amount}, {entry.from_account}, "
        f'{entry.to_account}, "{entry.comment}"]'
    )


class LedgerGenerator:
    """Generator for plain-text IOU ledgers."""

    def generate(self, entries: list[Entry]) -> str:
        """
        Generate ledger text from entries.

        Args:
            entries: Entries in output order.

        Returns:
            Newline-joined ledger lines, without a trailing newline.
        """
        text = "\n".join(format_entry(entry) for entry in entries)
        logger.debug(f"Generated {len(entries)} ledger lines")
        return text

    def sort_lines(self, text: str) -> str:
        """
        Reorder dated entry lines newest first, keeping their original text.

        Lines that do not start with a dated ``iou[`` entry are dropped.

        Args:
            text: Ledger text.

        Returns:
            Sorted entry lines joined with newlines.
        """
        dated: list[tuple[str, str]] = []

        for line in text.strip().splitlines():
            match = _DATED_ENTRY_RE.match(line.strip())
            if match:
                dated.append((match.group(1), line))

        dated.sort(key=lambda item: item[0], reverse=True)
        return "\n".join(line for _, line in dated)
