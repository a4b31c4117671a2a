"""Unit tests for the ledger parser."""

from pathlib import Path

import pytest

from iou_ledger.domain.entry import Entry
from iou_ledger.infrastructure.parsers.ledger_parser import LedgerParser
from iou_ledger.utils.exceptions import MalformedEntryError, ParsingError


def test_parse_valid_entries() -> None:
    """Test parsing of well-formed entry lines in file order."""
    text = (
        'iou[2024.03.15, 2*35, ppd, la, "hours"]\n'
        'iou[2024.03.14, 1.5*35, ppd, na, "hours"]'
    )

    entries = LedgerParser().parse(text)

    expected = [
        Entry(date="2024.03.15", amount="2*35", from_account="ppd", to_account="la", comment="hours"),
        Entry(date="2024.03.14", amount="1.5*35", from_account="ppd", to_account="na", comment="hours"),
    ]
    if entries != expected:
        raise AssertionError(f"Expected {expected}, got {entries}")


def test_parse_skips_non_entry_lines() -> None:
    """Test that lines not starting with iou[ are ignored."""
    text = 'foo\niou[2024.01.01, 2*35, ppd, la, "x"]\nbar'

    entries = LedgerParser().parse(text)

    if len(entries) != 1:
        raise AssertionError(f"Expected 1 entry, got {len(entries)}")
    if entries[0].comment != "x":
        raise AssertionError(f"Expected comment 'x', got {entries[0].comment!r}")


def test_parse_skips_blank_and_directive_lines() -> None:
    """Test that blank lines and account directives are not entries."""
    text = (
        "\n"
        'account[la, "Luke"]\n'
        "   \n"
        '  iou[2025.01.02, 25/60*20, na, ppd, "call"]  \n'
    )

    entries = LedgerParser().parse(text)

    if len(entries) != 1:
        raise AssertionError(f"Expected 1 entry, got {len(entries)}")
    if entries[0].amount != "25/60*20":
        raise AssertionError(f"Expected amount kept verbatim, got {entries[0].amount}")


def test_parse_malformed_entry_fails_fast() -> None:
    """Test that a malformed entry line aborts the whole parse."""
    text = 'iou[2024.01.01, 2*35, ppd, la, "ok"]\niou[bad]'

    with pytest.raises(MalformedEntryError) as exc_info:
        LedgerParser().parse(text)

    if exc_info.value.line != "iou[bad]":
        raise AssertionError(f"Expected offending line, got {exc_info.value.line!r}")
    if exc_info.value.line_number != 2:
        raise AssertionError(f"Expected line 2, got {exc_info.value.line_number}")
    if "iou[bad]" not in str(exc_info.value):
        raise AssertionError("Expected the offending line in the error message")


def test_malformed_entry_is_a_parsing_error() -> None:
    """Test that MalformedEntryError is reported as a parsing error."""
    with pytest.raises(ParsingError):
        LedgerParser().parse("iou[bad]")


def test_parse_missing_quotes_is_malformed() -> None:
    """Test that an unquoted comment does not match the grammar."""
    with pytest.raises(MalformedEntryError):
        LedgerParser().parse("iou[2024.01.01, 2*35, ppd, la, hours]")


def test_parse_empty_field_is_malformed() -> None:
    """Test that a blank field does not match the grammar."""
    with pytest.raises(MalformedEntryError):
        LedgerParser().parse('iou[2024.01.01,  , ppd, la, "hours"]')


def test_parse_trims_fields() -> None:
    """Test that captured fields are stripped of surrounding whitespace."""
    entries = LedgerParser().parse('iou[ 2024.01.01 ,  3*35 , ppd ,la,  " late fix "]')

    entry = entries[0]
    if (entry.date, entry.amount, entry.from_account, entry.to_account, entry.comment) != (
        "2024.01.01",
        "3*35",
        "ppd",
        "la",
        "late fix",
    ):
        raise AssertionError(f"Unexpected fields: {entry}")


def test_parse_comment_with_commas() -> None:
    """Test that the comment runs to the final quote and may contain commas."""
    entries = LedgerParser().parse('iou[2024.01.01, 10, na, la, "lunch, coffee, snacks"]')

    if entries[0].comment != "lunch, coffee, snacks":
        raise AssertionError(f"Unexpected comment: {entries[0].comment!r}")
    if entries[0].to_account != "la":
        raise AssertionError(f"Unexpected to account: {entries[0].to_account!r}")


def test_parse_empty_text() -> None:
    """Test that empty text has no entries."""
    if LedgerParser().parse("") != []:
        raise AssertionError("Expected no entries for empty text")


def test_parse_file(tmp_path: Path) -> None:
    """Test parsing a ledger file from disk."""
    ledger_file = tmp_path / "ledger.txt"
    ledger_file.write_text('iou[2025.03.15, 2*35, ppd, na, "hours"]\n', encoding="utf-8")

    entries = LedgerParser().parse_file(ledger_file)

    if len(entries) != 1:
        raise AssertionError(f"Expected 1 entry, got {len(entries)}")


def test_parse_missing_file(tmp_path: Path) -> None:
    """Test that a missing ledger file raises ParsingError."""
    with pytest.raises(ParsingError):
        LedgerParser().parse_file(tmp_path / "missing.txt")
