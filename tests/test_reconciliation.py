"""Unit tests for the reconciliation service."""

from iou_ledger.domain.entry import Entry, GoalRecord, TimesheetRecord
from iou_ledger.services.reconciliation import ReconciliationService
from iou_ledger.utils.parameters import AccountPairConfig, ReconciliationConfig


def make_service(cutoff_date: str = "2025.03.15") -> ReconciliationService:
    """Build a service with the production account pairs."""
    config = ReconciliationConfig(
        rate=35,
        cutoff_date=cutoff_date,
        default_comment="hours",
        timesheet_accounts=AccountPairConfig(from_account="ppd", to_account="la"),
        goal_accounts=AccountPairConfig(from_account="ppd", to_account="na"),
    )
    return ReconciliationService(config)


def make_entry(date: str, amount: str, to_account: str, comment: str = "hours") -> Entry:
    """Build a ppd entry."""
    return Entry(
        date=date, amount=amount, from_account="ppd", to_account=to_account, comment=comment
    )


def test_goal_record_updates_matching_entry() -> None:
    """Test that a Beeminder record overwrites the amount of its matching entry only."""
    current = [make_entry("2025.03.15", "2*35", "na")]

    merged = make_service().merge(current, [], [GoalRecord(date="2025.03.15", hours=4)])

    if merged != [make_entry("2025.03.15", "4*35", "na")]:
        raise AssertionError(f"Unexpected merge result: {merged}")


def test_timesheet_record_before_cutoff_is_ignored() -> None:
    """Test that records dated before the cutoff neither add nor update entries."""
    current = [make_entry("2025.03.01", "1*35", "la")]

    merged = make_service().merge(
        current, [TimesheetRecord(date="2025-03-01", hours=3, person="Luke")], []
    )

    if merged != current:
        raise AssertionError(f"Expected ledger unchanged, got {merged}")


def test_goal_record_before_cutoff_is_ignored() -> None:
    """Test that Beeminder records dated before the cutoff leave the ledger untouched."""
    current = [make_entry("2025.03.10", "2*35", "na")]

    result = make_service().reconcile(current, [], [GoalRecord(date="2025.03.10", hours=5)])

    if result.entries != [make_entry("2025.03.10", "2*35", "na")]:
        raise AssertionError(f"Expected ledger unchanged, got {result.entries}")
    if (result.added, result.updated, result.skipped) != (0, 0, 1):
        raise AssertionError(
            f"Unexpected counts: {result.added}, {result.updated}, {result.skipped}"
        )


def test_new_records_are_appended_and_sorted() -> None:
    """Test adding new entries from both sources, newest first."""
    current = [make_entry("2025.03.15", "2*35", "la")]

    merged = make_service().merge(
        current,
        [TimesheetRecord(date="2025-03-16", hours=3, person="Luke")],
        [GoalRecord(date="2025.03.17", hours=1.5)],
    )

    expected = [
        make_entry("2025.03.17", "1.5*35", "na"),
        make_entry("2025.03.16", "3*35", "la"),
        make_entry("2025.03.15", "2*35", "la"),
    ]
    if merged != expected:
        raise AssertionError(f"Expected {expected}, got {merged}")


def test_identity_isolation() -> None:
    """Test that a source only touches entries with its own account pair."""
    current = [
        make_entry("2025.04.01", "2*35", "la"),
        Entry(date="2025.04.01", amount="7", from_account="na", to_account="ppd", comment="lunch"),
    ]

    merged = make_service().merge(current, [], [GoalRecord(date="2025.04.01", hours=5)])

    if make_entry("2025.04.01", "2*35", "la") not in merged:
        raise AssertionError("Timesheet entry was altered by a goal record")
    if current[1] not in merged:
        raise AssertionError("Unrelated entry was altered")
    if make_entry("2025.04.01", "5*35", "na") not in merged:
        raise AssertionError("Expected a new goal entry")
    if len(merged) != 3:
        raise AssertionError(f"Expected 3 entries, got {len(merged)}")


def test_merge_is_idempotent() -> None:
    """Test that reapplying the same sources changes nothing."""
    service = make_service()
    current = [
        make_entry("2025.03.20", "1*35", "la"),
        make_entry("2025.03.10", "9*35", "na"),
    ]
    timesheet = [
        TimesheetRecord(date="2025-03-20", hours=2, person="Luke"),
        TimesheetRecord(date="2025-03-21", hours=1.25, person="Luke"),
        TimesheetRecord(date="2025-03-21", hours=0.75, person="Luke"),
    ]
    goals = [GoalRecord(date="2025.03.22", hours=3), GoalRecord(date="2025.03.10", hours=1)]

    once = service.merge(current, timesheet, goals)
    twice = service.merge(once, timesheet, goals)

    if once != twice:
        raise AssertionError(f"Expected fixed point, got {once} then {twice}")


def test_merge_does_not_mutate_input() -> None:
    """Test that the caller's entries are left untouched."""
    current = [make_entry("2025.03.15", "2*35", "na")]

    make_service().merge(current, [], [GoalRecord(date="2025.03.15", hours=4)])

    if current[0].amount != "2*35":
        raise AssertionError(f"Input entry was mutated: {current[0]}")


def test_same_date_keeps_insertion_order() -> None:
    """Test that entries sharing a date keep their working-set order."""
    current = [
        Entry(date="2025.03.20", amount="5", from_account="x", to_account="y", comment="first"),
        Entry(date="2025.03.19", amount="5", from_account="x", to_account="y", comment="older"),
        Entry(date="2025.03.20", amount="6", from_account="x", to_account="z", comment="second"),
    ]

    merged = make_service().merge(current, [], [GoalRecord(date="2025.03.20", hours=1)])

    comments = [entry.comment for entry in merged]
    if comments != ["first", "second", "hours", "older"]:
        raise AssertionError(f"Unexpected order: {comments}")


def test_output_is_sorted_descending() -> None:
    """Test that output dates never increase."""
    current = [
        make_entry("2024.12.31", "1", "la"),
        make_entry("2025.05.01", "1", "la"),
        make_entry("2025.01.15", "1", "na"),
    ]

    merged = make_service().merge(
        current,
        [TimesheetRecord(date="2025-04-01", hours=2)],
        [GoalRecord(date="2025.03.16", hours=2)],
    )

    dates = [entry.date for entry in merged]
    if dates != sorted(dates, reverse=True):
        raise AssertionError(f"Dates not descending: {dates}")


def test_reconcile_counts_changes() -> None:
    """Test the added, updated and skipped counters."""
    current = [make_entry("2025.03.15", "2*35", "na")]

    result = make_service().reconcile(
        current,
        [
            TimesheetRecord(date="2025-03-14", hours=1),
            TimesheetRecord(date="2025-03-16", hours=1),
        ],
        [GoalRecord(date="2025.03.15", hours=4), GoalRecord(date="2025.03.16", hours=2)],
    )

    if (result.added, result.updated, result.skipped) != (2, 1, 1):
        raise AssertionError(
            f"Expected (2, 1, 1), got {(result.added, result.updated, result.skipped)}"
        )


def test_unchanged_amount_is_not_counted() -> None:
    """Test that a record whose amount already matches is a no-op."""
    current = [make_entry("2025.03.15", "4*35", "na", comment="kept")]

    result = make_service().reconcile(current, [], [GoalRecord(date="2025.03.15", hours=4.0)])

    if result.updated != 0:
        raise AssertionError(f"Expected no updates, got {result.updated}")
    if result.entries[0].comment != "kept":
        raise AssertionError("Comment should never be changed by a merge")


def test_configured_cutoff_is_used() -> None:
    """Test that the cutoff comes from configuration."""
    merged = make_service(cutoff_date="2025.01.01").merge(
        [], [TimesheetRecord(date="2025-03-01", hours=2)], []
    )

    if merged != [make_entry("2025.03.01", "2*35", "la")]:
        raise AssertionError(f"Unexpected merge result: {merged}")
