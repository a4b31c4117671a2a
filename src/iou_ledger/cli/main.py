"""
Command-line interface for IOU Ledger.

Provides commands for reconciling the ledger with Baserow and Beeminder hours,
and for the manual sort, conversion, goal import and invoice tools.
"""

import json
from pathlib import Path
from typing import Any

import typer
from pydantic import BaseModel, ValidationError

from iou_ledger.domain.entry import GoalDatapoint, GoalRecord, LedgerSnapshot, TimesheetRecord
from iou_ledger.infrastructure.clients.baserow_client import BaserowClient
from iou_ledger.infrastructure.clients.beeminder_client import BeeminderClient
from iou_ledger.infrastructure.parsers.hours_table_parser import HoursTableParser
from iou_ledger.infrastructure.parsers.ledger_parser import LedgerParser
from iou_ledger.services.generator import LedgerGenerator
from iou_ledger.services.invoice import InvoiceService
from iou_ledger.services.ledger_update import LedgerUpdateService
from iou_ledger.services.normalization import (
    build_entries,
    collapse_datapoints,
    sum_datapoints_by_day,
)
from iou_ledger.services.output import OutputService
from iou_ledger.services.reconciliation import ReconciliationService
from iou_ledger.utils.date_utils import parse_date
from iou_ledger.utils.exceptions import ConfigurationError, IouLedgerError, ParsingError
from iou_ledger.utils.logging_config import get_logger, setup_logging
from iou_ledger.utils.parameters import (
    AccountPairConfig,
    ParameterLoader,
    ReconciliationConfig,
)

app = typer.Typer(help="IOU Ledger - Reconcile logged hours into a plain-text IOU ledger")

logger = get_logger(__name__)


def init_config(config_path: str = "config/config.yaml") -> ParameterLoader:
    """
    Initialize configuration and logging.

    Args:
        config_path: Path to configuration file.

    Returns:
        Parameter loader instance.
    """
    param_loader = ParameterLoader(config_path)
    setup_logging(param_loader.get_logging_config(), "iou_ledger")
    return param_loader


def read_text(path: str) -> str:
    """
    Read UTF-8 text from a file, or from stdin when path is ``-``.

    Raises:
        ParsingError: If the file cannot be read.
    """
    if path == "-":
        return typer.get_text_stream("stdin").read()
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ParsingError(f"Failed to read {path}: {e}") from e


def load_records(path: str, model: type[BaseModel]) -> list[Any]:
    """
    Load a JSON array of records from a file.

    Args:
        path: Path to the JSON file.
        model: Pydantic model each element is validated against.

    Returns:
        Validated records.

    Raises:
        ParsingError: If the file is not a valid JSON array of records.
    """
    try:
        data = json.loads(read_text(path))
        if not isinstance(data, list):
            raise ParsingError(f"Expected a JSON array in {path}")
        return [model.model_validate(item) for item in data]
    except (json.JSONDecodeError, ValidationError) as e:
        raise ParsingError(f"Invalid records in {path}: {e}") from e


def override_reconciliation(
    config: ReconciliationConfig, **overrides: Any
) -> ReconciliationConfig:
    """
    Apply command-line overrides to the reconciliation rules.

    The result is validated again, so an override is held to the same
    constraints as the configuration file.

    Args:
        config: Rules loaded from configuration.
        **overrides: Field values to replace; None leaves a field as configured.

    Returns:
        Validated reconciliation rules.

    Raises:
        ConfigurationError: If an override is invalid.
    """
    updates = {key: value for key, value in overrides.items() if value is not None}
    if not updates:
        return config
    try:
        return ReconciliationConfig.model_validate({**config.model_dump(), **updates})
    except ValidationError as e:
        raise ConfigurationError(f"Invalid reconciliation override: {e}") from e


@app.command()
def update(
    ledger: str = typer.Argument(..., help="Ledger file to reconcile"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    output: str | None = typer.Option(
        None, help="Write the updated ledger here instead of in place"
    ),
    dry_run: bool = typer.Option(False, help="Print the updated ledger without writing"),
) -> None:
    """
    Reconcile a ledger file with Baserow and Beeminder hours.

    Fetches recent billable hours, merges them into the ledger, writes the
    result and appends a snapshot of the run to the snapshot log.
    """
    try:
        param_loader = init_config(config_path)
        output_service = OutputService(param_loader.get_output_config())

        logger.info("Starting ledger update")

        service = LedgerUpdateService(
            BaserowClient(param_loader.get_baserow_config()),
            BeeminderClient(param_loader.get_beeminder_config()),
            ReconciliationService(param_loader.get_reconciliation_config()),
        )
        snapshot = service.run(read_text(ledger))

        if dry_run:
            typer.echo(snapshot.after_content)
            return

        output_service.write_snapshot(snapshot)
        output_service.write_ledger(snapshot.after_content, Path(output or ledger))

        typer.echo(f"Added {snapshot.added} and updated {snapshot.updated} entries", err=True)

    except IouLedgerError as e:
        logger.error(f"Update failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def merge(
    ledger: str = typer.Argument(..., help="Ledger file to reconcile ('-' for stdin)"),
    timesheet: str | None = typer.Option(None, help="JSON array of Baserow records"),
    goals: str | None = typer.Option(None, help="JSON array of per-day Beeminder records"),
    datapoints: str | None = typer.Option(
        None, help="JSON array of raw Beeminder datapoints (collapsed per day)"
    ),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    rate: float | None = typer.Option(None, help="Override hourly rate from config"),
    cutoff: str | None = typer.Option(None, help="Override cutoff date (YYYY.MM.DD)"),
    output: str | None = typer.Option(None, help="Output file (prints to stdout if omitted)"),
) -> None:
    """
    Reconcile a ledger with records from local JSON files.

    Runs the same merge as update without contacting any service.
    """
    try:
        param_loader = init_config(config_path)
        config = override_reconciliation(
            param_loader.get_reconciliation_config(), rate=rate, cutoff_date=cutoff
        )

        entries = LedgerParser().parse(read_text(ledger))
        timesheet_records: list[TimesheetRecord] = (
            load_records(timesheet, TimesheetRecord) if timesheet else []
        )
        goal_records: list[GoalRecord] = load_records(goals, GoalRecord) if goals else []
        if datapoints:
            goal_records.extend(collapse_datapoints(load_records(datapoints, GoalDatapoint)))

        result = ReconciliationService(config).reconcile(entries, timesheet_records, goal_records)
        text = LedgerGenerator().generate(result.entries)

        if output is None:
            typer.echo(text)
        else:
            OutputService(param_loader.get_output_config()).write_ledger(text, Path(output))
            typer.echo(f"Added {result.added} and updated {result.updated} entries", err=True)

    except IouLedgerError as e:
        logger.error(f"Merge failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def check(
    ledger: str = typer.Argument(..., help="Ledger file to validate ('-' for stdin)"),
) -> None:
    """
    Validate that every entry line of a ledger parses.
    """
    try:
        entries = LedgerParser().parse(read_text(ledger))
        typer.echo(f"{len(entries)} entries OK")

    except IouLedgerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def sort(
    input_file: str = typer.Argument("-", help="Ledger text to sort ('-' for stdin)"),
) -> None:
    """
    Sort dated entry lines newest first, keeping their text unchanged.
    """
    try:
        typer.echo(LedgerGenerator().sort_lines(read_text(input_file)))

    except IouLedgerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def convert(
    input_file: str = typer.Argument("-", help="Tab-separated hours<TAB>date rows ('-' for stdin)"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    rate: float | None = typer.Option(None, help="Override hourly rate from config"),
    account: str | None = typer.Option(None, help="Override destination account from config"),
    comment: str | None = typer.Option(None, help="Override entry comment from config"),
) -> None:
    """
    Convert tab-separated hours into ledger entries, one per day.
    """
    try:
        param_loader = init_config(config_path)
        import_config = param_loader.get_import_config()

        daily = HoursTableParser().parse(read_text(input_file))
        entries = build_entries(
            daily,
            rate if rate is not None else import_config.rate,
            AccountPairConfig(
                from_account=import_config.from_account,
                to_account=account or import_config.to_account,
            ),
            comment if comment is not None else import_config.comment,
        )
        typer.echo(LedgerGenerator().generate(entries))

    except IouLedgerError as e:
        logger.error(f"Conversion failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command("goal-import")
def goal_import(
    goal: str | None = typer.Option(None, help="Goal slug (defaults to configured goal)"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
    list_goals: bool = typer.Option(False, "--list", help="List available goals and exit"),
) -> None:
    """
    Turn a Beeminder goal's datapoints into ledger entries, one per day.
    """
    try:
        param_loader = init_config(config_path)
        import_config = param_loader.get_import_config()
        client = BeeminderClient(param_loader.get_beeminder_config())

        if list_goals:
            for slug in client.list_goals():
                typer.echo(slug)
            return

        daily = sum_datapoints_by_day(client.fetch_datapoints(goal), import_config.timezone)
        entries = build_entries(
            daily,
            import_config.rate,
            AccountPairConfig(
                from_account=import_config.from_account, to_account=import_config.to_account
            ),
            import_config.comment,
        )
        typer.echo(LedgerGenerator().generate(entries))

    except IouLedgerError as e:
        logger.error(f"Goal import failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def invoice(
    client_name: str = typer.Option(..., "--client", help="Client name to invoice"),
    start: str = typer.Option(..., help="First day of the invoice period"),
    end: str = typer.Option(..., help="Last day of the invoice period"),
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """
    Fetch billable hours for a client and write an invoice CSV.
    """
    try:
        param_loader = init_config(config_path)

        try:
            start_date = parse_date(start).isoformat()
            end_date = parse_date(end).isoformat()
        except (ValueError, OverflowError) as e:
            raise ParsingError(f"Invalid invoice period {start} - {end}: {e}") from e

        lines = BaserowClient(param_loader.get_baserow_config()).fetch_invoice_lines(
            client_name, start_date, end_date
        )
        summary = InvoiceService().summarize(client_name, start_date, end_date, lines)

        invoice_path = OutputService(param_loader.get_output_config()).write_invoice(summary)

        for date, hours in summary.hours_by_date.items():
            typer.echo(f"{date}  {hours:.2f}")
        typer.echo(f"Total hours: {summary.total_hours:.2f}")
        typer.echo(f"Invoice written to {invoice_path}")

    except IouLedgerError as e:
        logger.error(f"Invoice failed: {e}")
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


@app.command()
def last(
    config_path: str = typer.Option("config/config.yaml", help="Path to configuration file"),
) -> None:
    """
    Print the ledger produced by the most recent update run.
    """
    try:
        param_loader = init_config(config_path)
        snapshot: LedgerSnapshot | None = OutputService(
            param_loader.get_output_config()
        ).load_latest_snapshot()

        if snapshot is None:
            typer.echo("No update has been recorded yet", err=True)
            raise typer.Exit(code=1)

        typer.echo(f"Snapshot from {snapshot.timestamp.isoformat()}", err=True)
        typer.echo(snapshot.after_content)

    except IouLedgerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e


if __name__ == "__main__":
    app()
