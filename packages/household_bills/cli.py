# ruff: noqa: I001
"""CLI for the ``household_bills`` package.

This module exposes callable command handlers (``cmd_parse_statement``,
``cmd_split_bills``, ``cmd_tracking_id``) and a Typer-based console interface.
Environment variables (``DATABASE_URL``, ``HB_OCCUPANT_COUNT``,
``HB_PATTERNS_FILE``) are loaded from a local ``.env`` using
``python-dotenv`` before delegating to command logic. Business logic lives in
``household_bills.api`` and related modules.

Handlers print results to stdout, warnings and errors to stderr, and return
an exit status: ``0`` success, ``1`` I/O or database failure, ``2``
configuration error.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .errors import ConfigurationError
from .logging_setup import configure_logging

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def cmd_parse_statement(csv_path: str) -> int:
    """Parse a statement CSV and print one line per transaction.

    Output: ``<date>\\t<amount>\\t<running balance>\\t<description>`` in file
    order. Malformed lines are reported on stderr and skipped.
    """

    from .ingest.utils import load_statement

    try:
        loaded = load_statement(csv_path)
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
        return EXIT_FAILURE
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
        return EXIT_FAILURE
    except UnicodeDecodeError as e:
        print(f"Error: '{csv_path}' is not UTF-8 text: {e}", file=sys.stderr)
        return EXIT_FAILURE

    for rec in loaded.records:
        print(f"{rec.date.isoformat()}\t{rec.amount}\t{rec.running_balance}\t{rec.description}")

    for err in loaded.errors:
        print(f"Warning: skipped {err}", file=sys.stderr)
    if loaded.unreconciled:
        print(
            f"Warning: parsed amounts differ from the statement summary by {loaded.unreconciled}",
            file=sys.stderr,
        )
    return EXIT_OK


def cmd_split_bills(
    csv_path: str,
    *,
    occupants: int | None = None,
    patterns_file: str | None = None,
    persist: bool = False,
    database_url: str | None = None,
    source_account: str | None = None,
) -> int:
    """Match bills in a statement CSV and print one split per bill.

    Output: ``<tracking id>\\t<merchant>\\t<total>\\t<split>\\t<date>``.
    Duplicate bills are listed on stderr for manual review.
    """

    from .config import load_settings
    from .workflows.bill_run import run_bills_from_csv

    try:
        settings = load_settings(occupant_count=occupants, patterns_file=patterns_file)
    except ConfigurationError as e:
        print(f"Error: configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG

    try:
        run = run_bills_from_csv(
            csv_path,
            pattern_table=settings.pattern_table,
            occupant_count=settings.occupant_count,
            database_url=database_url,
            persist=persist,
            source_account=source_account,
            on_progress=lambda msg: print(msg, file=sys.stderr),
        )
    except ConfigurationError as e:
        print(f"Error: configuration: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
        return EXIT_FAILURE
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
        return EXIT_FAILURE
    except UnicodeDecodeError as e:
        print(f"Error: '{csv_path}' is not UTF-8 text: {e}", file=sys.stderr)
        return EXIT_FAILURE
    except Exception as e:
        # DB connectivity and persistence failures land here.
        print(f"Error: bill run failed: {e}", file=sys.stderr)
        return EXIT_FAILURE

    for m in run.matches:
        print(
            f"{m.tracking_id}\t{m.merchant_name}\t{m.total_amount}\t{m.split_amount}\t"
            f"{m.transaction.date.isoformat()}"
        )
    for dup in run.duplicates:
        print(f"Duplicate: {dup.reason}", file=sys.stderr)
    return EXIT_OK


def cmd_tracking_id(text: str) -> int:
    """Find a tracking id in ``text`` and print ``<id>\\t<year>\\t<month>\\t<kind>``."""

    from .tracking import extract_tracking_id, parse_tracking_id

    found = extract_tracking_id(text)
    parsed = parse_tracking_id(found)
    if found is None or parsed is None:
        print("Error: no tracking id found", file=sys.stderr)
        return EXIT_FAILURE
    print(f"{found}\t{parsed.year}\t{parsed.month:02d}\t{parsed.kind}")
    return EXIT_OK


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Parse bank statement exports and split recurring household bills across "
        "occupants. Loads settings from a local .env before running."
    ),
)


# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a Bank of America statement CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler will report nice errors
)


def _exit_with(code: int) -> None:
    if code != EXIT_OK:
        raise typer.Exit(code)


@app.command("parse-statement")
def parse_statement_cmd(csv_path: Annotated[Path, CSV_PATH_OPTION]) -> None:
    """Print the transactions parsed from a statement CSV."""

    _exit_with(cmd_parse_statement(str(csv_path)))


@app.command("split-bills")
def split_bills_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    occupants: int | None = typer.Option(
        None, help="People sharing each bill (falls back to HB_OCCUPANT_COUNT, then 3)."
    ),
    patterns: Path | None = typer.Option(
        None,
        "--patterns",
        help="JSON merchant pattern table (falls back to HB_PATTERNS_FILE, then the bundled table).",
    ),
    persist: bool = typer.Option(
        False, help="Store transactions and new bill splits in the database."
    ),
    database_url: str | None = typer.Option(
        None, help="Override DATABASE_URL; also enables the already-billed check."
    ),
    source_account: str | None = typer.Option(
        None, help="Optional account label stored with each transaction."
    ),
) -> None:
    """Match recurring bills and print each occupant's share."""

    _exit_with(
        cmd_split_bills(
            str(csv_path),
            occupants=occupants,
            patterns_file=str(patterns) if patterns is not None else None,
            persist=persist,
            database_url=database_url,
            source_account=source_account,
        )
    )


@app.command("tracking-id")
def tracking_id_cmd(text: str = typer.Argument(..., help="Free text such as a payment note.")) -> None:
    """Extract and decode a bill tracking id from free text."""

    _exit_with(cmd_tracking_id(text))


@app.callback(invoke_without_command=True)
def _root(
    ctx: typer.Context,
    *,
    log_level: str | None = typer.Option(
        None, help="Log level (falls back to HOUSEHOLD_BILLS_LOG_LEVEL, then INFO)."
    ),
) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging once.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    try:
        configure_logging(log_level)
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(EXIT_CONFIG) from e

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m household_bills.cli`
    app()
