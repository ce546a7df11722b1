"""Command‑line interface for the loan solver.

This module uses the ``click`` library to implement one command per query:
``term`` (how long a payment takes to clear a loan), ``payment`` (the payment
that clears a loan within a term) and ``max-loan`` (the largest loan a payment
clears within a term). Results can be printed to the terminal or exported to
JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
import os
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Callable, Optional

import click

from .constants import DEFAULT_CURRENCY
from .data_models import CalculationResult, Failure
from .engine import (
    calculate_loan_term,
    calculate_max_loan_amount,
    calculate_monthly_payment,
    yearly_snapshots,
)
from .formatter import (
    describe_failure,
    print_schedule,
    print_summary,
    print_yearly,
    serialize_schedule,
    serialize_yearly,
    summarize,
)
from .utils import parse_amount, parse_percent, parse_start_date, parse_term

logger = logging.getLogger(__name__)


def _converter(parse: Callable[[str], Any]) -> Callable[[click.Context, click.Parameter, Optional[str]], Any]:
    """Wrap a ``ValueError``-raising parser as a click option callback."""

    def callback(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Any:
        if value is None:
            return None
        try:
            return parse(value)
        except ValueError as exc:
            raise click.BadParameter(str(exc), ctx=ctx, param=param)

    return callback


def _default_start_date() -> str:
    return date.today().replace(day=1).isoformat()


def _configure_logging(verbose: bool) -> None:
    if verbose:
        level = logging.DEBUG
    else:
        level = getattr(logging, os.environ.get("LOAN_SOLVER_LOG_LEVEL", "WARNING").upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def export_to_json(path: Path, result: CalculationResult) -> None:
    """Export summary, yearly series and schedule to a JSON file."""
    data = {
        "summary": summarize(result),
        "yearly": serialize_yearly(yearly_snapshots(result.schedule)),
        "schedule": serialize_schedule(result.schedule),
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, result: CalculationResult) -> None:
    """Export the schedule to a CSV file."""
    header = ["Month", "Date", "Interest", "Principal", "Extra_Payment", "Remaining_Debt"]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in result.schedule:
            writer.writerow(
                [
                    row.month,
                    row.date.isoformat(),
                    float(row.interest),
                    float(row.principal),
                    float(row.extra_payment),
                    float(row.remaining_debt),
                ]
            )


def _report(
    result: CalculationResult,
    quantity: str,
    currency: str,
    yearly: bool,
    output: Optional[str],
) -> None:
    if isinstance(result, Failure):
        logger.debug("%s calculation failed: %s", quantity, result.reason.value)
        click.echo(f"Error: {describe_failure(result, quantity)}", err=True)
        sys.exit(1)

    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(result, currency)
    if yearly:
        print_yearly(yearly_snapshots(result.schedule), currency)
    else:
        print_schedule(result.schedule)


def common_options(func: Callable) -> Callable:
    """Options shared by every query command."""
    options = [
        click.option("--rate", "-r", "rate", required=True, callback=_converter(parse_percent), help="Annual interest rate (percent)"),
        click.option("--extra", "-x", "extra", default="0", callback=_converter(parse_amount), help="Extra payment at the end of each loan year"),
        click.option("--start-date", "-s", "start_date", default=_default_start_date, callback=_converter(parse_start_date), help="First payment date (YYYY-MM or YYYY-MM-DD)"),
        click.option("--currency", "currency", default=lambda: os.environ.get("LOAN_SOLVER_CURRENCY", DEFAULT_CURRENCY), help="Currency symbol for printed amounts"),
        click.option("--yearly", "yearly", is_flag=True, help="Print one row per year instead of the full schedule"),
        click.option("--output", "output", type=str, help="Output file path (.json or .csv)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log solver progress")
def cli(verbose: bool) -> None:
    """A command‑line loan calculator for term, payment and loan size."""
    _configure_logging(verbose)


@cli.command()
@click.option("--principal", "-p", "principal", required=True, callback=_converter(parse_amount), help="Loan amount")
@click.option("--payment", "-m", "payment", required=True, callback=_converter(parse_amount), help="Monthly payment")
@common_options
def term(
    principal: Decimal,
    payment: Decimal,
    rate: Decimal,
    extra: Decimal,
    start_date: date,
    currency: str,
    yearly: bool,
    output: Optional[str],
) -> None:
    """Compute how long a monthly payment takes to clear a loan."""
    result = calculate_loan_term(principal, rate, payment, extra, start_date)
    _report(result, "loan term", currency, yearly, output)


@cli.command()
@click.option("--principal", "-p", "principal", required=True, callback=_converter(parse_amount), help="Loan amount")
@click.option("--term", "-t", "term_months", required=True, callback=_converter(parse_term), help="Loan term in months")
@common_options
def payment(
    principal: Decimal,
    term_months: int,
    rate: Decimal,
    extra: Decimal,
    start_date: date,
    currency: str,
    yearly: bool,
    output: Optional[str],
) -> None:
    """Compute the monthly payment that clears a loan within a term."""
    result = calculate_monthly_payment(principal, rate, term_months, extra, start_date)
    _report(result, "monthly payment", currency, yearly, output)


@cli.command(name="max-loan")
@click.option("--payment", "-m", "payment", required=True, callback=_converter(parse_amount), help="Monthly payment")
@click.option("--term", "-t", "term_months", required=True, callback=_converter(parse_term), help="Loan term in months")
@common_options
def max_loan(
    payment: Decimal,
    term_months: int,
    rate: Decimal,
    extra: Decimal,
    start_date: date,
    currency: str,
    yearly: bool,
    output: Optional[str],
) -> None:
    """Compute the largest loan a monthly payment clears within a term."""
    result = calculate_max_loan_amount(payment, rate, term_months, extra, start_date)
    _report(result, "max loan amount", currency, yearly, output)


if __name__ == "__main__":
    cli()
