"""Command‑line interface for the EMI calculator.

This module uses the ``click`` library to implement a multi‑command interface.
Users can compute full amortization schedules, view summaries, compare the
two part-payment strategies against a loan without part payments, or list the
loan-type presets. Schedules can be printed to the terminal, grouped by
calendar or financial year, or exported to JSON, CSV or Excel files.
"""

from __future__ import annotations

import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

import click

from .data_models import EmiIncrease, LoanCalculationResult, ReductionStrategy
from .export import export_to_csv, export_to_excel, export_to_json
from .formatter import format_inr, print_comparison, print_groups, print_schedule, print_summary
from .grouping import group_by_year
from .loan_types import LOAN_TYPE_CONFIGS, LOAN_TYPES, get_config
from .state import CalculatorState
from .utils import parse_amount, parse_emi_increase, parse_part_payment, parse_year_month, round_half_up


def configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.environ.get("EMI_CALC_LOG_LEVEL", "WARNING")
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def parse_part_payment_strings(values: Tuple[str, ...]) -> Dict[int, float]:
    payments: Dict[int, float] = {}
    for item in values:
        try:
            idx, amount = parse_part_payment(item)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
        payments[idx] = payments.get(idx, 0.0) + amount
    return payments


def parse_emi_increase_strings(values: Tuple[str, ...]) -> Dict[int, EmiIncrease]:
    increases: Dict[int, EmiIncrease] = {}
    for item in values:
        try:
            idx, increase = parse_emi_increase(item)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
        increases[idx] = increase
    return increases


def build_state_from_options(
    amount: Optional[str],
    rate: Optional[float],
    tenure: Optional[float],
    tenure_unit: str,
    loan_type: str,
    start_date: Optional[str],
    mode: str,
    part_payment: Tuple[str, ...],
    emi_increase: Tuple[str, ...],
    year_grouping: str = "calendar",
) -> CalculatorState:
    """Turn raw option values into a ``CalculatorState``.

    Missing amount, rate or tenure fall back to the loan type's defaults.
    """
    config = get_config(loan_type)
    try:
        amount_value = parse_amount(amount) if amount else float(config.loan_amount.default)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    if start_date:
        try:
            parse_year_month(start_date)
        except ValueError as exc:
            raise click.BadParameter(str(exc))
    if tenure is None:
        tenure = config.tenure.default * (12 if tenure_unit == "months" else 1)
    state = CalculatorState(
        loan_type=loan_type.lower(),
        amount=amount_value,
        rate=float(config.interest_rate.default if rate is None else rate),
        tenure=float(tenure),
        tenure_unit=tenure_unit,
        year_grouping=year_grouping,
        reduce_mode=ReductionStrategy(mode),
        part_payments=parse_part_payment_strings(part_payment),
        emi_increases=parse_emi_increase_strings(emi_increase),
    )
    if start_date:
        state = replace(state, start_date=start_date)
    return state


def loan_options(func: Callable) -> Callable:
    """Options shared by every command that computes a loan."""
    options = [
        click.option("--amount", "-a", "amount", help="Loan amount, e.g. 7500000, 75l or 1.2cr"),
        click.option("--rate", "-r", "rate", type=float, help="Annual interest rate (percent)"),
        click.option("--tenure", "-t", "tenure", type=float, help="Loan tenure"),
        click.option(
            "--tenure-unit",
            "tenure_unit",
            type=click.Choice(["years", "months"]),
            default="years",
            help="Unit of --tenure",
        ),
        click.option(
            "--loan-type",
            "loan_type",
            type=click.Choice(list(LOAN_TYPES)),
            default="home",
            help="Preset used for missing amount, rate and tenure",
        ),
        click.option("--start-date", "-s", "start_date", help="First EMI month (YYYY-MM)"),
        click.option(
            "--part-payment",
            "part_payment",
            multiple=True,
            help="Part payment in INDEX:AMOUNT format (0-based month index)",
        ),
        click.option(
            "--emi-increase",
            "emi_increase",
            multiple=True,
            help="EMI increase in INDEX:VALUE format; append % for a percentage",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


mode_option = click.option(
    "--mode",
    "mode",
    type=click.Choice([s.value for s in ReductionStrategy]),
    default=ReductionStrategy.REDUCE_EMI.value,
    help="Part payments reduce the EMI or the tenure",
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """An EMI loan calculator with part payments and EMI increases."""
    configure_logging(verbose)


@cli.command()
@loan_options
@mode_option
@click.option(
    "--group",
    "group",
    type=click.Choice(["none", "calendar", "financial"]),
    default="none",
    help="Print yearly totals instead of monthly rows",
)
@click.option("--output", "output", type=str, help="Output file path (.json, .csv or .xlsx)")
def schedule(
    amount: Optional[str],
    rate: Optional[float],
    tenure: Optional[float],
    tenure_unit: str,
    loan_type: str,
    start_date: Optional[str],
    mode: str,
    part_payment: Tuple[str, ...],
    emi_increase: Tuple[str, ...],
    group: str,
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    state = build_state_from_options(
        amount,
        rate,
        tenure,
        tenure_unit,
        loan_type,
        start_date,
        mode,
        part_payment,
        emi_increase,
        "calendar" if group == "none" else group,
    )
    result = state.result()
    rows = state.calendar_schedule(result)
    if output:
        path = Path(output)
        suffix = path.suffix.lower()
        if suffix == ".json":
            export_to_json(path, state, result, rows)
        elif suffix == ".csv":
            export_to_csv(path, state, rows)
        elif suffix == ".xlsx":
            export_to_excel(path, state, rows)
        else:
            raise click.BadParameter("Unsupported output format; use .json, .csv or .xlsx")
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(result, state.amount, round_half_up(state.tenure_years * 12))
    if group == "none":
        print_schedule(rows, state.amount, state.part_payments, state.emi_increases)
    else:
        print_groups(group_by_year(rows, group))


@cli.command()
@loan_options
@mode_option
def summary(
    amount: Optional[str],
    rate: Optional[float],
    tenure: Optional[float],
    tenure_unit: str,
    loan_type: str,
    start_date: Optional[str],
    mode: str,
    part_payment: Tuple[str, ...],
    emi_increase: Tuple[str, ...],
) -> None:
    """Compute and print only the summary figures for a loan."""
    state = build_state_from_options(
        amount, rate, tenure, tenure_unit, loan_type, start_date, mode, part_payment, emi_increase
    )
    print_summary(state.result(), state.amount, round_half_up(state.tenure_years * 12))


@cli.command()
@loan_options
def compare(
    amount: Optional[str],
    rate: Optional[float],
    tenure: Optional[float],
    tenure_unit: str,
    loan_type: str,
    start_date: Optional[str],
    part_payment: Tuple[str, ...],
    emi_increase: Tuple[str, ...],
) -> None:
    """Compare both part-payment strategies with a loan without extras."""
    state = build_state_from_options(
        amount,
        rate,
        tenure,
        tenure_unit,
        loan_type,
        start_date,
        ReductionStrategy.REDUCE_EMI.value,
        part_payment,
        emi_increase,
    )
    results: Dict[str, LoanCalculationResult] = {
        "baseline": replace(state, part_payments={}, emi_increases={}).result(),
        "reduce-emi": replace(state, reduce_mode=ReductionStrategy.REDUCE_EMI).result(),
        "reduce-tenure": replace(state, reduce_mode=ReductionStrategy.REDUCE_TENURE).result(),
    }
    print_comparison(results)


@cli.command(name="types")
def list_types() -> None:
    """List the loan-type presets."""
    for name in LOAN_TYPES:
        config = LOAN_TYPE_CONFIGS[name]
        click.echo(
            f"{name:10s} amount {format_inr(config.loan_amount.min)}-{format_inr(config.loan_amount.max)} "
            f"(default {format_inr(config.loan_amount.default)}), "
            f"rate {config.interest_rate.min:g}-{config.interest_rate.max:g}% "
            f"(default {config.interest_rate.default:g}%), "
            f"tenure {config.tenure.min:g}-{config.tenure.max:g} yrs "
            f"(default {config.tenure.default:g})"
        )


if __name__ == "__main__":
    cli()
