"""Output helpers for the EMI calculator.

This module renders results as tab-separated text tables and formats amounts
in Indian rupees with lakh/crore digit grouping. Every amount goes through
:func:`emi_calc.utils.round_half_up`, the same rule the exporters use, so a
figure reads the same in the terminal, the web page and a downloaded file.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

import click

from .data_models import CalendarRow, EmiIncrease, LoanCalculationResult, YearGroup
from .grouping import loan_paid_percent
from .utils import round_half_up


def group_indian(digits: str) -> str:
    """Insert Indian separators: ``"7500000"`` -> ``"75,00,000"``."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups: List[str] = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(value: float) -> str:
    """Format ``value`` as whole rupees, e.g. ``format_inr(7500000) == "₹75,00,000"``."""
    amount = round_half_up(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}₹{group_indian(str(abs(amount)))}"


def format_increase(increase: Optional[EmiIncrease]) -> str:
    """``10%`` for percentage increases, rupees for absolute ones, ``-`` if none."""
    if increase is None or not increase.value or increase.value <= 0:
        return "-"
    if increase.kind == "percent":
        return f"{increase.value:g}%"
    return format_inr(increase.value)


def print_summary(result: LoanCalculationResult, principal: float, nominal_months: Optional[int] = None) -> None:
    """Print the aggregate figures of a calculation."""
    click.echo("Summary")
    click.echo("-" * 72)
    click.echo(f"Loan amount        : {format_inr(principal)}")
    click.echo(f"Monthly EMI        : {format_inr(result.emi)}")
    click.echo(f"Total interest     : {format_inr(result.total_interest)}")
    click.echo(f"Total payment      : {format_inr(result.total_payment)}")
    click.echo(f"Months             : {result.months}")
    if nominal_months is not None and result.months < nominal_months:
        click.echo(f"Months saved       : {nominal_months - result.months}")
    click.echo("-" * 72)


def print_schedule(
    rows: Iterable[CalendarRow],
    principal: float,
    part_payments: Optional[Mapping[int, float]] = None,
    emi_increases: Optional[Mapping[int, EmiIncrease]] = None,
) -> None:
    """Print the month-by-month schedule as a simple table."""
    part_payments = part_payments or {}
    emi_increases = emi_increases or {}
    headers = ["Period", "Principal", "Interest", "Total", "Balance", "Paid%", "Part-pay", "EMI+"]
    click.echo("\t".join(headers))
    for row in rows:
        extra = part_payments.get(row.idx) or 0
        click.echo(
            "\t".join(
                [
                    row.calendar_label,
                    format_inr(row.principal),
                    format_inr(row.interest),
                    format_inr(row.total),
                    format_inr(row.balance),
                    f"{loan_paid_percent(row.balance, principal):.1f}",
                    format_inr(extra) if extra > 0 else "-",
                    format_increase(emi_increases.get(row.idx)),
                ]
            )
        )


def print_groups(groups: Iterable[YearGroup]) -> None:
    """Print one line per calendar or financial year."""
    headers = ["Year", "Principal", "Interest", "Total", "Avg EMI", "Reduced%", "Balance"]
    click.echo("\t".join(headers))
    for group in groups:
        click.echo(
            "\t".join(
                [
                    group.label,
                    format_inr(group.total_principal),
                    format_inr(group.total_interest),
                    format_inr(group.total_payment),
                    format_inr(group.average_emi),
                    f"{group.percent_reduced:.1f}",
                    format_inr(group.end_balance),
                ]
            )
        )


def print_comparison(results: Dict[str, LoanCalculationResult]) -> None:
    """Print scenarios side by side against the first one (the baseline).

    A positive saving means the scenario is cheaper or shorter than the
    baseline.
    """
    names = list(results)
    baseline = results[names[0]]
    click.echo("Comparison")
    click.echo("=" * 86)
    click.echo(
        f"{'Scenario':20s} {'EMI':>12s} {'Interest':>15s} {'Months':>8s} "
        f"{'Interest saved':>15s} {'Months saved':>13s}"
    )
    for name in names:
        res = results[name]
        saved = baseline.total_interest - res.total_interest
        months_saved = baseline.months - res.months
        click.echo(
            f"{name:20s} {format_inr(res.emi):>12s} {format_inr(res.total_interest):>15s} "
            f"{res.months:8d} {format_inr(saved):>15s} {months_saved:13d}"
        )
    click.echo("=" * 86)
