"""Calendar projection and yearly grouping of amortization schedules.

The engine numbers months from zero and knows nothing about dates. The helpers
here place each row on the calendar starting from a given month, group rows by
calendar year or by Indian financial year (April to March) and derive the
series used for yearly charts.
"""

from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Sequence

from .data_models import CalendarRow, LoanCalculationResult, ScheduleRow, YearGroup
from .utils import add_months

GROUPINGS = ("calendar", "financial")

_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def month_label(year: int, month: int) -> str:
    """``(2025, 3)`` -> ``"Mar, 2025"``."""
    return f"{_MONTH_ABBR[month - 1]}, {year}"


def attach_calendar(schedule: Sequence[ScheduleRow], start: date) -> List[CalendarRow]:
    """Date each schedule row, row ``idx`` falling ``idx`` months after ``start``."""
    first = date(start.year, start.month, 1)
    rows: List[CalendarRow] = []
    for idx, row in enumerate(schedule):
        current = add_months(first, idx)
        rows.append(
            CalendarRow(
                idx=idx,
                calendar_year=current.year,
                calendar_month=current.month,
                calendar_label=month_label(current.year, current.month),
                row=row,
            )
        )
    return rows


def financial_year_label(year: int, month: int) -> str:
    """Label of the April-March financial year containing ``year``/``month``.

    April 2025 to March 2026 is ``"FY 2025-26"``.
    """
    start = year if month >= 4 else year - 1
    return f"FY {start}-{(start + 1) % 100:02d}"


def _summarize(key: str, rows: List[CalendarRow]) -> YearGroup:
    total_principal = sum(r.principal for r in rows)
    total_interest = sum(r.interest for r in rows)
    total_payment = sum(r.total for r in rows)
    start_balance = rows[0].balance + rows[0].principal
    end_balance = rows[-1].balance
    if start_balance > 0:
        percent_reduced = (start_balance - end_balance) / start_balance * 100
    else:
        percent_reduced = 0.0
    return YearGroup(
        key=key,
        rows=rows,
        total_principal=total_principal,
        total_interest=total_interest,
        total_payment=total_payment,
        average_emi=total_payment / len(rows),
        percent_reduced=percent_reduced,
        end_balance=end_balance,
    )


def group_by_year(rows: Iterable[CalendarRow], grouping: str = "calendar") -> List[YearGroup]:
    """Group calendar rows by year, keeping first-seen order.

    Parameters
    ----------
    rows: Iterable[CalendarRow]
        Rows produced by :func:`attach_calendar`.
    grouping: str
        ``"calendar"`` keys groups by calendar year (``"2025"``);
        ``"financial"`` keys them by financial year (``"FY 2025-26"``).
    """
    if grouping not in GROUPINGS:
        raise ValueError(f"Unknown year grouping: {grouping}")
    grouped: Dict[str, List[CalendarRow]] = {}
    for row in rows:
        if grouping == "calendar":
            key = str(row.calendar_year)
        else:
            key = financial_year_label(row.calendar_year, row.calendar_month)
        grouped.setdefault(key, []).append(row)
    return [_summarize(key, members) for key, members in grouped.items()]


def yearly_chart_series(schedule: Sequence[ScheduleRow]) -> Dict[str, list]:
    """Per loan-year principal, interest and closing balance.

    Years are the engine's ``year_index`` values, labelled ``Y1``, ``Y2``, ...
    """
    principal: Dict[int, float] = {}
    interest: Dict[int, float] = {}
    balance: Dict[int, float] = {}
    for row in schedule:
        principal[row.year_index] = principal.get(row.year_index, 0.0) + row.principal_paid
        interest[row.year_index] = interest.get(row.year_index, 0.0) + row.interest_paid
        balance[row.year_index] = row.remaining_balance
    years = list(principal)
    return {
        "labels": [f"Y{i + 1}" for i in range(len(years))],
        "principal": [principal[y] for y in years],
        "interest": [interest[y] for y in years],
        "balance": [balance[y] for y in years],
    }


def payment_breakdown(result: LoanCalculationResult, principal: float) -> Dict[str, float]:
    """Split of the total payment into principal and interest."""
    return {"principal": float(principal) if result.schedule else 0.0, "interest": float(result.total_interest)}


def loan_paid_percent(balance: float, principal: float) -> float:
    """Share of ``principal`` already repaid, in percent, to one decimal."""
    if principal <= 0:
        return 0.0
    return round((1 - balance / principal) * 100, 1)
