"""Export helpers for amortization schedules.

Schedules can be written as CSV, JSON or an Excel workbook. All three share
the same column rules: the ``Loan Paid %`` column is dropped when the loan
has both part payments and EMI increases, and the ``Part-payment`` and
``EMI Increase`` columns only appear when the loan has any. Amounts are
rounded half-up to whole rupees, matching the on-screen tables.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Sequence, Tuple, Union

import xlsxwriter

from .data_models import CalendarRow, LoanCalculationResult
from .formatter import format_increase, format_inr
from .grouping import loan_paid_percent
from .loan_types import category_label
from .state import CalculatorState
from .utils import round_half_up

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _has_part_payments(state: CalculatorState) -> bool:
    return any(v > 0 for v in state.part_payments.values())


def _has_emi_increases(state: CalculatorState) -> bool:
    return any(inc is not None and inc.value > 0 for inc in state.emi_increases.values())


def loan_details(state: CalculatorState) -> List[Tuple[str, str]]:
    """Header block describing the loan, in display order."""
    unit = "yrs" if state.tenure_unit == "years" else "mo"
    return [
        ("Loan Category", category_label(state.loan_type)),
        ("Loan Amount", format_inr(state.amount)),
        ("Interest Rate", f"{state.rate:g}%"),
        ("Tenure", f"{state.tenure:g} {unit}"),
        ("Start Date", state.start_date),
    ]


def schedule_table(state: CalculatorState, rows: Sequence[CalendarRow]) -> Tuple[List[str], List[List[str]]]:
    """Return the column headers and formatted cells for ``rows``."""
    has_parts = _has_part_payments(state)
    has_increases = _has_emi_increases(state)
    show_paid = not (has_parts and has_increases)

    headers = ["Period", "Principal (A)", "Interest (B)", "Total Payment (A+B)", "Balance"]
    if show_paid:
        headers.append("Loan Paid %")
    if has_parts:
        headers.append("Part-payment")
    if has_increases:
        headers.append("EMI Increase")

    body: List[List[str]] = []
    for row in rows:
        cells = [
            row.calendar_label,
            format_inr(row.principal),
            format_inr(row.interest),
            format_inr(row.total),
            format_inr(row.balance),
        ]
        if show_paid:
            cells.append(f"{loan_paid_percent(row.balance, state.amount):.1f}%")
        if has_parts:
            extra = state.part_payments.get(row.idx) or 0
            cells.append(format_inr(extra) if extra > 0 else "-")
        if has_increases:
            cells.append(format_increase(state.emi_increases.get(row.idx)))
        body.append(cells)
    return headers, body


def export_to_csv(target: Union[Path, io.StringIO], state: CalculatorState, rows: Sequence[CalendarRow]) -> None:
    """Write the schedule table as CSV to a path or text buffer."""
    headers, body = schedule_table(state, rows)
    if isinstance(target, Path):
        with target.open("w", newline="", encoding="utf-8") as f:
            _write_csv(f, headers, body)
    else:
        _write_csv(target, headers, body)
    logger.info("Exported %d schedule rows as CSV", len(body))


def _write_csv(f, headers: List[str], body: List[List[str]]) -> None:
    writer = csv.writer(f)
    writer.writerow(headers)
    writer.writerows(body)


def result_to_dict(state: CalculatorState, result: LoanCalculationResult, rows: Sequence[CalendarRow]) -> Dict[str, Any]:
    """JSON-serialisable view of a calculation, with rounded row amounts."""
    return {
        "loan": dict(loan_details(state)),
        "summary": {
            "emi": result.emi,
            "total_interest": result.total_interest,
            "total_payment": result.total_payment,
            "months": result.months,
        },
        "schedule": [
            {
                "index": row.idx,
                "period": row.calendar_label,
                "year": row.row.year_index,
                "month": row.row.month_index,
                "principal": round_half_up(row.principal),
                "interest": round_half_up(row.interest),
                "total": round_half_up(row.total),
                "balance": round_half_up(row.balance),
            }
            for row in rows
        ],
    }


def export_to_json(path: Path, state: CalculatorState, result: LoanCalculationResult, rows: Sequence[CalendarRow]) -> None:
    """Export loan details, summary and schedule to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(result_to_dict(state, result, rows), f, indent=2, ensure_ascii=False)
    logger.info("Exported %d schedule rows to %s", len(rows), path)


def export_to_excel(target: Union[Path, BinaryIO], state: CalculatorState, rows: Sequence[CalendarRow]) -> None:
    """Write an ``Amortization Schedule`` workbook to a path or binary buffer.

    The sheet starts with the loan details block, then a blank row, then the
    schedule table.
    """
    if isinstance(target, Path):
        workbook = xlsxwriter.Workbook(str(target))
    else:
        workbook = xlsxwriter.Workbook(target, {"in_memory": True})
    try:
        sheet = workbook.add_worksheet("Amortization Schedule")
        bold = workbook.add_format({"bold": True})
        header_fmt = workbook.add_format({"bold": True, "bg_color": "#DCE6F1", "border": 1})

        details = loan_details(state)
        for col, (label, value) in enumerate(details):
            sheet.write(0, col, label, bold)
            sheet.write(1, col, value)

        headers, body = schedule_table(state, rows)
        start = 3
        for col, header in enumerate(headers):
            sheet.write(start, col, header, header_fmt)
        for offset, cells in enumerate(body, start=1):
            for col, value in enumerate(cells):
                sheet.write(start + offset, col, value)
        sheet.set_column(0, len(headers) - 1, 18)
    finally:
        workbook.close()
    logger.info("Exported %d schedule rows as Excel", len(rows))


def excel_bytes(state: CalculatorState, rows: Sequence[CalendarRow]) -> bytes:
    buffer = io.BytesIO()
    export_to_excel(buffer, state, rows)
    return buffer.getvalue()
