"""Data models for the EMI calculator.

This module defines dataclasses representing the different entities used by the
calculator: loan parameters, EMI increase instructions, the part-payment
strategy, individual schedule rows and the overall calculation result. Rows
projected onto a calendar and yearly groups of such rows live here too so the
renderers and exporters share a single vocabulary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class ReductionStrategy(str, Enum):
    """How a part payment affects the installments that follow it.

    ``REDUCE_EMI`` re-amortizes the reduced balance over the unchanged number
    of remaining months. ``REDUCE_TENURE`` keeps the installment and lets the
    loan close early.
    """

    REDUCE_EMI = "emi"
    REDUCE_TENURE = "tenure"


@dataclass(frozen=True)
class LoanParameters:
    """Inputs describing the loan itself.

    Attributes
    ----------
    principal: float
        Opening loan amount.
    annual_rate_percent: float
        Nominal annual interest rate in percent (``8.5`` means 8.5 %).
    tenure_years: float
        Loan duration in years. Fractional values are allowed, e.g. a tenure
        given in months is passed as ``months / 12``.
    """

    principal: float
    annual_rate_percent: float
    tenure_years: float


@dataclass(frozen=True)
class EmiIncrease:
    """Instruction to raise the EMI from a given month onwards.

    Attributes
    ----------
    kind: str
        ``"percent"`` raises the installment by ``value`` percent,
        ``"absolute"`` adds ``value`` currency units.
    value: float
        Size of the increase. Non-negative.
    """

    kind: str  # "percent" or "absolute"
    value: float

    def apply(self, emi: float) -> float:
        if self.kind == "percent":
            return emi * (1 + self.value / 100)
        return emi + self.value


@dataclass(frozen=True)
class ScheduleRow:
    """One month of the amortization schedule.

    ``year_index`` and ``month_index`` are 1-based positions within the loan
    (month 13 is year 2, month 1). Monetary fields are unrounded.
    """

    year_index: int
    month_index: int
    principal_paid: float
    interest_paid: float
    total_paid: float
    remaining_balance: float


@dataclass(frozen=True)
class LoanCalculationResult:
    """Aggregates and schedule returned by the engine.

    ``emi``, ``total_interest`` and ``total_payment`` are rounded to whole
    currency units. ``emi`` is the installment charged in the first month.
    """

    emi: int
    total_interest: int
    total_payment: int
    schedule: List[ScheduleRow] = field(default_factory=list)

    @property
    def months(self) -> int:
        return len(self.schedule)


@dataclass(frozen=True)
class CalendarRow:
    """A schedule row placed on the calendar.

    ``idx`` is the zero-based schedule index, which is also the key used by
    the part-payment and EMI-increase maps.
    """

    idx: int
    calendar_year: int
    calendar_month: int  # 1..12
    calendar_label: str
    row: ScheduleRow

    @property
    def principal(self) -> float:
        return self.row.principal_paid

    @property
    def interest(self) -> float:
        return self.row.interest_paid

    @property
    def total(self) -> float:
        return self.row.total_paid

    @property
    def balance(self) -> float:
        return self.row.remaining_balance


@dataclass
class YearGroup:
    """Rows that fall into one calendar or financial year with their totals."""

    key: str
    rows: List[CalendarRow]
    total_principal: float
    total_interest: float
    total_payment: float
    average_emi: float
    percent_reduced: float
    end_balance: float

    @property
    def label(self) -> str:
        return self.key
