"""Calculator state.

The form fields of an interactive session live in an explicit, immutable
``CalculatorState``. Changes go through :func:`reduce`, which takes a state
and an action and returns a new state, so the engine stays a pure function of
whatever state the presentation layer hands it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Dict, List, Optional

from .data_models import CalendarRow, EmiIncrease, LoanCalculationResult, ReductionStrategy
from .engine import calculate_loan
from .grouping import GROUPINGS, attach_calendar
from .loan_types import get_config
from .utils import parse_year_month

TENURE_UNITS = ("years", "months")


def _current_month() -> str:
    today = date.today()
    return f"{today.year}-{today.month:02d}"


@dataclass(frozen=True)
class CalculatorState:
    loan_type: str = "home"
    amount: float = 7_500_000
    rate: float = 8.5
    tenure: float = 20
    tenure_unit: str = "years"
    start_date: str = field(default_factory=_current_month)
    year_grouping: str = "calendar"
    reduce_mode: ReductionStrategy = ReductionStrategy.REDUCE_EMI
    expanded: Dict[str, bool] = field(default_factory=dict)
    part_payments: Dict[int, float] = field(default_factory=dict)
    emi_increases: Dict[int, EmiIncrease] = field(default_factory=dict)

    @property
    def tenure_years(self) -> float:
        if self.tenure_unit == "months":
            return self.tenure / 12
        return self.tenure

    def result(self) -> LoanCalculationResult:
        return calculate_loan(
            self.amount,
            self.rate,
            self.tenure_years,
            part_payments=self.part_payments,
            strategy=self.reduce_mode,
            emi_increases=self.emi_increases,
        )

    def calendar_schedule(self, result: Optional[LoanCalculationResult] = None) -> List[CalendarRow]:
        result = result or self.result()
        return attach_calendar(result.schedule, parse_year_month(self.start_date))


@dataclass(frozen=True)
class Action:
    type: str
    payload: Any = None


def _set_part_payment(state: CalculatorState, payload: Any) -> CalculatorState:
    idx, amount = payload
    payments = dict(state.part_payments)
    if amount:
        payments[idx] = amount
    else:
        payments.pop(idx, None)
    return replace(state, part_payments=payments)


def _set_emi_increase(state: CalculatorState, payload: Any) -> CalculatorState:
    idx, increase = payload
    increases = dict(state.emi_increases)
    if increase is not None and increase.value:
        increases[idx] = increase
    else:
        increases.pop(idx, None)
    return replace(state, emi_increases=increases)


def _reset_to_defaults(state: CalculatorState) -> CalculatorState:
    config = get_config(state.loan_type)
    return replace(
        state,
        amount=config.loan_amount.default,
        rate=config.interest_rate.default,
        tenure=config.tenure.default,
    )


def reduce(state: CalculatorState, action: Action) -> CalculatorState:
    """Apply ``action`` to ``state`` and return the new state.

    ``SET_LOAN_TYPE`` also resets amount, rate and tenure to the new type's
    defaults. ``SET_PART_PAYMENT`` and ``SET_EMI_INCREASE`` take an
    ``(index, value)`` pair; a zero or ``None`` value clears the month.
    """
    kind = action.type
    payload = action.payload
    if kind == "SET_LOAN_TYPE":
        get_config(payload)
        return _reset_to_defaults(replace(state, loan_type=payload.lower()))
    if kind == "SET_AMOUNT":
        return replace(state, amount=float(payload))
    if kind == "SET_RATE":
        return replace(state, rate=float(payload))
    if kind == "SET_TENURE":
        return replace(state, tenure=float(payload))
    if kind == "SET_TENURE_UNIT":
        if payload not in TENURE_UNITS:
            raise ValueError(f"Unknown tenure unit: {payload}")
        return replace(state, tenure_unit=payload)
    if kind == "SET_START_DATE":
        parse_year_month(payload)
        return replace(state, start_date=payload)
    if kind == "SET_YEAR_GROUPING":
        if payload not in GROUPINGS:
            raise ValueError(f"Unknown year grouping: {payload}")
        return replace(state, year_grouping=payload)
    if kind == "SET_REDUCE_MODE":
        return replace(state, reduce_mode=ReductionStrategy(payload))
    if kind == "SET_EXPANDED":
        return replace(state, expanded=dict(payload))
    if kind == "SET_PART_PAYMENT":
        return _set_part_payment(state, payload)
    if kind == "SET_EMI_INCREASE":
        return _set_emi_increase(state, payload)
    if kind == "RESET_TO_DEFAULTS":
        return _reset_to_defaults(state)
    raise ValueError(f"Unknown action: {kind}")
