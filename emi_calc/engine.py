"""Core calculation engine for the EMI calculator.

This module implements the financial logic required to build amortization
schedules for equated monthly installment (EMI) loans. It supports sparse
part payments, applied either to shorten the tenure or to lower the EMI, and
EMI increases given as a percentage or an absolute amount. Results are
returned as a ``LoanCalculationResult`` holding the rounded aggregates and the
unrounded month-by-month schedule.

All arithmetic is plain floating point. Rounding is applied only to the three
aggregates; the running balance and interest carry full precision so that
rounding errors do not compound across months.
"""

from __future__ import annotations

import logging
import math
from typing import List, Mapping, Optional

from .data_models import (
    EmiIncrease,
    LoanCalculationResult,
    LoanParameters,
    ReductionStrategy,
    ScheduleRow,
)
from .utils import round_half_up

logger = logging.getLogger(__name__)


def _empty_result() -> LoanCalculationResult:
    return LoanCalculationResult(emi=0, total_interest=0, total_payment=0, schedule=[])


def _calculate_emi(balance: float, rate_per_month: float, months: int) -> float:
    """Return the equated monthly installment for ``balance`` over ``months``.

    The formula is:

        emi = P * i * (1 + i)^n / ((1 + i)^n - 1)

    where ``P`` is the balance, ``i`` the monthly interest rate and ``n`` the
    number of installments. When the denominator is not positive (which only
    happens for vanishingly small rates) the payment falls back to ``P / n``.
    """
    factor = math.pow(1 + rate_per_month, months)
    denominator = factor - 1
    if denominator > 0:
        return balance * rate_per_month * factor / denominator
    return balance / months


def _straight_line(principal: float, months: int) -> LoanCalculationResult:
    """Zero-interest schedule repaying an equal share of principal each month.

    Part payments and EMI increases are not applied here.
    """
    share = principal / months
    schedule = [
        ScheduleRow(
            year_index=i // 12 + 1,
            month_index=i % 12 + 1,
            principal_paid=share,
            interest_paid=0.0,
            total_paid=share,
            remaining_balance=principal - share * (i + 1),
        )
        for i in range(months)
    ]
    return LoanCalculationResult(
        emi=round_half_up(share),
        total_interest=0,
        total_payment=round_half_up(principal),
        schedule=schedule,
    )


def calculate_loan(
    principal: float,
    annual_rate_percent: float,
    tenure_years: float,
    part_payments: Optional[Mapping[int, float]] = None,
    strategy: ReductionStrategy = ReductionStrategy.REDUCE_EMI,
    emi_increases: Optional[Mapping[int, EmiIncrease]] = None,
) -> LoanCalculationResult:
    """Compute the amortization schedule and aggregates for an EMI loan.

    Parameters
    ----------
    principal: float
        Opening loan amount.
    annual_rate_percent: float
        Nominal annual rate in percent.
    tenure_years: float
        Loan duration in years; the schedule has ``round(tenure_years * 12)``
        months at most.
    part_payments: Mapping[int, float]
        Extra amounts keyed by zero-based schedule month. The amount is taken
        off the balance before that month's interest is computed.
    strategy: ReductionStrategy
        Whether a part payment lowers the EMI or shortens the tenure.
    emi_increases: Mapping[int, EmiIncrease]
        EMI increases keyed by zero-based schedule month.

    Returns
    -------
    LoanCalculationResult
        ``emi`` is the first month's installment. A change announced in month
        ``i`` (increase or re-amortization) is charged from month ``i + 1``.
        Degenerate inputs never raise: a non-positive principal or tenure
        yields an all-zero result, and a non-positive rate yields a
        straight-line schedule.
    """
    part_payments = part_payments or {}
    emi_increases = emi_increases or {}

    if principal <= 0 or tenure_years <= 0:
        logger.debug("Degenerate loan (principal=%s, tenure=%s); empty schedule", principal, tenure_years)
        return _empty_result()

    total_months = round_half_up(tenure_years * 12)
    if total_months <= 0:
        return _empty_result()

    if annual_rate_percent <= 0:
        logger.debug("Non-positive rate %s; straight-line schedule of %d months", annual_rate_percent, total_months)
        return _straight_line(principal, total_months)

    rate_per_month = annual_rate_percent / 12 / 100
    strategy = ReductionStrategy(strategy)

    balance = float(principal)
    total_interest = 0.0
    schedule: List[ScheduleRow] = []

    emi = _calculate_emi(balance, rate_per_month, total_months)
    first_emi = emi
    pending_emi = emi

    for i in range(total_months):
        increase = emi_increases.get(i)
        if increase is not None:
            pending_emi = increase.apply(emi)

        extra = part_payments.get(i) or 0
        if extra > 0:
            balance -= extra
            if strategy is ReductionStrategy.REDUCE_EMI:
                # Re-amortize over the months left, counting this one
                remaining_months = total_months - i
                if balance > 0 and remaining_months > 0:
                    pending_emi = _calculate_emi(balance, rate_per_month, remaining_months)
                else:
                    pending_emi = 0.0

        interest = balance * rate_per_month
        principal_part = emi - interest
        total_interest += interest
        balance -= principal_part

        schedule.append(
            ScheduleRow(
                year_index=i // 12 + 1,
                month_index=i % 12 + 1,
                principal_paid=max(principal_part, 0.0),
                interest_paid=max(interest, 0.0),
                total_paid=max(emi, 0.0),
                remaining_balance=max(balance, 0.0),
            )
        )

        emi = pending_emi
        if balance <= 0:
            break

    logger.debug(
        "Computed %d of %d months (strategy=%s, part payments=%d, increases=%d)",
        len(schedule),
        total_months,
        strategy.value,
        len(part_payments),
        len(emi_increases),
    )
    return LoanCalculationResult(
        emi=round_half_up(first_emi),
        total_interest=round_half_up(total_interest),
        total_payment=round_half_up(principal + total_interest),
        schedule=schedule,
    )


def calculate(
    params: LoanParameters,
    part_payments: Optional[Mapping[int, float]] = None,
    strategy: ReductionStrategy = ReductionStrategy.REDUCE_EMI,
    emi_increases: Optional[Mapping[int, EmiIncrease]] = None,
) -> LoanCalculationResult:
    """Same as :func:`calculate_loan` but taking a ``LoanParameters``."""
    return calculate_loan(
        params.principal,
        params.annual_rate_percent,
        params.tenure_years,
        part_payments=part_payments,
        strategy=strategy,
        emi_increases=emi_increases,
    )
