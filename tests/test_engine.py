# tests/test_engine.py
import pytest

from emi_calc.data_models import EmiIncrease, LoanParameters, ReductionStrategy
from emi_calc.engine import calculate, calculate_loan


def test_zero_rate_is_straight_line():
    res = calculate_loan(1_200_000, 0, 1)
    assert len(res.schedule) == 12
    for row in res.schedule:
        assert row.principal_paid == 100_000
        assert row.interest_paid == 0
        assert row.total_paid == 100_000
    assert res.schedule[-1].remaining_balance == 0
    assert res.emi == 100_000
    assert res.total_interest == 0
    assert res.total_payment == 1_200_000


def test_negative_rate_uses_straight_line_too():
    res = calculate_loan(120_000, -2, 1)
    assert [r.total_paid for r in res.schedule] == [10_000] * 12


def test_zero_rate_ignores_part_payments_and_increases():
    plain = calculate_loan(1_200_000, 0, 1)
    extras = calculate_loan(
        1_200_000,
        0,
        1,
        part_payments={0: 500_000},
        strategy=ReductionStrategy.REDUCE_TENURE,
        emi_increases={1: EmiIncrease("percent", 50)},
    )
    assert extras == plain


@pytest.mark.parametrize(
    "principal, tenure",
    [(0, 1), (-5_000, 1), (100_000, 0), (100_000, -1)],
)
def test_degenerate_inputs_give_empty_result(principal, tenure):
    res = calculate_loan(principal, 9, tenure)
    assert (res.emi, res.total_interest, res.total_payment) == (0, 0, 0)
    assert res.schedule == []


def test_tenure_rounding_to_zero_months_gives_empty_result():
    res = calculate_loan(100_000, 9, 0.04)
    assert res.schedule == []


def test_standard_one_year_loan():
    # 5 lakh @ 9% for 12 months: EMI ≈ 43,725.6
    res = calculate_loan(500_000, 9, 1)
    assert abs(res.emi - 43_726) <= 1
    assert len(res.schedule) == 12
    assert res.schedule[-1].remaining_balance == pytest.approx(0.0, abs=1e-6)
    assert round(res.schedule[-1].remaining_balance) == 0
    assert res.total_payment == 500_000 + res.total_interest


def test_total_interest_matches_row_sum():
    res = calculate_loan(2_500_000, 8.5, 10)
    row_sum = sum(r.interest_paid for r in res.schedule)
    assert abs(res.total_interest - row_sum) <= 1


def test_balance_never_increases():
    res = calculate_loan(
        7_500_000,
        8.5,
        20,
        part_payments={12: 200_000, 40: 500_000},
        emi_increases={24: EmiIncrease("percent", 5)},
    )
    balances = [r.remaining_balance for r in res.schedule]
    assert all(b2 <= b1 for b1, b2 in zip(balances, balances[1:]))
    assert balances[-1] == pytest.approx(0.0, abs=1e-6)


def test_year_and_month_indices_cycle():
    res = calculate_loan(100_000, 10, 2)
    assert (res.schedule[0].year_index, res.schedule[0].month_index) == (1, 1)
    assert (res.schedule[11].year_index, res.schedule[11].month_index) == (1, 12)
    assert (res.schedule[12].year_index, res.schedule[12].month_index) == (2, 1)


def test_fractional_tenure_in_months():
    res = calculate_loan(300_000, 10, 18 / 12)
    assert len(res.schedule) == 18


def test_reduce_tenure_shortens_schedule_and_keeps_emi():
    res = calculate_loan(500_000, 9, 1, part_payments={0: 200_000}, strategy=ReductionStrategy.REDUCE_TENURE)
    assert len(res.schedule) < 12
    first = res.schedule[0].total_paid
    assert all(r.total_paid == first for r in res.schedule)
    assert res.schedule[-1].remaining_balance == 0
    assert abs(res.emi - 43_726) <= 1


def test_reduce_emi_lowers_next_installment():
    res = calculate_loan(500_000, 9, 1, part_payments={0: 100_000}, strategy=ReductionStrategy.REDUCE_EMI)
    assert len(res.schedule) >= 11
    assert res.schedule[1].total_paid < res.schedule[0].total_paid
    # the month of the part payment is still charged the old EMI
    assert abs(res.schedule[0].total_paid - 43_725.6) < 1


def test_strategy_accepts_plain_strings():
    as_enum = calculate_loan(500_000, 9, 1, part_payments={0: 200_000}, strategy=ReductionStrategy.REDUCE_TENURE)
    as_str = calculate_loan(500_000, 9, 1, part_payments={0: 200_000}, strategy="tenure")
    assert as_enum == as_str


def test_reduce_emi_saves_less_interest_than_reduce_tenure():
    kwargs = dict(part_payments={6: 500_000})
    base = calculate_loan(3_000_000, 9, 15)
    emi_mode = calculate_loan(3_000_000, 9, 15, strategy=ReductionStrategy.REDUCE_EMI, **kwargs)
    tenure_mode = calculate_loan(3_000_000, 9, 15, strategy=ReductionStrategy.REDUCE_TENURE, **kwargs)
    assert tenure_mode.total_interest < emi_mode.total_interest < base.total_interest
    assert len(tenure_mode.schedule) < len(emi_mode.schedule)


def test_percent_increase_applies_from_next_month():
    res = calculate_loan(1_000_000, 10, 5, emi_increases={3: EmiIncrease("percent", 10)})
    rows = res.schedule
    assert rows[3].total_paid == rows[0].total_paid
    assert rows[4].total_paid == pytest.approx(rows[3].total_paid * 1.10)
    assert rows[5].total_paid == pytest.approx(rows[4].total_paid)
    assert len(rows) < 60


def test_absolute_increase_applies_from_next_month():
    res = calculate_loan(1_000_000, 10, 5, emi_increases={2: EmiIncrease("absolute", 5_000)})
    rows = res.schedule
    assert rows[3].total_paid == pytest.approx(rows[2].total_paid + 5_000)


def test_reported_emi_is_first_month_installment():
    res = calculate_loan(1_000_000, 10, 5, emi_increases={0: EmiIncrease("percent", 20)})
    assert res.emi == round(res.schedule[0].total_paid)
    assert res.schedule[1].total_paid > res.schedule[0].total_paid


def test_reduce_emi_recomputation_overrides_increase_in_same_month():
    increase = {2: EmiIncrease("percent", 50)}
    part = {2: 100_000}
    emi_mode = calculate_loan(500_000, 9, 1, part_payments=part, emi_increases=increase)
    assert emi_mode.schedule[3].total_paid < emi_mode.schedule[2].total_paid

    tenure_mode = calculate_loan(
        500_000, 9, 1, part_payments=part, emi_increases=increase, strategy=ReductionStrategy.REDUCE_TENURE
    )
    assert tenure_mode.schedule[3].total_paid == pytest.approx(tenure_mode.schedule[2].total_paid * 1.5)


def test_zero_part_payment_is_same_as_absent():
    assert calculate_loan(500_000, 9, 1, part_payments={4: 0}) == calculate_loan(500_000, 9, 1)


def test_part_payment_clearing_loan_stops_schedule():
    res = calculate_loan(500_000, 9, 1, part_payments={0: 600_000})
    assert len(res.schedule) == 1
    assert res.schedule[0].remaining_balance == 0
    assert res.schedule[0].interest_paid == 0


def test_repeat_calls_are_identical():
    kwargs = dict(
        part_payments={5: 50_000, 17: 120_000},
        strategy=ReductionStrategy.REDUCE_TENURE,
        emi_increases={12: EmiIncrease("percent", 7.5)},
    )
    assert calculate_loan(2_000_000, 8.75, 10, **kwargs) == calculate_loan(2_000_000, 8.75, 10, **kwargs)


def test_caller_maps_are_not_modified():
    parts = {3: 10_000}
    increases = {6: EmiIncrease("absolute", 1_000)}
    calculate_loan(500_000, 9, 2, part_payments=parts, emi_increases=increases)
    assert parts == {3: 10_000}
    assert increases == {6: EmiIncrease("absolute", 1_000)}


def test_calculate_takes_loan_parameters():
    params = LoanParameters(principal=500_000, annual_rate_percent=9, tenure_years=1)
    assert calculate(params) == calculate_loan(500_000, 9, 1)
