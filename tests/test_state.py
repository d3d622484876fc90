# tests/test_state.py
import pytest

from emi_calc.data_models import EmiIncrease, ReductionStrategy
from emi_calc.engine import calculate_loan
from emi_calc.loan_types import LOAN_TYPE_CONFIGS, clamp, get_config
from emi_calc.state import Action, CalculatorState, reduce


def test_defaults_match_home_preset():
    state = CalculatorState()
    home = LOAN_TYPE_CONFIGS["home"]
    assert state.amount == home.loan_amount.default
    assert state.rate == home.interest_rate.default
    assert state.tenure == home.tenure.default
    assert state.reduce_mode is ReductionStrategy.REDUCE_EMI


def test_set_loan_type_resets_defaults_without_mutating():
    state = CalculatorState(amount=123, rate=1, tenure=2)
    new = reduce(state, Action("SET_LOAN_TYPE", "personal"))
    assert (new.loan_type, new.amount, new.rate, new.tenure) == ("personal", 1_000_000, 14, 5)
    assert (state.loan_type, state.amount) == ("home", 123)


def test_simple_setters():
    state = CalculatorState(start_date="2025-01")
    state = reduce(state, Action("SET_AMOUNT", 500_000))
    state = reduce(state, Action("SET_RATE", 9))
    state = reduce(state, Action("SET_TENURE", 18))
    state = reduce(state, Action("SET_TENURE_UNIT", "months"))
    state = reduce(state, Action("SET_REDUCE_MODE", "tenure"))
    state = reduce(state, Action("SET_YEAR_GROUPING", "financial"))
    state = reduce(state, Action("SET_EXPANDED", {"2025": True}))
    assert state.tenure_years == pytest.approx(1.5)
    assert state.reduce_mode is ReductionStrategy.REDUCE_TENURE
    assert state.year_grouping == "financial"
    assert state.expanded == {"2025": True}


def test_part_payment_and_increase_edits():
    state = CalculatorState()
    state = reduce(state, Action("SET_PART_PAYMENT", (3, 1_000)))
    state = reduce(state, Action("SET_EMI_INCREASE", (12, EmiIncrease("percent", 5))))
    assert state.part_payments == {3: 1_000}
    assert state.emi_increases == {12: EmiIncrease("percent", 5)}
    cleared = reduce(state, Action("SET_PART_PAYMENT", (3, 0)))
    cleared = reduce(cleared, Action("SET_EMI_INCREASE", (12, None)))
    assert cleared.part_payments == {} and cleared.emi_increases == {}
    assert state.part_payments == {3: 1_000}


def test_reset_to_defaults():
    state = CalculatorState(loan_type="car", amount=1, rate=1, tenure=1)
    state = reduce(state, Action("RESET_TO_DEFAULTS"))
    assert (state.amount, state.rate, state.tenure) == (1_200_000, 9, 7)


@pytest.mark.parametrize(
    "action",
    [
        Action("SET_TENURE_UNIT", "weeks"),
        Action("SET_YEAR_GROUPING", "lunar"),
        Action("SET_START_DATE", "soon"),
        Action("SET_LOAN_TYPE", "boat"),
        Action("SET_REDUCE_MODE", "both"),
        Action("FLY"),
    ],
)
def test_invalid_actions_raise(action):
    with pytest.raises(ValueError):
        reduce(CalculatorState(), action)


def test_result_uses_engine():
    state = CalculatorState(amount=500_000, rate=9, tenure=12, tenure_unit="months", part_payments={2: 50_000})
    assert state.result() == calculate_loan(500_000, 9, 1, part_payments={2: 50_000})


def test_calendar_schedule_starts_at_start_date():
    state = CalculatorState(amount=500_000, rate=9, tenure=1, start_date="2025-04")
    rows = state.calendar_schedule()
    assert rows[0].calendar_label == "Apr, 2025"
    assert rows[-1].calendar_label == "Mar, 2026"


def test_loan_type_config_helpers():
    assert get_config("Home") is LOAN_TYPE_CONFIGS["home"]
    with pytest.raises(ValueError):
        get_config("boat")
    tenure = LOAN_TYPE_CONFIGS["personal"].tenure
    assert clamp(25, tenure) == 10
    assert clamp(0, tenure) == 1
    assert clamp(4, tenure) == 4
