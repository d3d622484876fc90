"""Loan type presets.

Each loan type carries the input ranges, defaults and tick marks used by the
form sliders. The engine does not enforce these ranges; input collectors clamp
values with :func:`clamp` before calling it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class SliderConfig:
    label: str
    min: float
    max: float
    default: float
    ticks: Tuple[float, ...]
    unit: str


@dataclass(frozen=True)
class LoanTypeConfig:
    loan_amount: SliderConfig
    interest_rate: SliderConfig
    tenure: SliderConfig


LOAN_TYPES = ("home", "personal", "car")

LOAN_TYPE_CONFIGS: Dict[str, LoanTypeConfig] = {
    "home": LoanTypeConfig(
        loan_amount=SliderConfig(
            label="Loan Amount",
            min=0,
            max=200_000_000,  # 20 Cr
            default=7_500_000,  # 75 L
            ticks=(0, 2_500_000, 5_000_000, 10_000_000, 50_000_000, 100_000_000, 200_000_000),
            unit="₹",
        ),
        interest_rate=SliderConfig(
            label="Interest Rate", min=0, max=15, default=8.5, ticks=(0, 5, 10, 15), unit="%"
        ),
        tenure=SliderConfig(
            label="Tenure", min=1, max=30, default=20, ticks=(1, 5, 10, 15, 20, 25, 30), unit="yrs"
        ),
    ),
    "personal": LoanTypeConfig(
        loan_amount=SliderConfig(
            label="Loan Amount",
            min=0,
            max=10_000_000,  # 1 Cr
            default=1_000_000,  # 10 L
            ticks=(0, 1_000_000, 2_500_000, 5_000_000, 10_000_000),
            unit="₹",
        ),
        interest_rate=SliderConfig(
            label="Interest Rate", min=0, max=40, default=14, ticks=(0, 10, 20, 30, 40), unit="%"
        ),
        tenure=SliderConfig(
            label="Tenure", min=1, max=10, default=5, ticks=tuple(range(1, 11)), unit="yrs"
        ),
    ),
    "car": LoanTypeConfig(
        loan_amount=SliderConfig(
            label="Loan Amount",
            min=0,
            max=50_000_000,  # 5 Cr
            default=1_200_000,  # 12 L
            ticks=(0, 10_000_000, 20_000_000, 30_000_000, 50_000_000),
            unit="₹",
        ),
        interest_rate=SliderConfig(
            label="Interest Rate", min=0, max=20, default=9, ticks=(0, 5, 10, 15, 20), unit="%"
        ),
        tenure=SliderConfig(
            label="Tenure", min=1, max=10, default=7, ticks=tuple(range(1, 11)), unit="yrs"
        ),
    ),
}


def get_config(loan_type: str) -> LoanTypeConfig:
    """Return the preset for ``loan_type`` (case-insensitive)."""
    try:
        return LOAN_TYPE_CONFIGS[loan_type.lower()]
    except KeyError:
        raise ValueError(f"Unknown loan type: {loan_type}; expected one of {', '.join(LOAN_TYPES)}")


def clamp(value: float, slider: SliderConfig) -> float:
    """Clamp ``value`` into the slider's range."""
    return min(max(value, slider.min), slider.max)


def category_label(loan_type: str) -> str:
    """``"home"`` -> ``"Home Loan"``."""
    return f"{loan_type[:1].upper()}{loan_type[1:]} Loan"
