"""Tolerant arithmetic shared by the derivation engine.

Plan inputs are allowed to be nonsense (zero ticket size, zero conversion
rates). The engine never raises on them: ratios with a guarded default fall
back to that default, everything else follows IEEE semantics and comes out as
``inf``/``nan`` so a human notices it downstream.
"""

from __future__ import annotations

import math
from typing import Any

import numpy as np
import pandas as pd


def ieee_divide(numerator: float, denominator: float) -> float:
    """Divide like a float unit does: ``x/0 -> ±inf``, ``0/0 -> nan``."""
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.float64(numerator) / np.float64(denominator))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Return ``numerator / denominator`` or *default* when the denominator is 0.

    A NaN denominator is treated like zero.
    """
    if denominator == 0 or (isinstance(denominator, float) and math.isnan(denominator)):
        return default
    return ieee_divide(numerator, denominator)


def pct(value: float) -> float:
    """Percent -> fraction."""
    return value / 100.0


def coerce_number(raw: Any) -> float:
    """Normalise raw user input to a float; unparseable or NaN input becomes 0."""
    if isinstance(raw, str):
        raw = raw.strip().replace(",", "")
    value = pd.to_numeric(pd.Series([raw], dtype="object"), errors="coerce").fillna(0.0).iloc[0]
    return float(value)


def at_least_one(value: float) -> float:
    """Guard for unit-count divisors: zero or negative becomes 1."""
    return value if value > 0 else 1.0


__all__ = [
    "ieee_divide",
    "safe_divide",
    "pct",
    "coerce_number",
    "at_least_one",
]
