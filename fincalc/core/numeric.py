"""Float helpers that return inf/nan where Python would raise.

The calculators accept whatever numbers the caller sends and let degenerate
inputs surface as non-finite results instead of exceptions.
"""

from __future__ import annotations

import math


def ieee_div(numerator: float, denominator: float) -> float:
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def ieee_log(value: float) -> float:
    if math.isnan(value) or value < 0:
        return math.nan
    if value == 0:
        return -math.inf
    if math.isinf(value):
        return math.inf
    return math.log(value)


def ieee_pow(base: float, exponent: float) -> float:
    if base < 0 and not float(exponent).is_integer():
        return math.nan
    try:
        return math.pow(base, exponent)
    except OverflowError:
        return math.inf
    except ValueError:
        # 0 ** negative
        return math.inf


def clamp(value: float, low: float, high: float) -> float:
    """Clamp to [low, high]; nan stays nan."""
    if math.isnan(value):
        return value
    return max(low, min(value, high))
