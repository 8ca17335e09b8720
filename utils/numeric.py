"""
Numeric helpers shared by the classifier and the aggregator.
"""

import math


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round half up: 2.5 -> 3, 0.25 -> 0.3 at one digit (not banker's rounding).
    """
    factor = 10 ** ndigits
    rounded = math.floor(value * factor + 0.5) / factor
    return int(rounded) if ndigits == 0 else rounded


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
