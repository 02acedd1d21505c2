"""
Rounding helpers.
"""
import math


def round_half_away(value: float, digits: int = 2) -> float:
    """
    Round to ``digits`` decimals with halves going away from zero.

    The value is scaled, rounded and scaled back, so 12.345 -> 12.35
    wherever the scaled float lands on .5.
    """
    factor = 10 ** digits
    scaled = abs(value) * factor
    rounded = math.floor(scaled + 0.5) / factor
    return math.copysign(rounded, value) if rounded else 0.0


def compliance_rate(positive: int, negative: int) -> float:
    """Percentage of ``positive`` among ``positive + negative``; 0 when both are 0."""
    observed = positive + negative
    if observed <= 0:
        return 0.0
    return positive / observed * 100
