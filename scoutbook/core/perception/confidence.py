"""
Confidence ranges for perceived values.

Turns (perceived value, confidence, scout skill, observation count) into
the low/high bounds a scout reports. Pure and deterministic: the same
reading rendered twice always gives the same bounds.

The range narrows as confidence, skill or observation count rise, but it
never collapses to a single point. Some uncertainty is irreducible.
"""

import math

# (min, max) scales
ATTRIBUTE_SCALE: tuple[int, int] = (1, 20)
ABILITY_SCALE: tuple[int, int] = (1, 200)

SKILL_MIN = 1
SKILL_MAX = 20

# Narrowest range, in attribute points (scaled up for wider scales)
MIN_RANGE_WIDTH = 1.0

# How strongly each extra observation narrows the range
OBSERVATION_NARROWING = 0.3

# Full confidence removes this fraction of the width
CONFIDENCE_NARROWING = 0.4


def clamp_confidence(confidence: float) -> float:
    """Clamp a confidence into [0, 1]. NaN reads as no confidence."""
    if confidence != confidence:  # NaN
        return 0.0
    return max(0.0, min(1.0, float(confidence)))


def clamp_skill(scout_skill: float) -> float:
    return max(SKILL_MIN, min(SKILL_MAX, scout_skill))


def clamp_observation_count(observation_count: int) -> int:
    """Negative and zero counts are treated as a single observation."""
    return max(1, int(observation_count))


def _scale_factor(scale: tuple[int, int]) -> float:
    low, high = scale
    return max(1.0, (high - low) / (ATTRIBUTE_SCALE[1] - ATTRIBUTE_SCALE[0]))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def range_half_width(
    confidence: float,
    scout_skill: float,
    observation_count: int = 1,
    scale: tuple[int, int] = ATTRIBUTE_SCALE,
) -> float:
    """
    Half of the uncertainty range, before rounding.

    Non-increasing in confidence, skill and observation count. Always at
    least half of MIN_RANGE_WIDTH (scaled) and never more than half the scale.

    Args:
        confidence: 0-1 (clamped)
        scout_skill: 1-20 (clamped)
        observation_count: number of observations behind the reading (min 1)
        scale: (min, max) of the value being estimated

    Returns:
        Half-width in scale units
    """
    confidence = clamp_confidence(confidence)
    skill = clamp_skill(scout_skill)
    count = clamp_observation_count(observation_count)

    raw_width = (SKILL_MAX - skill) / (1 + count * OBSERVATION_NARROWING)
    width = max(MIN_RANGE_WIDTH, raw_width * (1 - confidence * CONFIDENCE_NARROWING))
    width *= _scale_factor(scale)
    width = min(width, scale[1] - scale[0])
    return width / 2


def confidence_range(
    perceived_value: float,
    confidence: float,
    scout_skill: float,
    observation_count: int = 1,
    scale: tuple[int, int] = ATTRIBUTE_SCALE,
) -> tuple[int, int]:
    """
    Calculate the reported range around a perceived value.

    Malformed input is clamped rather than rejected: confidence into [0, 1],
    observation counts below 1 up to 1, skill into 1-20 and the perceived
    value into the scale.

    Args:
        perceived_value: The scout's point estimate
        confidence: 0-1 trust in the estimate
        scout_skill: Governing scout skill, 1-20
        observation_count: Observations behind the estimate
        scale: (min, max) bounds, ATTRIBUTE_SCALE or ABILITY_SCALE

    Returns:
        (low, high) with scale_min <= low <= perceived <= high <= scale_max
        and low < high
    """
    scale_min, scale_max = scale
    value = max(scale_min, min(scale_max, perceived_value))
    half = range_half_width(confidence, scout_skill, observation_count, scale)

    low = max(scale_min, _round_half_up(value - half))
    high = min(scale_max, _round_half_up(value + half))

    # Pinned against a scale edge: widen toward the interior
    if high <= low:
        if high < scale_max:
            high = low + 1
        else:
            low = high - 1

    return (low, high)


def confidence_label(confidence: float) -> str:
    """Human-readable confidence band."""
    confidence = clamp_confidence(confidence)
    if confidence >= 0.7:
        return "High"
    elif confidence >= 0.4:
        return "Medium"
    return "Low"
