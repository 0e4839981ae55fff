"""Empirical mapping from physical temperature to state fidelity."""

from __future__ import annotations

import math

TEMPERATURE_MIN_K = 0.015
TEMPERATURE_MAX_K = 300.0

FIDELITY_AT_MIN = 0.97
FIDELITY_SPAN = 0.72
FIDELITY_FLOOR = 0.05
FIDELITY_CEILING = 0.99

MAX_NOISE_PROBABILITY = 0.95
EXTRA_NOISE_WEIGHT = 0.5

_LOG_MIN = math.log10(TEMPERATURE_MIN_K)
_LOG_MAX = math.log10(TEMPERATURE_MAX_K)


def clamp_temperature(kelvin: float) -> float:
    """Limits a temperature to the supported [15 mK, 300 K] range."""
    return max(TEMPERATURE_MIN_K, min(TEMPERATURE_MAX_K, float(kelvin)))


def clamp_extra_noise(level: float) -> float:
    return max(0.0, min(1.0, float(level)))


def temperature_position(kelvin: float) -> float:
    """Position of a temperature on the log axis, 0 at 15 mK and 1 at 300 K.

    Temperatures below 15 mK clamp to 0; values above 300 K extrapolate
    past 1.
    """
    k = max(TEMPERATURE_MIN_K, float(kelvin))
    return (math.log10(k) - _LOG_MIN) / (_LOG_MAX - _LOG_MIN)


def temperature_to_fidelity(kelvin: float) -> float:
    """Smoothstep decay from ~0.97 at 15 mK down to ~0.25 at 300 K."""
    t = temperature_position(kelvin)
    fidelity = FIDELITY_AT_MIN - FIDELITY_SPAN * t * t * (3 - 2 * t)
    return max(FIDELITY_FLOOR, min(FIDELITY_CEILING, fidelity))


def noise_probability(temperature_k: float, extra_noise: float = 0.0) -> float:
    """Combined noise level from temperature infidelity and the extra slider."""
    infidelity = 1.0 - temperature_to_fidelity(temperature_k)
    return min(MAX_NOISE_PROBABILITY, infidelity + extra_noise * EXTRA_NOISE_WEIGHT)


def format_temperature(kelvin: float) -> str:
    """Human readable label: '15 mK', '4.2 K', '300 K'."""
    if kelvin < 1:
        return f"{kelvin * 1000:.0f} mK"
    if kelvin < 10:
        return f"{kelvin:.1f} K"
    return f"{round(kelvin)} K"
