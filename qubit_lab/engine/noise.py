"""Decoherence models.

Two independent formulations live here and are deliberately kept apart:

- :class:`DiscreteDepolarizingNoise` perturbs an amplitude vector once per
  gate and drives the interactive circuit simulator.
- :class:`ContinuousPhysicalNoise` evolves a single-qubit Bloch vector over
  real elapsed time through amplitude damping, phase damping and
  depolarizing channels.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from .bloch import BlochVector, bound_bloch_vector
from .state_vector import StateVector
from .thermal import noise_probability

PER_GATE_SCALE = 0.25


# =========================================================================
# Discrete per-gate blend on amplitude vectors
# =========================================================================

class DiscreteDepolarizingNoise:
    """Blends amplitudes toward a fixed target after every gate.

    With d = sqrt(1 - p) the |0...0> amplitude becomes
    d * a0 + (1 - d) * 0.5 and every other amplitude is scaled by d; the
    result is renormalized.
    """

    def __init__(self, p: float):
        if not 0 <= p <= 1:  # also rejects NaN
            raise ValueError(f"Probability must be in [0, 1], got {p}")
        self._p = float(p)

    @property
    def probability(self) -> float:
        return self._p

    @classmethod
    def for_environment(cls, temperature_k: float, extra_noise: float = 0.0,
                        scale: float = PER_GATE_SCALE) -> DiscreteDepolarizingNoise:
        """Per-gate noise derived from the temperature and extra slider.

        ``scale`` converts the combined noise level into a per-gate
        probability; the result is capped at 1.
        """
        return cls(min(1.0, noise_probability(temperature_k, extra_noise) * scale))

    def apply(self, state: StateVector | None) -> StateVector | None:
        if state is None:
            return None
        if self._p <= 0:
            return state.copy()
        d = math.sqrt(max(0.0, 1.0 - self._p))
        blended = d * np.asarray(state.data)
        blended[0] += (1.0 - d) * 0.5
        return state.with_data(blended).normalized()

    def to_dict(self) -> dict:
        return {"type": type(self).__name__, "probability": self._p}

    def __repr__(self) -> str:
        return f"DiscreteDepolarizingNoise(p={self._p:.4f})"


# =========================================================================
# Continuous three-channel model on Bloch vectors
# =========================================================================

# Characteristic rates in 1/s (T1 ~ 1 us, T2 ~ 0.5 us, depolarizing ~ 0.67 us).
BASE_RATES = {
    "amplitude_damping": 1e6,
    "phase_damping": 2e6,
    "depolarizing": 1.5e6,
}


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


@dataclass(frozen=True)
class NoiseIntensity:
    """Slider intensities in [0, 1] for the three physical channels."""
    amplitude: float = 0.0
    phase: float = 0.0
    depolarizing: float = 0.0

    def __post_init__(self):
        for name in ("amplitude", "phase", "depolarizing"):
            object.__setattr__(self, name, _clamp01(getattr(self, name)))

    @classmethod
    def from_dict(cls, data: dict | None) -> NoiseIntensity:
        data = data or {}
        return cls(
            amplitude=data.get("amplitude", 0.0),
            phase=data.get("phase", 0.0),
            depolarizing=data.get("depolarizing", 0.0),
        )

    def updated(self, **changes: float) -> NoiseIntensity:
        """Copy with the given intensities replaced; None values are ignored."""
        values = {
            "amplitude": self.amplitude,
            "phase": self.phase,
            "depolarizing": self.depolarizing,
        }
        for name, value in changes.items():
            if name not in values:
                raise KeyError(f"Unknown noise channel '{name}'")
            if value is not None:
                values[name] = value
        return NoiseIntensity(**values)

    def to_dict(self) -> dict:
        return {
            "amplitude": self.amplitude,
            "phase": self.phase,
            "depolarizing": self.depolarizing,
        }


class BlochChannel(ABC):
    """Exponential-decay channel acting on a Bloch vector."""

    key: str = ""

    @property
    def base_rate(self) -> float:
        return BASE_RATES[self.key]

    def decay(self, dt: float, intensity: float) -> float:
        return math.exp(-self.base_rate * intensity * dt)

    def apply(self, vector: BlochVector, dt: float, intensity: float) -> BlochVector:
        vector = BlochVector.coerce(vector)
        if intensity <= 0 or dt <= 0:
            return vector
        return self._transform(vector, self.decay(dt, intensity))

    @abstractmethod
    def _transform(self, v: BlochVector, decay: float) -> BlochVector:
        ...


class AmplitudeDampingChannel(BlochChannel):
    """T1 relaxation: transverse decay, z relaxes toward +1 (|0>)."""

    key = "amplitude_damping"

    def _transform(self, v: BlochVector, decay: float) -> BlochVector:
        return BlochVector(v.x * decay, v.y * decay, v.z * decay + (1.0 - decay))


class PhaseDampingChannel(BlochChannel):
    """T2 dephasing: transverse decay, z unchanged."""

    key = "phase_damping"

    def _transform(self, v: BlochVector, decay: float) -> BlochVector:
        return BlochVector(v.x * decay, v.y * decay, v.z)


class DepolarizingChannel(BlochChannel):
    """Uniform shrink toward the maximally mixed state at the origin."""

    key = "depolarizing"

    def _transform(self, v: BlochVector, decay: float) -> BlochVector:
        return v.scaled(decay)


class ContinuousPhysicalNoise:
    """Applies amplitude damping, phase damping and depolarizing in order."""

    def __init__(self):
        self._channels: list[tuple[str, BlochChannel]] = [
            ("amplitude", AmplitudeDampingChannel()),
            ("phase", PhaseDampingChannel()),
            ("depolarizing", DepolarizingChannel()),
        ]

    @property
    def channels(self) -> list[BlochChannel]:
        return [channel for _, channel in self._channels]

    def update(self, vector: BlochVector | None, dt: float,
               intensity: NoiseIntensity | dict | None = None) -> BlochVector | None:
        """Evolves ``vector`` by ``dt`` seconds.

        A missing vector or a non-positive dt is a no-op. The result is
        projected back onto the unit ball if rounding pushed it outside.
        """
        if vector is None:
            return None
        vector = BlochVector.coerce(vector)
        if dt <= 0:
            return vector
        if not isinstance(intensity, NoiseIntensity):
            intensity = NoiseIntensity.from_dict(intensity)

        noisy = vector
        for attr, channel in self._channels:
            level = getattr(intensity, attr)
            if level > 0:
                noisy = channel.apply(noisy, dt, level)
        return bound_bloch_vector(noisy)
