"""Time-driven noise controller for a single Bloch sphere.

Keeps the ideal (gate-computed) Bloch vector next to a noisy copy that
decays under :class:`ContinuousPhysicalNoise` as frames are reported,
and records a short metric history for plotting and CSV export.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass

from qubit_lab.engine.bloch import (
    BlochVector, GROUND_STATE, bloch_fidelity, bloch_purity,
)
from qubit_lab.engine.noise import ContinuousPhysicalNoise, NoiseIntensity

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LENGTH = 120  # ~2 seconds at 60 FPS
MIN_FRAME_SECONDS = 1e-6


@dataclass(frozen=True)
class NoiseMetrics:
    fidelity: float = 1.0
    purity: float = 1.0
    decoherence_rate: float = 0.0
    magnitude: float = 1.0


@dataclass(frozen=True)
class HistoryFrame:
    time: int
    fidelity: float
    purity: float
    magnitude: float
    bloch: BlochVector


class NoiseController:
    """Applies continuous noise per animation frame and tracks metrics."""

    def __init__(self, history_length: int = DEFAULT_HISTORY_LENGTH,
                 noise: ContinuousPhysicalNoise | None = None):
        self._noise = noise or ContinuousPhysicalNoise()
        self._ideal = GROUND_STATE
        self._noisy = GROUND_STATE
        self._intensity = NoiseIntensity()
        self._last_frame_ms: float | None = None
        self._metrics = NoiseMetrics()
        self._frame_counter = 0
        self._history: deque[HistoryFrame] = deque(maxlen=history_length)

    # ---- Inputs -----------------------------------------------------------

    def set_ideal_bloch(self, bloch) -> bool:
        """Sets the noiseless target; invalid vectors are logged and ignored."""
        try:
            self._ideal = BlochVector.coerce(bloch)
        except ValueError:
            logger.warning("Ignoring invalid Bloch vector: %r", bloch)
            return False
        return True

    def set_noise_intensity(self, amplitude: float | None = None,
                            phase: float | None = None,
                            depolarizing: float | None = None):
        """Updates any subset of the sliders; values are clamped to [0, 1]."""
        self._intensity = self._intensity.updated(
            amplitude=amplitude, phase=phase, depolarizing=depolarizing)

    # ---- Frame update -----------------------------------------------------

    def update(self, now_ms: float) -> bool:
        """Advances the noisy vector to timestamp ``now_ms`` (milliseconds).

        The first call only primes the clock. Returns True when a frame
        was actually applied.
        """
        if self._last_frame_ms is None:
            self._last_frame_ms = now_ms
            return False

        dt = max(0.0, (now_ms - self._last_frame_ms) / 1000.0)
        self._last_frame_ms = now_ms
        if dt < MIN_FRAME_SECONDS:
            return False

        self._noisy = self._noise.update(self._noisy, dt, self._intensity)

        purity = bloch_purity(self._noisy)
        self._metrics = NoiseMetrics(
            fidelity=bloch_fidelity(self._ideal, self._noisy),
            purity=purity,
            decoherence_rate=max(0.0, 1.0 - purity) / 0.5,
            magnitude=self._noisy.magnitude(),
        )
        self._record_history()
        return True

    def _record_history(self):
        self._history.append(HistoryFrame(
            time=self._frame_counter,
            fidelity=self._metrics.fidelity,
            purity=self._metrics.purity,
            magnitude=self._metrics.magnitude,
            bloch=self._noisy,
        ))
        self._frame_counter += 1

    # ---- Outputs ----------------------------------------------------------

    @property
    def ideal_bloch(self) -> BlochVector:
        return self._ideal

    @property
    def noisy_bloch(self) -> BlochVector:
        return self._noisy

    @property
    def intensity(self) -> NoiseIntensity:
        return self._intensity

    @property
    def metrics(self) -> NoiseMetrics:
        return self._metrics

    @property
    def history(self) -> list[HistoryFrame]:
        return list(self._history)

    def reset(self):
        """Snaps the noisy vector back to the ideal one and clears history."""
        self._noisy = self._ideal
        self._last_frame_ms = None
        self._history.clear()
        self._frame_counter = 0
        self._metrics = NoiseMetrics()

    def fidelity_color(self) -> str:
        f = self._metrics.fidelity
        if f > 0.9:
            return "#00f5ff"
        if f > 0.7:
            return "#50fa7b"
        if f > 0.5:
            return "#ffcc44"
        if f > 0.3:
            return "#ff9955"
        return "#ff5555"

    def export_history_csv(self) -> str:
        from qubit_lab.core.export import history_to_csv
        return history_to_csv(self._history)
