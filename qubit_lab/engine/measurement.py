"""Measurement probabilities and shot sampling."""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from .state_vector import StateVector


def basis_labels(num_qubits: int) -> list[str]:
    """Bitstrings in basis order, qubit 0 first: ['00', '01', '10', '11']."""
    return [format(i, f"0{num_qubits}b") for i in range(2 ** num_qubits)]


class MeasurementEngine:
    """Static helpers for computational-basis measurement."""

    @staticmethod
    def probabilities(state: StateVector) -> np.ndarray:
        """Squared magnitude of every amplitude, in basis order."""
        return state.probabilities

    @staticmethod
    def sample_shots(probabilities: Sequence[float], shots: int,
                     rng: np.random.Generator | None = None) -> dict[str, int]:
        """Draws ``shots`` outcomes by inverse-CDF sampling.

        Each draw r ~ U[0, 1) lands in the first bucket whose cumulative
        probability reaches r. Draws left over by floating-point residue
        fall into the last bucket, so no shot is ever dropped.

        Returns:
            Counts keyed by bitstring, every basis state present.
        """
        if shots < 0:
            raise ValueError(f"shots must be non-negative, got {shots}")
        probs = np.asarray(probabilities, dtype=np.float64)
        num_qubits = int(math.log2(len(probs))) if len(probs) else 0
        if len(probs) == 0 or 2 ** num_qubits != len(probs):
            raise ValueError(f"Expected 2^n probabilities, got {len(probs)}")

        rng = rng or np.random.default_rng()
        draws = rng.random(shots)
        cumulative = np.cumsum(probs)
        buckets = np.searchsorted(cumulative, draws, side="left")
        buckets = np.minimum(buckets, len(probs) - 1)
        counts = np.bincount(buckets, minlength=len(probs))
        return {label: int(c) for label, c in zip(basis_labels(num_qubits), counts)}

    @staticmethod
    def sample(state: StateVector, shots: int,
               rng: np.random.Generator | None = None) -> dict[str, int]:
        """Sample ``shots`` outcomes from a state without collapsing it."""
        return MeasurementEngine.sample_shots(state.probabilities, shots, rng)

    @staticmethod
    def correlation(probabilities: Sequence[float]) -> float:
        """Probability that both qubits agree: p(00) + p(11)."""
        if len(probabilities) != 4:
            raise ValueError("correlation needs 2-qubit probabilities")
        return float(probabilities[0] + probabilities[3])


# Module-level aliases for the functional API.
probabilities = MeasurementEngine.probabilities
sample_shots = MeasurementEngine.sample_shots
