"""Reduced density matrices, Bloch vectors and single-qubit quality metrics.

All functions here are pure: Bloch vectors are always derived from an
amplitude vector or a noise model and never stored as ground truth.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple, Sequence

import numpy as np

if TYPE_CHECKING:
    from .state_vector import StateVector


class BlochVector(NamedTuple):
    """Point in (or on) the unit ball; |v| = 1 for pure states."""
    x: float
    y: float
    z: float

    @classmethod
    def coerce(cls, value: BlochVector | Sequence[float] | dict) -> BlochVector:
        """Accepts a BlochVector, an (x, y, z) sequence or an {x, y, z} dict.

        Raises:
            ValueError: If the value has missing or non-numeric components.
        """
        if isinstance(value, BlochVector):
            return value
        try:
            if isinstance(value, dict):
                components = (value["x"], value["y"], value["z"])
            else:
                components = tuple(value)
            if len(components) != 3:
                raise ValueError(f"Expected 3 components, got {len(components)}")
            x, y, z = (float(c) for c in components)
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Invalid Bloch vector: {value!r}") from exc
        if not all(math.isfinite(c) for c in (x, y, z)):
            raise ValueError(f"Bloch vector components must be finite: {value!r}")
        return cls(x, y, z)

    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def dot(self, other: BlochVector) -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def scaled(self, factor: float) -> BlochVector:
        return BlochVector(self.x * factor, self.y * factor, self.z * factor)


GROUND_STATE = BlochVector(0.0, 0.0, 1.0)


@dataclass(frozen=True)
class ReducedDensityMatrix:
    """Single-qubit reduced density matrix [[r00, r01], [conj(r01), r11]]."""
    r00: float
    r01_re: float
    r01_im: float
    r11: float

    @classmethod
    def from_state(cls, state: StateVector, qubit: int) -> ReducedDensityMatrix:
        """Partial trace over every qubit except ``qubit``.

        Sums psi[i] * conj(psi[j]) over all basis-index pairs that agree on
        the other qubits' bits, bucketed by the target qubit's bit values.
        """
        mask = state.bit_mask(qubit)
        data = state.data
        dim = len(data)
        rho = np.zeros((2, 2), dtype=np.complex128)
        for i in range(dim):
            for j in range(dim):
                if (i & ~mask) != (j & ~mask):
                    continue
                qi = 1 if i & mask else 0
                qj = 1 if j & mask else 0
                rho[qi, qj] += data[i] * np.conj(data[j])
        return cls(
            r00=float(rho[0, 0].real),
            r01_re=float(rho[0, 1].real),
            r01_im=float(rho[0, 1].imag),
            r11=float(rho[1, 1].real),
        )

    @property
    def trace(self) -> float:
        return self.r00 + self.r11

    def to_matrix(self) -> np.ndarray:
        r01 = complex(self.r01_re, self.r01_im)
        return np.array([[self.r00, r01],
                          [r01.conjugate(), self.r11]], dtype=np.complex128)

    def bloch_vector(self) -> BlochVector:
        return bloch_vector(self)


def bloch_vector(dm: ReducedDensityMatrix) -> BlochVector:
    """Pauli expectations: x = 2 Re r01, y = -2 Im r01, z = r00 - r11."""
    return BlochVector(2.0 * dm.r01_re, -2.0 * dm.r01_im, dm.r00 - dm.r11)


# ---- Metrics ---------------------------------------------------------------

def bloch_fidelity(ideal: BlochVector | None, noisy: BlochVector | None) -> float:
    """F = (1 + r_ideal . r_noisy) / 2, clamped to [0, 1].

    Missing inputs report perfect fidelity.
    """
    if ideal is None or noisy is None:
        return 1.0
    fidelity = (1.0 + BlochVector.coerce(ideal).dot(BlochVector.coerce(noisy))) / 2.0
    return max(0.0, min(1.0, fidelity))


def bloch_purity(vector: BlochVector | None) -> float:
    """P = (1 + |r|^2) / 2, clamped to [0.5, 1]."""
    if vector is None:
        return 1.0
    r = BlochVector.coerce(vector).magnitude()
    return max(0.5, min(1.0, (1.0 + r * r) / 2.0))


def bloch_distance(a: BlochVector, b: BlochVector) -> float:
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2)


def interpolate_bloch(a: BlochVector, b: BlochVector, t: float) -> BlochVector:
    """Linear interpolation with t clamped to [0, 1]."""
    t = max(0.0, min(1.0, t))
    return BlochVector(
        a[0] + (b[0] - a[0]) * t,
        a[1] + (b[1] - a[1]) * t,
        a[2] + (b[2] - a[2]) * t,
    )


def bound_bloch_vector(vector: BlochVector, tol: float = 1e-10) -> BlochVector:
    """Projects onto the unit sphere only when |v| exceeds 1 + tol."""
    vector = BlochVector.coerce(vector)
    r = vector.magnitude()
    if r <= 1.0 + tol:
        return vector
    return vector.scaled(1.0 / r)
