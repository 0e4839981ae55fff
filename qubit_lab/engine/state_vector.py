"""Core quantum state representation using immutable state vectors."""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

import numpy as np

if TYPE_CHECKING:
    from .bloch import BlochVector, ReducedDensityMatrix

MAX_QUBITS = 2


def _frozen(data: np.ndarray) -> np.ndarray:
    data = np.array(data, dtype=np.complex128)
    data.flags.writeable = False
    return data


class StateVector:
    """Represents a 1- or 2-qubit pure state as a complex numpy array.

    Qubit 0 is the most significant bit of the basis index. Instances are
    snapshots: the amplitudes are read-only and every operation returns a
    new StateVector, so callers can keep earlier steps around for
    step-through and undo.
    """

    def __init__(self, num_qubits: int, data: np.ndarray | None = None):
        if num_qubits < 1 or num_qubits > MAX_QUBITS:
            raise ValueError(f"num_qubits must be 1-{MAX_QUBITS}, got {num_qubits}")
        self._num_qubits = num_qubits
        if data is None:
            data = np.zeros(2 ** num_qubits, dtype=np.complex128)
            data[0] = 1.0 + 0.0j  # |00>
        elif np.shape(data) != (2 ** num_qubits,):
            raise ValueError(f"Expected shape ({2**num_qubits},), got {np.shape(data)}")
        self._data = _frozen(data)

    @classmethod
    def from_amplitudes(cls, amplitudes: Sequence[complex]) -> StateVector:
        """Builds a state from 2 or 4 complex amplitudes (not renormalized)."""
        data = np.asarray(amplitudes, dtype=np.complex128)
        num_qubits = {2: 1, 4: 2}.get(data.shape[0] if data.ndim == 1 else -1)
        if num_qubits is None:
            raise ValueError(f"Expected 2 or 4 amplitudes, got shape {data.shape}")
        return cls(num_qubits, data)

    @classmethod
    def from_real_pairs(cls, values: Sequence[float]) -> StateVector:
        """Builds a state from interleaved (re, im) floats."""
        flat = np.asarray(values, dtype=np.float64)
        if flat.ndim != 1 or flat.shape[0] % 2:
            raise ValueError("Expected an even-length flat sequence of floats")
        return cls.from_amplitudes(flat[0::2] + 1j * flat[1::2])

    @classmethod
    def from_initial_states(cls, initial_states: list[int]) -> StateVector:
        """Create a computational basis state, e.g. [0, 1] creates |01>."""
        n = len(initial_states)
        index = 0
        for i, bit in enumerate(initial_states):
            if bit:
                index |= (1 << (n - 1 - i))
        data = np.zeros(2 ** n, dtype=np.complex128)
        data[index] = 1.0 + 0.0j
        return cls(n, data)

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def probabilities(self) -> np.ndarray:
        """Returns |amplitude|^2 for each basis state."""
        return np.abs(self._data) ** 2

    def bit_mask(self, qubit: int) -> int:
        """Bit flag of a qubit in the basis index (qubit 0 is the MSB)."""
        if qubit < 0 or qubit >= self._num_qubits:
            raise ValueError(f"Qubit index {qubit} out of range [0, {self._num_qubits - 1}]")
        return 1 << (self._num_qubits - 1 - qubit)

    def apply_matrix(self, matrix: np.ndarray, qubit: int) -> StateVector:
        """Applies a 2x2 unitary to one qubit and returns the new state.

        Each basis index with the target bit clear is paired with its
        partner (bit set) and that 2-amplitude subspace is left-multiplied
        by the matrix. No normalization is performed.
        """
        self.bit_mask(qubit)
        n = self._num_qubits
        state_tensor = self._data.reshape([2] * n)
        result = np.tensordot(matrix, state_tensor, axes=([1], [qubit]))
        # tensordot moves the target axis to the front
        result = np.moveaxis(result, 0, qubit)
        return StateVector(n, result.reshape(2 ** n))

    def with_data(self, data: np.ndarray) -> StateVector:
        return StateVector(self._num_qubits, data)

    def norm(self) -> float:
        return float(np.sqrt(np.sum(np.abs(self._data) ** 2)))

    def normalized(self) -> StateVector:
        """Divides by the L2 norm; a zero vector is returned unchanged."""
        norm = self.norm()
        if norm == 0.0:
            return self.copy()
        return StateVector(self._num_qubits, self._data / norm)

    def reduced_density_matrix(self, qubit: int) -> ReducedDensityMatrix:
        from .bloch import ReducedDensityMatrix
        return ReducedDensityMatrix.from_state(self, qubit)

    def bloch_vector(self, qubit: int) -> BlochVector:
        return self.reduced_density_matrix(qubit).bloch_vector()

    def to_real_pairs(self) -> tuple[float, ...]:
        """Interleaved (re, im) floats, 2 per basis state."""
        return tuple(float(v) for z in self._data for v in (z.real, z.imag))

    def isclose(self, other: StateVector, tol: float = 1e-9) -> bool:
        return (self._num_qubits == other.num_qubits
                and bool(np.allclose(self._data, other.data, atol=tol)))

    def copy(self) -> StateVector:
        return StateVector(self._num_qubits, self._data)

    def __repr__(self) -> str:
        return f"StateVector(num_qubits={self._num_qubits})"
