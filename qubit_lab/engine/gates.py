"""Quantum gate kinds and 2x2 matrix definitions."""

from __future__ import annotations

from enum import Enum

import numpy as np


class UnknownGateError(KeyError):
    """Raised when a gate name is not part of the fixed catalog."""


class GateKind(Enum):
    """Closed set of gates understood by the engine."""
    I = "I"
    X = "X"
    Y = "Y"
    Z = "Z"
    H = "H"
    S = "S"
    SDG = "SDG"
    T = "T"
    TDG = "TDG"
    SX = "SX"
    RX = "RX"
    RY = "RY"
    RZ = "RZ"
    CNOT = "CNOT"
    CZ = "CZ"
    CY = "CY"
    CH = "CH"
    SWAP = "SWAP"

    @property
    def num_qubits(self) -> int:
        return 2 if self in _TWO_QUBIT else 1

    @property
    def is_rotation(self) -> bool:
        return self in _ROTATIONS

    @property
    def is_controlled(self) -> bool:
        return self in (GateKind.CNOT, GateKind.CZ, GateKind.CY, GateKind.CH)

    @classmethod
    def parse(cls, name: str | GateKind) -> GateKind:
        """Resolve a gate name (or alias) to its kind."""
        if isinstance(name, GateKind):
            return name
        key = str(name).strip()
        kind = _ALIASES.get(key) or _ALIASES.get(key.upper())
        if kind is None:
            raise UnknownGateError(f"Gate '{name}' is not in the catalog")
        return kind


_TWO_QUBIT = frozenset({GateKind.CNOT, GateKind.CZ, GateKind.CY,
                        GateKind.CH, GateKind.SWAP})
_ROTATIONS = frozenset({GateKind.RX, GateKind.RY, GateKind.RZ})

_ALIASES: dict[str, GateKind] = {kind.value: kind for kind in GateKind}
_ALIASES.update({
    "ID": GateKind.I,
    "S_DAG": GateKind.SDG,
    "SDAG": GateKind.SDG,
    "S†": GateKind.SDG,
    "T_DAG": GateKind.TDG,
    "TDAG": GateKind.TDG,
    "T†": GateKind.TDG,
    "SQRTX": GateKind.SX,
    "√X": GateKind.SX,
    "CX": GateKind.CNOT,
})


# --- Fixed single-qubit gate matrices ---

_S2 = 1 / np.sqrt(2)

I_MATRIX = np.eye(2, dtype=np.complex128)

X_MATRIX = np.array([[0, 1],
                      [1, 0]], dtype=np.complex128)

Y_MATRIX = np.array([[0, -1j],
                      [1j, 0]], dtype=np.complex128)

Z_MATRIX = np.array([[1, 0],
                      [0, -1]], dtype=np.complex128)

H_MATRIX = np.array([[_S2, _S2],
                      [_S2, -_S2]], dtype=np.complex128)

S_MATRIX = np.array([[1, 0],
                      [0, 1j]], dtype=np.complex128)

S_DAG_MATRIX = np.array([[1, 0],
                          [0, -1j]], dtype=np.complex128)

T_MATRIX = np.array([[1, 0],
                      [0, _S2 + 1j * _S2]], dtype=np.complex128)

T_DAG_MATRIX = np.array([[1, 0],
                          [0, _S2 - 1j * _S2]], dtype=np.complex128)

# Squares to X.
SX_MATRIX = np.array([[0.5 + 0.5j, 0.5 - 0.5j],
                       [0.5 - 0.5j, 0.5 + 0.5j]], dtype=np.complex128)

for _m in (I_MATRIX, X_MATRIX, Y_MATRIX, Z_MATRIX, H_MATRIX, S_MATRIX,
           S_DAG_MATRIX, T_MATRIX, T_DAG_MATRIX, SX_MATRIX):
    _m.flags.writeable = False


# --- Parameterized single-qubit gate functions ---

def rx_matrix(theta: float) -> np.ndarray:
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c, -1j * s],
                      [-1j * s, c]], dtype=np.complex128)


def ry_matrix(theta: float) -> np.ndarray:
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c, -s],
                      [s, c]], dtype=np.complex128)


def rz_matrix(theta: float) -> np.ndarray:
    return np.array([[np.exp(-1j * theta / 2), 0],
                      [0, np.exp(1j * theta / 2)]], dtype=np.complex128)


_FIXED: dict[GateKind, np.ndarray] = {
    GateKind.I: I_MATRIX,
    GateKind.X: X_MATRIX,
    GateKind.Y: Y_MATRIX,
    GateKind.Z: Z_MATRIX,
    GateKind.H: H_MATRIX,
    GateKind.S: S_MATRIX,
    GateKind.SDG: S_DAG_MATRIX,
    GateKind.T: T_MATRIX,
    GateKind.TDG: T_DAG_MATRIX,
    GateKind.SX: SX_MATRIX,
}

_PARAMETRIZED = {
    GateKind.RX: rx_matrix,
    GateKind.RY: ry_matrix,
    GateKind.RZ: rz_matrix,
}


def matrix_for(name: str | GateKind, angle: float | None = None) -> np.ndarray | None:
    """Returns the 2x2 unitary for a single-qubit gate.

    Args:
        name: Gate name, alias or GateKind.
        angle: Rotation angle in radians. Required for RX/RY/RZ and
               ignored for every other gate.

    Returns:
        The matrix, or None when the name is unknown or names a
        two-qubit gate (callers treat that as a pass-through).
    """
    try:
        kind = GateKind.parse(name)
    except UnknownGateError:
        return None
    if kind in _FIXED:
        return _FIXED[kind]
    if kind in _PARAMETRIZED:
        if angle is None:
            raise ValueError(f"Gate {kind.value} requires an angle")
        return _PARAMETRIZED[kind](float(angle))
    return None


def is_unitary(matrix: np.ndarray, tol: float = 1e-9) -> bool:
    """Checks U^dagger U = I within tolerance."""
    product = matrix.conj().T @ matrix
    return bool(np.allclose(product, np.eye(matrix.shape[0]), atol=tol))


def to_real_pairs(matrix: np.ndarray) -> tuple[float, ...]:
    """Flattens a 2x2 matrix to 8 reals: (re, im) per entry, row-major."""
    flat = np.asarray(matrix, dtype=np.complex128).reshape(-1)
    return tuple(float(v) for z in flat for v in (z.real, z.imag))
