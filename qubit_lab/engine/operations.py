"""Multi-qubit gate engine.

CNOT, CZ and SWAP are applied as exact index permutations / sign flips.
CY and CH are composed from CNOT and single-qubit gates on the target, so
no 4x4 matrices are needed.
"""

from __future__ import annotations

import numpy as np

from .circuit import GateInstance
from .gates import (
    GateKind, matrix_for,
    H_MATRIX, S_MATRIX, S_DAG_MATRIX, T_MATRIX,
)
from .state_vector import StateVector


def _require_two_qubits(state: StateVector, gate: str):
    if state.num_qubits != 2:
        raise ValueError(f"{gate} needs a 2-qubit state, got {state.num_qubits}")


def apply_cnot(state: StateVector, control: int, target: int) -> StateVector:
    """Swaps each control-set amplitude with its target-flipped partner."""
    _require_two_qubits(state, "CNOT")
    c_bit, t_bit = state.bit_mask(control), state.bit_mask(target)
    src = state.data
    out = np.array(src)
    for i in range(len(src)):
        if not (i & c_bit) or (i & t_bit):
            continue
        j = i | t_bit
        out[i], out[j] = src[j], src[i]
    return state.with_data(out)


def apply_cz(state: StateVector, control: int, target: int) -> StateVector:
    """Negates the amplitude of every index with both bits set."""
    _require_two_qubits(state, "CZ")
    c_bit, t_bit = state.bit_mask(control), state.bit_mask(target)
    out = np.array(state.data)
    for i in range(len(out)):
        if (i & c_bit) and (i & t_bit):
            out[i] = -out[i]
    return state.with_data(out)


def apply_swap(state: StateVector) -> StateVector:
    """Exchanges |01> and |10>; |00> and |11> are untouched."""
    _require_two_qubits(state, "SWAP")
    src = state.data
    out = np.array(src)
    out[1], out[2] = src[2], src[1]
    return state.with_data(out)


def apply_cy(state: StateVector, control: int, target: int) -> StateVector:
    s = state.apply_matrix(S_MATRIX, target)
    s = apply_cnot(s, control, target)
    return s.apply_matrix(S_DAG_MATRIX, target)


def apply_ch(state: StateVector, control: int, target: int) -> StateVector:
    s = state.apply_matrix(S_DAG_MATRIX, target)
    s = s.apply_matrix(H_MATRIX, target)
    s = s.apply_matrix(T_MATRIX, target)
    s = apply_cnot(s, control, target)
    s = s.apply_matrix(T_MATRIX, target)
    s = s.apply_matrix(H_MATRIX, target)
    return s.apply_matrix(S_MATRIX, target)


_CONTROLLED = {
    GateKind.CNOT: apply_cnot,
    GateKind.CZ: apply_cz,
    GateKind.CY: apply_cy,
    GateKind.CH: apply_ch,
}


def apply_gate(state: StateVector, gate: GateInstance) -> StateVector:
    """Applies one gate instance and returns the new state."""
    kind = gate.kind
    if kind == GateKind.SWAP:
        return apply_swap(state)
    if kind in _CONTROLLED:
        control, target = gate.qubits
        return _CONTROLLED[kind](state, control, target)
    matrix = matrix_for(kind, gate.angle)
    return state.apply_matrix(matrix, gate.qubits[0])
