"""JSON save/load for quantum circuits (``.qlab`` files)."""

from __future__ import annotations

import json
from pathlib import Path

from qubit_lab.engine.circuit import QuantumCircuit


class CircuitSerializer:
    """Reads and writes the ``QuantumCircuit.to_dict`` layout as JSON."""

    FILE_VERSION = "1.0"
    FILE_EXTENSION = ".qlab"

    @staticmethod
    def save(circuit: QuantumCircuit, filepath: Path | str):
        filepath = Path(filepath)
        data = circuit.to_dict()
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    @staticmethod
    def load(filepath: Path | str, strict: bool = True) -> QuantumCircuit:
        """Reads a circuit file.

        With ``strict=True`` an unknown gate name raises UnknownGateError.
        With ``strict=False`` such gates are logged and dropped, and the
        rest of the circuit loads as usual.
        """
        filepath = Path(filepath)
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return QuantumCircuit.from_dict(data, strict=strict)
