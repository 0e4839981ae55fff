"""Gate metadata registry using the Singleton pattern."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .gates import GateKind


class GateCategory(Enum):
    BASIC = "basic"
    PHASE = "phase"
    ROTATION = "rotation"
    TWO_QUBIT = "two"


@dataclass(frozen=True)
class GateDefinition:
    """Immutable presentation metadata for a catalog gate."""
    kind: GateKind
    label: str
    display_name: str
    category: GateCategory
    color: str
    description: str

    @property
    def num_qubits(self) -> int:
        return self.kind.num_qubits

    @property
    def parametrized(self) -> bool:
        return self.kind.is_rotation

    @property
    def controlled(self) -> bool:
        return self.kind.is_controlled


class GateRegistry:
    """Singleton registry mapping gate kinds to GateDefinition objects."""

    _instance: GateRegistry | None = None

    def __init__(self):
        self._gates: dict[GateKind, GateDefinition] = {}

    @classmethod
    def instance(cls) -> GateRegistry:
        if cls._instance is None:
            cls._instance = cls()
            cls._instance._register_builtins()
        return cls._instance

    @classmethod
    def reset(cls):
        """Reset the singleton (for testing)."""
        cls._instance = None

    def _register_builtins(self):
        basic = GateCategory.BASIC
        phase = GateCategory.PHASE
        rot = GateCategory.ROTATION
        two = GateCategory.TWO_QUBIT

        # Pauli / basic
        self._add(GateKind.I, "I", "Identity", basic, "#6272a4",
                  "Does nothing; useful as a placeholder")
        self._add(GateKind.X, "X", "Pauli-X", basic, "#ff5555",
                  "NOT gate: flips |0> and |1>, a pi rotation about X")
        self._add(GateKind.Y, "Y", "Pauli-Y", basic, "#ffb86c",
                  "Combined bit and phase flip")
        self._add(GateKind.Z, "Z", "Pauli-Z", basic, "#f1fa8c",
                  "Phase flip: |1> -> -|1>")
        self._add(GateKind.H, "H", "Hadamard", basic, "#50fa7b",
                  "Creates the equal superpositions |+> and |->")

        # Phase
        self._add(GateKind.S, "S", "S Gate", phase, "#8be9fd",
                  "Square root of Z, a pi/2 phase")
        self._add(GateKind.SDG, "S†", "S† Gate", phase, "#5fd8f5",
                  "Inverse of S, a -pi/2 phase")
        self._add(GateKind.T, "T", "T Gate", phase, "#bd93f9",
                  "pi/4 phase rotation")
        self._add(GateKind.TDG, "T†", "T† Gate", phase, "#a57fef",
                  "Inverse of T, a -pi/4 phase")
        self._add(GateKind.SX, "√X", "Square-root X", phase, "#ff79c6",
                  "Square root of the NOT gate")

        # Rotations
        self._add(GateKind.RX, "Rx", "Rotation-X", rot, "#ffaa80",
                  "Rotation around the X axis by theta")
        self._add(GateKind.RY, "Ry", "Rotation-Y", rot, "#ff9060",
                  "Rotation around the Y axis by theta")
        self._add(GateKind.RZ, "Rz", "Rotation-Z", rot, "#c897ff",
                  "Rotation around the Z axis by theta")

        # Two-qubit
        self._add(GateKind.CNOT, "CNOT", "Controlled-NOT", two, "#00ff99",
                  "Flips the target when the control is |1>")
        self._add(GateKind.CZ, "CZ", "Controlled-Z", two, "#00ddff",
                  "Phase flip on |11>")
        self._add(GateKind.CY, "CY", "Controlled-Y", two, "#44ffbb",
                  "Applies Y to the target when the control is |1>")
        self._add(GateKind.CH, "CH", "Controlled-Hadamard", two, "#22ee88",
                  "Applies H to the target when the control is |1>")
        self._add(GateKind.SWAP, "SWAP", "SWAP", two, "#ff79aa",
                  "Exchanges the states of the two qubits")

    def _add(self, kind: GateKind, label: str, display_name: str,
             category: GateCategory, color: str, description: str):
        self.register(GateDefinition(kind, label, display_name, category,
                                     color, description))

    def register(self, gate_def: GateDefinition):
        self._gates[gate_def.kind] = gate_def

    def get(self, name: str | GateKind) -> GateDefinition:
        kind = GateKind.parse(name)
        if kind not in self._gates:
            raise KeyError(f"Gate '{kind.value}' not found in registry")
        return self._gates[kind]

    def all_gates(self) -> list[GateDefinition]:
        return list(self._gates.values())

    def by_category(self, category: GateCategory) -> list[GateDefinition]:
        return [g for g in self._gates.values() if g.category == category]

    def single_qubit_gates(self) -> list[GateDefinition]:
        return [g for g in self._gates.values() if g.num_qubits == 1]

    def multi_qubit_gates(self) -> list[GateDefinition]:
        return [g for g in self._gates.values() if g.num_qubits == 2]

    def parameterized_gates(self) -> list[GateDefinition]:
        return [g for g in self._gates.values() if g.parametrized]

    def gate_names(self) -> list[str]:
        return [kind.value for kind in self._gates]
