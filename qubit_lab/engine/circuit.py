"""Quantum circuit data model."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from .gates import GateKind, UnknownGateError
from .state_vector import MAX_QUBITS

logger = logging.getLogger(__name__)

DEFAULT_ROTATION_ANGLE = math.pi / 2


@dataclass(frozen=True)
class GateInstance:
    """A gate placed in the circuit. Immutable once created.

    ``qubits`` lists the target for single-qubit gates and
    (control, target) for controlled gates.
    """
    kind: GateKind
    qubits: tuple[int, ...]
    angle: float | None = None

    def __post_init__(self):
        kind = GateKind.parse(self.kind)
        qubits = tuple(int(q) for q in self.qubits)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "qubits", qubits)

        if len(qubits) != kind.num_qubits:
            raise ValueError(
                f"{kind.value} acts on {kind.num_qubits} qubit(s), got {list(qubits)}")
        if len(set(qubits)) != len(qubits):
            raise ValueError(f"{kind.value} needs distinct qubits, got {list(qubits)}")
        if any(q < 0 or q >= MAX_QUBITS for q in qubits):
            raise ValueError(f"Qubit indices must be in [0, {MAX_QUBITS - 1}], got {list(qubits)}")

        if kind.is_rotation:
            angle = DEFAULT_ROTATION_ANGLE if self.angle is None else float(self.angle)
            object.__setattr__(self, "angle", angle)
        elif self.angle is not None:
            raise ValueError(f"{kind.value} does not take an angle")

    @classmethod
    def of(cls, name: str | GateKind, *qubits: int, angle: float | None = None) -> GateInstance:
        return cls(GateKind.parse(name), tuple(qubits), angle)

    @property
    def name(self) -> str:
        return self.kind.value

    def to_dict(self) -> dict:
        data = {"name": self.kind.value, "qubits": list(self.qubits)}
        if self.angle is not None:
            data["angle"] = self.angle
        return data

    @classmethod
    def from_dict(cls, data: dict) -> GateInstance:
        return cls(
            kind=GateKind.parse(data["name"]),
            qubits=tuple(data["qubits"]),
            angle=data.get("angle"),
        )


@dataclass
class QuantumCircuit:
    """Ordered sequence of gate instances on one or two qubits."""
    num_qubits: int = 2
    gates: list[GateInstance] = field(default_factory=list)

    def __post_init__(self):
        if self.num_qubits < 1 or self.num_qubits > MAX_QUBITS:
            raise ValueError(f"num_qubits must be 1-{MAX_QUBITS}, got {self.num_qubits}")
        gates = list(self.gates)
        self.gates = []
        for gate in gates:
            self.add_gate(gate)

    def add_gate(self, gate: GateInstance):
        if any(q >= self.num_qubits for q in gate.qubits):
            raise ValueError(
                f"{gate.name} on qubits {list(gate.qubits)} does not fit a "
                f"{self.num_qubits}-qubit circuit")
        self.gates.append(gate)

    def remove_gate(self, index: int) -> GateInstance:
        return self.gates.pop(index)

    def clear(self):
        self.gates.clear()

    def gate_count(self) -> int:
        return len(self.gates)

    def __len__(self) -> int:
        return len(self.gates)

    def __iter__(self):
        return iter(self.gates)

    def circuit_hash(self) -> int:
        """Hash of the circuit structure for cache invalidation."""
        return hash((self.num_qubits, tuple(self.gates)))

    def copy(self) -> QuantumCircuit:
        return QuantumCircuit(self.num_qubits, list(self.gates))

    def to_dict(self) -> dict:
        return {
            "version": "1.0",
            "num_qubits": self.num_qubits,
            "gates": [g.to_dict() for g in self.gates],
        }

    @classmethod
    def from_dict(cls, data: dict, strict: bool = True) -> QuantumCircuit:
        """Rebuild a circuit from :meth:`to_dict` output.

        With ``strict=False`` gates whose name is not in the catalog are
        logged and skipped instead of raising UnknownGateError.
        """
        circuit = cls(num_qubits=data.get("num_qubits", 2))
        for g_data in data.get("gates", []):
            try:
                gate = GateInstance.from_dict(g_data)
            except UnknownGateError:
                if strict:
                    raise
                logger.warning("Skipping unrecognized gate %r", g_data.get("name"))
                continue
            circuit.add_gate(gate)
        return circuit

    @classmethod
    def from_gates(cls, gates: list[dict], num_qubits: int = 2,
                   strict: bool = True) -> QuantumCircuit:
        return cls.from_dict({"num_qubits": num_qubits, "gates": gates}, strict=strict)


# ---- Presets ---------------------------------------------------------------

@dataclass(frozen=True)
class CircuitPreset:
    key: str
    label: str
    gates: tuple[GateInstance, ...]

    def build(self) -> QuantumCircuit:
        return QuantumCircuit(2, list(self.gates))


PRESETS: dict[str, CircuitPreset] = {
    p.key: p for p in (
        CircuitPreset("bell_phi_plus", "Bell |Φ⁺⟩", (
            GateInstance.of("H", 0),
            GateInstance.of("CNOT", 0, 1),
        )),
        CircuitPreset("bell_psi_plus", "Bell |Ψ⁺⟩", (
            GateInstance.of("X", 1),
            GateInstance.of("H", 0),
            GateInstance.of("CNOT", 0, 1),
        )),
        CircuitPreset("plus_plus", "|++⟩", (
            GateInstance.of("H", 0),
            GateInstance.of("H", 1),
        )),
        CircuitPreset("teleport", "Teleport", (
            GateInstance.of("H", 0),
            GateInstance.of("CNOT", 0, 1),
            GateInstance.of("H", 0),
        )),
    )
}
