"""Circuit simulator - turns a gate sequence into state snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Generator

import numpy as np

from .bloch import BlochVector
from .circuit import QuantumCircuit
from .measurement import MeasurementEngine
from .noise import DiscreteDepolarizingNoise
from .operations import apply_gate
from .state_vector import StateVector

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """Result of a full simulation run."""
    states: list[StateVector]
    measurement_counts: dict[str, int] = field(default_factory=dict)
    num_shots: int = 0
    seed: int | None = None

    @property
    def final_state(self) -> StateVector:
        return self.states[-1]

    @property
    def probabilities(self) -> np.ndarray:
        return self.final_state.probabilities

    @property
    def bloch_vectors(self) -> list[BlochVector]:
        """Per-qubit Bloch vectors of the final state."""
        final = self.final_state
        return [final.bloch_vector(q) for q in range(final.num_qubits)]


class Simulator:
    """Executes a QuantumCircuit, optionally adding noise after every gate."""

    def __init__(self, noise: DiscreteDepolarizingNoise | None = None):
        self._noise = noise

    @property
    def noise(self) -> DiscreteDepolarizingNoise | None:
        return self._noise

    def run_step_by_step(self, circuit: QuantumCircuit
                         ) -> Generator[tuple[StateVector, int], None, None]:
        """Yields (state, gate_index) starting with the initial state at -1."""
        state = StateVector(circuit.num_qubits)
        yield state, -1
        for index, gate in enumerate(circuit.gates):
            state = apply_gate(state, gate)
            if self._noise is not None:
                state = self._noise.apply(state)
            yield state, index

    def build_states(self, circuit: QuantumCircuit) -> list[StateVector]:
        """Returns len(circuit) + 1 snapshots: the initial state and one per gate."""
        states = [state for state, _ in self.run_step_by_step(circuit)]
        logger.debug("Built %d snapshots for %d gates (noise=%r)",
                     len(states), len(circuit), self._noise)
        return states

    def run(self, circuit: QuantumCircuit, shots: int = 0,
            seed: int | None = None,
            rng: np.random.Generator | None = None) -> SimulationResult:
        """Full simulation: build every snapshot, then sample the final state.

        Args:
            circuit: The circuit to simulate.
            shots: Number of measurement samples (0 skips sampling).
            seed: Optional seed for reproducibility (creates rng if not given).
            rng: Optional pre-seeded Generator (takes precedence over seed).
        """
        states = self.build_states(circuit)
        counts: dict[str, int] = {}
        if shots > 0:
            if rng is None:
                rng = np.random.default_rng(seed)
            counts = MeasurementEngine.sample(states[-1], shots, rng=rng)
        return SimulationResult(
            states=states,
            measurement_counts=counts,
            num_shots=shots,
            seed=seed,
        )
