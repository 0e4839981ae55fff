"""Headless circuit-builder session.

Holds everything the two-qubit lab view shows: the circuit being edited,
the temperature and extra-noise settings, the cached per-step snapshots
and the selected playback step. Snapshots are rebuilt lazily whenever the
circuit or the noise settings change.
"""

from __future__ import annotations

import logging

import numpy as np

from qubit_lab.controller.noise_controller import NoiseController
from qubit_lab.core.config import AppConfig
from qubit_lab.core.serialization import CircuitSerializer
from qubit_lab.engine.bloch import BlochVector, bloch_purity
from qubit_lab.engine.circuit import PRESETS, GateInstance, QuantumCircuit
from qubit_lab.engine.measurement import MeasurementEngine
from qubit_lab.engine.noise import DiscreteDepolarizingNoise
from qubit_lab.engine.simulator import Simulator
from qubit_lab.engine.state_vector import StateVector
from qubit_lab.engine.thermal import (
    clamp_extra_noise, clamp_temperature,
    format_temperature, noise_probability, temperature_to_fidelity,
)

logger = logging.getLogger(__name__)


class LabSession:
    """Circuit, noise environment and derived displays for one user."""

    def __init__(self, config: AppConfig | None = None,
                 rng: np.random.Generator | None = None):
        self._config = config or AppConfig()
        self._circuit = QuantumCircuit(num_qubits=2)
        self._temperature_k = self._config.temperature_k
        self._extra_noise = self._config.extra_noise
        self._active_step = -1
        self._results: dict[str, int] | None = None
        self._rng = rng or np.random.default_rng()
        self._states: list[StateVector] | None = None
        self._states_key: tuple | None = None
        self._noise_controller = NoiseController(
            history_length=self._config.history_length)

    # ---- Circuit editing --------------------------------------------------

    @property
    def circuit(self) -> QuantumCircuit:
        return self._circuit

    def add_gate(self, name: str, *qubits: int, angle: float | None = None) -> GateInstance:
        gate = GateInstance.of(name, *qubits, angle=angle)
        self._circuit.add_gate(gate)
        self._invalidate()
        return gate

    def remove_gate(self, index: int) -> GateInstance:
        gate = self._circuit.remove_gate(index)
        self._invalidate()
        return gate

    def clear(self):
        self._circuit.clear()
        self._invalidate()

    def load_preset(self, key: str):
        if key not in PRESETS:
            raise KeyError(f"Unknown preset '{key}'")
        self._circuit = PRESETS[key].build()
        self._invalidate()

    def load_circuit(self, circuit: QuantumCircuit):
        if circuit.num_qubits != 2:
            raise ValueError("The lab works on 2-qubit circuits")
        self._circuit = circuit.copy()
        self._invalidate()

    def open_file(self, filepath) -> QuantumCircuit:
        """Loads a saved circuit, honouring the configured gate strictness."""
        circuit = CircuitSerializer.load(filepath, strict=self._config.strict_gates)
        self.load_circuit(circuit)
        self._config.add_recent_file(str(filepath))
        return self._circuit

    def save_file(self, filepath):
        CircuitSerializer.save(self._circuit, filepath)
        self._config.add_recent_file(str(filepath))

    # ---- Environment ------------------------------------------------------

    @property
    def temperature_k(self) -> float:
        return self._temperature_k

    def set_temperature(self, kelvin: float):
        self._temperature_k = clamp_temperature(kelvin)
        self._invalidate(keep_step=True)

    @property
    def extra_noise(self) -> float:
        return self._extra_noise

    def set_extra_noise(self, level: float):
        self._extra_noise = clamp_extra_noise(level)
        self._invalidate(keep_step=True)

    @property
    def temperature_fidelity(self) -> float:
        return temperature_to_fidelity(self._temperature_k)

    @property
    def temperature_label(self) -> str:
        return format_temperature(self._temperature_k)

    @property
    def noise_probability(self) -> float:
        return noise_probability(self._temperature_k, self._extra_noise)

    def noise_model(self) -> DiscreteDepolarizingNoise:
        return DiscreteDepolarizingNoise.for_environment(
            self._temperature_k, self._extra_noise,
            scale=self._config.per_gate_noise_scale)

    # ---- Snapshots --------------------------------------------------------

    def _invalidate(self, keep_step: bool = False):
        self._states = None
        self._results = None
        if not keep_step:
            self._active_step = -1

    @property
    def states(self) -> list[StateVector]:
        # Keyed on the circuit structure so edits made through
        # ``session.circuit`` directly are picked up too.
        key = (self._circuit.circuit_hash(), self._temperature_k, self._extra_noise)
        if self._states is None or key != self._states_key:
            self._states = Simulator(noise=self.noise_model()).build_states(self._circuit)
            self._states_key = key
        return self._states

    @property
    def active_step(self) -> int:
        return self._active_step

    def select_step(self, step: int):
        """Shows the state after gate ``step``; -1 shows the final state."""
        if step < -1 or step >= len(self._circuit):
            raise IndexError(f"Step {step} out of range for {len(self._circuit)} gates")
        self._active_step = step

    def playback_steps(self) -> list[int]:
        """Gate indices in the order a timed playback visits them."""
        return list(range(len(self._circuit)))

    @property
    def step_delay_ms(self) -> int:
        return self._config.step_delay_ms

    def playback_schedule(self) -> list[tuple[int, int]]:
        """(step, start offset in ms) pairs spaced by the configured delay."""
        delay = self._config.step_delay_ms
        return [(step, i * delay) for i, step in enumerate(self.playback_steps())]

    @property
    def displayed_state(self) -> StateVector:
        states = self.states
        if 0 <= self._active_step < len(states) - 1:
            return states[self._active_step + 1]
        return states[-1]

    @property
    def probabilities(self) -> np.ndarray:
        return self.displayed_state.probabilities

    def bloch_vector(self, qubit: int) -> BlochVector:
        return self.displayed_state.bloch_vector(qubit)

    def purity(self, qubit: int) -> float:
        return bloch_purity(self.bloch_vector(qubit))

    @property
    def correlation(self) -> float:
        return MeasurementEngine.correlation(self.probabilities)

    # ---- Measurement ------------------------------------------------------

    @property
    def results(self) -> dict[str, int] | None:
        return self._results

    def measure(self, shots: int | None = None) -> dict[str, int]:
        shots = self._config.default_shots if shots is None else shots
        self._results = MeasurementEngine.sample_shots(self.probabilities, shots, self._rng)
        logger.debug("Measured %d shots: %s", shots, self._results)
        return self._results

    # ---- Continuous decoherence -------------------------------------------

    @property
    def noise_controller(self) -> NoiseController:
        return self._noise_controller

    def track_qubit(self, qubit: int) -> NoiseController:
        """Restarts the noise controller from one qubit of the displayed state."""
        self._noise_controller.set_ideal_bloch(self.bloch_vector(qubit))
        self._noise_controller.reset()
        return self._noise_controller
