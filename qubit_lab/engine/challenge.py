"""Single-qubit "flip challenge": reach a target state with few gates.

The session logic is headless; a front end renders the Bloch vectors and
drives :class:`ChallengeSession` from button presses and a clock.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .bloch import BlochVector, bloch_distance
from .circuit import DEFAULT_ROTATION_ANGLE
from .gates import GateKind, matrix_for
from .state_vector import StateVector

WIN_THRESHOLD = 0.15

_S2 = 1 / math.sqrt(2)


@dataclass(frozen=True)
class Level:
    name: str
    description: str
    hint: str
    start: tuple[complex, complex]
    target: tuple[complex, complex]
    gates: tuple[str, ...]
    min_gates: int
    concept: str

    def start_state(self) -> StateVector:
        return StateVector.from_amplitudes(self.start)

    def target_bloch(self) -> BlochVector:
        return StateVector.from_amplitudes(self.target).bloch_vector(0)

    @property
    def has_rotation(self) -> bool:
        return any(GateKind.parse(g).is_rotation for g in self.gates)


LEVELS: tuple[Level, ...] = (
    Level("Bit Flip", "Flip |0> to |1> using the X gate",
          "The X gate is the quantum NOT - it flips the qubit!",
          (1, 0), (0, 1), ("X",), 1, "Pauli-X (NOT gate)"),
    Level("Superposition", "Put |0> into superposition |+>",
          "Hadamard creates equal superposition - try H!",
          (1, 0), (_S2, _S2), ("H",), 1, "Hadamard gate"),
    Level("Undo!", "Bring |+> back to |0>",
          "H applied twice = Identity. H^2 = I!",
          (_S2, _S2), (1, 0), ("H",), 1, "H^2 = Identity"),
    Level("Phase Flip", "Create |-> from |0>",
          "H then Z gives you the minus superposition.",
          (1, 0), (_S2, -_S2), ("H", "Z"), 2, "Phase matters!"),
    Level("Quarter Turn", "Reach |i> = (|0>+i|1>)/sqrt(2)",
          "Try H first, then S for a pi/2 phase.",
          (1, 0), (_S2, 1j * _S2), ("H", "S"), 2, "S gate (sqrt Z)"),
    Level("Combo Move", "Get from |1> to |+>",
          "First flip with X, then create superposition with H!",
          (0, 1), (_S2, _S2), ("X", "H"), 2, "Gate chaining"),
    Level("Roundabout", "|0> -> |1> but use H gates!",
          "H -> X -> H is another way to flip. Or just X!",
          (1, 0), (0, 1), ("H", "X", "Z"), 1, "Multiple paths"),
    Level("Y Rotation", "Rotate to a custom angle on the YZ plane",
          "Use the Ry angle to rotate exactly to the target.",
          (1, 0), (math.cos(math.pi / 6), math.sin(math.pi / 6)),
          ("RY",), 1, "Rotation gates"),
    Level("Phase Chain", "|+> -> |-i> via phase gates",
          "S adds pi/2 phase. Adding S then Z gets you to -i.",
          (_S2, _S2), (_S2, -1j * _S2), ("S", "Z", "T"), 2, "Phase accumulation"),
    Level("Full Circuit", "Combine everything! |0> -> |-i>",
          "Think: H then S then Z. Or find your own path!",
          (1, 0), (_S2, -1j * _S2), ("H", "X", "Y", "Z", "S", "T"), 3,
          "Quantum mastery!"),
)


def level_score(gates_used: int, min_gates: int, elapsed_seconds: int) -> int:
    """Gate economy + time bonus + perfect bonus for a solved level."""
    gate_score = max(5, 30 - (gates_used - min_gates) * 5)
    time_bonus = max(0, 20 - elapsed_seconds // 5)
    perfect_bonus = 25 if gates_used == min_gates else 0
    return gate_score + time_bonus + perfect_bonus


@dataclass
class ChallengeSession:
    """Progress through :data:`LEVELS` with undo and scoring."""
    levels: tuple[Level, ...] = LEVELS
    level_index: int = 0
    score: int = 0
    won: bool = False
    complete: bool = False
    state: StateVector = field(init=False)
    history: list[StateVector] = field(default_factory=list, init=False)

    def __post_init__(self):
        self.state = self.level.start_state()

    @property
    def level(self) -> Level:
        return self.levels[self.level_index]

    @property
    def current_bloch(self) -> BlochVector:
        return self.state.bloch_vector(0)

    @property
    def distance(self) -> float:
        return bloch_distance(self.current_bloch, self.level.target_bloch())

    @property
    def match_percent(self) -> int:
        return max(0, round((1 - self.distance / 2) * 100))

    def apply_gate(self, name: str, angle: float = DEFAULT_ROTATION_ANGLE,
                   elapsed_seconds: int = 0) -> bool:
        """Applies an allowed gate; returns True if this move won the level."""
        if self.won:
            return False
        kind = GateKind.parse(name)
        if kind not in {GateKind.parse(g) for g in self.level.gates}:
            raise ValueError(f"Gate {kind.value} is not available on level '{self.level.name}'")
        matrix = matrix_for(kind, angle if kind.is_rotation else None)
        self.history.append(self.state)
        self.state = self.state.apply_matrix(matrix, 0)
        return self._check_win(elapsed_seconds)

    def _check_win(self, elapsed_seconds: int) -> bool:
        if self.distance < WIN_THRESHOLD and self.history:
            self.won = True
            self.score += level_score(len(self.history), self.level.min_gates,
                                      elapsed_seconds)
        return self.won

    def undo(self) -> bool:
        if not self.history or self.won:
            return False
        self.state = self.history.pop()
        return True

    def reset_level(self):
        self.state = self.level.start_state()
        self.history = []
        self.won = False

    def next_level(self) -> bool:
        """Advances; returns False (and marks completion) after the last level."""
        if self.level_index + 1 >= len(self.levels):
            self.complete = True
            return False
        self.level_index += 1
        self.reset_level()
        return True

    def restart(self):
        self.level_index = 0
        self.score = 0
        self.complete = False
        self.reset_level()
