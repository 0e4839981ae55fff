"""Qubit Lab - command-line entry point.

Runs a preset or an inline gate list through the simulator and prints the
per-step probabilities, Bloch vectors and a shot histogram.

Usage:
    python main.py --preset bell_phi_plus --temperature 0.015 --shots 1000
    python main.py --gates "H:0 CNOT:0,1 RY:1@0.7854" --extra-noise 0.2
"""

from __future__ import annotations

import argparse
import logging
import sys

import numpy as np

from qubit_lab.core.config import AppConfig
from qubit_lab.engine.bloch import bloch_purity
from qubit_lab.engine.circuit import PRESETS, GateInstance, QuantumCircuit
from qubit_lab.engine.gate_registry import GateRegistry
from qubit_lab.engine.measurement import MeasurementEngine, basis_labels
from qubit_lab.engine.noise import DiscreteDepolarizingNoise
from qubit_lab.engine.simulator import Simulator
from qubit_lab.engine.thermal import (
    clamp_extra_noise, clamp_temperature, format_temperature, temperature_to_fidelity,
)


def parse_gate_list(text: str) -> list[GateInstance]:
    """Parses 'NAME:q[,q][@angle]' tokens separated by whitespace."""
    gates = []
    for token in text.split():
        name, _, rest = token.partition(":")
        qubit_part, _, angle_part = rest.partition("@")
        if not qubit_part:
            raise ValueError(f"Gate token '{token}' is missing qubits")
        qubits = [int(q) for q in qubit_part.split(",")]
        angle = float(angle_part) if angle_part else None
        gates.append(GateInstance.of(name, *qubits, angle=angle))
    return gates


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Two-qubit circuit simulator with noise")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--preset", choices=list(PRESETS.keys()), default=None)
    source.add_argument("--gates", type=str, default=None,
                        help="e.g. \"H:0 CNOT:0,1 RX:1@1.57\"")
    parser.add_argument("--temperature", type=float, default=None, help="Kelvin")
    parser.add_argument("--extra-noise", type=float, default=None)
    parser.add_argument("--shots", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    config = AppConfig.load()
    temperature = clamp_temperature(
        config.temperature_k if args.temperature is None else args.temperature)
    extra = clamp_extra_noise(
        config.extra_noise if args.extra_noise is None else args.extra_noise)
    shots = config.default_shots if args.shots is None else args.shots

    if args.gates:
        circuit = QuantumCircuit(2, parse_gate_list(args.gates))
    else:
        circuit = PRESETS[args.preset or "bell_phi_plus"].build()

    noise = DiscreteDepolarizingNoise.for_environment(
        temperature, extra, scale=config.per_gate_noise_scale)
    result = Simulator(noise=noise).run(circuit, shots=shots,
                                        rng=np.random.default_rng(args.seed))

    print(f"Temperature {format_temperature(temperature)}: "
          f"fidelity {temperature_to_fidelity(temperature):.3f}, "
          f"per-gate noise p={noise.probability:.4f}")
    registry = GateRegistry.instance()
    labels = basis_labels(circuit.num_qubits)
    for step, state in enumerate(result.states):
        gate = "init" if step == 0 else registry.get(circuit.gates[step - 1].kind).label
        probs = " ".join(f"{lbl}={p:.3f}" for lbl, p in zip(labels, state.probabilities))
        print(f"  [{step:2d}] {gate:<5} {probs}")

    for q, bloch in enumerate(result.bloch_vectors):
        print(f"  q{q}: bloch=({bloch.x:+.3f}, {bloch.y:+.3f}, {bloch.z:+.3f}) "
              f"purity={bloch_purity(bloch):.3f}")
    print(f"  correlation={MeasurementEngine.correlation(result.probabilities):.3f}")

    if shots > 0:
        print(f"Counts over {shots} shots:")
        for label, count in result.measurement_counts.items():
            print(f"  {label}: {count}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
