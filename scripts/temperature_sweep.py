"""Temperature sweep -- final-state quality of a preset circuit vs temperature.

Usage:
    python scripts/temperature_sweep.py --circuit bell_phi_plus --steps 12
    python scripts/temperature_sweep.py --circuit plus_plus --extra-noise 0.2 --output results.json
"""

from __future__ import annotations

import argparse
import json
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import numpy as np

from qubit_lab.engine.bloch import bloch_purity
from qubit_lab.engine.circuit import PRESETS, QuantumCircuit
from qubit_lab.engine.noise import DiscreteDepolarizingNoise
from qubit_lab.engine.simulator import Simulator
from qubit_lab.engine.thermal import (
    TEMPERATURE_MAX_K, TEMPERATURE_MIN_K, noise_probability, temperature_to_fidelity,
)


def run_sweep(
    circuit: QuantumCircuit,
    temperatures: np.ndarray,
    extra_noise: float,
) -> list[dict]:
    ideal = Simulator().build_states(circuit)[-1]
    results = []

    for kelvin in temperatures:
        noise = DiscreteDepolarizingNoise.for_environment(float(kelvin), extra_noise)
        final = Simulator(noise=noise).build_states(circuit)[-1]
        overlap = float(np.abs(np.vdot(ideal.data, final.data)) ** 2)

        results.append({
            "temperature_k": float(kelvin),
            "temperature_fidelity": temperature_to_fidelity(float(kelvin)),
            "noise_prob": noise_probability(float(kelvin), extra_noise),
            "state_overlap": overlap,
            "purity_q0": bloch_purity(final.bloch_vector(0)),
            "probabilities": [float(p) for p in final.probabilities],
        })

    return results


def main():
    parser = argparse.ArgumentParser(description="Temperature sweep experiment")
    parser.add_argument("--circuit", choices=list(PRESETS.keys()), default="bell_phi_plus")
    parser.add_argument("--min-k", type=float, default=TEMPERATURE_MIN_K)
    parser.add_argument("--max-k", type=float, default=TEMPERATURE_MAX_K)
    parser.add_argument("--steps", type=int, default=12)
    parser.add_argument("--extra-noise", type=float, default=0.0)
    parser.add_argument("--output", type=str, default=None)
    args = parser.parse_args()

    circuit = PRESETS[args.circuit].build()
    temperatures = np.geomspace(args.min_k, args.max_k, args.steps)

    print(f"Running temperature sweep: circuit={args.circuit}, "
          f"T=[{args.min_k:g}, {args.max_k:g}] K, steps={args.steps}, "
          f"extra_noise={args.extra_noise}")

    output = {
        "experiment": "temperature_sweep",
        "circuit": args.circuit,
        "extra_noise": args.extra_noise,
        "results": run_sweep(circuit, temperatures, args.extra_noise),
    }

    if args.output:
        with open(args.output, "w") as f:
            json.dump(output, f, indent=2)
        print(f"Results saved to {args.output}")
    else:
        print(json.dumps(output, indent=2))


if __name__ == "__main__":
    main()
