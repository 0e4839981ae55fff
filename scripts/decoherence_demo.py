"""Decoherence demo -- decay a Bloch vector under the physical noise channels.

Simulates a fixed frame rate, then writes the recorded history as CSV and
optionally as a PNG plot.

Usage:
    python scripts/decoherence_demo.py --state plus --phase 0.3 --frames 120
    python scripts/decoherence_demo.py --amplitude 0.5 --csv history.csv --png history.png
"""

from __future__ import annotations

import argparse
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from qubit_lab.controller.noise_controller import NoiseController
from qubit_lab.core.export import HistoryExporter
from qubit_lab.engine.bloch import BlochVector

STATES = {
    "zero": BlochVector(0.0, 0.0, 1.0),
    "one": BlochVector(0.0, 0.0, -1.0),
    "plus": BlochVector(1.0, 0.0, 0.0),
    "plus_i": BlochVector(0.0, 1.0, 0.0),
}


def run_demo(state: BlochVector, frames: int, frame_us: float,
             amplitude: float, phase: float, depolarizing: float) -> NoiseController:
    controller = NoiseController(history_length=frames)
    controller.set_ideal_bloch(state)
    controller.reset()
    controller.set_noise_intensity(amplitude=amplitude, phase=phase,
                                   depolarizing=depolarizing)
    # Timestamps are in milliseconds; frames are microseconds apart
    # so the MHz-scale channel rates stay visible. Frames closer than
    # 1 us apart are dropped by the controller.
    now_ms = 0.0
    controller.update(now_ms)
    for _ in range(frames):
        now_ms += frame_us / 1000.0
        controller.update(now_ms)
    return controller


def main():
    parser = argparse.ArgumentParser(description="Continuous decoherence demo")
    parser.add_argument("--state", choices=list(STATES.keys()), default="plus")
    parser.add_argument("--frames", type=int, default=120)
    parser.add_argument("--frame-us", type=float, default=2.0,
                        help="Simulated time between frames in microseconds")
    parser.add_argument("--amplitude", type=float, default=0.0)
    parser.add_argument("--phase", type=float, default=0.0)
    parser.add_argument("--depolarizing", type=float, default=0.0)
    parser.add_argument("--csv", type=str, default=None)
    parser.add_argument("--png", type=str, default=None)
    args = parser.parse_args()

    controller = run_demo(STATES[args.state], args.frames, args.frame_us,
                          args.amplitude, args.phase, args.depolarizing)
    metrics = controller.metrics
    noisy = controller.noisy_bloch
    print(f"Final: bloch=({noisy.x:+.4f}, {noisy.y:+.4f}, {noisy.z:+.4f}) "
          f"fidelity={metrics.fidelity:.4f} purity={metrics.purity:.4f}")

    if args.csv:
        path = HistoryExporter.export_csv(controller.history, args.csv)
        print(f"History saved to {path}")
    else:
        print(controller.export_history_csv())
    if args.png:
        path = HistoryExporter.export_png(controller.history, args.png)
        print(f"Plot saved to {path}")


if __name__ == "__main__":
    main()
