"""Noise-history export utilities for CSV and PNG output."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from matplotlib.figure import Figure

if TYPE_CHECKING:
    from qubit_lab.controller.noise_controller import HistoryFrame

CSV_HEADER = "time,fidelity,purity,magnitude,x,y,z"


def history_to_csv(history: Iterable[HistoryFrame]) -> str:
    """Header row plus one row per frame, floats fixed to 4 decimals."""
    rows = [
        f"{h.time},{h.fidelity:.4f},{h.purity:.4f},{h.magnitude:.4f},"
        f"{h.bloch.x:.4f},{h.bloch.y:.4f},{h.bloch.z:.4f}"
        for h in history
    ]
    return CSV_HEADER + "\n" + "\n".join(rows)


class HistoryExporter:
    """Writes a recorded noise history to disk."""

    @staticmethod
    def export_csv(history: Iterable[HistoryFrame], filepath: str | Path) -> Path:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(history_to_csv(history), encoding="utf-8")
        return filepath

    @staticmethod
    def build_figure(history: Iterable[HistoryFrame]) -> Figure:
        """Fidelity, purity and Bloch components against frame index."""
        frames = list(history)
        times = [h.time for h in frames]

        fig = Figure(figsize=(8, 5), dpi=100)
        ax_metrics, ax_bloch = fig.subplots(2, 1, sharex=True)

        ax_metrics.plot(times, [h.fidelity for h in frames], label="fidelity", color="#00b8c4")
        ax_metrics.plot(times, [h.purity for h in frames], label="purity", color="#50fa7b")
        ax_metrics.plot(times, [h.magnitude for h in frames], label="|r|", color="#ffb86c")
        ax_metrics.set_ylim(0.0, 1.05)
        ax_metrics.set_ylabel("metric")
        ax_metrics.legend(loc="lower left", fontsize=8)
        ax_metrics.grid(True, alpha=0.3)

        for axis, color in (("x", "#ff5555"), ("y", "#50fa7b"), ("z", "#6272a4")):
            ax_bloch.plot(times, [getattr(h.bloch, axis) for h in frames],
                          label=axis, color=color)
        ax_bloch.set_ylim(-1.05, 1.05)
        ax_bloch.set_xlabel("frame")
        ax_bloch.set_ylabel("Bloch component")
        ax_bloch.legend(loc="lower left", fontsize=8)
        ax_bloch.grid(True, alpha=0.3)

        fig.tight_layout()
        return fig

    @staticmethod
    def export_png(history: Iterable[HistoryFrame], filepath: str | Path,
                   dpi: int = 150) -> Path:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        fig = HistoryExporter.build_figure(history)
        fig.savefig(str(filepath), dpi=dpi)
        return filepath
