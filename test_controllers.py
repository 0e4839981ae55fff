"""Session, challenge, persistence and export tests."""

from __future__ import annotations

import sys
import os
import json
import math

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import numpy as np
import pytest

from qubit_lab.controller.lab_session import LabSession
from qubit_lab.controller.noise_controller import NoiseController
from qubit_lab.core.config import AppConfig
from qubit_lab.core.export import CSV_HEADER, HistoryExporter
from qubit_lab.core.serialization import CircuitSerializer
from qubit_lab.engine.bloch import BlochVector
from qubit_lab.engine.challenge import ChallengeSession, level_score
from qubit_lab.engine.circuit import GateInstance, QuantumCircuit, PRESETS
from qubit_lab.engine.gates import UnknownGateError

import main as cli


def _run_frames(controller: NoiseController, frames: int, step_ms: float = 1.0):
    controller.update(0.0)
    for i in range(1, frames + 1):
        controller.update(i * step_ms)


# ---- Noise controller -------------------------------------------------------

def test_first_update_only_primes_clock():
    controller = NoiseController()
    assert controller.update(100.0) is False
    assert controller.history == []
    assert controller.update(101.0) is True
    assert len(controller.history) == 1


def test_tiny_frames_are_skipped():
    controller = NoiseController()
    controller.update(0.0)
    assert controller.update(0.0000001) is False
    assert controller.update(-5.0) is False
    assert controller.history == []


def test_history_is_bounded_with_increasing_time():
    controller = NoiseController(history_length=3)
    _run_frames(controller, 5)
    assert [h.time for h in controller.history] == [2, 3, 4]


def test_noiseless_frame_csv():
    controller = NoiseController()
    _run_frames(controller, 1)
    lines = controller.export_history_csv().split("\n")
    assert lines[0] == CSV_HEADER
    assert lines[1] == "0,1.0000,1.0000,1.0000,0.0000,0.0000,1.0000"


def test_dephasing_lowers_fidelity_and_purity():
    controller = NoiseController()
    assert controller.set_ideal_bloch({"x": 1.0, "y": 0.0, "z": 0.0})
    controller.reset()
    controller.set_noise_intensity(phase=1.0)
    assert controller.fidelity_color() == "#00f5ff"
    _run_frames(controller, 1)
    metrics = controller.metrics
    assert metrics.fidelity == pytest.approx(0.5)
    assert metrics.purity == pytest.approx(0.5)
    assert metrics.decoherence_rate == pytest.approx(1.0)
    assert controller.fidelity_color() == "#ff9955"


def test_invalid_ideal_vector_is_ignored(caplog):
    controller = NoiseController()
    assert controller.set_ideal_bloch({"x": 1.0}) is False
    assert controller.ideal_bloch == BlochVector(0.0, 0.0, 1.0)
    assert "Ignoring invalid Bloch vector" in caplog.text


def test_reset_restores_ideal_and_clears_history():
    controller = NoiseController()
    controller.set_ideal_bloch((0.0, 1.0, 0.0))
    controller.reset()
    controller.set_noise_intensity(amplitude=0.4, depolarizing=0.2)
    _run_frames(controller, 4, step_ms=0.002)
    assert controller.noisy_bloch != controller.ideal_bloch
    controller.reset()
    assert controller.noisy_bloch == controller.ideal_bloch
    assert controller.history == []
    assert controller.metrics.fidelity == 1.0
    assert controller.intensity.amplitude == pytest.approx(0.4)


# ---- Lab session ------------------------------------------------------------

def test_bell_preset_in_session():
    session = LabSession(rng=np.random.default_rng(0))
    session.load_preset("bell_phi_plus")
    assert np.allclose(session.probabilities, [0.5, 0, 0, 0.5], atol=0.02)
    assert session.correlation == pytest.approx(1.0)
    counts = session.measure(500)
    assert counts["01"] == 0 and counts["10"] == 0
    assert counts["00"] + counts["11"] == 500
    assert session.results == counts


def test_session_step_selection():
    session = LabSession()
    session.load_preset("bell_phi_plus")
    session.select_step(0)
    assert np.allclose(session.probabilities, [0.5, 0, 0.5, 0], atol=0.02)
    assert session.purity(1) == pytest.approx(1.0)
    with pytest.raises(IndexError):
        session.select_step(2)
    session.set_temperature(4.0)
    assert session.active_step == 0
    session.add_gate("Z", 1)
    assert session.active_step == -1
    assert session.playback_steps() == [0, 1, 2]


def test_session_environment_is_clamped():
    session = LabSession()
    session.set_temperature(1000)
    assert session.temperature_k == 300.0
    assert session.temperature_label == "300 K"
    session.set_temperature(0)
    assert session.temperature_k == pytest.approx(0.015)
    session.set_extra_noise(2.0)
    assert session.extra_noise == 1.0
    assert session.noise_model().probability == pytest.approx(
        session.noise_probability * 0.25)


def test_session_rejects_bad_inputs():
    session = LabSession()
    with pytest.raises(KeyError):
        session.load_preset("ghz")
    with pytest.raises(ValueError):
        session.load_circuit(QuantumCircuit(1))
    session.measure(10)
    session.add_gate("H", 0)
    assert session.results is None


# ---- Flip challenge ---------------------------------------------------------

def test_first_level_perfect_score():
    game = ChallengeSession()
    assert game.match_percent == 0
    assert game.apply_gate("X") is True
    assert game.score == 75
    assert game.match_percent == 100


def test_disallowed_gate_raises():
    game = ChallengeSession()
    with pytest.raises(ValueError):
        game.apply_gate("H")


def test_undo_restores_previous_state():
    game = ChallengeSession(level_index=3)
    assert game.apply_gate("Z") is False
    assert game.undo() is True
    assert game.undo() is False
    assert game.apply_gate("H") is False
    assert game.apply_gate("Z") is True
    assert game.undo() is False


def test_rotation_level_needs_exact_angle():
    game = ChallengeSession(level_index=7)
    assert game.level.has_rotation
    assert game.apply_gate("RY") is False
    game.reset_level()
    assert game.apply_gate("RY", angle=math.pi / 3) is True


def test_score_time_bonus_and_completion():
    assert level_score(3, 1, 23) == 36
    assert level_score(20, 1, 500) == 5
    game = ChallengeSession(level_index=9)
    assert game.next_level() is False
    assert game.complete
    game.restart()
    assert game.level_index == 0 and not game.complete


# ---- Persistence and export ----------------------------------------------------

def test_config_round_trip(tmp_path):
    config = AppConfig(_config_dir=tmp_path)
    config.default_shots = 2048
    config.add_recent_file("a.qlab")
    config.add_recent_file("b.qlab")
    config.add_recent_file("a.qlab")
    config.save()
    loaded = AppConfig.load(tmp_path)
    assert loaded.default_shots == 2048
    assert loaded.recent_files == ["a.qlab", "b.qlab"]


def test_corrupt_config_falls_back_to_defaults(tmp_path, caplog):
    (tmp_path / "config.json").write_text("{not json", encoding="utf-8")
    loaded = AppConfig.load(tmp_path)
    assert loaded.default_shots == 512
    assert "using defaults" in caplog.text


def test_serializer_round_trip(tmp_path):
    circuit = PRESETS["teleport"].build()
    circuit.add_gate(GateInstance.of("RZ", 1, angle=0.3))
    path = tmp_path / f"circuit{CircuitSerializer.FILE_EXTENSION}"
    CircuitSerializer.save(circuit, path)
    loaded = CircuitSerializer.load(path)
    assert loaded.gates == circuit.gates
    assert json.loads(path.read_text(encoding="utf-8"))["version"] == "1.0"


def test_serializer_lenient_load(tmp_path):
    path = tmp_path / "odd.qlab"
    path.write_text(json.dumps({"num_qubits": 2, "gates": [
        {"name": "MAGIC", "qubits": [0]}, {"name": "X", "qubits": [1]},
    ]}), encoding="utf-8")
    with pytest.raises(UnknownGateError):
        CircuitSerializer.load(path)
    assert [g.name for g in CircuitSerializer.load(path, strict=False)] == ["X"]


def test_history_export(tmp_path):
    controller = NoiseController()
    controller.set_noise_intensity(depolarizing=0.5)
    _run_frames(controller, 10, step_ms=0.002)
    csv_path = HistoryExporter.export_csv(controller.history, tmp_path / "out" / "h.csv")
    assert len(csv_path.read_text(encoding="utf-8").split("\n")) == 11
    png_path = HistoryExporter.export_png(controller.history, tmp_path / "h.png", dpi=50)
    assert png_path.read_bytes()[:4] == b"\x89PNG"


# ---- Command line -----------------------------------------------------------

def test_parse_gate_list():
    gates = cli.parse_gate_list("H:0 CNOT:0,1 RY:1@0.5")
    assert [g.name for g in gates] == ["H", "CNOT", "RY"]
    assert gates[2].angle == 0.5
    with pytest.raises(ValueError):
        cli.parse_gate_list("H")


def test_cli_runs_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert cli.main(["--preset", "bell_phi_plus", "--shots", "20", "--seed", "1"]) == 0
    out = capsys.readouterr().out
    assert "correlation=" in out
    assert "Counts over 20 shots:" in out


def test_cli_uses_configured_per_gate_scale(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    config = AppConfig(_config_dir=tmp_path / ".qubit_lab")
    config.per_gate_noise_scale = 0.0
    config.save()
    assert cli.main(["--shots", "0"]) == 0
    assert "per-gate noise p=0.0000" in capsys.readouterr().out


def test_cli_clamps_environment_arguments(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert cli.main(["--extra-noise", "-0.5", "--shots", "0"]) == 0
    assert "per-gate noise p=0.0075" in capsys.readouterr().out
    assert cli.main(["--temperature", "1000", "--extra-noise", "3", "--shots", "0"]) == 0
    out = capsys.readouterr().out
    assert "Temperature 300 K" in out
    assert "per-gate noise p=0.2375" in out


def test_cli_report_uses_gate_labels(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert cli.main(["--gates", "SDG:1 CNOT:0,1", "--shots", "0"]) == 0
    out = capsys.readouterr().out
    assert "[ 1] S†" in out


# ---- Configuration wiring ---------------------------------------------------

def test_session_noise_controller_uses_history_length():
    config = AppConfig()
    config.history_length = 3
    session = LabSession(config)
    session.load_preset("plus_plus")
    controller = session.track_qubit(0)
    assert controller is session.noise_controller
    assert controller.ideal_bloch == pytest.approx((1.0, 0.0, 0.0), abs=0.01)
    controller.set_noise_intensity(phase=0.5)
    _run_frames(controller, 5, step_ms=0.002)
    assert [h.time for h in controller.history] == [2, 3, 4]


def test_playback_schedule_uses_step_delay():
    config = AppConfig()
    config.step_delay_ms = 250
    session = LabSession(config)
    session.load_preset("bell_phi_plus")
    assert session.step_delay_ms == 250
    assert session.playback_schedule() == [(0, 0), (1, 250)]


def test_open_file_honours_strict_gates(tmp_path):
    path = tmp_path / "mixed.qlab"
    path.write_text(json.dumps({"num_qubits": 2, "gates": [
        {"name": "MAGIC", "qubits": [0]}, {"name": "X", "qubits": [1]},
    ]}), encoding="utf-8")
    with pytest.raises(UnknownGateError):
        LabSession(AppConfig()).open_file(path)

    config = AppConfig()
    config.strict_gates = False
    session = LabSession(config)
    session.open_file(path)
    assert [g.name for g in session.circuit] == ["X"]
    assert config.recent_files == [str(path)]


def test_session_noise_model_uses_configured_scale():
    config = AppConfig()
    config.per_gate_noise_scale = 0.5
    session = LabSession(config)
    assert session.noise_model().probability == pytest.approx(
        session.noise_probability * 0.5)


def test_session_sees_direct_circuit_edits():
    session = LabSession()
    assert session.probabilities[0] == pytest.approx(1.0)
    session.circuit.add_gate(GateInstance.of("X", 1))
    assert session.probabilities[1] == pytest.approx(1.0, abs=0.01)


def test_non_object_config_falls_back_to_defaults(tmp_path, caplog):
    (tmp_path / "config.json").write_text("[1, 2, 3]", encoding="utf-8")
    loaded = AppConfig.load(tmp_path)
    assert loaded.default_shots == 512
    assert "using defaults" in caplog.text
