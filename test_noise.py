"""Decoherence model tests: discrete amplitude blend and continuous channels."""

from __future__ import annotations

import sys
import os
import math

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import numpy as np
import pytest

from qubit_lab.engine.bloch import BlochVector, bloch_purity, bound_bloch_vector
from qubit_lab.engine.noise import (
    BASE_RATES, AmplitudeDampingChannel, ContinuousPhysicalNoise,
    DepolarizingChannel, DiscreteDepolarizingNoise, NoiseIntensity,
    PhaseDampingChannel, PER_GATE_SCALE,
)
from qubit_lab.engine.state_vector import StateVector
from qubit_lab.engine.thermal import noise_probability

SAMPLE_VECTORS = [
    BlochVector(1.0, 0.0, 0.0),
    BlochVector(0.0, -1.0, 0.0),
    BlochVector(0.0, 0.0, -1.0),
    BlochVector(0.5, 0.5, 0.5),
    BlochVector(0.7, 0.7, -0.1),
]


# =========================================================================
# Discrete per-gate blend
# =========================================================================

def test_discrete_blend_formula():
    # |1>: d = 0.8 -> (0.1, 0.8) before renormalization
    state = StateVector.from_amplitudes([0, 1])
    out = DiscreteDepolarizingNoise(0.36).apply(state)
    expected = np.array([0.1, 0.8]) / math.sqrt(0.65)
    assert np.allclose(out.data, expected)
    assert out.norm() == pytest.approx(1.0)


def test_discrete_blend_scales_imaginary_parts():
    state = StateVector.from_amplitudes([0.6j, 0, 0, 0.8])
    out = DiscreteDepolarizingNoise(0.19).apply(state)
    d = 0.9
    raw = np.array([0.05 + 0.6j * d, 0, 0, 0.8 * d])
    assert np.allclose(out.data, raw / np.linalg.norm(raw))


def test_discrete_zero_probability_is_identity():
    state = StateVector.from_amplitudes([0.6, 0, 0, 0.8j])
    out = DiscreteDepolarizingNoise(0.0).apply(state)
    assert out.isclose(state)
    assert out is not state


def test_discrete_none_state_passes_through():
    assert DiscreteDepolarizingNoise(0.2).apply(None) is None


def test_discrete_probability_range():
    with pytest.raises(ValueError):
        DiscreteDepolarizingNoise(-0.1)
    with pytest.raises(ValueError):
        DiscreteDepolarizingNoise(1.5)


def test_for_environment_scales_noise_probability():
    noise = DiscreteDepolarizingNoise.for_environment(4.0, 0.3)
    assert noise.probability == pytest.approx(noise_probability(4.0, 0.3) * PER_GATE_SCALE)
    assert noise_probability(300, 1.0) == pytest.approx(0.95)


def test_discrete_noise_pulls_toward_ground():
    state = StateVector.from_initial_states([1, 1])
    for _ in range(200):
        state = DiscreteDepolarizingNoise(0.5).apply(state)
    assert state.probabilities[0] > 0.99


# =========================================================================
# Continuous physical model
# =========================================================================

def test_zero_intensity_is_identity():
    for channel in (AmplitudeDampingChannel(), PhaseDampingChannel(), DepolarizingChannel()):
        v = BlochVector(0.5, 0.5, 0.0)
        assert channel.apply(v, 0.001, 0.0) == v


def test_amplitude_damping_converges_to_ground():
    channel = AmplitudeDampingChannel()
    for v in SAMPLE_VECTORS:
        out = channel.apply(v, 1e-3, 1.0)
        assert out == pytest.approx((0.0, 0.0, 1.0), abs=1e-9)


def test_ground_state_is_fixed_point():
    ground = BlochVector(0.0, 0.0, 1.0)
    assert AmplitudeDampingChannel().apply(ground, 0.01, 1.0) == pytest.approx(ground)
    assert AmplitudeDampingChannel().apply(ground, 1e-7, 0.4) == pytest.approx(ground)


def test_amplitude_damping_contracts_and_drifts_up():
    v = BlochVector(0.7, 0.7, -0.7)
    out = AmplitudeDampingChannel().apply(v, 5e-7, 1.0)
    assert out.magnitude() < v.magnitude()
    assert out.z > v.z


def test_transverse_decay_is_exponential():
    v = BlochVector(1.0, 0.0, 0.0)
    channel = AmplitudeDampingChannel()
    r1 = channel.apply(v, 1e-7, 1.0)
    r2 = channel.apply(v, 2e-7, 1.0)
    assert r2.x / r1.x == pytest.approx(math.exp(-BASE_RATES["amplitude_damping"] * 1e-7))


def test_phase_damping_keeps_z():
    v = BlochVector(0.5, 0.5, 0.5)
    out = PhaseDampingChannel().apply(v, 1e-3, 1.0)
    assert out.z == 0.5
    assert abs(out.x) < 1e-9 and abs(out.y) < 1e-9


def test_depolarizing_shrinks_to_origin():
    channel = DepolarizingChannel()
    for v in SAMPLE_VECTORS:
        out = channel.apply(v, 1e-3, 1.0)
        assert out.magnitude() < 0.01
        assert bloch_purity(out) == pytest.approx(0.5, abs=1e-4)


def test_depolarizing_is_uniform():
    v = BlochVector(0.3, -0.4, 0.5)
    out = DepolarizingChannel().apply(v, 3e-7, 0.5)
    decay = math.exp(-BASE_RATES["depolarizing"] * 0.5 * 3e-7)
    assert tuple(out) == pytest.approx(tuple(v.scaled(decay)))


def test_update_applies_channels_in_order():
    noise = ContinuousPhysicalNoise()
    v = BlochVector(0.6, 0.0, -0.8)
    dt = 2e-7
    intensity = NoiseIntensity(amplitude=0.5, phase=0.3, depolarizing=0.2)
    expected = AmplitudeDampingChannel().apply(v, dt, 0.5)
    expected = PhaseDampingChannel().apply(expected, dt, 0.3)
    expected = DepolarizingChannel().apply(expected, dt, 0.2)
    assert tuple(noise.update(v, dt, intensity)) == pytest.approx(tuple(expected))


def test_update_guards():
    noise = ContinuousPhysicalNoise()
    v = BlochVector(1.0, 0.0, 0.0)
    assert noise.update(None, 0.1, NoiseIntensity(phase=1.0)) is None
    assert noise.update(v, 0.0, NoiseIntensity(phase=1.0)) == v
    assert noise.update(v, -1.0, NoiseIntensity(phase=1.0)) == v
    assert noise.update(v, 1e-3, None) == v


def test_update_accepts_plain_inputs():
    noise = ContinuousPhysicalNoise()
    out = noise.update({"x": 0.0, "y": 1.0, "z": 0.0}, 1e-3, {"phase": 1.0})
    assert out == pytest.approx((0.0, 0.0, 0.0), abs=1e-9)


def test_update_rejects_malformed_vector():
    noise = ContinuousPhysicalNoise()
    with pytest.raises(ValueError):
        noise.update({"x": 1.0, "y": 0.0}, 1e-3, {"phase": 1.0})
    with pytest.raises(ValueError):
        noise.update(("a", 0, 0), 1e-3, {"phase": 1.0})


def test_bound_only_normalizes_outside_sphere():
    assert bound_bloch_vector(BlochVector(2.0, 0.0, 0.0)) == pytest.approx((1.0, 0.0, 0.0))
    inside = BlochVector(0.3, 0.3, 0.3)
    assert bound_bloch_vector(inside) == inside
    edge = BlochVector(1.0 + 1e-12, 0.0, 0.0)
    assert bound_bloch_vector(edge) == edge


def test_intensity_is_clamped_and_updatable():
    intensity = NoiseIntensity(amplitude=1.7, phase=-0.2, depolarizing=0.4)
    assert intensity.to_dict() == {"amplitude": 1.0, "phase": 0.0, "depolarizing": 0.4}
    changed = intensity.updated(phase=0.5, depolarizing=None)
    assert changed == NoiseIntensity(1.0, 0.5, 0.4)
    with pytest.raises(KeyError):
        intensity.updated(thermal=0.1)


def test_for_environment_scale_is_capped():
    assert DiscreteDepolarizingNoise.for_environment(0.015, 0.0, scale=0.0).probability == 0.0
    assert DiscreteDepolarizingNoise.for_environment(300, 1.0, scale=2.0).probability == 1.0
