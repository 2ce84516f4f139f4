"""
Unit Tests for Active Shock Absorber Simulator
==============================================
Tests core physics modules for correctness.
Run: python -m pytest tests/ -v
"""

import sys
import os
import math
import dataclasses
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from active_damper.damping_model import (
    ConfigurationError, DampingModel, DampingVariant, ALL_VARIANTS,
    damping_force,
)
from active_damper.oscillator import (
    PhysicalParameters, InitialConditions, SimulationConfig,
    compute_acceleration,
)
from active_damper.integrator import (
    StateSample, solve, integrate_rk4, simulate_euler, rk4_step,
)
from active_damper.playback import (
    index_for_time, sample_at, advance_clock, playback_indices,
)
from active_damper.validation import (
    LIMIT_CYCLE_TOLERANCE, POSITION_TOLERANCE,
    constant_damping_reference, reference_solution, run_all_validations,
    validate_against_reference, validate_undamped,
)
from active_damper.visualization import spring_path


def undamped(y, v):
    return 0.0


class TestDampingModel:
    """Verify the damping coefficient catalog."""

    def test_all_variants_exist(self):
        for key in ['exp_y', 'exp_v', 'vdp', 'constant']:
            model = DampingModel(key)
            assert model.name is not None
            assert model.variant.value == key

    def test_catalog_is_closed(self):
        assert set(ALL_VARIANTS) == set(DampingVariant)

    def test_exp_y_formula(self):
        model = DampingModel('exp_y')
        assert model(0.0, 5.0) == 0.0
        assert abs(model(0.3, 0.0) - (1 - math.exp(-0.9))) < 1e-15
        assert abs(model(10.0, 0.0) - 1.0) < 1e-12

    def test_exp_v_formula(self):
        model = DampingModel('exp_v')
        assert model(5.0, 0.0) == 0.0
        assert abs(model(0.0, -0.3) - (1 - math.exp(-0.9))) < 1e-15

    def test_vdp_formula(self):
        model = DampingModel('vdp')
        assert model(1.0, 3.0) == 0.0
        assert model(2.0, 0.0) == pytest.approx(1.5)

    def test_constant_formula(self):
        model = DampingModel(DampingVariant.CONSTANT)
        for y, v in [(0, 0), (1e3, -1e3), (-0.5, 0.25)]:
            assert model(y, v) == 0.2

    def test_vdp_injects_energy_near_origin(self):
        """γ(y0, 0) = 0.5 (y0² - 1) < 0 for |y0| < 1."""
        model = DampingModel('vdp')
        for y0 in [-0.99, -0.5, 0.0, 0.1, 0.9]:
            assert model(y0, 0.0) < 0
        assert model(1.5, 0.0) > 0

    def test_unknown_variant_rejected(self):
        with pytest.raises(ConfigurationError):
            DampingModel('quadratic')

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            DampingModel('')

    def test_gamma_array_matches_scalar(self):
        ys = np.linspace(-1.2, 1.2, 7)
        vs = np.linspace(0.8, -0.8, 7)
        for key in ALL_VARIANTS:
            model = DampingModel(key)
            arr = model.gamma_array(ys, vs)
            assert arr.shape == ys.shape
            for y, v, g in zip(ys, vs, arr):
                assert g == pytest.approx(model(y, v), abs=1e-15)

    def test_models_compare_by_variant(self):
        assert DampingModel('vdp') == DampingModel(DampingVariant.VDP)
        assert DampingModel('vdp') != DampingModel('exp_y')
        assert hash(DampingModel('exp_v')) == hash(DampingModel('exp_v'))

    def test_damping_force_sign(self):
        """Positive γ opposes motion, negative γ (vdp near 0) pushes along it."""
        assert damping_force(0.5, 1.0, DampingModel('exp_y')) < 0
        assert damping_force(0.0, 1.0, DampingModel('vdp')) > 0


class TestOscillator:
    """Verify parameters, configuration and the equation of motion."""

    def test_natural_frequency(self):
        p = PhysicalParameters(mass=0.25, spring_constant=4.0)
        assert abs(p.natural_frequency - 4.0) < 1e-12
        assert abs(p.period - math.pi / 2) < 1e-12

    def test_acceleration(self):
        p = PhysicalParameters(mass=2.0, spring_constant=3.0)
        acc = compute_acceleration(0.5, 1.0, p, lambda y, v: 0.4)
        assert acc == pytest.approx((-0.4 * 1.0 - 3.0 * 0.5) / 2.0)

    def test_acceleration_uses_damping_force(self):
        p = PhysicalParameters(mass=0.1, spring_constant=1.0)
        model = DampingModel('vdp')
        acc = compute_acceleration(0.3, -0.7, p, model)
        assert acc == (damping_force(0.3, -0.7, model) - 1.0 * 0.3) / 0.1
        assert damping_force(0.3, -0.7, lambda y, v: 0.0) == 0.0

    def test_defaults(self):
        cfg = SimulationConfig()
        assert cfg.params.mass == 0.1
        assert cfg.params.spring_constant == 1.0
        assert cfg.initial == InitialConditions(y0=0.1, v0=0.2)
        assert cfg.damping == 'exp_y'
        assert cfg.t_max == 35.0
        assert cfg.dt == 0.05

    def test_config_is_hashable_cache_key(self):
        a = SimulationConfig(damping='vdp', t_max=10.0)
        b = SimulationConfig(damping='vdp', t_max=10.0)
        cache = {a: 'run'}
        assert cache[b] == 'run'

    def test_enum_and_tag_configs_are_same_key(self):
        a = SimulationConfig(damping=DampingVariant.EXP_V)
        b = SimulationConfig(damping='exp_v')
        assert a == b and hash(a) == hash(b)
        assert a.damping == 'exp_v'

    def test_config_is_frozen(self):
        cfg = SimulationConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.dt = 0.1

    def test_steps(self):
        assert SimulationConfig(t_max=35.0, dt=0.05).steps == 700
        assert SimulationConfig(t_max=1.0, dt=0.3).steps == 4


class TestConfigurationRejection:
    """Invalid configs must fail before any sample is produced."""

    @pytest.mark.parametrize('kwargs', [
        dict(dt=0.0), dict(dt=-0.05), dict(dt=float('nan')),
        dict(t_max=0.0), dict(t_max=-1.0), dict(t_max=float('inf')),
        dict(params=PhysicalParameters(mass=0.0)),
        dict(params=PhysicalParameters(mass=-1.0)),
        dict(params=PhysicalParameters(spring_constant=0.0)),
        dict(damping='bogus'),
    ])
    def test_solve_rejects(self, kwargs):
        with pytest.raises(ConfigurationError):
            solve(SimulationConfig(**kwargs))

    def test_euler_rejects_unknown_tag(self):
        with pytest.raises(ConfigurationError):
            simulate_euler(SimulationConfig(damping='default'))

    def test_no_silent_fallback(self):
        """An unknown tag never runs with the exp_y default instead."""
        with pytest.raises(ConfigurationError, match='Available'):
            solve(SimulationConfig(damping='exp_z'))

    def test_integrate_rk4_rejects(self):
        with pytest.raises(ConfigurationError):
            integrate_rk4(undamped, PhysicalParameters(), InitialConditions(),
                          t_max=1.0, dt=0.0)


class TestIntegrators:
    """Verify the RK4 trajectory solver."""

    def test_length(self):
        assert len(solve(SimulationConfig(t_max=35.0, dt=0.05))) == 701
        assert len(solve(SimulationConfig(t_max=1.0, dt=0.3))) == 5

    def test_single_step_when_dt_exceeds_t_max(self):
        traj = solve(SimulationConfig(t_max=0.01, dt=0.05))
        assert len(traj) == 2
        assert traj.time[-1] == 0.05

    def test_initial_sample_exact(self):
        for key in ALL_VARIANTS:
            cfg = SimulationConfig(initial=InitialConditions(y0=-0.37, v0=0.81),
                                   damping=key)
            traj = solve(cfg)
            assert traj.samples[0] == (0, -0.37, 0.81)
            assert traj.samples[0] == StateSample(0.0, -0.37, 0.81)

    def test_deterministic(self):
        for key in ALL_VARIANTS:
            a = solve(SimulationConfig(damping=key))
            b = solve(SimulationConfig(damping=key))
            assert a.samples == b.samples
            assert a is not b

    def test_monotonic_time(self):
        traj = solve(SimulationConfig(t_max=7.3, dt=0.1))
        dts = np.diff(traj.time)
        assert np.all(dts > 0)
        assert np.allclose(dts, 0.1, atol=1e-12)

    def test_time_accumulates_dt(self):
        """t advances by repeated addition, not i * dt."""
        traj = solve(SimulationConfig(t_max=3.0, dt=0.1))
        t = 0.0
        for s in traj.samples[1:]:
            t += 0.1
            assert s.t == t

    def test_rk4_step_matches_trajectory(self):
        cfg = SimulationConfig(damping='exp_v')
        traj = solve(cfg)
        y1, v1 = rk4_step(cfg.damping_model(), cfg.params,
                          cfg.initial.y0, cfg.initial.v0, cfg.dt)
        assert traj.samples[1].y == float(y1)
        assert traj.samples[1].v == float(v1)

    def test_zero_damping_harmonic_motion(self):
        """γ ≡ 0, m = k = 1, y0 = 1, v0 = 0 follows cos(t); y(π) ≈ -1."""
        traj = integrate_rk4(undamped, PhysicalParameters(1.0, 1.0),
                             InitialConditions(1.0, 0.0), t_max=math.pi, dt=0.05)
        assert np.max(np.abs(traj.y - np.cos(traj.time))) < 1e-6
        i = int(np.argmin(np.abs(traj.time - math.pi)))
        assert abs(traj.y[i] - (-1.0)) < 1e-3

    def test_dissipative_variants_lose_energy(self):
        for key in ['exp_y', 'exp_v', 'constant']:
            traj = solve(SimulationConfig(damping=key))
            assert traj.total_energy[-1] < traj.total_energy[0]

    def test_vdp_grows_to_limit_cycle(self):
        traj = solve(SimulationConfig(damping='vdp'))
        assert traj.is_finite
        assert traj.total_energy[-1] > traj.total_energy[0]
        assert traj.peak_displacement > 1.0

    def test_non_finite_values_propagate(self):
        """Runaway states are recorded as inf/nan, never raised or clipped."""
        traj = integrate_rk4(lambda y, v: -1e3, PhysicalParameters(1.0, 1.0),
                             InitialConditions(0.1, 0.0), t_max=5.0, dt=0.01)
        assert len(traj) == 501
        assert not traj.is_finite
        assert traj.first_non_finite_index is not None
        assert not np.isfinite(traj.y[-1])

    def test_stable_run_has_no_non_finite_index(self):
        assert solve(SimulationConfig()).first_non_finite_index is None

    def test_trajectory_is_immutable(self):
        traj = solve(SimulationConfig(t_max=1.0))
        with pytest.raises(ValueError):
            traj.y[0] = 5.0
        with pytest.raises(dataclasses.FrozenInstanceError):
            traj.samples = ()

    def test_gamma_recorded_along_path(self):
        traj = solve(SimulationConfig(damping='vdp', t_max=2.0))
        expected = 0.5 * (traj.y ** 2 - 1.0)
        assert np.allclose(traj.gamma, expected)

    def test_rk4_more_accurate_than_euler(self):
        """At the same timestep, RK4 is closer to the exact linear solution."""
        cfg = SimulationConfig(damping='constant', t_max=10.0, dt=0.05)
        rk4 = solve(cfg)
        euler = simulate_euler(cfg)
        y_ref, _ = constant_damping_reference(cfg.params, cfg.initial, 0.2, rk4.time)
        assert np.max(np.abs(rk4.y - y_ref)) < np.max(np.abs(euler.y - y_ref))
        assert euler.method == 'euler' and rk4.method == 'rk4'

    def test_summary_mentions_variant(self):
        text = solve(SimulationConfig(damping='vdp', t_max=1.0)).summary()
        assert 'Van der Pol' in text
        assert 'RK4' in text


class TestPlayback:
    """Verify mapping of the playback clock onto trajectory indices."""

    def test_boundaries(self):
        assert index_for_time(0.0, 35.0, 701) == 0
        assert index_for_time(35.0, 35.0, 701) == 700

    def test_midpoint(self):
        assert index_for_time(17.5, 35.0, 701) == 350

    def test_clamps_past_t_max(self):
        assert index_for_time(35.02, 35.0, 701) == 700
        assert index_for_time(1e9, 35.0, 701) == 700

    def test_negative_and_nan_clock(self):
        assert index_for_time(-0.5, 35.0, 701) == 0
        assert index_for_time(float('nan'), 35.0, 701) == 0

    def test_single_sample(self):
        for t in [0.0, 0.3, 10.0, -1.0]:
            assert index_for_time(t, 0.01, 1) == 0

    def test_non_decreasing_in_time(self):
        clocks = np.linspace(-1.0, 40.0, 997)
        idx = [index_for_time(t, 35.0, 701) for t in clocks]
        assert idx == sorted(idx)
        assert all(0 <= i <= 700 for i in idx)

    def test_invalid_inputs(self):
        with pytest.raises(ConfigurationError):
            index_for_time(1.0, 0.0, 10)
        with pytest.raises(ConfigurationError):
            index_for_time(1.0, 35.0, 0)

    def test_sample_at(self):
        traj = solve(SimulationConfig(t_max=2.0, dt=0.5))
        assert sample_at(traj, 0.0) == traj.samples[0]
        assert sample_at(traj, 1.0) == traj.samples[2]
        assert sample_at(traj, 2.5) == traj.samples[-1]

    def test_integrate_rk4_keeps_requested_duration(self):
        """t_max = 1.0, dt = 0.3: the last sample lands at 1.2 s."""
        cfg = SimulationConfig(damping='constant', t_max=1.0, dt=0.3)
        from_config = solve(cfg)
        direct = integrate_rk4(DampingModel('constant'), cfg.params,
                               cfg.initial, t_max=1.0, dt=0.3)
        assert direct.time[-1] == pytest.approx(1.2)
        assert direct.t_max == from_config.t_max == 1.0
        for clock in [0.0, 0.5, 0.95, 1.0, 3.0]:
            assert sample_at(direct, clock) == sample_at(from_config, clock)
        assert sample_at(direct, 1.0) == direct.samples[-1]

    def test_advance_clock(self):
        assert advance_clock(0.0, 0.5, 35.0) == 1.0
        assert advance_clock(1.0, 0.25, 35.0, speed=1.0) == 1.25
        assert advance_clock(34.0, 0.5, 35.0) == 35.0
        assert advance_clock(34.9, 0.1, 35.0) == 0.0

    def test_playback_indices_loop(self):
        traj = solve(SimulationConfig(t_max=2.0, dt=0.05))
        indices = playback_indices(traj, frames=50, fps=20.0)
        assert len(indices) == 50
        assert indices[0] == 0
        assert all(0 <= i < len(traj) for i in indices)
        # clock wrapped back to the start at least once
        assert any(b < a for a, b in zip(indices, indices[1:]))


class TestValidation:
    """Verify the solver against reference solutions."""

    def test_undamped_matches_analytic(self):
        result = validate_undamped(tolerance=1e-4)
        assert result.passed
        assert result.samples == 701

    def test_constant_matches_analytic(self):
        result = validate_against_reference(SimulationConfig(damping='constant'),
                                            tolerance=1e-4, verbose=False)
        assert result.reference == 'analytic'
        assert result.passed

    def test_nonlinear_variants_match_dop853(self):
        for key in ['exp_y', 'exp_v', 'vdp']:
            result = validate_against_reference(SimulationConfig(damping=key),
                                                verbose=False)
            assert result.reference == 'dop853'
            assert result.passed, (key, result.max_position_error)

    def test_limit_cycle_tolerance(self):
        vdp = validate_against_reference(SimulationConfig(damping='vdp'),
                                         verbose=False)
        exp_y = validate_against_reference(SimulationConfig(damping='exp_y'),
                                           verbose=False)
        assert vdp.tolerance == LIMIT_CYCLE_TOLERANCE
        assert exp_y.tolerance == POSITION_TOLERANCE

    def test_all_validations_pass(self):
        results = run_all_validations(verbose=False)
        assert set(results) == {'undamped', 'exp_y', 'exp_v', 'vdp', 'constant'}
        assert [k for k, r in results.items() if not r.passed] == []

    def test_reference_solution_starts_at_initial_state(self):
        cfg = SimulationConfig(damping='exp_v', t_max=1.0)
        ref = reference_solution(cfg, np.array([0.0, 0.5, 1.0]))
        assert ref.shape == (2, 3)
        assert ref[0, 0] == pytest.approx(cfg.initial.y0)
        assert ref[1, 0] == pytest.approx(cfg.initial.v0)

    @pytest.mark.parametrize('ratio', [0.25, 1.0, 1.5])
    def test_linear_damping_regimes(self, ratio):
        """Under-, critically and over-damped closed forms agree with RK4."""
        params = PhysicalParameters(1.0, 1.0)
        assert params.critical_damping() == 2.0
        gamma = ratio * params.critical_damping()
        initial = InitialConditions(0.4, -0.3)
        traj = integrate_rk4(lambda y, v: gamma, params, initial, t_max=10.0, dt=0.01)
        y_ref, v_ref = constant_damping_reference(params, initial, gamma, traj.time)
        assert y_ref[0] == pytest.approx(0.4)
        assert v_ref[0] == pytest.approx(-0.3)
        assert np.max(np.abs(traj.y - y_ref)) < 1e-6
        assert np.max(np.abs(traj.v - v_ref)) < 1e-6


class TestVisualization:
    """Geometry helpers used by the linkage drawing."""

    def test_spring_path_endpoints(self):
        xs, ys = spring_path(0.5, 0.0, 2.0, coils=4, width=0.2)
        assert len(xs) == len(ys) == 1 + 3 * 4
        assert (xs[0], ys[0]) == (0.5, 0.0)
        assert xs[-1] == 0.5 and ys[-1] == pytest.approx(2.0)
        assert np.max(xs) == pytest.approx(0.6)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
