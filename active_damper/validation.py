"""
Validation Against Reference Solutions
======================================
Compares the fixed-step RK4 output against:
  - the closed-form solution of the linear oscillator (γ ≡ 0 and γ constant)
  - a tightly toleranced adaptive solver (scipy `solve_ivp`, DOP853)
    for the nonlinear damping laws, which have no closed form

Reference solutions are sampled on the trajectory's own time grid, so the
error is measured sample by sample.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
from scipy.integrate import solve_ivp

from .damping_model import (
    ALL_VARIANTS, CONSTANT_GAMMA, DampingVariant, resolve_variant,
)
from .integrator import Trajectory, integrate_rk4, solve
from .oscillator import InitialConditions, PhysicalParameters, SimulationConfig


# Max |y - y_ref| (m) accepted for a pass at the default dt = 0.05
POSITION_TOLERANCE = 1e-2

# The Van der Pol run settles onto a limit cycle of amplitude ~2 m. RK4's
# phase error on that cycle grows linearly with t, reaching ~8e-2 m by 35 s.
LIMIT_CYCLE_TOLERANCE = 1e-1

VARIANT_TOLERANCES = {
    DampingVariant.VDP: LIMIT_CYCLE_TOLERANCE,
}


def harmonic_reference(params: PhysicalParameters, initial: InitialConditions,
                       t: np.ndarray) -> np.ndarray:
    """Exact position of the undamped oscillator, y0 cos(ωt) + v0/ω sin(ωt)."""
    w = params.natural_frequency
    return initial.y0 * np.cos(w * t) + (initial.v0 / w) * np.sin(w * t)


def constant_damping_reference(params: PhysicalParameters,
                               initial: InitialConditions, gamma: float,
                               t: np.ndarray) -> np.ndarray:
    """
    Exact (y, v) for linear damping m y'' + c y' + k y = 0.

    Handles the under-, critically and over-damped regimes. Returns an
    array of shape (2, len(t)).
    """
    m, k = params.mass, params.spring_constant
    y0, v0 = initial.y0, initial.v0
    alpha = gamma / (2.0 * m)
    disc = alpha * alpha - k / m
    critical = params.critical_damping()

    if math.isclose(gamma, critical, rel_tol=1e-9):
        a, b = y0, v0 + alpha * y0
        decay = np.exp(-alpha * t)
        y = (a + b * t) * decay
        v = (b - alpha * (a + b * t)) * decay
    elif disc < 0:
        wd = math.sqrt(-disc)
        a, b = y0, (v0 + alpha * y0) / wd
        decay = np.exp(-alpha * t)
        cos, sin = np.cos(wd * t), np.sin(wd * t)
        y = decay * (a * cos + b * sin)
        v = decay * ((b * wd - alpha * a) * cos - (alpha * b + a * wd) * sin)
    else:
        r = math.sqrt(disc)
        r1, r2 = -alpha + r, -alpha - r
        c1 = (v0 - r2 * y0) / (r1 - r2)
        c2 = y0 - c1
        y = c1 * np.exp(r1 * t) + c2 * np.exp(r2 * t)
        v = c1 * r1 * np.exp(r1 * t) + c2 * r2 * np.exp(r2 * t)
    return np.vstack([y, v])


def reference_solution(config: SimulationConfig, t_eval: np.ndarray,
                       rtol: float = 1e-11, atol: float = 1e-13) -> np.ndarray:
    """
    High-accuracy (y, v) at `t_eval` from an adaptive DOP853 run.

    Returns an array of shape (2, len(t_eval)).
    """
    model = config.damping_model()
    m = config.params.mass
    k = config.params.spring_constant

    def rhs(t, state):
        y, v = state
        return [v, (-model.gamma(y, v) * v - k * y) / m]

    t_end = float(t_eval[-1])
    sol = solve_ivp(rhs, (0.0, t_end),
                    [config.initial.y0, config.initial.v0],
                    method='DOP853', t_eval=t_eval, rtol=rtol, atol=atol)
    if not sol.success:
        raise RuntimeError(f"Reference solver failed: {sol.message}")
    return sol.y


@dataclass
class ValidationResult:
    """Result of one validation comparison."""
    case: str
    reference: str          # 'analytic' or 'dop853'
    samples: int
    max_position_error: float
    rms_position_error: float
    max_velocity_error: float
    tolerance: float

    @property
    def passed(self) -> bool:
        return self.max_position_error < self.tolerance


def _compare(case, reference, traj: Trajectory, y_ref, v_ref,
             tolerance) -> ValidationResult:
    dy = traj.y - y_ref
    dv = traj.v - v_ref
    return ValidationResult(
        case=case,
        reference=reference,
        samples=len(traj),
        max_position_error=float(np.max(np.abs(dy))),
        rms_position_error=float(np.sqrt(np.mean(dy * dy))),
        max_velocity_error=float(np.max(np.abs(dv))),
        tolerance=tolerance,
    )


def validate_undamped(params: PhysicalParameters = PhysicalParameters(mass=1.0),
                      initial: InitialConditions = InitialConditions(y0=1.0, v0=0.0),
                      t_max: float = 35.0, dt: float = 0.05,
                      tolerance: float = POSITION_TOLERANCE) -> ValidationResult:
    """RK4 with γ ≡ 0 against simple harmonic motion."""
    traj = integrate_rk4(lambda y, v: 0.0, params, initial, t_max, dt)
    w = params.natural_frequency
    y_ref = harmonic_reference(params, initial, traj.time)
    v_ref = -initial.y0 * w * np.sin(w * traj.time) + initial.v0 * np.cos(w * traj.time)
    return _compare('undamped (γ ≡ 0)', 'analytic', traj, y_ref, v_ref, tolerance)


def validate_against_reference(config: SimulationConfig,
                               tolerance: Optional[float] = None,
                               verbose: bool = True) -> ValidationResult:
    """
    Run the solver for `config` and compare against the best available
    reference: closed form for the constant variant, DOP853 otherwise.
    Without an explicit `tolerance` the per-variant default applies.
    """
    traj = solve(config)
    variant = resolve_variant(config.damping)
    if tolerance is None:
        tolerance = VARIANT_TOLERANCES.get(variant, POSITION_TOLERANCE)

    if variant is DampingVariant.CONSTANT:
        y_ref, v_ref = constant_damping_reference(config.params, config.initial,
                                                  CONSTANT_GAMMA, traj.time)
        reference = 'analytic'
    else:
        y_ref, v_ref = reference_solution(config, traj.time)
        reference = 'dop853'
    result = _compare(ALL_VARIANTS[variant]['name'], reference,
                      traj, y_ref, v_ref, tolerance)

    if verbose:
        _print_row(result)
    return result


def _print_header():
    print(f"\n{'='*75}")
    print(f"  VALIDATION: RK4 vs reference solutions")
    print(f"{'='*75}")
    print(f"{'Case':<26} {'Ref':>9} {'N':>6} {'max|Δy|':>11} "
          f"{'rms Δy':>11} {'max|Δv|':>11} {'':>6}")
    print("-" * 75)


def _print_row(r: ValidationResult):
    status = "PASS" if r.passed else "FAIL"
    print(f"{r.case:<26} {r.reference:>9} {r.samples:>6d} "
          f"{r.max_position_error:>11.3e} {r.rms_position_error:>11.3e} "
          f"{r.max_velocity_error:>11.3e} {status:>6}")


def run_all_validations(t_max: float = 35.0, dt: float = 0.05,
                        verbose: bool = True) -> Dict[str, ValidationResult]:
    """Validate every catalog variant plus the undamped oscillator."""
    if verbose:
        _print_header()

    results: Dict[str, ValidationResult] = {}
    undamped = validate_undamped(t_max=t_max, dt=dt)
    results['undamped'] = undamped
    if verbose:
        _print_row(undamped)

    for variant in ALL_VARIANTS:
        config = SimulationConfig(damping=variant.value, t_max=t_max, dt=dt)
        results[variant.value] = validate_against_reference(config, verbose=verbose)

    if verbose:
        failed: List[str] = [k for k, r in results.items() if not r.passed]
        print("-" * 75)
        status = "✓ PASS" if not failed else f"✗ FAILED: {', '.join(failed)}"
        print(f"  Status: {status}")
        print(f"{'='*75}\n")

    return results


if __name__ == "__main__":
    run_all_validations(verbose=True)
