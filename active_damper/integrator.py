"""
Numerical Integration Engine
=============================
Fixed-step time integration of the oscillator:

1. **Runge-Kutta 4th Order (RK4)** — the solver behind `solve`.
2. **Euler Method** (1st order) — kept for accuracy comparison only.

Both integrate the first-order system:
    dy/dt = v
    dv/dt = a(y, v)  (from compute_acceleration)

Steps are never rejected or retried. A run covers ceil(t_max/dt) steps
and t advances by exactly dt per step, so the last sample may sit
slightly past t_max. NaN/Inf are carried through unchanged.

Output: Trajectory dataclass with the full, immutable state history.
"""

import math
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

import numpy as np

from .oscillator import (
    InitialConditions, PhysicalParameters, SimulationConfig,
    compute_acceleration, kinetic_energy, potential_energy, validate_inputs,
)


class StateSample(NamedTuple):
    """Snapshot of the oscillator at one instant."""
    t: float
    y: float
    v: float


def _readonly(values) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True, eq=False)
class Trajectory:
    """Complete trajectory output."""
    params: PhysicalParameters
    initial: InitialConditions
    damping: object               # callable (y, v) -> γ
    method: str                   # 'rk4' or 'euler'
    dt: float                     # timestep used
    samples: Tuple[StateSample, ...]

    # Read-only arrays — each has shape (N,)
    time: np.ndarray
    y: np.ndarray
    v: np.ndarray
    gamma: np.ndarray             # damping coefficient along the path

    t_max: float                  # requested duration (s)
    config: Optional[SimulationConfig] = None

    def __len__(self) -> int:
        return len(self.samples)

    def __getitem__(self, index) -> StateSample:
        return self.samples[index]

    @property
    def final_state(self) -> StateSample:
        return self.samples[-1]

    @property
    def peak_displacement(self) -> float:
        """Largest |y| over the run (m)."""
        return float(np.max(np.abs(self.y)))

    @property
    def kinetic_energy(self) -> np.ndarray:
        return kinetic_energy(self.v, self.params)

    @property
    def potential_energy(self) -> np.ndarray:
        return potential_energy(self.y, self.params)

    @property
    def total_energy(self) -> np.ndarray:
        """Mechanical energy ½mv² + ½ky² at every sample (J)."""
        return self.kinetic_energy + self.potential_energy

    @property
    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.y)) and np.all(np.isfinite(self.v)))

    @property
    def first_non_finite_index(self) -> Optional[int]:
        """Index of the first NaN/Inf sample, or None for a stable run."""
        bad = ~(np.isfinite(self.y) & np.isfinite(self.v))
        if not bad.any():
            return None
        return int(np.argmax(bad))

    def summary(self) -> str:
        """Human-readable summary string."""
        name = getattr(self.damping, 'name', 'Custom')
        label = getattr(self.damping, 'label', '-')
        final = self.final_state
        energy = self.total_energy
        lines = [
            f"╔══════════════════════════════════════════════════════╗",
            f"║  TRAJECTORY SUMMARY — {name:<30s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Damping γ    : {label:<36s} ║",
            f"║  Method       : {self.method.upper():<36s} ║",
            f"║  Timestep     : {self.dt:<36.4f} ║",
            f"║  Samples      : {len(self):<36d} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Mass         : {self.params.mass:>10.3f} kg{'':<23s} ║",
            f"║  Spring k     : {self.params.spring_constant:>10.3f} N/m{'':<22s} ║",
            f"║  y0, v0       : {self.initial.y0:>10.3f} m, {self.initial.v0:>8.3f} m/s{'':<9s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Final y      : {final.y:>10.4f} m{'':<24s} ║",
            f"║  Final v      : {final.v:>10.4f} m/s{'':<22s} ║",
            f"║  Peak |y|     : {self.peak_displacement:>10.4f} m{'':<24s} ║",
            f"║  Energy E0→E1 : {energy[0]:>10.4f} → {energy[-1]:<10.4f} J{'':<9s} ║",
            f"║  Stable       : {str(self.is_finite):<36s} ║",
            f"╚══════════════════════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


def rk4_step(damping, params: PhysicalParameters, y: float, v: float,
             dt: float) -> Tuple[float, float]:
    """
    One classical RK4 step of the oscillator.

    Stages 2 and 3 use the half-step state, stage 4 the full-step state;
    γ is re-evaluated at each stage's state.
    """
    def accel(p, q):
        return compute_acceleration(p, q, params, damping)

    k1y = v
    k1v = accel(y, v)

    y2 = y + 0.5 * dt * k1y
    v2 = v + 0.5 * dt * k1v
    k2y = v2
    k2v = accel(y2, v2)

    y3 = y + 0.5 * dt * k2y
    v3 = v + 0.5 * dt * k2v
    k3y = v3
    k3v = accel(y3, v3)

    y4 = y + dt * k3y
    v4 = v + dt * k3v
    k4y = v4
    k4v = accel(y4, v4)

    y = y + (dt / 6.0) * (k1y + 2*k2y + 2*k3y + k4y)
    v = v + (dt / 6.0) * (k1v + 2*k2v + 2*k3v + k4v)
    return y, v


def euler_step(damping, params: PhysicalParameters, y: float, v: float,
               dt: float) -> Tuple[float, float]:
    """
    Forward Euler step.

    y_{n+1} = y_n + v_n * dt
    v_{n+1} = v_n + a(y_n, v_n) * dt
    """
    acc = compute_acceleration(y, v, params, damping)
    return y + v * dt, v + acc * dt


_STEPPERS = {
    'rk4': rk4_step,
    'euler': euler_step,
}


def _integrate(damping, params, initial, t_max, dt, method, config=None):
    validate_inputs(params, t_max, dt)
    step = _STEPPERS[method]

    y = float(initial.y0)
    v = float(initial.v0)
    t = 0.0

    history = [StateSample(t, y, v)]

    with np.errstate(over='ignore', invalid='ignore'):
        for _ in range(math.ceil(t_max / dt)):
            y, v = step(damping, params, y, v, dt)
            t += dt
            history.append(StateSample(t, float(y), float(v)))

    return _build_result(history, damping, params, initial, method, dt,
                         t_max, config)


def integrate_rk4(damping, params: PhysicalParameters,
                  initial: InitialConditions, t_max: float,
                  dt: float) -> Trajectory:
    """
    4th-order Runge-Kutta over [0, t_max] with any damping callable.

    `damping` must be total over the reals, e.g. a DampingModel or
    `lambda y, v: 0.0` for the undamped oscillator.
    """
    return _integrate(damping, params, initial, t_max, dt, 'rk4')


def solve(config: SimulationConfig) -> Trajectory:
    """
    Integrate one configuration with RK4.

    The config is validated first: no sample is produced for an invalid
    mass, spring constant, dt, t_max or damping tag. Pure and deterministic,
    equal configs give identical trajectories.
    """
    config.validate()
    return _integrate(config.damping_model(), config.params, config.initial,
                      config.t_max, config.dt, 'rk4', config)


def simulate_euler(config: SimulationConfig) -> Trajectory:
    """Forward Euler on the same time grid as `solve`."""
    config.validate()
    return _integrate(config.damping_model(), config.params, config.initial,
                      config.t_max, config.dt, 'euler', config)


def _build_result(history, damping, params, initial, method, dt, t_max,
                  config):
    """Convert history list to Trajectory."""
    samples = tuple(history)
    times, ys, vs = zip(*samples)

    y_arr = np.array(ys, dtype=float)
    v_arr = np.array(vs, dtype=float)
    with np.errstate(over='ignore', invalid='ignore'):
        if hasattr(damping, 'gamma_array'):
            gammas = damping.gamma_array(y_arr, v_arr)
        else:
            gammas = [damping(p, q) for p, q in zip(ys, vs)]

    return Trajectory(
        params=params,
        initial=initial,
        damping=damping,
        method=method,
        dt=dt,
        samples=samples,
        time=_readonly(times),
        y=_readonly(y_arr),
        v=_readonly(v_arr),
        gamma=_readonly(gammas),
        t_max=float(t_max),
        config=config,
    )
