"""
Oscillator Definition & Forces
==============================
Defines the single-degree-of-freedom mass-spring-damper and its
equation of motion:

    m y'' + γ(y, y') y' + k y = 0

rewritten as a first-order system in the state (y, v):

    y' = v
    v' = (-γ(y, v) v - k y) / m

Sign convention:
  y = displacement from rest (up positive)
  v = velocity (up positive)
"""

import math
from dataclasses import dataclass

from .damping_model import (
    ConfigurationError, DampingModel, DampingVariant, damping_force,
    resolve_variant,
)


@dataclass(frozen=True)
class PhysicalParameters:
    """
    Mass and spring stiffness of the oscillator.
    """
    mass: float = 0.1                 # kg
    spring_constant: float = 1.0      # N/m

    @property
    def natural_frequency(self) -> float:
        """Undamped angular frequency ω₀ = sqrt(k/m) (rad/s)."""
        return math.sqrt(self.spring_constant / self.mass)

    @property
    def period(self) -> float:
        """Undamped period 2π/ω₀ (s)."""
        return 2.0 * math.pi / self.natural_frequency

    def critical_damping(self) -> float:
        """Coefficient γ_c = 2 sqrt(k m) separating under- and over-damping."""
        return 2.0 * math.sqrt(self.spring_constant * self.mass)


@dataclass(frozen=True)
class InitialConditions:
    """
    State of the mass at t = 0.
    """
    y0: float = 0.1                   # m
    v0: float = 0.2                   # m/s


@dataclass(frozen=True)
class SimulationConfig:
    """
    Everything that determines one run.

    Frozen and hashable: two equal configs always produce identical
    trajectories, so a config can key a cache of results.
    """
    params: PhysicalParameters = PhysicalParameters()
    initial: InitialConditions = InitialConditions()
    damping: str = 'exp_y'            # damping variant tag
    t_max: float = 35.0               # s
    dt: float = 0.05                  # s

    def __post_init__(self):
        # store the plain tag so enum and string configs hash alike
        if isinstance(self.damping, DampingVariant):
            object.__setattr__(self, 'damping', self.damping.value)

    @property
    def steps(self) -> int:
        """Number of fixed integration steps, ceil(t_max / dt)."""
        return math.ceil(self.t_max / self.dt)

    def damping_model(self) -> DampingModel:
        return DampingModel(self.damping)

    def validate(self) -> None:
        """Raise ConfigurationError for anything that cannot be integrated."""
        validate_inputs(self.params, self.t_max, self.dt)
        resolve_variant(self.damping)


def validate_inputs(params: PhysicalParameters, t_max: float, dt: float) -> None:
    # `not x > 0` also rejects NaN
    if not params.mass > 0:
        raise ConfigurationError(f"mass must be > 0, got {params.mass}")
    if not params.spring_constant > 0:
        raise ConfigurationError(
            f"spring_constant must be > 0, got {params.spring_constant}")
    if not dt > 0:
        raise ConfigurationError(f"dt must be > 0, got {dt}")
    if not t_max > 0:
        raise ConfigurationError(f"t_max must be > 0, got {t_max}")
    if math.isinf(t_max) or math.isinf(dt):
        raise ConfigurationError(
            f"t_max and dt must be finite, got t_max={t_max}, dt={dt}")


def compute_acceleration(y: float, v: float, params: PhysicalParameters,
                         damping) -> float:
    """
    Acceleration of the mass at state (y, v).

    Parameters
    ----------
    y : displacement (m)
    v : velocity (m/s)
    params : PhysicalParameters instance
    damping : callable (y, v) -> γ, e.g. a DampingModel

    Returns
    -------
    acceleration : float (m/s²)
    """
    return (damping_force(y, v, damping) - params.spring_constant * y) / params.mass


def kinetic_energy(v, params: PhysicalParameters):
    """½ m v² (J). Accepts scalars or arrays."""
    return 0.5 * params.mass * v * v


def potential_energy(y, params: PhysicalParameters):
    """½ k y² (J). Accepts scalars or arrays."""
    return 0.5 * params.spring_constant * y * y
