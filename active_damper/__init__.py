"""
Active Shock Absorber Simulator
===============================
Simulates a single-degree-of-freedom mass-spring-damper whose damping
coefficient depends nonlinearly on position and/or velocity:

    m y'' + γ(y, y') y' + k y = 0

  - Catalog of damping laws (exp_y, exp_v, Van der Pol, constant)
  - Fixed-step RK4 trajectory solver (Euler kept for comparison)
  - Playback indexing of a looping animation clock onto the trajectory
  - Validation against closed-form and adaptive reference solutions
  - Plots, dashboard and animated linkage GIF
"""

from .damping_model import (
    ConfigurationError, DampingModel, DampingVariant, ALL_VARIANTS,
    damping_force,
)
from .oscillator import (
    PhysicalParameters, InitialConditions, SimulationConfig,
    compute_acceleration,
)
from .integrator import (
    StateSample, Trajectory, solve, integrate_rk4, simulate_euler, rk4_step,
)
from .playback import index_for_time, sample_at, advance_clock, playback_indices
from .validation import (
    validate_against_reference, validate_undamped, run_all_validations,
)
from .visualization import (
    plot_time_series, plot_phase_portrait, plot_damping_curves,
    plot_variant_comparison, plot_energy, plot_euler_vs_rk4,
    plot_dashboard, plot_validation, create_oscillator_animation,
)

__version__ = "1.0.0"
__all__ = [
    'ConfigurationError', 'DampingModel', 'DampingVariant', 'ALL_VARIANTS',
    'damping_force',
    'PhysicalParameters', 'InitialConditions', 'SimulationConfig',
    'StateSample', 'Trajectory',
    'solve', 'integrate_rk4', 'simulate_euler', 'rk4_step',
    'compute_acceleration',
    'index_for_time', 'sample_at', 'advance_clock', 'playback_indices',
    'validate_against_reference', 'validate_undamped', 'run_all_validations',
    'plot_time_series', 'plot_phase_portrait', 'plot_damping_curves',
    'plot_variant_comparison', 'plot_energy', 'plot_euler_vs_rk4',
    'plot_dashboard', 'plot_validation', 'create_oscillator_animation',
]
