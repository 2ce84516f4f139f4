"""
Visualization Engine
====================
Plots and animation for oscillator trajectories:
  1. Time series y(t) with playback marker
  2. Phase portrait (v vs y)
  3. Damping coefficient curves for every variant
  4. Variant comparison (same initial conditions)
  5. Energy history
  6. Euler vs RK4 accuracy comparison
  7. Dashboard with key metrics
  8. Validation error plot
  9. Animated mass-spring-damper linkage (saved as GIF)
"""

import os
from typing import Dict, Optional, Tuple

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import matplotlib.gridspec as gridspec
from matplotlib.patches import Rectangle

from .damping_model import ALL_VARIANTS, DampingModel
from .integrator import Trajectory
from .playback import DEFAULT_PLAYBACK_SPEED, playback_indices, sample_at


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b',
                      '#e040fb', '#ff5252'],
    'marker_color': '#ff5252',
    'font_family': 'monospace',
}

LEGEND_KW = dict(facecolor='#1a1a1a', edgecolor='#444')


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def _legend(ax, **kwargs):
    ax.legend(labelcolor=STYLE['text_color'], **LEGEND_KW, **kwargs)


def _save(fig, save_path):
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])


def _color(result: Trajectory) -> str:
    return getattr(result.damping, 'color', STYLE['accent_colors'][0])


def _label(result: Trajectory) -> str:
    return getattr(result.damping, 'label', 'custom γ')


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
#  1. Time Series
# ══════════════════════════════════════════════════════════════════════════

def plot_time_series(result: Trajectory, current_time: Optional[float] = None,
                     save_path: str = None, show: bool = False) -> plt.Figure:
    """Position vs time, with the sample at `current_time` marked."""
    fig, ax = plt.subplots(figsize=(12, 5))
    _apply_dark_style(fig, ax)

    ax.plot(result.time, result.y, color=_color(result), linewidth=2,
            label=f'γ = {_label(result)}')
    ax.axhline(y=0, color='#555', linestyle='--', alpha=0.5)

    if current_time is not None:
        s = sample_at(result, current_time)
        ax.plot(s.t, s.y, 'o', color=STYLE['marker_color'], markersize=9,
                markeredgecolor='white', zorder=5, label=f't = {s.t:.2f} s')

    ax.set_xlabel('Time t (s)', fontsize=12)
    ax.set_ylabel('Position y (m)', fontsize=12)
    ax.set_xlim(0, result.t_max)
    ax.set_title(f'Time Series y(t) — {result.method.upper()}, dt={result.dt}',
                 fontsize=13, fontweight='bold')
    _legend(ax, loc='upper right', fontsize=10)

    plt.tight_layout()
    _save(fig, save_path)
    if show:
        plt.show()
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  2. Phase Portrait
# ══════════════════════════════════════════════════════════════════════════

def plot_phase_portrait(result: Trajectory, current_time: Optional[float] = None,
                        save_path: str = None) -> plt.Figure:
    """Velocity against position over the whole run."""
    fig, ax = plt.subplots(figsize=(7, 7))
    _apply_dark_style(fig, ax)

    ax.plot(result.y, result.v, color=_color(result), linewidth=1.5)
    ax.plot(result.y[0], result.v[0], 'o', color='#00e676', markersize=9,
            label='Start', zorder=5)

    if current_time is not None:
        s = sample_at(result, current_time)
        ax.plot(s.y, s.v, 'o', color=STYLE['marker_color'], markersize=9,
                markeredgecolor='white', zorder=6, label='Now')

    ax.set_xlabel('Position y (m)', fontsize=12)
    ax.set_ylabel("Velocity y' (m/s)", fontsize=12)
    ax.set_title('Phase Portrait', fontsize=13, fontweight='bold')
    _legend(ax, fontsize=10)

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  3. Damping Curves
# ══════════════════════════════════════════════════════════════════════════

def plot_damping_curves(save_path: str = None) -> plt.Figure:
    """γ(y, 0) and γ(0, v) for every variant."""
    fig, axes = plt.subplots(1, 2, figsize=(14, 5.5))
    _apply_dark_style(fig, axes)

    s = np.linspace(-1.5, 1.5, 500)
    zeros = np.zeros_like(s)
    for variant, data in ALL_VARIANTS.items():
        model = DampingModel(variant)
        axes[0].plot(s, model.gamma_array(s, zeros), color=data['color'],
                     linestyle=data['linestyle'], linewidth=2.5, label=data['label'])
        axes[1].plot(s, model.gamma_array(zeros, s), color=data['color'],
                     linestyle=data['linestyle'], linewidth=2.5, label=data['label'])

    # Energy injection region
    for ax in axes:
        ax.axhspan(-0.6, 0.0, alpha=0.08, color='#ff5252')
        ax.axhline(y=0, color='#888', linewidth=0.5)
        ax.set_ylabel('Damping coefficient γ')
        ax.set_ylim(-0.6, 1.2)
    axes[0].text(0.0, -0.45, 'Energy\ninjection', ha='center',
                 color='#ff5252', fontsize=10, alpha=0.7)

    axes[0].set_xlabel('Position y (m), v = 0')
    axes[1].set_xlabel("Velocity y' (m/s), y = 0")
    axes[0].set_title('γ vs Position', fontweight='bold')
    axes[1].set_title('γ vs Velocity', fontweight='bold')
    _legend(axes[1], fontsize=10)

    fig.suptitle('Damping Functions — Active Shock Absorber Catalog',
                 fontsize=14, fontweight='bold', color=STYLE['text_color'])
    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  4. Variant Comparison
# ══════════════════════════════════════════════════════════════════════════

def plot_variant_comparison(results: Dict[str, Trajectory],
                            save_path: str = None) -> plt.Figure:
    """Time series, phase portraits, energy and peak |y| per variant."""
    fig, axes = plt.subplots(2, 2, figsize=(16, 10))
    _apply_dark_style(fig, axes)

    ax = axes[0, 0]
    for res in results.values():
        ax.plot(res.time, res.y, color=_color(res), linewidth=1.8,
                label=_label(res))
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Position y (m)')
    ax.set_title('Position vs Time', fontweight='bold')
    _legend(ax, fontsize=9)

    ax = axes[0, 1]
    for res in results.values():
        ax.plot(res.y, res.v, color=_color(res), linewidth=1.5)
    ax.set_xlabel('Position y (m)')
    ax.set_ylabel("Velocity y' (m/s)")
    ax.set_title('Phase Portraits', fontweight='bold')

    ax = axes[1, 0]
    for res in results.values():
        ax.plot(res.time, res.total_energy, color=_color(res), linewidth=1.8)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Mechanical energy (J)')
    ax.set_yscale('log')
    ax.set_title('Energy vs Time', fontweight='bold')

    ax = axes[1, 1]
    names = [getattr(r.damping, 'name', key) for key, r in results.items()]
    peaks = [r.peak_displacement for r in results.values()]
    finals = [abs(r.final_state.y) for r in results.values()]
    colors = [_color(r) for r in results.values()]
    bars = ax.barh(names, peaks, color=colors, alpha=0.85, edgecolor='#555')
    ax.set_xlabel('Peak |y| (m)')
    ax.set_title('Peak Displacement', fontweight='bold')
    for bar, p, f in zip(bars, peaks, finals):
        ax.text(bar.get_width() * 1.01, bar.get_y() + bar.get_height()/2,
                f'{p:.3f} (end {f:.3f})', va='center',
                color=STYLE['text_color'], fontsize=9)

    fig.suptitle('Damping Variant Comparison — Same Initial Conditions',
                 fontsize=15, fontweight='bold', color=STYLE['text_color'], y=1.02)
    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  5. Energy
# ══════════════════════════════════════════════════════════════════════════

def plot_energy(result: Trajectory, save_path: str = None) -> plt.Figure:
    """Kinetic, potential and total mechanical energy, plus γ along the path."""
    fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    _apply_dark_style(fig, axes)

    ax = axes[0]
    ax.plot(result.time, result.kinetic_energy, color='#ff6b35',
            linewidth=1.5, label='Kinetic ½mv²')
    ax.plot(result.time, result.potential_energy, color='#00d4ff',
            linewidth=1.5, label='Potential ½ky²')
    ax.plot(result.time, result.total_energy, color='#ffeb3b',
            linewidth=2.2, label='Total')
    ax.set_ylabel('Energy (J)')
    ax.set_title('Mechanical Energy', fontweight='bold')
    _legend(ax, fontsize=9)

    ax = axes[1]
    ax.plot(result.time, result.gamma, color=_color(result), linewidth=1.8)
    ax.axhline(y=0, color='#ff5252', linestyle='--', alpha=0.5)
    ax.fill_between(result.time, result.gamma, 0,
                    where=result.gamma < 0, color='#ff5252', alpha=0.2)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('γ(y, v)')
    ax.set_title('Damping Coefficient Along Trajectory', fontweight='bold')

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  6. Euler vs RK4 Comparison
# ══════════════════════════════════════════════════════════════════════════

def plot_euler_vs_rk4(euler_result: Trajectory, rk4_result: Trajectory,
                      save_path: str = None) -> plt.Figure:
    """Compare Euler and RK4 trajectories to show accuracy difference."""
    fig, axes = plt.subplots(1, 3, figsize=(18, 5))
    _apply_dark_style(fig, axes)

    ax = axes[0]
    ax.plot(euler_result.time, euler_result.y, color='#ff6b35', linewidth=2,
            linestyle='--', label=f'Euler (dt={euler_result.dt}s)')
    ax.plot(rk4_result.time, rk4_result.y, color='#00d4ff', linewidth=2,
            label=f'RK4 (dt={rk4_result.dt}s)')
    ax.set_xlabel('Time (s)')
    ax.set_ylabel('Position y (m)')
    ax.set_title('Position vs Time', fontweight='bold')
    _legend(ax, fontsize=10)

    ax = axes[1]
    ax.plot(euler_result.y, euler_result.v, color='#ff6b35', linewidth=1.5,
            linestyle='--', label='Euler')
    ax.plot(rk4_result.y, rk4_result.v, color='#00d4ff', linewidth=1.5,
            label='RK4')
    ax.set_xlabel('Position y (m)')
    ax.set_ylabel("Velocity y' (m/s)")
    ax.set_title('Phase Portrait', fontweight='bold')
    _legend(ax, fontsize=10)

    ax = axes[2]
    ax.axis('off')
    ax.set_facecolor('#111111')

    e_fin, r_fin = euler_result.final_state, rk4_result.final_state
    e_en, r_en = euler_result.total_energy[-1], rk4_result.total_energy[-1]
    text_lines = [
        f"{'Metric':<18} {'Euler':>12} {'RK4':>12} {'Δ':>10}",
        f"{'─'*52}",
        f"{'Final y (m)':<18} {e_fin.y:>12.4f} {r_fin.y:>12.4f} "
        f"{e_fin.y - r_fin.y:>+10.4f}",
        f"{'Final v (m/s)':<18} {e_fin.v:>12.4f} {r_fin.v:>12.4f} "
        f"{e_fin.v - r_fin.v:>+10.4f}",
        f"{'Peak |y| (m)':<18} {euler_result.peak_displacement:>12.4f} "
        f"{rk4_result.peak_displacement:>12.4f} "
        f"{euler_result.peak_displacement - rk4_result.peak_displacement:>+10.4f}",
        f"{'Final E (J)':<18} {e_en:>12.5f} {r_en:>12.5f} {e_en - r_en:>+10.5f}",
    ]

    ax.text(0.05, 0.85, '\n'.join(text_lines), transform=ax.transAxes,
            fontsize=10, fontfamily='monospace', color=STYLE['text_color'],
            verticalalignment='top')
    ax.set_title('Numerical Comparison', fontweight='bold',
                 color=STYLE['text_color'])

    fig.suptitle('Euler vs Runge-Kutta 4th Order — Accuracy Comparison',
                 fontsize=14, fontweight='bold', color=STYLE['text_color'], y=1.02)
    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  7. Dashboard
# ══════════════════════════════════════════════════════════════════════════

def plot_dashboard(result: Trajectory, current_time: float = 0.0,
                   save_path: str = None) -> plt.Figure:
    """Linkage, metrics, time series, phase portrait, energy and γ."""
    fig = plt.figure(figsize=(18, 11))
    fig.patch.set_facecolor(STYLE['bg_color'])

    gs = gridspec.GridSpec(3, 3, figure=fig, hspace=0.35, wspace=0.3)
    now = sample_at(result, current_time)

    # ── Mechanical linkage (left column, spans 2 rows) ──
    ax0 = fig.add_subplot(gs[:2, 0])
    _setup_linkage_axes(ax0)
    artists = _draw_linkage(ax0)
    _update_linkage(artists, now.y)
    ax0.set_title('PHYSICAL MODEL', fontweight='bold',
                  color=STYLE['text_color'], fontsize=13)

    # ── Time series (top, spans 2 cols) ──
    ax1 = fig.add_subplot(gs[0, 1:])
    _apply_dark_style(fig, ax1)
    ax1.plot(result.time, result.y, color='#00d4ff', linewidth=2)
    ax1.plot(now.t, now.y, 'o', color=STYLE['marker_color'], markersize=10,
             markeredgecolor='white', zorder=5)
    ax1.set_xlim(0, result.t_max)
    ax1.set_xlabel('Time (s)')
    ax1.set_ylabel('y (m)')
    ax1.set_title('TIME SERIES y(t)', fontweight='bold', fontsize=13)

    # ── Phase portrait (middle-center) ──
    ax2 = fig.add_subplot(gs[1, 1])
    _apply_dark_style(fig, ax2)
    ax2.plot(result.y, result.v, color='#e040fb', linewidth=1.5)
    ax2.plot(now.y, now.v, 'o', color=STYLE['marker_color'], markersize=9,
             markeredgecolor='white', zorder=5)
    ax2.set_xlabel('y (m)')
    ax2.set_ylabel("y' (m/s)")
    ax2.set_title('PHASE PORTRAIT', fontweight='bold')

    # ── Metrics panel (middle-right) ──
    ax_info = fig.add_subplot(gs[1, 2])
    ax_info.set_facecolor('#111111')
    ax_info.axis('off')

    metrics = [
        ('DAMPING γ', _label(result)),
        ('MASS', f'{result.params.mass:.2f} kg'),
        ('SPRING k', f'{result.params.spring_constant:.2f} N/m'),
        ('y0 / v0', f'{result.initial.y0:.2f} / {result.initial.v0:.2f}'),
        ('ω0', f'{result.params.natural_frequency:.3f} rad/s'),
        ('PEAK |y|', f'{result.peak_displacement:.4f} m'),
        ('SAMPLES', f'{len(result)} (dt={result.dt})'),
        ('METHOD', result.method.upper()),
    ]

    for i, (label, value) in enumerate(metrics):
        y_pos = 0.92 - i * 0.115
        ax_info.text(0.05, y_pos, label, fontsize=10, fontweight='bold',
                     color='#888888', transform=ax_info.transAxes, fontfamily='monospace')
        ax_info.text(0.95, y_pos, value, fontsize=11, fontweight='bold',
                     color='#00d4ff', transform=ax_info.transAxes,
                     ha='right', fontfamily='monospace')

    ax_info.set_title('SIMULATION DATA', fontweight='bold',
                      color=STYLE['text_color'], fontsize=13, pad=10)

    # ── Velocity (bottom-left) ──
    ax3 = fig.add_subplot(gs[2, 0])
    _apply_dark_style(fig, ax3)
    ax3.plot(result.time, result.v, color='#ff6b35', linewidth=1.8)
    ax3.set_xlabel('Time (s)')
    ax3.set_ylabel("y' (m/s)")
    ax3.set_title('VELOCITY', fontweight='bold')

    # ── Energy (bottom-center) ──
    ax4 = fig.add_subplot(gs[2, 1])
    _apply_dark_style(fig, ax4)
    ax4.plot(result.time, result.total_energy, color='#ffeb3b', linewidth=1.8)
    ax4.set_xlabel('Time (s)')
    ax4.set_ylabel('E (J)')
    ax4.set_title('MECHANICAL ENERGY', fontweight='bold')

    # ── Damping coefficient (bottom-right) ──
    ax5 = fig.add_subplot(gs[2, 2])
    _apply_dark_style(fig, ax5)
    ax5.plot(result.time, result.gamma, color='#00e676', linewidth=1.8)
    ax5.axhline(y=0, color='#ff5252', linestyle='--', alpha=0.5)
    ax5.set_xlabel('Time (s)')
    ax5.set_ylabel('γ')
    ax5.set_title('DAMPING COEFFICIENT', fontweight='bold')

    fig.suptitle(f'ACTIVE SHOCK ABSORBER DASHBOARD — '
                 f'{getattr(result.damping, "name", "Custom")}',
                 fontsize=16, fontweight='bold', color='#00d4ff', y=0.98)

    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  8. Validation Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_validation(validation_results, save_path: str = None) -> plt.Figure:
    """Max and RMS position error of RK4 per validation case."""
    fig, ax = plt.subplots(figsize=(11, 5))
    _apply_dark_style(fig, ax)

    results = list(validation_results.values())
    names = [r.case for r in results]
    x = np.arange(len(results))
    max_err = [r.max_position_error for r in results]
    rms_err = [r.rms_position_error for r in results]
    colors = ['#00e676' if r.passed else '#ff5252' for r in results]

    ax.bar(x - 0.2, max_err, width=0.4, color=colors, alpha=0.85, label='max |Δy|')
    ax.bar(x + 0.2, rms_err, width=0.4, color='#00d4ff', alpha=0.6, label='rms Δy')
    if results:
        ax.hlines([r.tolerance for r in results], x - 0.4, x + 0.4,
                  color='#ffeb3b', linestyle='--', alpha=0.7, label='Tolerance')
    ax.set_yscale('log')
    ax.set_xticks(x)
    ax.set_xticklabels(names, rotation=15)
    ax.set_ylabel('Position error (m)')
    ax.set_title('RK4 Error vs Reference Solutions', fontweight='bold')
    _legend(ax, fontsize=10)

    plt.tight_layout()
    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  9. Animated Mass-Spring-Damper (GIF)
# ══════════════════════════════════════════════════════════════════════════

GROUND_Y = 0.0
REST_HEIGHT = 1.3          # mass base above ground at y = 0
DISPLAY_SCALE = 2.0        # drawing units per metre of displacement
SPRING_X = -0.5
DAMPER_X = 0.5
MASS_WIDTH = 1.6
MASS_HEIGHT = 0.45
CYLINDER_HEIGHT = 0.8
CYLINDER_WIDTH = 0.24


def spring_path(x: float, y_start: float, y_end: float, coils: int = 12,
                width: float = 0.3) -> Tuple[np.ndarray, np.ndarray]:
    """Zig-zag polyline for a coil spring between two heights."""
    coil_height = (y_end - y_start) / coils
    xs, ys = [x], [y_start]
    for i in range(coils):
        xs += [x - width / 2, x + width / 2, x]
        ys += [y_start + coil_height * (i + 0.25),
               y_start + coil_height * (i + 0.75),
               y_start + coil_height * (i + 1)]
    return np.array(xs), np.array(ys)


def _setup_linkage_axes(ax):
    ax.set_facecolor(STYLE['bg_color'])
    ax.set_xlim(-1.5, 1.5)
    ax.set_ylim(-0.3, 3.2)
    ax.set_aspect('equal')
    ax.axis('off')


def _draw_linkage(ax):
    """Static ground and cylinder plus the artists that follow the mass."""
    ax.plot([-1.3, 1.3], [GROUND_Y, GROUND_Y], color='#64748b',
            linewidth=4, solid_capstyle='round')
    ax.add_patch(Rectangle((DAMPER_X - CYLINDER_WIDTH / 2, GROUND_Y),
                           CYLINDER_WIDTH, CYLINDER_HEIGHT, color='#ef4444'))

    spring, = ax.plot([], [], color='#3b82f6', linewidth=2.5)
    rod, = ax.plot([], [], color='#b45309', linewidth=4)
    piston, = ax.plot([], [], color='#b45309', linewidth=3,
                      solid_capstyle='round')
    mass = Rectangle((-MASS_WIDTH / 2, REST_HEIGHT), MASS_WIDTH, MASS_HEIGHT,
                     facecolor='#334155', edgecolor='#94a3b8', linewidth=1.5)
    ax.add_patch(mass)
    return spring, rod, piston, mass


def _update_linkage(artists, y: float):
    spring, rod, piston, mass = artists
    base = REST_HEIGHT + DISPLAY_SCALE * y if np.isfinite(y) else REST_HEIGHT
    # piston head stays inside the cylinder
    head = min(max(base - 0.5, GROUND_Y + 0.1), CYLINDER_HEIGHT - 0.05)

    spring.set_data(*spring_path(SPRING_X, GROUND_Y, base))
    rod.set_data([DAMPER_X, DAMPER_X], [head, base])
    piston.set_data([DAMPER_X - 0.1, DAMPER_X + 0.1], [head, head])
    mass.set_y(base)
    return spring, rod, piston, mass


def create_oscillator_animation(result: Trajectory,
                                save_path: str = 'outputs/oscillator_anim.gif',
                                frames: int = 120, fps: float = 20.0,
                                speed: float = DEFAULT_PLAYBACK_SPEED) -> str:
    """
    Animated GIF of the linkage next to y(t).

    Frames follow the interactive playback clock: each frame advances it
    by speed/fps seconds and wraps at t_max.
    """
    from matplotlib.animation import FuncAnimation, PillowWriter

    fig, (ax_model, ax_ts) = plt.subplots(
        1, 2, figsize=(13, 5.5), gridspec_kw={'width_ratios': [1, 2]})
    fig.patch.set_facecolor(STYLE['bg_color'])
    _setup_linkage_axes(ax_model)
    _apply_dark_style(fig, ax_ts)

    artists = _draw_linkage(ax_model)
    ax_ts.plot(result.time, result.y, color=_color(result), linewidth=1.5, alpha=0.8)
    marker, = ax_ts.plot([], [], 'o', color=STYLE['marker_color'],
                         markersize=9, markeredgecolor='white')
    ax_ts.set_xlim(0, result.t_max)
    ax_ts.set_xlabel('Time (s)', fontsize=12)
    ax_ts.set_ylabel('Position y (m)', fontsize=12)
    ax_ts.set_title(f'Active Shock Absorber — γ = {_label(result)}',
                    fontsize=14, fontweight='bold')
    time_text = ax_ts.text(0.02, 0.95, '', transform=ax_ts.transAxes,
                           color=STYLE['text_color'], fontsize=11,
                           fontfamily='monospace')

    indices = playback_indices(result, frames, fps=fps, speed=speed)

    def animate(frame_idx):
        s = result.samples[indices[frame_idx]]
        _update_linkage(artists, s.y)
        marker.set_data([s.t], [s.y])
        time_text.set_text(f't={s.t:.2f}s | y={s.y:+.4f} m | '
                           f"y'={s.v:+.4f} m/s")
        return (*artists, marker, time_text)

    anim = FuncAnimation(fig, animate, frames=len(indices),
                         interval=1000 / fps, blit=True)
    anim.save(save_path, writer=PillowWriter(fps=fps),
              savefig_kwargs={'facecolor': STYLE['bg_color']})
    plt.close(fig)
    print(f"  Animation saved: {save_path}")
    return save_path
