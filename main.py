#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  ACTIVE SHOCK ABSORBER SIMULATOR — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the complete simulation pipeline:
    1. Damping function catalog
    2. Reference trajectory (RK4, default sliders)
    3. Damping variant comparison
    4. Euler vs RK4 accuracy comparison
    5. Validation against analytic / DOP853 references
    6. Playback clock walk-through
    7. Full dashboard
    8. Animated linkage GIF

  All outputs saved to outputs/ directory.

  Usage:
    python main.py              # Run everything
    python main.py --quick      # Skip animation (faster)
═══════════════════════════════════════════════════════════════════════════════
"""

import sys
import os
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from active_damper.damping_model import DampingModel, ALL_VARIANTS
from active_damper.oscillator import (
    PhysicalParameters, InitialConditions, SimulationConfig,
)
from active_damper.integrator import solve, simulate_euler
from active_damper.playback import advance_clock, index_for_time
from active_damper.validation import run_all_validations
from active_damper.visualization import (
    plot_time_series, plot_phase_portrait, plot_damping_curves,
    plot_variant_comparison, plot_energy, plot_euler_vs_rk4,
    plot_dashboard, plot_validation, create_oscillator_animation,
    ensure_output_dir,
)

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


def banner():
    print("""
╔═══════════════════════════════════════════════════════════════════════╗
║                                                                       ║
║     ACTIVE SHOCK ABSORBER SIMULATOR                                   ║
║     ─────────────────────────────────────────────                     ║
║     m y'' + γ(y, y') y' + k y = 0                                     ║
║     Damping: exp(y) · exp(v) · Van der Pol · constant                 ║
║     Method: fixed-step RK4 │ Validated against DOP853                 ║
║                                                                       ║
╚═══════════════════════════════════════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def main():
    start_time = time.time()
    quick = '--quick' in sys.argv

    banner()
    out = ensure_output_dir('outputs')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Damping Function Catalog
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Damping Functions γ(y, v)")
    print(f"  {'Variant':<10} {'Formula':<18} {'γ(0,0)':>8} {'γ(0.5,0)':>9} "
          f"{'γ(0,0.5)':>9} {'γ(1.5,0)':>9}")
    for variant in ALL_VARIANTS:
        model = DampingModel(variant)
        print(f"  {variant.value:<10} {model.label:<18} {model(0, 0):>8.3f} "
              f"{model(0.5, 0):>9.3f} {model(0, 0.5):>9.3f} {model(1.5, 0):>9.3f}")

    fig_g = plot_damping_curves(save_path=f'{out}/01_damping_curves.png')
    plt.close(fig_g)
    print(f"\n  ✓ Saved: {out}/01_damping_curves.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Reference Trajectory
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Reference Trajectory (exp_y, default parameters)")

    params = PhysicalParameters(mass=0.1, spring_constant=1.0)
    initial = InitialConditions(y0=0.1, v0=0.2)
    config = SimulationConfig(params=params, initial=initial,
                              damping='exp_y', t_max=35.0, dt=0.05)

    result = solve(config)
    print(result.summary())

    fig_ts = plot_time_series(result, current_time=config.t_max / 4,
                              save_path=f'{out}/02_time_series.png')
    plt.close(fig_ts)
    fig_pp = plot_phase_portrait(result, save_path=f'{out}/02b_phase_portrait.png')
    plt.close(fig_pp)
    fig_en = plot_energy(result, save_path=f'{out}/02c_energy.png')
    plt.close(fig_en)
    print(f"  ✓ Saved: {out}/02_time_series.png, 02b_phase_portrait.png, 02c_energy.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Variant Comparison
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Damping Variant Comparison (Same Initial Conditions)")

    variant_results = {}
    for variant in ALL_VARIANTS:
        cfg = SimulationConfig(params=params, initial=initial,
                               damping=variant.value, t_max=35.0, dt=0.05)
        r = solve(cfg)
        variant_results[variant.value] = r
        energy = r.total_energy
        print(f"  {r.damping.name:<22s}  "
              f"Peak |y|: {r.peak_displacement:>7.4f} m  "
              f"Final y: {r.final_state.y:>+8.4f} m  "
              f"E: {energy[0]:.4f} → {energy[-1]:.4f} J")

    fig_cmp = plot_variant_comparison(variant_results,
                                      save_path=f'{out}/03_variant_comparison.png')
    plt.close(fig_cmp)
    print(f"\n  ✓ Saved: {out}/03_variant_comparison.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Euler vs RK4 Accuracy
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Euler vs RK4 Numerical Accuracy")

    cfg_coarse = SimulationConfig(params=params, initial=initial,
                                  damping='constant', t_max=35.0, dt=0.05)
    result_euler = simulate_euler(cfg_coarse)
    result_rk4 = solve(cfg_coarse)

    print(f"  Timestep: {cfg_coarse.dt} s  ({len(result_rk4)} samples)")
    print(f"  Euler  — Final y: {result_euler.final_state.y:+.5f} m  |  "
          f"Final E: {result_euler.total_energy[-1]:.5f} J")
    print(f"  RK4    — Final y: {result_rk4.final_state.y:+.5f} m  |  "
          f"Final E: {result_rk4.total_energy[-1]:.5f} J")

    fig_evr = plot_euler_vs_rk4(result_euler, result_rk4,
                                save_path=f'{out}/04_euler_vs_rk4.png')
    plt.close(fig_evr)
    print(f"\n  ✓ Saved: {out}/04_euler_vs_rk4.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Validation
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Validation — RK4 vs Reference Solutions")
    val_results = run_all_validations(verbose=True)
    fig_val = plot_validation(val_results, save_path=f'{out}/05_validation.png')
    plt.close(fig_val)
    print(f"  ✓ Saved: {out}/05_validation.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Playback Clock
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 6: Playback Clock → Sample Index")

    clock = 0.0
    n = len(result)
    print(f"  {'Tick':>5} {'Clock (s)':>10} {'Index':>7} {'t (s)':>8} {'y (m)':>10}")
    for tick in range(8):
        idx = index_for_time(clock, config.t_max, n)
        s = result[idx]
        print(f"  {tick:>5} {clock:>10.3f} {idx:>7} {s.t:>8.3f} {s.y:>+10.5f}")
        # 2.5 s of wall time per tick, played at double speed
        clock = advance_clock(clock, elapsed=2.5, t_max=config.t_max)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 7: Full Dashboard
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 7: Full Dashboard")
    fig_dash = plot_dashboard(result, current_time=config.t_max / 4,
                              save_path=f'{out}/07_dashboard.png')
    plt.close(fig_dash)
    print(f"  ✓ Saved: {out}/07_dashboard.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 8: Animation
    # ══════════════════════════════════════════════════════════════════════
    if not quick:
        section("PHASE 8: Oscillator Animation (GIF)")
        create_oscillator_animation(result,
                                    save_path=f'{out}/08_oscillator_animation.gif',
                                    frames=360, fps=20)
        print(f"  ✓ Saved: {out}/08_oscillator_animation.gif")
    else:
        section("PHASE 8: Animation SKIPPED (--quick mode)")

    # ══════════════════════════════════════════════════════════════════════
    #  SUMMARY
    # ══════════════════════════════════════════════════════════════════════
    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"""
  All outputs saved to: {os.path.abspath(out)}/

  Generated files:
    01_damping_curves.png        — γ(y, 0) and γ(0, v) for all variants
    02_time_series.png           — y(t) with playback marker
    02b_phase_portrait.png       — v vs y
    02c_energy.png               — energy and γ along the trajectory
    03_variant_comparison.png    — all damping laws, same start
    04_euler_vs_rk4.png          — numerical method comparison
    05_validation.png            — RK4 error vs references
    07_dashboard.png             — full simulation dashboard
    {'08_oscillator_animation.gif — Animated linkage' if not quick else '(animation skipped)'}

  Total runtime: {elapsed:.1f} seconds
""")


if __name__ == "__main__":
    main()
