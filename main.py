#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  LINEAR-DRAG SHOT SOLVER — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the complete demonstration pipeline:
    1. Physics constants
    2. Solve the reference shot (target (15, 5), 65°, no wind)
    3. Reference trajectory (closed form)
    4. Required power vs distance
    5. Wind effects
    6. Closed form vs Euler / RK4
    7. Round-trip validation
    8. Aim policy (auto-aim / manual, power limit)
    9. Animated trajectory GIF

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

from dragshot.constants import DEFAULT_CONSTANTS, DEFAULT_BOUNDS
from dragshot.kinematics import Point, ORIGIN, simulate, crossing_distance
from dragshot.solver import solve_shot
from dragshot.integrator import simulate_euler, simulate_rk4
from dragshot.aiming import AimMode, aim
from dragshot.validation import (
    validate_round_trip, compare_with_numeric, ROUND_TRIP_TOLERANCE,
)
from dragshot.visualization import (
    plot_trajectory, plot_power_curve, plot_wind_effects,
    plot_numeric_comparison, plot_round_trip, create_trajectory_animation,
    ensure_output_dir,
)
from dragshot.log import get_logger

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

logger = get_logger("dragshot.main")

REFERENCE_TARGET = Point(15.0, 5.0)
REFERENCE_ANGLE = 65.0
REFERENCE_WIND = 0.0


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def main():
    start_time = time.time()
    quick = '--quick' in sys.argv

    out = ensure_output_dir('outputs')
    c = DEFAULT_CONSTANTS

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Constants
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Physics Constants")
    print(f"  G   = {c.G:.4f}")
    print(f"  K   = {c.K:.4f}")
    print(f"  G/K = {c.G_K:.4f}   (vertical terminal speed)")
    print(f"  Sampler stops at y < {DEFAULT_BOUNDS.floor_y:g}, "
          f"x outside [{DEFAULT_BOUNDS.min_x:g}, {DEFAULT_BOUNDS.max_x:g}], "
          f"t ≥ {DEFAULT_BOUNDS.max_time:g}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Solve the reference shot
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Required Power for Reference Target")
    solved = solve_shot(REFERENCE_TARGET.x, REFERENCE_TARGET.y,
                        REFERENCE_ANGLE, REFERENCE_WIND)
    if not solved.ok:
        logger.error("reference shot failed: %s", solved.reason.value)
        return 1
    shot = solved.value
    landed = shot.position_at_flight_time()
    print(f"  Target        : ({REFERENCE_TARGET.x:g}, {REFERENCE_TARGET.y:g})")
    print(f"  Angle / wind  : {REFERENCE_ANGLE:g}° / {REFERENCE_WIND:+g}")
    print(f"  Power         : {shot.power:.4f}")
    print(f"  Time of flight: {shot.time_of_flight:.4f}")
    print(f"  Position at t*: ({landed.x:.5f}, {landed.y:.5f})")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Reference trajectory
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Reference Trajectory (Closed Form)")
    result = simulate(ORIGIN, shot.power, REFERENCE_ANGLE, REFERENCE_WIND)
    print(result.summary())
    ground = crossing_distance(ORIGIN, shot.power, REFERENCE_ANGLE, REFERENCE_WIND)
    if ground.ok:
        print(f"  Ground crossing (y=0) at x = {ground.value:.3f}")

    fig = plot_trajectory(result, target=REFERENCE_TARGET,
                          save_path=f'{out}/01_reference_trajectory.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/01_reference_trajectory.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Required power vs distance
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Required Power vs Distance")
    angles = (30.0, 45.0, 60.0, 75.0)
    print(f"  {'Dist':>6}" + ''.join(f"{f'{a:g}°':>10}" for a in angles))
    for d in (5.0, 10.0, 15.0, 20.0, 25.0, 30.0):
        row = []
        for a in angles:
            r = solve_shot(d, 0.0, a, 0.0)
            row.append(f"{r.value.power:>10.2f}" if r.ok else f"{'—':>10}")
        print(f"  {d:>6.1f}" + ''.join(row))

    fig = plot_power_curve(angles, save_path=f'{out}/02_power_vs_distance.png')
    plt.close(fig)
    print(f"\n  ✓ Saved: {out}/02_power_vs_distance.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Wind effects
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Wind Effects")
    for wind in (-10.0, -5.0, 0.0, 5.0, 10.0):
        r = solve_shot(REFERENCE_TARGET.x, REFERENCE_TARGET.y, REFERENCE_ANGLE, wind)
        ground = crossing_distance(ORIGIN, shot.power, REFERENCE_ANGLE, wind)
        needed = f"{r.value.power:>8.2f}" if r.ok else f"{r.reason.value:>8}"
        landing = f"{ground.value:>8.2f}" if ground.ok else f"{'—':>8}"
        print(f"  wind {wind:+6.1f}  required power {needed}  "
              f"ground crossing at fixed power {landing}")

    fig = plot_wind_effects(shot.power, REFERENCE_ANGLE,
                            save_path=f'{out}/03_wind_effects.png')
    plt.close(fig)
    print(f"\n  ✓ Saved: {out}/03_wind_effects.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Closed form vs numerical integration
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 6: Closed Form vs Euler / RK4")
    for cmp in compare_with_numeric(shot.power, REFERENCE_ANGLE, REFERENCE_WIND,
                                    dt_values=(0.1, 0.05, 0.01)):
        print(f"  {cmp.method.upper():<6s} dt={cmp.dt:<5g} "
              f"max deviation = {cmp.max_deviation:.3e}  ({cmp.samples} samples)")

    dt_test = 0.05
    exact = simulate(ORIGIN, shot.power, REFERENCE_ANGLE, REFERENCE_WIND, dt=dt_test)
    euler = simulate_euler(ORIGIN, shot.power, REFERENCE_ANGLE, REFERENCE_WIND, dt=dt_test)
    rk4 = simulate_rk4(ORIGIN, shot.power, REFERENCE_ANGLE, REFERENCE_WIND, dt=dt_test)
    fig = plot_numeric_comparison(exact, euler, rk4,
                                  save_path=f'{out}/04_closed_form_vs_numeric.png')
    plt.close(fig)
    print(f"\n  ✓ Saved: {out}/04_closed_form_vs_numeric.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 7: Round-trip validation
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 7: Round-Trip Validation")
    rt = validate_round_trip(verbose=True)
    fig = plot_round_trip(rt, tolerance=ROUND_TRIP_TOLERANCE,
                          save_path=f'{out}/05_round_trip.png')
    plt.close(fig)
    print(f"  ✓ Saved: {out}/05_round_trip.png")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 8: Aim policy
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 8: Aim Policy")
    cases = [
        ("Auto-aim reference", REFERENCE_TARGET, REFERENCE_ANGLE, 0.0, AimMode.AUTO_AIM),
        ("Auto-aim far target", Point(35.0, 0.0), 20.0, -5.0, AimMode.AUTO_AIM),
        ("Target behind", Point(-5.0, 0.0), 45.0, 0.0, AimMode.AUTO_AIM),
        ("Vertical launch", Point(10.0, 0.0), 90.0, 0.0, AimMode.AUTO_AIM),
        ("Manual power 40", REFERENCE_TARGET, REFERENCE_ANGLE, 0.0, AimMode.MANUAL),
    ]
    for label, target, angle, wind, mode in cases:
        a = aim(target, angle, wind, mode=mode, manual_power=40.0)
        impact = a.impact_point
        status = a.error if a.error else "OK"
        print(f"  {label:<22s} power={a.power:>7.2f}  "
              f"impact=({impact.x:>7.2f}, {impact.y:>7.2f})  {status}")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 9: Trajectory animation
    # ══════════════════════════════════════════════════════════════════════
    if not quick:
        section("PHASE 9: Trajectory Animation (GIF)")
        path = create_trajectory_animation(result, target=REFERENCE_TARGET,
                                           save_path=f'{out}/06_trajectory_animation.gif',
                                           frames=120)
        print(f"  ✓ Saved: {path}")
    else:
        section("PHASE 9: Animation SKIPPED (--quick mode)")

    elapsed = time.time() - start_time
    section("COMPLETE")
    print(f"\n  All outputs saved to: {os.path.abspath(out)}/")
    print(f"  Total runtime: {elapsed:.1f} seconds\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
