"""
Validation
==========
Two checks on the engine:

1. **Round trip** — solve a target, then evaluate the closed form at the
   solved time of flight and measure how far it lands from the target.
2. **Closed form vs numeric** — integrate the same equations of motion
   with Euler and RK4 and measure the deviation from the closed form at
   shared sample times, for several timesteps.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .constants import PhysicsConstants, DEFAULT_CONSTANTS
from .kinematics import ORIGIN, simulate
from .integrator import simulate_euler, simulate_rk4
from .solver import solve_shot


# ══════════════════════════════════════════════════════════════════════════
#  Reference scenarios
# ══════════════════════════════════════════════════════════════════════════

# (dist, height, angle_deg, wind)
REFERENCE_TARGETS = [
    (15.0,   5.0, 65.0,  0.0),
    (10.0,   0.0, 45.0,  0.0),
    (20.0,  -3.0, 45.0,  0.0),
    (25.0,   8.0, 70.0,  2.0),
    (12.0,   2.0, 55.0, -2.0),
    (30.0,   0.0, 60.0,  5.0),
    (18.0,  10.0, 80.0,  0.0),
    (15.0,  50.0, 10.0,  0.0),   # too steep for this angle
]

ROUND_TRIP_TOLERANCE = 0.05


@dataclass
class RoundTripResult:
    """Result of one solve-then-evaluate check."""
    dist: float
    height: float
    angle: float
    wind: float
    power: Optional[float]
    time_of_flight: Optional[float]
    miss: Optional[float]       # distance from target at t*
    failure: Optional[str]      # failure reason when unsolved

    @property
    def solved(self) -> bool:
        return self.failure is None

    @property
    def passed(self) -> bool:
        return self.miss is not None and self.miss <= ROUND_TRIP_TOLERANCE


@dataclass
class NumericComparison:
    """Max deviation of a numerical integrator from the closed form."""
    method: str
    dt: float
    max_deviation: float
    samples: int


def validate_round_trip(targets: Sequence[Tuple[float, float, float, float]] = REFERENCE_TARGETS,
                        constants: PhysicsConstants = DEFAULT_CONSTANTS,
                        verbose: bool = True) -> List[RoundTripResult]:
    """Solve each target and measure the miss at the solved time of flight."""
    results = []

    if verbose:
        print(f"\n{'='*75}")
        print(f"  ROUND-TRIP VALIDATION  (G={constants.G:g}, K={constants.K:g})")
        print(f"{'='*75}")
        print(f"{'Dist':>6} {'Height':>7} {'Angle':>6} {'Wind':>6} "
              f"{'Power':>9} {'ToF':>7} {'Miss':>10}  Status")
        print("-" * 75)

    for dist, height, angle, wind in targets:
        solved = solve_shot(dist, height, angle, wind, constants)
        if not solved.ok:
            rt = RoundTripResult(dist, height, angle, wind,
                                 power=None, time_of_flight=None, miss=None,
                                 failure=solved.reason.value)
        else:
            shot = solved.value
            landed = shot.position_at_flight_time(ORIGIN, constants)
            miss = None
            if landed is not None:
                miss = math.hypot(landed.x - dist, landed.y - height)
            rt = RoundTripResult(dist, height, angle, wind,
                                 power=shot.power, time_of_flight=shot.time_of_flight,
                                 miss=miss, failure=None)
        results.append(rt)

        if verbose:
            if rt.solved:
                status = "✓ PASS" if rt.passed else "✗ MISS"
                tof = f"{rt.time_of_flight:>7.3f}" if rt.time_of_flight is not None else f"{'—':>7}"
                miss_txt = f"{rt.miss:>10.2e}" if rt.miss is not None else f"{'—':>10}"
                print(f"{dist:>6.1f} {height:>7.1f} {angle:>6.1f} {wind:>+6.1f} "
                      f"{rt.power:>9.3f} {tof} {miss_txt}  {status}")
            else:
                print(f"{dist:>6.1f} {height:>7.1f} {angle:>6.1f} {wind:>+6.1f} "
                      f"{'—':>9} {'—':>7} {'—':>10}  {rt.failure}")

    if verbose:
        solved = [r for r in results if r.solved]
        passed = sum(1 for r in solved if r.passed)
        print("-" * 75)
        print(f"  Solved: {len(solved)}/{len(results)} | "
              f"Within {ROUND_TRIP_TOLERANCE:g}: {passed}/{len(solved)}")
        print(f"{'='*75}\n")

    return results


def compare_with_numeric(power: float, angle: float, wind: float,
                         dt_values: Sequence[float] = (0.1, 0.05, 0.01),
                         constants: PhysicsConstants = DEFAULT_CONSTANTS) -> List[NumericComparison]:
    """
    Max position deviation of Euler and RK4 from the closed form, per dt.

    Both sides are sampled at t = n * dt; only samples common to both are
    compared.
    """
    comparisons = []
    for dt in dt_values:
        exact = simulate(ORIGIN, power, angle, wind, dt, constants)
        for method, integrate in (('euler', simulate_euler), ('rk4', simulate_rk4)):
            numeric = integrate(ORIGIN, power, angle, wind, dt, constants)
            n = min(len(exact.time), len(numeric.time))
            dev = np.hypot(exact.x[:n] - numeric.x[:n], exact.y[:n] - numeric.y[:n])
            comparisons.append(NumericComparison(method, dt, float(np.max(dev)), n))
    return comparisons


def run_all_validations(verbose: bool = True):
    """Round-trip all reference targets and compare integrators on the first."""
    round_trip = validate_round_trip(verbose=verbose)

    dist, height, angle, wind = REFERENCE_TARGETS[0]
    shot = solve_shot(dist, height, angle, wind).unwrap()
    numeric = compare_with_numeric(shot.power, angle, wind)

    if verbose:
        print(f"  Closed form vs numeric (power={shot.power:.2f}, angle={angle:g}°)")
        for c in numeric:
            print(f"    {c.method:<6s} dt={c.dt:<6g} max deviation = {c.max_deviation:.3e}")

    return {'round_trip': round_trip, 'numeric': numeric}


if __name__ == "__main__":
    run_all_validations(verbose=True)
