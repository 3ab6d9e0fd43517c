"""
Linear-Drag Shot Solver
=======================
A small engine for projectile motion under constant gravity and a drag
force proportional to velocity, with a constant horizontal wind:
  - Closed-form trajectory evaluation and sampling
  - Bisection root finder
  - Required-power solver (time-of-flight reduction)
  - Euler / RK4 integrators to cross-check the closed form

Failures the solver expects (unreachable target, vertical launch) come
back as ``Err`` values instead of exceptions.
"""

from .constants import (
    PhysicsConstants, SimulationBounds, DEFAULT_CONSTANTS, DEFAULT_BOUNDS,
)
from .results import Ok, Err, Failure, Result, SolverError
from .kinematics import (
    Point, ORIGIN, TrajectoryResult, position_at, velocity_at,
    sample, trajectory, simulate, apex_time, crossing_distance,
)
from .rootfind import bisect
from .solver import (
    ShotSolution, flight_time_error, launch_velocity_for_time,
    solve_shot, solve_required_power,
)
from .integrator import simulate_euler, simulate_rk4
from .aiming import AimMode, AimResult, aim, power_difference

__version__ = "1.0.0"
__all__ = [
    'PhysicsConstants', 'SimulationBounds', 'DEFAULT_CONSTANTS', 'DEFAULT_BOUNDS',
    'Ok', 'Err', 'Failure', 'Result', 'SolverError',
    'Point', 'ORIGIN', 'TrajectoryResult', 'position_at', 'velocity_at',
    'sample', 'trajectory', 'simulate', 'apex_time', 'crossing_distance',
    'bisect',
    'ShotSolution', 'flight_time_error', 'launch_velocity_for_time',
    'solve_shot', 'solve_required_power',
    'simulate_euler', 'simulate_rk4',
    'AimMode', 'AimResult', 'aim', 'power_difference',
]
