"""
Required-Power Solver
=====================
Finds the launch speed ("power") that puts the trajectory through a target
at (dist, height) relative to the launch point, for a fixed angle and wind.

Rather than shooting over speed, the problem is reduced to one unknown,
the time of flight t:

1. From x(t) = dist, the launch velocity's horizontal component is
       vx0 = K * (dist - v_wind * t) / (1 - e^(-K t)) + v_wind
2. A shared launch angle gives vy0 = vx0 * tan(angle). Substituting into
   y(t) = height leaves
       F(t) = dist * tan(angle) + C * ((1 - e^(-K t)) / K - t) - height
   with C = v_wind * tan(angle) + G_K.
3. dF/dt = C * (e^(-K t) - 1) has constant sign for t > 0, so F is
   monotone and bisection over the time horizon is well-posed.
4. Solve F(t*) = 0, recover vx0 and power = vx0 / cos(angle).
"""

import math
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .constants import PhysicsConstants, DEFAULT_CONSTANTS
from .kinematics import Point, ORIGIN, position_at
from .results import Ok, Err, Failure, Result
from .rootfind import bisect

logger = logging.getLogger(__name__)


# ── Search policy ─────────────────────────────────────────────────────────
SEARCH_T_MIN = 0.01
SEARCH_T_MAX = 20.0
SHORT_RANGE = 0.1           # |dist| below this takes the shortcut
SHORT_RANGE_POWER = 1.0
VERTICAL_COS_EPS = 1e-9


@dataclass(frozen=True)
class ShotSolution:
    """A solved shot. ``time_of_flight`` is None for the short-range shortcut."""
    power: float
    time_of_flight: Optional[float]
    dist: float
    height: float
    angle: float
    wind: float

    def position_at_flight_time(self, origin: Point = ORIGIN,
                                constants: PhysicsConstants = DEFAULT_CONSTANTS) -> Optional[Point]:
        """Where the solved shot is at t*; should coincide with the target."""
        if self.time_of_flight is None:
            return None
        return position_at(origin, self.power, self.angle, self.wind,
                           self.time_of_flight, constants)


def flight_time_error(dist: float, height: float, angle: float, wind: float,
                      constants: PhysicsConstants = DEFAULT_CONSTANTS) -> Callable[[float], float]:
    """
    Vertical miss at time t, given that vx0 is chosen so that x(t) = dist.
    """
    K = constants.K
    tan_theta = math.tan(math.radians(angle))
    v_wind = wind / K
    C = v_wind * tan_theta + constants.G_K

    def error(t: float) -> float:
        E = 1 - math.exp(-K * t)
        return dist * tan_theta + C * (E / K - t) - height

    return error


def launch_velocity_for_time(dist: float, t: float, wind: float,
                             constants: PhysicsConstants = DEFAULT_CONSTANTS) -> float:
    """Horizontal launch velocity that reaches ``dist`` at exactly time t."""
    K = constants.K
    v_wind = wind / K
    E = 1 - math.exp(-K * t)
    return K * (dist - v_wind * t) / E + v_wind


def solve_shot(dist: float, height: float, angle: float, wind: float,
               constants: PhysicsConstants = DEFAULT_CONSTANTS) -> Result[ShotSolution]:
    """
    Solve for power and time of flight.

    Returns ``Ok(ShotSolution)``, ``Err(DEGENERATE_ANGLE)`` for a vertical
    launch, or ``Err(UNREACHABLE)`` when no time of flight within the search
    horizon works or the recovered power is negative.
    """
    if abs(dist) < SHORT_RANGE:
        logger.debug("dist=%g inside short range, using nominal power", dist)
        return Ok(ShotSolution(SHORT_RANGE_POWER, None, dist, height, angle, wind))

    cos_theta = math.cos(math.radians(angle))
    if abs(cos_theta) < VERTICAL_COS_EPS:
        logger.debug("angle=%g is vertical", angle)
        return Err(Failure.DEGENERATE_ANGLE,
                   f"cos({angle:g}°) ≈ 0, horizontal distance is not controlled by power")

    error = flight_time_error(dist, height, angle, wind, constants)
    found = bisect(error, SEARCH_T_MIN, SEARCH_T_MAX)
    if not found.ok:
        logger.debug("no time of flight in [%g, %g] for dist=%g height=%g angle=%g wind=%g",
                     SEARCH_T_MIN, SEARCH_T_MAX, dist, height, angle, wind)
        return Err(Failure.UNREACHABLE, found.detail)

    t_star = found.value
    vx0 = launch_velocity_for_time(dist, t_star, wind, constants)
    power = vx0 / cos_theta

    if power < 0:
        logger.debug("recovered power %g is negative (t*=%g)", power, t_star)
        return Err(Failure.UNREACHABLE, f"recovered power {power:.3f} is negative")

    return Ok(ShotSolution(power, t_star, dist, height, angle, wind))


def solve_required_power(dist: float, height: float, angle: float, wind: float,
                         constants: PhysicsConstants = DEFAULT_CONSTANTS) -> Result[float]:
    """Launch speed needed to pass through (dist, height)."""
    solved = solve_shot(dist, height, angle, wind, constants)
    if not solved.ok:
        return solved
    return Ok(solved.value.power)
