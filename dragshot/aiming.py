"""
Aim Policy
==========
Drives the engine the way an interactive front end does: solve for power
(auto-aim) or take a manual power, sample the resulting trajectory, and
turn solver failures and power limits into user-facing messages.

Nothing here is part of the engine's contract. The power cap and the
"target must be ahead" rule are presentation policy.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .constants import PhysicsConstants, SimulationBounds, DEFAULT_CONSTANTS, DEFAULT_BOUNDS
from .kinematics import Point, ORIGIN, DEFAULT_DT, trajectory
from .results import Failure
from .solver import solve_required_power

logger = logging.getLogger(__name__)

MAX_POWER = 100.0
DEFAULT_MANUAL_POWER = 50.0

MSG_TARGET_BEHIND = "Target must be to the right of the player"
MSG_POWER_LIMIT = "Required power exceeds limit ({limit:g})"
FAILURE_MESSAGES = {
    Failure.UNREACHABLE: "Target unreachable with current angle/wind",
    Failure.DEGENERATE_ANGLE: "Launch angle is vertical; distance cannot be controlled by power",
    Failure.NO_ROOT_BRACKETED: "Target unreachable with current angle/wind",
}


class AimMode(Enum):
    AUTO_AIM = 'auto_aim'   # power is solved for the target
    MANUAL = 'manual'       # power is supplied by the caller


@dataclass
class AimResult:
    """
    ``power`` is the power the trajectory was sampled with; ``solved_power``
    is the unclamped solver output (None when solving failed).
    """
    power: float
    solved_power: Optional[float]
    trajectory: List[Point] = field(repr=False)
    impact_point: Optional[Point]
    error: Optional[str] = None
    failure: Optional[Failure] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def aim(target: Point, angle: float, wind: float,
        mode: AimMode = AimMode.AUTO_AIM,
        manual_power: float = DEFAULT_MANUAL_POWER,
        origin: Point = ORIGIN,
        max_power: float = MAX_POWER,
        dt: float = DEFAULT_DT,
        constants: PhysicsConstants = DEFAULT_CONSTANTS,
        bounds: SimulationBounds = DEFAULT_BOUNDS) -> AimResult:
    """
    Solve (or take) a power for ``target`` and sample the shot.

    In AUTO_AIM a successful solve replaces ``manual_power``; above
    ``max_power`` it is clamped and an error message is set. In MANUAL mode
    the solve still runs so the caller can display the required power, but
    the trajectory always uses ``manual_power``.
    """
    dist = target.x - origin.x
    height = target.y - origin.y

    power = manual_power
    solved = None
    error = None
    failure = None

    if dist <= 0:
        error = MSG_TARGET_BEHIND
    else:
        result = solve_required_power(dist, height, angle, wind, constants)
        if not result.ok:
            failure = result.reason
            error = FAILURE_MESSAGES[result.reason]
        else:
            solved = result.value
            if mode is AimMode.AUTO_AIM:
                if solved > max_power:
                    error = MSG_POWER_LIMIT.format(limit=max_power)
                    power = max_power
                else:
                    power = solved

    if error:
        logger.debug("aim at %s: %s", target, error)

    points = trajectory(origin, power, angle, wind, dt, constants, bounds)
    impact = points[-1] if points else None
    return AimResult(power=power, solved_power=solved, trajectory=points,
                     impact_point=impact, error=error, failure=failure)


def power_difference(first: AimResult, second: AimResult) -> float:
    """Power delta between two shots (first minus second)."""
    return first.power - second.power
