"""
Closed-Form Linear-Drag Kinematics
==================================
Position and velocity of a projectile under constant gravity and a drag
force proportional to velocity (single coefficient K on both axes), with a
constant horizontal wind forcing term.

With v_wind = wind / K and G_K = G / K:
    x(t) = x0 + ((vx0 - v_wind) / K) * (1 - e^(-K t)) + v_wind * t
    y(t) = y0 + ((vy0 + G_K)   / K) * (1 - e^(-K t)) - G_K * t

No numerical integration is involved; the sampler only chooses where to
evaluate the closed form.
"""

import math
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Tuple

import numpy as np

from .constants import PhysicsConstants, SimulationBounds, DEFAULT_CONSTANTS, DEFAULT_BOUNDS
from .results import Ok, Err, Failure, Result
from .rootfind import bisect

DEFAULT_DT = 0.05


class Point(NamedTuple):
    x: float
    y: float


ORIGIN = Point(0.0, 0.0)


def launch_velocity(power: float, angle: float) -> Tuple[float, float]:
    """Split launch speed into (vx0, vy0); angle in degrees."""
    rad = math.radians(angle)
    return power * math.cos(rad), power * math.sin(rad)


def position_at(start: Point, power: float, angle: float, wind: float, t: float,
                constants: PhysicsConstants = DEFAULT_CONSTANTS) -> Point:
    """Closed-form position at time t >= 0."""
    K, G_K = constants.K, constants.G_K
    v_wind = wind / K
    vx0, vy0 = launch_velocity(power, angle)

    decay = 1 - math.exp(-K * t)
    x = start.x + ((vx0 - v_wind) / K * decay + v_wind * t)
    y = start.y + ((vy0 + G_K) / K * decay - G_K * t)
    return Point(x, y)


def velocity_at(power: float, angle: float, wind: float, t: float,
                constants: PhysicsConstants = DEFAULT_CONSTANTS) -> Tuple[float, float]:
    """Time derivative of ``position_at``."""
    K, G_K = constants.K, constants.G_K
    v_wind = wind / K
    vx0, vy0 = launch_velocity(power, angle)

    e = math.exp(-K * t)
    return (vx0 - v_wind) * e + v_wind, (vy0 + G_K) * e - G_K


def _states(start, power, angle, wind, dt, constants, bounds):
    """Yield (t, x, y, vx, vy) until the termination policy fires."""
    if not dt > 0:
        raise ValueError(f"dt must be positive, got {dt}")

    t = 0.0
    while t < bounds.max_time:
        x, y = position_at(start, power, angle, wind, t, constants)
        vx, vy = velocity_at(power, angle, wind, t, constants)
        yield t, x, y, vx, vy

        # The sample that leaves the bounds is the impact/exit point
        if not bounds.contains(x, y):
            return
        t += dt


def sample(start: Point, power: float, angle: float, wind: float,
           dt: float = DEFAULT_DT,
           constants: PhysicsConstants = DEFAULT_CONSTANTS,
           bounds: SimulationBounds = DEFAULT_BOUNDS) -> Iterator[Point]:
    """
    Lazily sample the trajectory from t=0 in steps of dt.

    Stops after the first point below ``bounds.floor_y`` or outside
    ``[bounds.min_x, bounds.max_x]`` (that point is included), or when
    ``bounds.max_time`` is reached. Always yields at least the start point.
    """
    for _, x, y, _, _ in _states(start, power, angle, wind, dt, constants, bounds):
        yield Point(x, y)


def trajectory(start: Point, power: float, angle: float, wind: float,
               dt: float = DEFAULT_DT,
               constants: PhysicsConstants = DEFAULT_CONSTANTS,
               bounds: SimulationBounds = DEFAULT_BOUNDS) -> List[Point]:
    return list(sample(start, power, angle, wind, dt, constants, bounds))


@dataclass
class TrajectoryResult:
    """Sampled trajectory as arrays, plus derived flight metrics."""
    method: str               # 'closed_form', 'euler' or 'rk4'
    dt: float
    power: float
    angle: float
    wind: float
    start: Point

    # Arrays — each has shape (N,)
    time: np.ndarray
    x: np.ndarray
    y: np.ndarray
    vx: np.ndarray
    vy: np.ndarray

    @property
    def speed(self) -> np.ndarray:
        return np.hypot(self.vx, self.vy)

    @property
    def points(self) -> List[Point]:
        return [Point(float(a), float(b)) for a, b in zip(self.x, self.y)]

    @property
    def impact_point(self) -> Point:
        """Last sample: ground impact, bounds exit or time ceiling."""
        return Point(float(self.x[-1]), float(self.y[-1]))

    @property
    def flight_time(self) -> float:
        return float(self.time[-1])

    @property
    def horizontal_range(self) -> float:
        return float(self.x[-1] - self.start.x)

    @property
    def max_height(self) -> float:
        return float(np.max(self.y))

    @property
    def apex(self) -> Point:
        idx = int(np.argmax(self.y))
        return Point(float(self.x[idx]), float(self.y[idx]))

    @property
    def impact_speed(self) -> float:
        return float(self.speed[-1])

    @property
    def impact_angle_deg(self) -> float:
        """Angle of descent at the last sample (degrees below horizontal)."""
        return float(np.degrees(np.arctan2(-self.vy[-1], abs(self.vx[-1]))))

    def summary(self) -> str:
        """Human-readable summary string."""
        lines = [
            f"╔══════════════════════════════════════════════════════╗",
            f"║  TRAJECTORY SUMMARY — {self.method.upper():<30s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Power        : {self.power:>10.2f}{'':<26s} ║",
            f"║  Angle        : {self.angle:>10.1f} °{'':<24s} ║",
            f"║  Wind         : {self.wind:>+10.2f}{'':<26s} ║",
            f"║  Timestep     : {self.dt:<36.4f} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Samples      : {len(self.time):>10d}{'':<26s} ║",
            f"║  Range        : {self.horizontal_range:>10.2f}{'':<26s} ║",
            f"║  Max height   : {self.max_height:>10.2f}{'':<26s} ║",
            f"║  Flight time  : {self.flight_time:>10.2f}{'':<26s} ║",
            f"║  Impact speed : {self.impact_speed:>10.2f}{'':<26s} ║",
            f"║  Impact angle : {self.impact_angle_deg:>10.1f} °{'':<24s} ║",
            f"╚══════════════════════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


def build_result(history, method, dt, start, power, angle, wind) -> TrajectoryResult:
    """Convert a list of (t, x, y, vx, vy) tuples into a TrajectoryResult."""
    times, xs, ys, vxs, vys = zip(*history)
    return TrajectoryResult(
        method=method,
        dt=dt,
        power=power,
        angle=angle,
        wind=wind,
        start=start,
        time=np.array(times),
        x=np.array(xs),
        y=np.array(ys),
        vx=np.array(vxs),
        vy=np.array(vys),
    )


def simulate(start: Point, power: float, angle: float, wind: float,
             dt: float = DEFAULT_DT,
             constants: PhysicsConstants = DEFAULT_CONSTANTS,
             bounds: SimulationBounds = DEFAULT_BOUNDS) -> TrajectoryResult:
    """Closed-form trajectory at the same sample times as ``sample``."""
    history = list(_states(start, power, angle, wind, dt, constants, bounds))
    return build_result(history, 'closed_form', dt, start, power, angle, wind)


def apex_time(power: float, angle: float,
              constants: PhysicsConstants = DEFAULT_CONSTANTS) -> float:
    """Time at which vertical velocity reaches zero (0 if never ascending)."""
    _, vy0 = launch_velocity(power, angle)
    if vy0 <= 0:
        return 0.0
    return math.log((vy0 + constants.G_K) / constants.G_K) / constants.K


def crossing_distance(start: Point, power: float, angle: float, wind: float,
                      level: float = 0.0,
                      constants: PhysicsConstants = DEFAULT_CONSTANTS,
                      bounds: SimulationBounds = DEFAULT_BOUNDS) -> Result[float]:
    """
    Horizontal position where the descending branch crosses ``level``.

    y(t) is strictly concave, so after the apex it is monotone and a single
    bisection over [apex, max_time] locates the crossing.
    """
    t_apex = apex_time(power, angle, constants)
    if t_apex >= bounds.max_time:
        return Err(Failure.NO_ROOT_BRACKETED, "apex beyond time horizon")

    def height_above(t):
        return position_at(start, power, angle, wind, t, constants).y - level

    found = bisect(height_above, t_apex, bounds.max_time)
    if not found.ok:
        return found
    return Ok(position_at(start, power, angle, wind, found.value, constants).x)
