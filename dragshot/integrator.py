"""
Numerical Integration Cross-Check
=================================
Steps the linear-drag equations of motion directly:

    dx/dt  = vx            dvx/dt = -K * vx + wind
    dy/dt  = vy            dvy/dt = -K * vy - G

1. **Euler Method** (1st order) — simple, accumulates error.
2. **Runge-Kutta 4th Order (RK4)** — much closer at the same timestep.

The closed form in ``kinematics`` is the exact solution of this system, so
these integrators exist to check it and to show step-size error. They use
the same termination policy as the closed-form sampler.
"""

import numpy as np

from .constants import PhysicsConstants, SimulationBounds, DEFAULT_CONSTANTS, DEFAULT_BOUNDS
from .kinematics import Point, TrajectoryResult, build_result, launch_velocity


def compute_acceleration(velocity: np.ndarray, wind: float,
                         constants: PhysicsConstants = DEFAULT_CONSTANTS) -> np.ndarray:
    """
    Acceleration [ax, ay] for a ground-frame velocity [vx, vy].

    Drag pulls vx toward the wind equilibrium wind / K and vy toward -G / K.
    """
    K = constants.K
    return np.array([-K * velocity[0] + wind,
                     -K * velocity[1] - constants.G])


def _initial_state(start: Point, power: float, angle: float):
    pos = np.array([start.x, start.y], dtype=float)
    vel = np.array(launch_velocity(power, angle), dtype=float)
    return pos, vel


def _record(t, pos, vel):
    return t, float(pos[0]), float(pos[1]), float(vel[0]), float(vel[1])


def _check_dt(dt):
    if not dt > 0:
        raise ValueError(f"dt must be positive, got {dt}")


def simulate_euler(start: Point, power: float, angle: float, wind: float,
                   dt: float = 0.01,
                   constants: PhysicsConstants = DEFAULT_CONSTANTS,
                   bounds: SimulationBounds = DEFAULT_BOUNDS) -> TrajectoryResult:
    """
    Forward Euler integration.

    x_{n+1} = x_n + v_n * dt
    v_{n+1} = v_n + a(v_n) * dt
    """
    _check_dt(dt)
    pos, vel = _initial_state(start, power, angle)
    t = 0.0

    history = [_record(t, pos, vel)]

    while bounds.contains(pos[0], pos[1]):
        if t + dt >= bounds.max_time:
            break
        acc = compute_acceleration(vel, wind, constants)

        pos = pos + vel * dt
        vel = vel + acc * dt
        t += dt

        history.append(_record(t, pos, vel))

    return build_result(history, 'euler', dt, start, power, angle, wind)


def simulate_rk4(start: Point, power: float, angle: float, wind: float,
                 dt: float = 0.05,
                 constants: PhysicsConstants = DEFAULT_CONSTANTS,
                 bounds: SimulationBounds = DEFAULT_BOUNDS) -> TrajectoryResult:
    """4th-order Runge-Kutta integration."""
    _check_dt(dt)
    pos, vel = _initial_state(start, power, angle)
    t = 0.0

    history = [_record(t, pos, vel)]

    def accel(v):
        return compute_acceleration(v, wind, constants)

    while bounds.contains(pos[0], pos[1]):
        if t + dt >= bounds.max_time:
            break
        # RK4 stages
        k1v = accel(vel)
        k1x = vel

        k2v = accel(vel + 0.5 * dt * k1v)
        k2x = vel + 0.5 * dt * k1v

        k3v = accel(vel + 0.5 * dt * k2v)
        k3x = vel + 0.5 * dt * k2v

        k4v = accel(vel + dt * k3v)
        k4x = vel + dt * k3v

        pos = pos + (dt / 6.0) * (k1x + 2*k2x + 2*k3x + k4x)
        vel = vel + (dt / 6.0) * (k1v + 2*k2v + 2*k3v + k4v)
        t += dt

        history.append(_record(t, pos, vel))

    return build_result(history, 'rk4', dt, start, power, angle, wind)
