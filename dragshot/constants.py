"""
Physics Constants & Simulation Bounds
======================================
Immutable configuration values passed into every engine operation.

The model uses a single linear drag coefficient for both axes:
    dvx/dt = -K * vx + wind
    dvy/dt = -K * vy - G

Units are abstract distance/time units of the host application, not SI.
"""

from dataclasses import dataclass


# ── Reference values ──────────────────────────────────────────────────────
GRAVITY = 157.9629       # distance units / time²
DRAG_COEFFICIENT = 1.128  # 1 / time


@dataclass(frozen=True)
class PhysicsConstants:
    """Gravity and linear drag coefficient; G_K is derived."""
    G: float = GRAVITY
    K: float = DRAG_COEFFICIENT

    def __post_init__(self):
        if self.K <= 0:
            raise ValueError(f"Drag coefficient K must be positive, got {self.K}")

    @property
    def G_K(self) -> float:
        """Gravity-to-drag ratio (vertical terminal speed)."""
        return self.G / self.K

    def terminal_velocity(self, wind: float = 0.0):
        """Drag-equilibrium velocity (vx, vy) for a given wind."""
        return wind / self.K, -self.G_K


@dataclass(frozen=True)
class SimulationBounds:
    """
    Termination policy for the trajectory sampler.

    A trajectory stops at the first sample below ``floor_y``, outside
    ``[min_x, max_x]``, or once ``max_time`` is reached.
    """
    floor_y: float = -30.0
    min_x: float = -50.0
    max_x: float = 200.0
    max_time: float = 20.0

    def __post_init__(self):
        if self.max_time <= 0:
            raise ValueError(f"max_time must be positive, got {self.max_time}")
        if self.min_x > self.max_x:
            raise ValueError("min_x must not exceed max_x")

    def contains(self, x: float, y: float) -> bool:
        return y >= self.floor_y and self.min_x <= x <= self.max_x


DEFAULT_CONSTANTS = PhysicsConstants()
DEFAULT_BOUNDS = SimulationBounds()
