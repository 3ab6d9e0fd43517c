"""
Unit Tests for the Linear-Drag Shot Solver
==========================================
Tests core physics modules for correctness.
Run: python -m pytest tests/ -v
"""

import sys
import os
import math
import dataclasses
import types
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from dragshot.constants import PhysicsConstants, SimulationBounds, DEFAULT_CONSTANTS, DEFAULT_BOUNDS
from dragshot.results import Ok, Err, Failure, SolverError
from dragshot.kinematics import (
    Point, ORIGIN, position_at, velocity_at, sample, trajectory, simulate,
    apex_time, crossing_distance,
)
from dragshot.rootfind import bisect
from dragshot.solver import (
    solve_shot, solve_required_power, flight_time_error, launch_velocity_for_time,
)
from dragshot.integrator import simulate_euler, simulate_rk4, compute_acceleration
from dragshot.aiming import (
    AimMode, aim, power_difference, MSG_TARGET_BEHIND, FAILURE_MESSAGES,
)
from dragshot.validation import validate_round_trip, compare_with_numeric


class TestConstants:

    def test_derived_ratio(self):
        c = PhysicsConstants(G=157.9629, K=1.128)
        assert abs(c.G_K - 157.9629 / 1.128) < 1e-12

    def test_non_positive_drag_rejected(self):
        with pytest.raises(ValueError):
            PhysicsConstants(K=0.0)

    def test_constants_are_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONSTANTS.G = 1.0

    def test_bounds_contains(self):
        assert DEFAULT_BOUNDS.contains(0.0, 0.0)
        assert not DEFAULT_BOUNDS.contains(0.0, -30.5)
        assert not DEFAULT_BOUNDS.contains(200.5, 0.0)
        assert not DEFAULT_BOUNDS.contains(-50.5, 0.0)


class TestKinematics:
    """Closed-form model and trajectory sampler."""

    def test_starts_at_launch_point(self):
        start = Point(2.0, -1.0)
        pts = trajectory(start, 50.0, 45.0, 3.0)
        assert pts[0] == start

    def test_deterministic(self):
        a = trajectory(ORIGIN, 63.7, 52.0, -4.2)
        b = trajectory(ORIGIN, 63.7, 52.0, -4.2)
        assert a == b

    def test_sample_is_lazy(self):
        gen = sample(ORIGIN, 50.0, 45.0, 0.0)
        assert isinstance(gen, types.GeneratorType)
        assert next(gen) == Point(0.0, 0.0)

    def test_stops_below_floor(self):
        pts = trajectory(ORIGIN, 50.0, 45.0, 0.0)
        assert pts[-1].y < DEFAULT_BOUNDS.floor_y
        assert all(DEFAULT_BOUNDS.contains(p.x, p.y) for p in pts[:-1])

    def test_stops_past_right_bound(self):
        pts = trajectory(ORIGIN, 500.0, 0.0, 0.0)
        assert pts[-1].x > DEFAULT_BOUNDS.max_x
        assert all(p.x <= DEFAULT_BOUNDS.max_x for p in pts[:-1])

    def test_stops_past_left_bound(self):
        pts = trajectory(ORIGIN, 500.0, 180.0, 0.0)
        assert pts[-1].x < DEFAULT_BOUNDS.min_x

    def test_time_ceiling(self):
        """Without gravity a resting projectile only stops at the time limit."""
        weightless = PhysicsConstants(G=0.0, K=1.128)
        pts = trajectory(ORIGIN, 0.0, 0.0, 0.0, dt=0.05, constants=weightless)
        assert 399 <= len(pts) <= 401
        assert all(p == Point(0.0, 0.0) for p in pts)

    def test_custom_bounds(self):
        tight = SimulationBounds(floor_y=-1.0, min_x=-5.0, max_x=5.0, max_time=20.0)
        pts = trajectory(ORIGIN, 50.0, 45.0, 0.0, bounds=tight)
        assert not tight.contains(*pts[-1])

    @pytest.mark.parametrize("dt", [0.0, -0.05])
    def test_non_positive_dt_rejected(self, dt):
        with pytest.raises(ValueError):
            trajectory(ORIGIN, 50.0, 45.0, 0.0, dt=dt)

    def test_low_drag_matches_vacuum(self):
        """As K → 0 the closed form approaches the drag-free parabola."""
        c = PhysicsConstants(G=10.0, K=1e-3)
        p = position_at(ORIGIN, 10.0 * math.sqrt(2), 45.0, 0.0, 1.0, c)
        assert abs(p.x - 10.0) < 0.02
        assert abs(p.y - (10.0 - 5.0)) < 0.02

    def test_velocity_limits(self):
        vx, vy = velocity_at(40.0, 30.0, 0.0, 0.0)
        assert abs(vx - 40.0 * math.cos(math.radians(30))) < 1e-9
        assert abs(vy - 40.0 * math.sin(math.radians(30))) < 1e-9

        wind = 3.0
        vx, vy = velocity_at(40.0, 30.0, wind, 50.0)
        assert abs(vx - wind / DEFAULT_CONSTANTS.K) < 1e-6
        assert abs(vy + DEFAULT_CONSTANTS.G_K) < 1e-6

    def test_apex_has_zero_vertical_velocity(self):
        t = apex_time(60.0, 70.0)
        _, vy = velocity_at(60.0, 70.0, 0.0, t)
        assert t > 0
        assert abs(vy) < 1e-9

    def test_apex_time_for_downward_shot(self):
        assert apex_time(30.0, 0.0) == 0.0

    def test_simulate_matches_sampler(self):
        result = simulate(ORIGIN, 70.0, 55.0, 2.0)
        pts = trajectory(ORIGIN, 70.0, 55.0, 2.0)
        assert result.points == pts
        assert result.impact_point == pts[-1]
        assert result.method == 'closed_form'
        assert result.max_height >= result.apex.y - 1e-12
        assert result.flight_time > 0

    def test_tailwind_extends_range(self):
        calm = crossing_distance(ORIGIN, 50.0, 45.0, 0.0)
        tail = crossing_distance(ORIGIN, 50.0, 45.0, 5.0)
        head = crossing_distance(ORIGIN, 50.0, 45.0, -5.0)
        assert head.value < calm.value < tail.value

    @pytest.mark.parametrize("angle", [15.0, 45.0, 60.0, 85.0])
    def test_range_increases_with_power(self, angle):
        ranges = []
        for power in (20.0, 40.0, 60.0, 80.0, 100.0):
            crossed = crossing_distance(ORIGIN, power, angle, 0.0)
            assert crossed.ok
            ranges.append(crossed.value)
        assert all(b > a for a, b in zip(ranges, ranges[1:]))

    def test_crossing_never_reached(self):
        """A shot starting below the level never crosses it."""
        crossed = crossing_distance(Point(0.0, -10.0), 5.0, 10.0, 0.0, level=0.0)
        assert isinstance(crossed, Err)
        assert crossed.reason is Failure.NO_ROOT_BRACKETED


class TestRootFinder:
    """Bisection on plain functions."""

    def test_linear_root(self):
        root = bisect(lambda x: x - 3, 0.0, 10.0)
        assert root.ok
        assert abs(root.value - 3.0) < 1e-5

    def test_cubic_root(self):
        root = bisect(lambda x: x**3 - 2*x - 5, 2.0, 3.0)
        assert abs(root.value - 2.0945514815423265) < 1e-5

    def test_unbracketed(self):
        root = bisect(lambda x: x * x + 1, -2.0, 2.0)
        assert isinstance(root, Err)
        assert root.reason is Failure.NO_ROOT_BRACKETED
        assert not root.ok

    def test_zero_at_endpoint(self):
        assert bisect(lambda x: x, 0.0, 5.0) == Ok(0.0)
        assert bisect(lambda x: x - 5.0, 0.0, 5.0) == Ok(5.0)

    def test_reversed_bracket(self):
        root = bisect(lambda x: x - 3, 10.0, 0.0)
        assert abs(root.value - 3.0) < 1e-5

    def test_iteration_limit_returns_midpoint(self):
        # One halving of [0, 10] leaves [0, 5]
        root = bisect(lambda x: x - 3, 0.0, 10.0, max_iter=1)
        assert root == Ok(2.5)

    def test_invalid_tolerance(self):
        with pytest.raises(ValueError):
            bisect(lambda x: x, -1.0, 1.0, tol=0.0)

    def test_unwrap(self):
        assert Ok(4.0).unwrap() == 4.0
        with pytest.raises(SolverError) as exc:
            Err(Failure.NO_ROOT_BRACKETED).unwrap()
        assert exc.value.reason is Failure.NO_ROOT_BRACKETED


class TestSolver:
    """Required-power solver."""

    @pytest.mark.parametrize("dist,height,angle,wind", [
        (0.0, 0.0, 45.0, 0.0),
        (0.05, 100.0, 30.0, -5.0),
        (-0.09, -20.0, 90.0, 12.0),
    ])
    def test_short_range_shortcut(self, dist, height, angle, wind):
        assert solve_required_power(dist, height, angle, wind) == Ok(1.0)
        assert solve_shot(dist, height, angle, wind).value.time_of_flight is None

    @pytest.mark.parametrize("dist", [0.1, 15.0, -20.0])
    def test_vertical_launch_is_degenerate(self, dist):
        result = solve_required_power(dist, 5.0, 90.0, 2.0)
        assert isinstance(result, Err)
        assert result.reason is Failure.DEGENERATE_ANGLE

    def test_round_trip_reference_shot(self):
        c = PhysicsConstants(G=157.9629, K=1.128)
        solved = solve_shot(15.0, 5.0, 65.0, 0.0, c)
        assert solved.ok
        shot = solved.value
        p = position_at(ORIGIN, shot.power, 65.0, 0.0, shot.time_of_flight, c)
        assert math.hypot(p.x - 15.0, p.y - 5.0) < 0.05
        assert 70.0 < shot.power < 85.0

    def test_sampled_trajectory_passes_target(self):
        power = solve_required_power(15.0, 5.0, 65.0, 0.0).value
        pts = trajectory(ORIGIN, power, 65.0, 0.0, dt=0.005)
        nearest = min(math.hypot(p.x - 15.0, p.y - 5.0) for p in pts)
        assert nearest < 0.15

    def test_power_matches_solve_shot(self):
        a = solve_required_power(22.0, -4.0, 50.0, 3.0)
        b = solve_shot(22.0, -4.0, 50.0, 3.0)
        assert a.value == b.value.power

    def test_error_function_vanishes_at_solution(self):
        shot = solve_shot(20.0, 3.0, 55.0, -2.0).value
        err = flight_time_error(20.0, 3.0, 55.0, -2.0)
        assert abs(err(shot.time_of_flight)) < 2e-3

    def test_launch_velocity_reaches_distance(self):
        t, wind = 0.8, 4.0
        vx0 = launch_velocity_for_time(25.0, t, wind)
        p = position_at(ORIGIN, vx0, 0.0, wind, t)
        assert abs(p.x - 25.0) < 1e-9

    def test_wind_changes_required_power(self):
        head = solve_required_power(25.0, 0.0, 45.0, -5.0).value
        calm = solve_required_power(25.0, 0.0, 45.0, 0.0).value
        tail = solve_required_power(25.0, 0.0, 45.0, 5.0).value
        assert tail < calm < head

    def test_mirrored_target(self):
        right = solve_required_power(15.0, 5.0, 65.0, 0.0).value
        left = solve_required_power(-15.0, 5.0, 115.0, 0.0).value
        assert left == pytest.approx(right, rel=1e-4)

    def test_unreachable_too_flat(self):
        result = solve_required_power(15.0, 50.0, 10.0, 0.0)
        assert isinstance(result, Err)
        assert result.reason is Failure.UNREACHABLE

    def test_unreachable_aiming_away(self):
        result = solve_required_power(15.0, 5.0, 120.0, 0.0)
        assert isinstance(result, Err)
        assert result.reason is Failure.UNREACHABLE

    def test_negative_power_is_unreachable(self):
        """Strong tailwind and a deep target: the algebra wants a backward shot."""
        result = solve_required_power(15.0, -100.0, 45.0, 300.0)
        assert isinstance(result, Err)
        assert result.reason is Failure.UNREACHABLE
        assert 'negative' in result.detail

    def test_alternate_constants(self):
        earth = PhysicsConstants(G=9.81, K=0.1)
        shot = solve_shot(50.0, 0.0, 45.0, 0.0, earth).value
        p = position_at(ORIGIN, shot.power, 45.0, 0.0, shot.time_of_flight, earth)
        assert math.hypot(p.x - 50.0, p.y) < 0.05
        # Drag makes it harder than the vacuum shot sqrt(g * R)
        assert shot.power > math.sqrt(9.81 * 50.0)


class TestIntegrators:
    """Euler / RK4 against the closed form."""

    def test_terminal_velocity_has_no_acceleration(self):
        wind = 6.0
        c = DEFAULT_CONSTANTS
        acc = compute_acceleration(np.array([wind / c.K, -c.G_K]), wind, c)
        assert np.allclose(acc, 0.0, atol=1e-9)

    def test_rk4_matches_closed_form(self):
        exact = simulate(ORIGIN, 76.0, 65.0, 2.0, dt=0.01)
        rk4 = simulate_rk4(ORIGIN, 76.0, 65.0, 2.0, dt=0.01)
        n = min(len(exact.time), len(rk4.time))
        assert n > 10
        assert np.allclose(exact.x[:n], rk4.x[:n], atol=1e-4)
        assert np.allclose(exact.y[:n], rk4.y[:n], atol=1e-4)

    def test_rk4_more_accurate_than_euler(self):
        comparisons = compare_with_numeric(76.0, 65.0, 0.0, dt_values=(0.05,))
        by_method = {c.method: c.max_deviation for c in comparisons}
        assert by_method['rk4'] < by_method['euler']

    def test_euler_converges(self):
        comparisons = compare_with_numeric(50.0, 45.0, 0.0, dt_values=(0.1, 0.01))
        euler = [c.max_deviation for c in comparisons if c.method == 'euler']
        assert euler[1] < euler[0]

    def test_numeric_uses_same_termination(self):
        euler = simulate_euler(ORIGIN, 50.0, 45.0, 0.0, dt=0.01)
        assert euler.method == 'euler'
        assert euler.y[-1] < DEFAULT_BOUNDS.floor_y

    def test_non_positive_dt_rejected(self):
        with pytest.raises(ValueError):
            simulate_rk4(ORIGIN, 50.0, 45.0, 0.0, dt=0.0)


class TestAiming:
    """Consumer-side aim policy."""

    def test_auto_aim_uses_solved_power(self):
        result = aim(Point(15.0, 5.0), 65.0, 0.0)
        expected = solve_required_power(15.0, 5.0, 65.0, 0.0).value
        assert result.ok
        assert result.power == expected
        assert result.solved_power == expected
        assert result.impact_point == result.trajectory[-1]

    def test_target_behind(self):
        result = aim(Point(-5.0, 0.0), 45.0, 0.0, manual_power=42.0)
        assert result.error == MSG_TARGET_BEHIND
        assert result.power == 42.0
        assert result.solved_power is None

    def test_power_limit_clamps(self):
        result = aim(Point(60.0, 0.0), 30.0, 0.0)
        assert result.solved_power > 100.0
        assert result.power == 100.0
        assert result.error == "Required power exceeds limit (100)"

    def test_manual_mode_keeps_power(self):
        result = aim(Point(15.0, 5.0), 65.0, 0.0, mode=AimMode.MANUAL, manual_power=40.0)
        assert result.ok
        assert result.power == 40.0
        assert result.solved_power is not None
        assert result.trajectory == trajectory(ORIGIN, 40.0, 65.0, 0.0)

    def test_failure_messages(self):
        vertical = aim(Point(10.0, 0.0), 90.0, 0.0)
        assert vertical.failure is Failure.DEGENERATE_ANGLE
        assert vertical.error == FAILURE_MESSAGES[Failure.DEGENERATE_ANGLE]

        flat = aim(Point(15.0, 50.0), 10.0, 0.0)
        assert flat.failure is Failure.UNREACHABLE
        assert flat.error == FAILURE_MESSAGES[Failure.UNREACHABLE]

    def test_power_difference(self):
        near = aim(Point(10.0, 0.0), 45.0, 0.0)
        far = aim(Point(20.0, 0.0), 45.0, 0.0)
        assert power_difference(far, near) > 0
        assert power_difference(far, near) == pytest.approx(far.power - near.power)


class TestValidation:

    def test_reference_targets_round_trip(self):
        results = validate_round_trip(verbose=False)
        solved = [r for r in results if r.solved]
        assert len(solved) >= 6
        assert all(r.passed for r in solved)
        assert results[-1].failure == Failure.UNREACHABLE.value


class TestVisualization:
    """Figures render and save without a display."""

    def test_trajectory_plot_saved(self, tmp_path):
        import matplotlib.pyplot as plt
        from dragshot.visualization import plot_trajectory
        path = tmp_path / "trajectory.png"
        fig = plot_trajectory(simulate(ORIGIN, 60.0, 50.0, 0.0), target=Point(15.0, 5.0),
                              save_path=str(path))
        plt.close(fig)
        assert path.exists()

    def test_power_curve_skips_unreachable(self):
        import matplotlib.pyplot as plt
        from dragshot.visualization import plot_power_curve
        fig = plot_power_curve(angles=(10.0, 45.0), distances=np.linspace(1.0, 20.0, 5),
                               height=20.0)
        assert len(fig.axes[0].lines) >= 2
        plt.close(fig)


if __name__ == "__main__":
    pytest.main([__file__, '-v'])
