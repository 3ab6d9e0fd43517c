"""
Visualization Engine
====================
Plots for shot analysis:
  1. Trajectory (height vs distance) with launch, apex, impact and target
  2. Required power vs target distance, one curve per launch angle
  3. Wind effect on a fixed shot
  4. Closed form vs Euler / RK4 deviation
  5. Round-trip validation misses
  6. Animated trajectory (saved as GIF)
"""

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
from typing import Optional, Sequence
import os

from .constants import PhysicsConstants, DEFAULT_CONSTANTS
from .kinematics import Point, ORIGIN, TrajectoryResult, simulate
from .solver import solve_required_power


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'accent_colors': ['#a855f7', '#ef4444', '#22c55e', '#3b82f6',
                      '#f97316', '#06b6d4'],
    'font_family': 'monospace',
}

LEGEND_KW = dict(facecolor='#1a1a1a', edgecolor='#444')


def _apply_dark_style(fig, axes):
    """Apply consistent dark theme to figure and axes."""
    fig.patch.set_facecolor(STYLE['bg_color'])
    if not isinstance(axes, np.ndarray):
        axes = [axes]
    else:
        axes = axes.flatten()

    for ax in axes:
        ax.set_facecolor(STYLE['bg_color'])
        ax.tick_params(colors=STYLE['text_color'])
        ax.xaxis.label.set_color(STYLE['text_color'])
        ax.yaxis.label.set_color(STYLE['text_color'])
        ax.title.set_color(STYLE['text_color'])
        ax.grid(True, color=STYLE['grid_color'], alpha=0.4, linewidth=0.5)
        for spine in ax.spines.values():
            spine.set_color(STYLE['grid_color'])


def _finish(fig, save_path):
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])
    return fig


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
#  1. Single Trajectory Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_trajectory(result: TrajectoryResult, target: Optional[Point] = None,
                    save_path: str = None, show: bool = False) -> plt.Figure:
    """Height vs distance for a single trajectory."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    ax.plot(result.x, result.y, color=STYLE['accent_colors'][0], linewidth=2.5,
            label=f'power={result.power:.1f}, θ={result.angle:.0f}°, wind={result.wind:+.1f}')

    ax.plot(result.start.x, result.start.y, 'o', color='#00e676', markersize=10,
            label='Launch', zorder=5)
    apex = result.apex
    ax.plot(apex.x, apex.y, '^', color='#ffeb3b', markersize=10, label='Apex', zorder=5)
    impact = result.impact_point
    ax.plot(impact.x, impact.y, 'x', color='#ff5252', markersize=12,
            markeredgewidth=3, label='Impact', zorder=5)
    if target is not None:
        ax.plot(target.x, target.y, 'o', markerfacecolor='none', markeredgecolor='#ffffff',
                markersize=16, markeredgewidth=2, label='Target', zorder=6)

    ax.axhline(y=result.start.y, color='#555', linestyle='--', alpha=0.5)
    ax.set_xlabel('Distance', fontsize=12)
    ax.set_ylabel('Height', fontsize=12)
    ax.set_title(f'Trajectory ({result.method.replace("_", " ")}, '
                 f'{len(result.time)} samples, dt={result.dt:g})',
                 fontsize=13, fontweight='bold')
    ax.legend(loc='upper right', fontsize=10, labelcolor=STYLE['text_color'], **LEGEND_KW)

    _finish(fig, save_path)
    if show:
        plt.show()
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  2. Required Power vs Distance
# ══════════════════════════════════════════════════════════════════════════

def plot_power_curve(angles: Sequence[float] = (30, 45, 60, 75),
                     distances: Optional[np.ndarray] = None,
                     height: float = 0.0, wind: float = 0.0,
                     max_power: Optional[float] = 100.0,
                     constants: PhysicsConstants = DEFAULT_CONSTANTS,
                     save_path: str = None) -> plt.Figure:
    """Required power to hit (d, height) for each angle. Gaps are unreachable."""
    if distances is None:
        distances = np.linspace(1.0, 36.0, 141)

    fig, ax = plt.subplots(figsize=(11, 6))
    _apply_dark_style(fig, ax)

    for i, angle in enumerate(angles):
        powers = []
        for d in distances:
            res = solve_required_power(float(d), height, angle, wind, constants)
            powers.append(res.value if res.ok else np.nan)
        color = STYLE['accent_colors'][i % len(STYLE['accent_colors'])]
        ax.plot(distances, powers, color=color, linewidth=2.2, label=f'θ = {angle:g}°')

    if max_power is not None:
        ax.axhline(y=max_power, color='#ff5252', linestyle='--', alpha=0.6,
                   label=f'Power limit ({max_power:g})')

    ax.set_xlabel('Target distance')
    ax.set_ylabel('Required power')
    ax.set_title(f'Required Power vs Distance (height={height:g}, wind={wind:+g})',
                 fontweight='bold')
    ax.legend(fontsize=10, labelcolor=STYLE['text_color'], **LEGEND_KW)
    ax.set_ylim(bottom=0)

    return _finish(fig, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  3. Wind Effects
# ══════════════════════════════════════════════════════════════════════════

def plot_wind_effects(power: float, angle: float,
                      winds: Sequence[float] = (-10.0, -5.0, 0.0, 5.0, 10.0),
                      start: Point = ORIGIN,
                      constants: PhysicsConstants = DEFAULT_CONSTANTS,
                      save_path: str = None) -> plt.Figure:
    """Same power and angle under different winds."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    for i, wind in enumerate(winds):
        r = simulate(start, power, angle, wind, constants=constants)
        color = STYLE['accent_colors'][i % len(STYLE['accent_colors'])]
        ax.plot(r.x, r.y, color=color, linewidth=2, label=f'wind {wind:+g}')

    ax.axhline(y=start.y, color='#555', linestyle='--', alpha=0.5)
    ax.set_xlabel('Distance')
    ax.set_ylabel('Height')
    ax.set_title(f'Effect of Wind (power={power:.1f}, θ={angle:g}°)', fontweight='bold')
    ax.legend(fontsize=10, labelcolor=STYLE['text_color'], **LEGEND_KW)

    return _finish(fig, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  4. Closed Form vs Numerical Integration
# ══════════════════════════════════════════════════════════════════════════

def plot_numeric_comparison(exact: TrajectoryResult, euler: TrajectoryResult,
                            rk4: TrajectoryResult, save_path: str = None) -> plt.Figure:
    """Overlay of the three methods and pointwise deviation from the closed form."""
    fig, axes = plt.subplots(1, 2, figsize=(15, 6))
    _apply_dark_style(fig, axes)

    ax = axes[0]
    ax.plot(exact.x, exact.y, color='#00e676', linewidth=2.5, label='Closed form')
    ax.plot(euler.x, euler.y, '--', color='#ff6b35', linewidth=2,
            label=f'Euler (dt={euler.dt:g})')
    ax.plot(rk4.x, rk4.y, ':', color='#00d4ff', linewidth=2.5,
            label=f'RK4 (dt={rk4.dt:g})')
    ax.set_xlabel('Distance')
    ax.set_ylabel('Height')
    ax.set_title('Trajectory Comparison', fontweight='bold')
    ax.legend(fontsize=10, labelcolor=STYLE['text_color'], **LEGEND_KW)

    ax = axes[1]
    for res, color, label in ((euler, '#ff6b35', 'Euler'), (rk4, '#00d4ff', 'RK4')):
        n = min(len(exact.time), len(res.time))
        dev = np.hypot(exact.x[:n] - res.x[:n], exact.y[:n] - res.y[:n])
        ax.semilogy(exact.time[:n], np.maximum(dev, 1e-16), color=color,
                    linewidth=2, label=label)
    ax.set_xlabel('Time')
    ax.set_ylabel('Deviation from closed form')
    ax.set_title('Integration Error', fontweight='bold')
    ax.legend(fontsize=10, labelcolor=STYLE['text_color'], **LEGEND_KW)

    return _finish(fig, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  5. Round-Trip Validation
# ══════════════════════════════════════════════════════════════════════════

def plot_round_trip(results, tolerance: float = 0.05,
                    save_path: str = None) -> plt.Figure:
    """Miss distance at the solved time of flight, per reference target."""
    fig, ax = plt.subplots(figsize=(12, 6))
    _apply_dark_style(fig, ax)

    labels = [f'({r.dist:g},{r.height:g})\n{r.angle:g}° w{r.wind:+g}' for r in results]
    misses = [r.miss if r.miss is not None else 0.0 for r in results]
    colors = ['#555555' if not r.solved else ('#00e676' if r.passed else '#ff5252')
              for r in results]

    positions = np.arange(len(results))
    ax.bar(positions, np.maximum(misses, 1e-12), color=colors, alpha=0.85, edgecolor='#555')
    ax.set_yscale('log')
    ax.axhline(y=tolerance, color='#ffeb3b', linestyle='--', alpha=0.7,
               label=f'Tolerance ({tolerance:g})')
    for pos, r in zip(positions, results):
        if not r.solved:
            ax.text(pos, 1e-11, r.failure, rotation=90, ha='center', va='bottom',
                    color=STYLE['text_color'], fontsize=9)

    ax.set_xticks(positions)
    ax.set_xticklabels(labels, fontsize=8)
    ax.set_ylabel('Miss distance at t*')
    ax.set_title('Round-Trip Validation', fontweight='bold')
    ax.legend(fontsize=10, labelcolor=STYLE['text_color'], **LEGEND_KW)

    return _finish(fig, save_path)


# ══════════════════════════════════════════════════════════════════════════
#  6. Animated Trajectory (GIF)
# ══════════════════════════════════════════════════════════════════════════

def create_trajectory_animation(result: TrajectoryResult,
                                save_path: str = 'outputs/trajectory_anim.gif',
                                target: Optional[Point] = None,
                                frames: int = 100) -> str:
    """Create animated GIF of trajectory with trail."""
    from matplotlib.animation import FuncAnimation, PillowWriter

    fig, ax = plt.subplots(figsize=(12, 6))
    fig.patch.set_facecolor(STYLE['bg_color'])
    ax.set_facecolor(STYLE['bg_color'])

    x, y = result.x, result.y
    pad_x = max(1.0, 0.05 * (x.max() - x.min()))
    pad_y = max(1.0, 0.1 * (y.max() - y.min()))
    ax.set_xlim(x.min() - pad_x, x.max() + pad_x)
    ax.set_ylim(y.min() - pad_y, y.max() + pad_y)
    ax.set_xlabel('Distance', color=STYLE['text_color'], fontsize=12)
    ax.set_ylabel('Height', color=STYLE['text_color'], fontsize=12)
    ax.set_title(f'Trajectory Animation (power={result.power:.1f}, θ={result.angle:g}°)',
                 color=STYLE['text_color'], fontsize=14, fontweight='bold')
    ax.tick_params(colors=STYLE['text_color'])
    ax.grid(True, color=STYLE['grid_color'], alpha=0.3)
    for spine in ax.spines.values():
        spine.set_color(STYLE['grid_color'])
    if target is not None:
        ax.plot(target.x, target.y, 'o', markerfacecolor='none',
                markeredgecolor='#ffffff', markersize=16, markeredgewidth=2)

    trail_line, = ax.plot([], [], color='#a855f7', linewidth=1.5, alpha=0.6)
    point, = ax.plot([], [], 'o', color='#a855f7', markersize=8)
    time_text = ax.text(0.02, 0.95, '', transform=ax.transAxes,
                        color=STYLE['text_color'], fontsize=11, fontfamily='monospace')

    # Subsample for animation
    total_pts = len(x)
    step = max(1, total_pts // frames)
    indices = list(range(0, total_pts, step))
    if indices[-1] != total_pts - 1:
        indices.append(total_pts - 1)

    speed = result.speed

    def animate(frame_idx):
        idx = indices[min(frame_idx, len(indices) - 1)]
        trail_line.set_data(x[:idx+1], y[:idx+1])
        point.set_data([x[idx]], [y[idx]])
        time_text.set_text(
            f't={result.time[idx]:.2f} | v={speed[idx]:.1f} | '
            f'x={x[idx]:.1f} | y={y[idx]:.1f}'
        )
        return trail_line, point, time_text

    anim = FuncAnimation(fig, animate, frames=len(indices), interval=50, blit=True)
    anim.save(save_path, writer=PillowWriter(fps=20),
              savefig_kwargs={'facecolor': STYLE['bg_color']})
    plt.close(fig)
    return save_path
