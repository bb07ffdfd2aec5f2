"""
Visualization Engine
====================
Plots for range-card analysis:
  1. Trajectory (drop and windage vs range)
  2. Drag family comparison (same bullet, different reference curves)
  3. Cd vs Mach curves for the standard families
  4. Dashboard with key metrics
  5. Validation comparison plots
"""

import os
from typing import Dict, List

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import matplotlib.gridspec as gridspec

from .drag_model import STANDARD_TABLES, standard_curve
from .integrator import TrajectoryResult
from .units import Distance, Velocity


# ── Style Configuration ───────────────────────────────────────────────────
STYLE = {
    'bg_color': '#0a0a0a',
    'text_color': '#e0e0e0',
    'grid_color': '#333333',
    'accent_colors': ['#00d4ff', '#ff6b35', '#00e676', '#ffeb3b',
                      '#e040fb', '#ff5252', '#80cbc4', '#bcaaa4'],
    'font_family': 'monospace',
}


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


def _legend(ax, **kwargs):
    ax.legend(facecolor='#1a1a1a', edgecolor='#444',
              labelcolor=STYLE['text_color'], **kwargs)


def _save(fig, save_path):
    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])


def ensure_output_dir(path: str = 'outputs'):
    os.makedirs(path, exist_ok=True)
    return path


# ══════════════════════════════════════════════════════════════════════════
#  1. Single Trajectory Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_trajectory(result: TrajectoryResult, title: str = 'Trajectory',
                    save_path: str = None, show: bool = False) -> plt.Figure:
    """Drop and windage (inches) vs range (yards)."""
    fig, axes = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
    _apply_dark_style(fig, axes)

    range_yd = Distance.YARD.from_base(result.distance)
    drop_in = Distance.INCH.from_base(result.drop)
    windage_in = Distance.INCH.from_base(result.windage)

    ax = axes[0]
    ax.plot(range_yd, drop_in, 'o-', color=STYLE['accent_colors'][0],
            linewidth=2.5, markersize=5, label='Drop')
    ax.axhline(y=0, color='#888', linewidth=0.8, linestyle='--', label='Line of sight')
    ax.set_ylabel('Drop (in)', fontsize=12)
    ax.set_title(f'{title} (v₀={result[0].velocity:.0f} ft/s)',
                 fontsize=13, fontweight='bold')
    _legend(ax, loc='lower left', fontsize=10)

    ax = axes[1]
    ax.plot(range_yd, windage_in, 's-', color=STYLE['accent_colors'][1],
            linewidth=2.5, markersize=5, label='Windage')
    ax.axhline(y=0, color='#888', linewidth=0.8, linestyle='--')
    ax.set_xlabel('Range (yd)', fontsize=12)
    ax.set_ylabel('Windage (in)', fontsize=12)
    _legend(ax, loc='lower left', fontsize=10)
    ax.set_xlim(left=0)

    _save(fig, save_path)
    if show:
        plt.show()
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  2. Drag Family Comparison
# ══════════════════════════════════════════════════════════════════════════

def plot_family_comparison(results: Dict[str, TrajectoryResult],
                           save_path: str = None) -> plt.Figure:
    """Side-by-side range cards for the same load against different curves."""
    fig, axes = plt.subplots(2, 2, figsize=(16, 10))
    _apply_dark_style(fig, axes)
    colors = STYLE['accent_colors']

    panels = [
        (axes[0, 0], 'drop', Distance.INCH, 'Drop (in)', 'Drop'),
        (axes[0, 1], 'velocity', Velocity.FPS, 'Velocity (ft/s)', 'Remaining Velocity'),
        (axes[1, 0], 'windage', Distance.INCH, 'Windage (in)', 'Wind Drift'),
    ]
    for ax, column, unit, ylabel, title in panels:
        for i, (label, res) in enumerate(results.items()):
            ax.plot(Distance.YARD.from_base(res.distance),
                    unit.from_base(getattr(res, column)),
                    color=colors[i % len(colors)], linewidth=2, label=label)
        ax.set_xlabel('Range (yd)')
        ax.set_ylabel(ylabel)
        ax.set_title(title, fontweight='bold')
    _legend(axes[0, 0], fontsize=9)

    ax = axes[1, 1]
    for i, (label, res) in enumerate(results.items()):
        ax.plot(Distance.YARD.from_base(res.distance), res.mach,
                color=colors[i % len(colors)], linewidth=2, label=label)
    ax.axhspan(0.8, 1.2, alpha=0.08, color='#ff5252')
    ax.set_xlabel('Range (yd)')
    ax.set_ylabel('Mach')
    ax.set_title('Mach Number', fontweight='bold')

    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  3. Cd vs Mach Curves
# ══════════════════════════════════════════════════════════════════════════

def plot_cd_vs_mach(save_path: str = None) -> plt.Figure:
    """Plot the fitted Cd vs Mach curve of every standard family."""
    fig, ax = plt.subplots(figsize=(11, 6))
    _apply_dark_style(fig, ax)

    mach_range = np.linspace(0, 4.0, 500)
    for i, table in enumerate(STANDARD_TABLES):
        curve = standard_curve(table)
        ax.plot(mach_range, curve.cd_array(mach_range),
                color=STYLE['accent_colors'][i % len(STYLE['accent_colors'])],
                linestyle='-' if i < 4 else '--', linewidth=2,
                label=table.value)

    # Annotate transonic region
    ax.axvspan(0.8, 1.2, alpha=0.08, color='#ff5252')
    ax.text(1.0, 0.05, 'Transonic\nRegion', ha='center',
            color='#ff5252', fontsize=10, alpha=0.7)

    ax.set_xlabel('Mach Number', fontsize=12)
    ax.set_ylabel('Drag Coefficient (Cd)', fontsize=12)
    ax.set_title('Drag Coefficient vs Mach Number: Standard Families',
                 fontsize=14, fontweight='bold')
    _legend(ax, fontsize=11, ncol=2)
    ax.set_xlim(0, 4.0)
    ax.set_ylim(0, 1.0)

    _save(fig, save_path)
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  4. Dashboard
# ══════════════════════════════════════════════════════════════════════════

def plot_dashboard(result: TrajectoryResult, title: str = 'Range Card',
                   save_path: str = None) -> plt.Figure:
    """Velocity, energy, time of flight and a metrics panel on one figure."""
    fig = plt.figure(figsize=(16, 10))
    fig.patch.set_facecolor(STYLE['bg_color'])
    gs = gridspec.GridSpec(2, 3, figure=fig, hspace=0.35, wspace=0.3)

    range_yd = Distance.YARD.from_base(result.distance)

    ax_drop = fig.add_subplot(gs[0, :2])
    ax_vel = fig.add_subplot(gs[1, 0])
    ax_energy = fig.add_subplot(gs[1, 1])
    ax_time = fig.add_subplot(gs[1, 2])
    ax_info = fig.add_subplot(gs[0, 2])
    _apply_dark_style(fig, np.array([ax_drop, ax_vel, ax_energy, ax_time, ax_info]))

    ax_drop.plot(range_yd, Distance.INCH.from_base(result.drop),
                 color=STYLE['accent_colors'][0], linewidth=2.5)
    ax_drop.axhline(y=0, color='#888', linewidth=0.8, linestyle='--')
    ax_drop.set_xlabel('Range (yd)')
    ax_drop.set_ylabel('Drop (in)')
    ax_drop.set_title(title, fontweight='bold')

    ax_vel.plot(range_yd, result.velocity, color=STYLE['accent_colors'][1], linewidth=2)
    ax_vel.set_xlabel('Range (yd)')
    ax_vel.set_ylabel('Velocity (ft/s)')
    ax_vel.set_title('Velocity', fontweight='bold')

    ax_energy.plot(range_yd, result.energy, color=STYLE['accent_colors'][2], linewidth=2)
    ax_energy.set_xlabel('Range (yd)')
    ax_energy.set_ylabel('Energy (ft·lb)')
    ax_energy.set_title('Energy', fontweight='bold')

    ax_time.plot(range_yd, result.time, color=STYLE['accent_colors'][3], linewidth=2)
    ax_time.set_xlabel('Range (yd)')
    ax_time.set_ylabel('Time (s)')
    ax_time.set_title('Time of Flight', fontweight='bold')

    last = result[-1]
    transonic = np.nonzero(result.mach < 1.2)[0]
    transonic_yd = f"{range_yd[transonic[0]]:.0f} yd" if len(transonic) else "beyond card"
    info = (
        f"Muzzle velocity : {result[0].velocity:8.1f} ft/s\n"
        f"Muzzle energy   : {result[0].energy:8.1f} ft·lb\n"
        f"Last range      : {Distance.YARD.from_base(last.distance):8.0f} yd\n"
        f"Velocity        : {last.velocity:8.1f} ft/s\n"
        f"Energy          : {last.energy:8.1f} ft·lb\n"
        f"Drop            : {Distance.INCH.from_base(last.drop):8.1f} in\n"
        f"Windage         : {Distance.INCH.from_base(last.windage):8.1f} in\n"
        f"Flight time     : {last.time:8.3f} s\n"
        f"Mach < 1.2 at   : {transonic_yd}\n"
        f"Stop reason     : {result.stop_reason.value}"
    )
    ax_info.axis('off')
    ax_info.text(0.02, 0.95, info, transform=ax_info.transAxes, va='top',
                 family=STYLE['font_family'], fontsize=10, color=STYLE['text_color'])

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches='tight',
                    facecolor=STYLE['bg_color'])
    return fig


# ══════════════════════════════════════════════════════════════════════════
#  5. Validation Plot
# ══════════════════════════════════════════════════════════════════════════

def plot_validation(validation_results: List, reference_data: dict,
                    save_path: str = None) -> plt.Figure:
    """Plot simulated vs reference velocity and drop for validation."""
    fig, axes = plt.subplots(1, 2, figsize=(14, 6))
    _apply_dark_style(fig, axes)

    ranges = [v.range_yd for v in validation_results]

    ax = axes[0]
    ax.plot(ranges, [v.ref_velocity for v in validation_results], 'o-', color='#ffeb3b',
            linewidth=2, markersize=8, label='Reference')
    ax.plot(ranges, [v.sim_velocity for v in validation_results], 's--', color='#00d4ff',
            linewidth=2, markersize=8, label='Calculated')
    ax.set_xlabel('Range (yd)')
    ax.set_ylabel('Velocity (ft/s)')
    ax.set_title(f'Velocity: {reference_data["name"]}', fontweight='bold')
    _legend(ax, fontsize=10)

    ax = axes[1]
    errors = [v.sim_drop - v.ref_drop for v in validation_results]
    colors = ['#00e676' if v.passed else '#ff5252' for v in validation_results]
    ax.bar(ranges, errors, color=colors, alpha=0.8, width=40)
    ax.axhline(y=0, color='#888', linewidth=0.5)
    ax.set_xlabel('Range (yd)')
    ax.set_ylabel('Drop Error (in)')
    ax.set_title('Drop Error', fontweight='bold')

    _save(fig, save_path)
    return fig
