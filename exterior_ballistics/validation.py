"""
Validation Against Published Range Cards
========================================
Compares calculator output with reference range cards for a .308 168 gr
match bullet fired at 2750 ft/s with a 2 in sight height, 100 yd zero and
a 5 mph wind from 45° right, under the default atmosphere (59 °F,
29.92 inHg, 78 % humidity):

  - G1 BC 0.223, sight angle 0.001228 rad, holds in MOA
  - G7 BC 0.223, sight angle 4.221 MOA, holds in mils

Rows are checked with the usual range-card tolerances: ±5 ft/s,
±0.005 Mach, ±5 ft·lb, ±0.06 s, ±1 lb game weight and a drop/windage
tolerance that widens with distance.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from .atmosphere import Atmosphere
from .calculator import TrajectoryCalculator
from .drag_model import create_ballistic_coefficient
from .integrator import TrajectoryPoint
from .projectile import Ammunition, Projectile, ShotParameters, Weapon, WindInfo, ZeroInfo
from .units import Angular, Distance, Velocity


# ══════════════════════════════════════════════════════════════════════════
#  Reference data
# ══════════════════════════════════════════════════════════════════════════

# Card rows:
# (range_yd, vel_fps, mach, energy_ftlb, drop_in, hold, windage_in, wind_hold, tof_s, ogw_lb)
# None skips a column.
REFERENCE_G1 = {
    'name': '.308 168 gr, G1 0.223',
    'table': 'G1',
    'bc': 0.223,
    'weight_gr': 168.0,
    'muzzle_velocity_fps': 2750.0,
    'sight_height_in': 2.0,
    'zero_yd': 100.0,
    'sight_angle': (0.001228, Angular.RADIAN),
    'wind': (5.0, -45.0),               # mph, degrees
    'adjustment_unit': Angular.MOA,
    'card': [
        (0,    2750.0, 2.463, 2820.6,   -2.0,    0.0,   0.0,  0.0, 0.0,   880),
        (100,  2351.2, 2.106, 2061.0,    0.0,    0.0,  -0.6, -0.6, 0.118, 550),
        (500,  1169.1, 1.047,  509.8,  -87.9,  -16.8, -19.5, -3.7, 0.857,  67),
        (1000,  776.4, 0.695,  224.9, -823.9,  -78.7, -87.5, -8.4, 2.495,  20),
    ],
}

REFERENCE_G7 = {
    'name': '.308 168 gr, G7 0.223',
    'table': 'G7',
    'bc': 0.223,
    'weight_gr': 168.0,
    'muzzle_velocity_fps': 2750.0,
    'sight_height_in': 2.0,
    'zero_yd': 100.0,
    'sight_angle': (4.221, Angular.MOA),
    'wind': (5.0, -45.0),
    'adjustment_unit': Angular.MIL,
    # published windage includes spin drift, which is not modelled
    'card': [
        (0,    2750.0, 2.463, 2820.6,   -2.0,   0.0,  None, None, 0.0,   880),
        (100,  2544.3, 2.279, 2416.0,    0.0,   0.0,  None, None, 0.113, 698),
        (500,  1810.7, 1.622, 1226.0,  -56.3,  -3.18, None, None, 0.673, 252),
        (1000, 1081.3, 0.968,  442.0, -401.6, -11.32, None, None, 1.748,  55),
    ],
}

ALL_REFERENCES = (REFERENCE_G1, REFERENCE_G7)


@dataclass
class ValidationResult:
    """Result of one range-card row comparison."""
    range_yd: float
    ref_velocity: float
    sim_velocity: float
    ref_drop: float         # in
    sim_drop: float
    ref_windage: Optional[float]
    sim_windage: float
    ref_tof: float
    sim_tof: float
    failures: List[str]

    @property
    def passed(self) -> bool:
        return not self.failures


def _offset_tolerance(range_yd: float, widths=(0.5, 1.0, 4.0)) -> float:
    if range_yd >= 800:
        return widths[2]
    if range_yd >= 500:
        return widths[1]
    return widths[0]


def _compare_row(point: TrajectoryPoint, row: tuple,
                 adjustment_unit: Angular) -> List[str]:
    range_yd, vel, mach, energy, drop, hold, windage, wind_hold, tof, ogw = row
    checks = [
        ('velocity', vel, Velocity.FPS.from_base(point.velocity), 5.0),
        ('mach', mach, point.mach, 0.005),
        ('energy', energy, point.energy, 5.0),
        ('time', tof, point.time, 0.06),
        ('ogw', ogw, point.optimal_game_weight, 1.0),
        ('drop', drop, Distance.INCH.from_base(point.drop), _offset_tolerance(range_yd)),
        ('windage', windage, Distance.INCH.from_base(point.windage),
         _offset_tolerance(range_yd, (0.5, 1.0, 1.5))),
    ]
    if range_yd > 1:
        checks.append(('hold', hold, point.drop_adjustment_in(adjustment_unit), 0.5))
        checks.append(('wind hold', wind_hold, point.windage_adjustment_in(adjustment_unit), 0.5))

    return [f"{name} {actual:.3f} != {expected:.3f} ±{tolerance}"
            for name, expected, actual, tolerance in checks
            if expected is not None and abs(actual - expected) > tolerance]


def reference_setup(reference: dict):
    """Build (ammunition, weapon, atmosphere, shot, winds) for a reference card."""
    bc = create_ballistic_coefficient(reference['bc'], reference['table'])
    projectile = Projectile(bc, reference['weight_gr'])
    ammunition = Ammunition(projectile, reference['muzzle_velocity_fps'])
    weapon = Weapon(Distance.INCH.to_base(reference['sight_height_in']),
                    ZeroInfo(Distance.YARD.to_base(reference['zero_yd'])))
    angle, angle_unit = reference['sight_angle']
    last_range = max(row[0] for row in reference['card'])
    shot = ShotParameters(angle_unit.to_base(angle),
                          maximum_distance=Distance.YARD.to_base(last_range),
                          step=Distance.YARD.to_base(100))
    wind_mph, wind_deg = reference['wind']
    winds = [WindInfo(Velocity.MPH.to_base(wind_mph), Angular.DEGREE.to_base(wind_deg))]
    return ammunition, weapon, Atmosphere.default(), shot, winds


def validate_against_reference(reference: dict, maximum_step_size: float = 1.0,
                               verbose: bool = True) -> List[ValidationResult]:
    """
    Compute the reference range card and compare it row by row with the
    published values.

    Returns list of ValidationResult, one per card row.
    """
    ammunition, weapon, atmosphere, shot, winds = reference_setup(reference)
    calc = TrajectoryCalculator(maximum_step_size)
    trajectory = calc.trajectory(ammunition, weapon, atmosphere, shot, winds)
    adjustment_unit = reference['adjustment_unit']

    if verbose:
        print(f"\n{'='*75}")
        print(f"  VALIDATION: {reference['name']}")
        print(f"  Muzzle velocity: {reference['muzzle_velocity_fps']} ft/s | "
              f"Zero: {reference['zero_yd']:.0f} yd | Holds in {adjustment_unit.symbol}")
        print(f"{'='*75}")
        print(f"{'Range':>6} {'Ref V':>8} {'Sim V':>8} {'Ref Drop':>9} {'Sim Drop':>9} "
              f"{'Ref W':>7} {'Sim W':>7} {'Ref ToF':>8} {'Sim ToF':>8}  Status")
        print("-" * 75)

    results = []
    for row in reference['card']:
        range_yd = row[0]
        point = trajectory[int(round(range_yd / 100))]
        vr = ValidationResult(
            range_yd=range_yd,
            ref_velocity=row[1],
            sim_velocity=Velocity.FPS.from_base(point.velocity),
            ref_drop=row[4],
            sim_drop=Distance.INCH.from_base(point.drop),
            ref_windage=row[6],
            sim_windage=Distance.INCH.from_base(point.windage),
            ref_tof=row[8],
            sim_tof=point.time,
            failures=_compare_row(point, row, adjustment_unit),
        )
        results.append(vr)

        if verbose:
            ref_w = f"{vr.ref_windage:>7.2f}" if vr.ref_windage is not None else f"{'-':>7}"
            status = "✓" if vr.passed else "✗ " + "; ".join(vr.failures)
            print(f"{range_yd:>6.0f} {vr.ref_velocity:>8.1f} {vr.sim_velocity:>8.1f} "
                  f"{vr.ref_drop:>9.1f} {vr.sim_drop:>9.1f} "
                  f"{ref_w} {vr.sim_windage:>7.2f} "
                  f"{vr.ref_tof:>8.3f} {vr.sim_tof:>8.3f}  {status}")

    if verbose:
        vel_err = np.mean([abs(r.sim_velocity - r.ref_velocity) for r in results])
        drop_err = np.mean([abs(r.sim_drop - r.ref_drop) for r in results])
        print("-" * 75)
        print(f"  Mean absolute errors: velocity {vel_err:.1f} ft/s | drop {drop_err:.2f} in")
        status = "✓ PASS" if all(r.passed for r in results) else "✗ OUT OF TOLERANCE"
        print(f"  Status: {status}")
        print(f"{'='*75}\n")

    return results


def run_all_validations(verbose: bool = True) -> Dict[str, List[ValidationResult]]:
    """Run validation against all available reference cards."""
    all_results = {}
    for ref_data in ALL_REFERENCES:
        results = validate_against_reference(ref_data, verbose=verbose)
        all_results[ref_data['name']] = results
    return all_results


if __name__ == "__main__":
    run_all_validations(verbose=True)
