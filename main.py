#!/usr/bin/env python3
"""
═══════════════════════════════════════════════════════════════════════════════
  EXTERIOR BALLISTICS CALCULATOR — Main Runner
═══════════════════════════════════════════════════════════════════════════════

  Executes the complete calculation pipeline:
    1. Atmosphere at altitude
    2. Cd vs Mach curves of the standard families
    3. Sight-in (zero angle) for a .308 168 gr load
    4. Range card with a quartering wind
    5. Drag family comparison (G1 vs G7 description of the same bullet)
    6. Wind effects, including winds that change downrange
    7. Validation against published range cards
    8. Full dashboard generation

  Plots saved to outputs/ directory.

  Usage:
    python main.py              # Run everything
    python main.py --quick      # Skip plots (faster)
    python main.py --verbose    # Log solver iterations
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import os
import sys
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from exterior_ballistics.atmosphere import Atmosphere
from exterior_ballistics.calculator import TrajectoryCalculator
from exterior_ballistics.drag_model import (
    STANDARD_TABLES, DragTable, create_ballistic_coefficient, standard_curve,
)
from exterior_ballistics.errors import ZeroNotFound
from exterior_ballistics.projectile import (
    Ammunition, Projectile, ShotParameters, Weapon, WindInfo, ZeroInfo,
)
from exterior_ballistics.units import Angular, Distance, Temperature, Velocity
from exterior_ballistics.validation import ALL_REFERENCES, validate_against_reference
from exterior_ballistics.visualization import (
    plot_trajectory, plot_family_comparison, plot_cd_vs_mach,
    plot_dashboard, plot_validation, ensure_output_dir,
)

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt


def banner():
    print("""
╔═══════════════════════════════════════════════════════════════════════╗
║                                                                       ║
║     EXTERIOR BALLISTICS CALCULATOR                                    ║
║     ─────────────────────────────────────────────────────             ║
║     Point mass: Gravity · Drag(Mach) · Atmosphere · Wind              ║
║     Drag families: G1 G2 G5 G6 G7 G8 GI GS · custom curves            ║
║                                                                       ║
╚═══════════════════════════════════════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─'*60}")
    print(f"  {title}")
    print(f"{'─'*60}")


def build_load(table: DragTable, bc: float):
    projectile = Projectile(create_ballistic_coefficient(bc, table), 168.0,
                            diameter=Distance.INCH.to_base(0.308),
                            length=Distance.INCH.to_base(1.282))
    return Ammunition(projectile, 2750.0)


def main():
    start_time = time.time()
    quick = '--quick' in sys.argv
    if '--verbose' in sys.argv:
        logging.basicConfig(level=logging.DEBUG, format='  %(name)s: %(message)s')

    banner()
    out = ensure_output_dir('outputs')
    saved = []

    def save(fig, name):
        if not quick:
            fig.savefig(f'{out}/{name}', dpi=150, bbox_inches='tight',
                        facecolor=fig.get_facecolor())
            saved.append(name)
            print(f"  ✓ Saved: {out}/{name}")
        plt.close(fig)

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 1: Atmosphere
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 1: Atmosphere (59 °F, 29.92 inHg, 78 % at the muzzle)")
    atmosphere = Atmosphere.default()
    print(f"  {'Alt (ft)':>9} {'ρ/ρ0':>8} {'a (ft/s)':>9}")
    for h in [0, 1000, 2000, 5000, 10000]:
        density_factor, mach = atmosphere.density_factor_and_mach(h)
        print(f"  {h:>9} {density_factor:>8.4f} {mach:>9.1f}")
    print(f"\n  Muzzle temperature: {Temperature.CELSIUS.from_base(atmosphere.temperature):.1f} °C")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 2: Drag Coefficient Curves
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 2: Cd vs Mach Curves")
    for table in STANDARD_TABLES:
        curve = standard_curve(table)
        print(f"  {table.value:<4s} {len(curve.table):>4d} samples  "
              f"Cd @ M0.5={curve.cd(0.5):.3f}  "
              f"Cd @ M1.0={curve.cd(1.0):.3f}  Cd @ M2.0={curve.cd(2.0):.3f}")
    save(plot_cd_vs_mach(), '01_cd_vs_mach.png')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 3: Zero
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 3: Sight-in (.308 168 gr, G7 0.223, 100 yd zero)")
    calc = TrajectoryCalculator()
    ammo_g7 = build_load(DragTable.G7, 0.223)
    weapon = Weapon(Distance.INCH.to_base(2.0), ZeroInfo(Distance.YARD.to_base(100)))
    try:
        sight_angle = calc.sight_angle(ammo_g7, weapon, atmosphere)
    except ZeroNotFound as exc:
        print(f"  ✗ {exc}")
        return 1
    print(f"  Sight angle: {sight_angle:.6f} rad = "
          f"{Angular.MOA.from_base(sight_angle):.3f} MOA = "
          f"{Angular.MIL.from_base(sight_angle):.3f} mil")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 4: Range Card
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 4: Range Card (5 mph wind from 45° right)")
    shot = ShotParameters(sight_angle, maximum_distance=Distance.YARD.to_base(1000),
                          step=Distance.YARD.to_base(100))
    wind = [WindInfo(Velocity.MPH.to_base(5), Angular.DEGREE.to_base(-45))]
    card = calc.trajectory(ammo_g7, weapon, atmosphere, shot, wind)
    print(card.format_table(adjustment_unit=Angular.MIL))
    print()
    print(card.summary())
    save(plot_trajectory(card, title='.308 168 gr G7 0.223'), '02_range_card.png')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 5: Drag Family Comparison
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 5: Same Bullet, G1 vs G7 Coefficient")
    family_results = {}
    for table, bc in [(DragTable.G1, 0.462), (DragTable.G7, 0.223)]:
        ammo = build_load(table, bc)
        angle = calc.sight_angle(ammo, weapon, atmosphere)
        r = calc.trajectory(ammo, weapon, atmosphere,
                            ShotParameters(angle, shot.maximum_distance, shot.step), wind)
        label = f"{table.value} {bc}"
        family_results[label] = r
        print(f"  {label:<10s}  1000 yd: {r[-1].velocity:>7.1f} ft/s  "
              f"drop {Distance.INCH.from_base(r[-1].drop):>7.1f} in  "
              f"ToF {r[-1].time:.3f} s")
    save(plot_family_comparison(family_results), '03_family_comparison.png')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 6: Wind Effects
    # ══════════════════════════════════════════════════════════════════════
    section("PHASE 6: Wind Effects at 1000 yd")
    mph = Velocity.MPH.to_base
    wind_cases = [
        ("No wind", []),
        ("Headwind 10 mph", [WindInfo(mph(10), Angular.DEGREE.to_base(180))]),
        ("Tailwind 10 mph", [WindInfo(mph(10), 0.0)]),
        ("Full value 10 mph", [WindInfo(mph(10), Angular.DEGREE.to_base(90))]),
        ("10 mph, calm after 500 yd", [
            WindInfo(mph(10), Angular.DEGREE.to_base(90), Distance.YARD.to_base(500)),
            WindInfo(0.0),
        ]),
    ]
    for label, winds in wind_cases:
        r = calc.trajectory(ammo_g7, weapon, atmosphere, shot, winds)
        print(f"  {label:<28s}  drop {Distance.INCH.from_base(r[-1].drop):>7.1f} in  "
              f"windage {Distance.INCH.from_base(r[-1].windage):>6.1f} in")

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 7: Validation
    # ══════════════════════════════════════════════════════════════════════
    for i, reference in enumerate(ALL_REFERENCES):
        section(f"PHASE 7{'abc'[i]}: Validation: {reference['name']}")
        val_results = validate_against_reference(reference)
        save(plot_validation(val_results, reference),
             f'04{"abc"[i]}_validation_{reference["table"].lower()}.png')

    # ══════════════════════════════════════════════════════════════════════
    #  PHASE 8: Full Dashboard
    # ══════════════════════════════════════════════════════════════════════
    if not quick:
        section("PHASE 8: Full Dashboard")
        save(plot_dashboard(card, title='.308 168 gr G7 0.223'), '05_dashboard.png')
    else:
        section("PHASE 8: Plots SKIPPED (--quick mode)")

    # ══════════════════════════════════════════════════════════════════════
    #  SUMMARY
    # ══════════════════════════════════════════════════════════════════════
    elapsed = time.time() - start_time
    section("COMPLETE")
    if saved:
        print(f"\n  Outputs saved to: {os.path.abspath(out)}/")
        for name in saved:
            print(f"    {name}")
    print(f"\n  Total runtime: {elapsed:.1f} seconds\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
