"""
Exterior Ballistics Calculator
==============================
Point-mass trajectory model for small-arms bullets:
  - Gravity
  - Mach-dependent drag from the standard reference families
    (G1, G2, G5, G6, G7, G8, GI, GS) or a custom drag curve
  - Atmosphere with humidity correction and altitude lapse
  - Wind, in segments that change downrange
  - Sight-in: barrel elevation for a given zero distance

Everything is computed in imperial base units (ft, ft/s, grains, radians);
``units`` converts to and from whatever the shooter uses.
"""

from .atmosphere import Atmosphere
from .calculator import TrajectoryCalculator, compute_sight_angle, compute_trajectory
from .drag_model import (
    BallisticCoefficient, CurveSegment, DragCurve, DragTable, DragValueType,
    calculate_by_curve, calculate_curve, create_ballistic_coefficient,
    create_ballistic_coefficient_for_custom_drag, standard_curve,
)
from .errors import BallisticsError, IntegrationDivergence, InvalidConfiguration, ZeroNotFound
from .integrator import (
    StopReason, TrajectoryIntegrator, TrajectoryPoint, TrajectoryResult,
    calculation_step, integrate,
)
from .projectile import Ammunition, Projectile, ShotParameters, Weapon, WindInfo, ZeroInfo
from .units import Angular, Distance, Energy, Pressure, Temperature, Velocity, Weight, convert
from .zero_solver import ZeroSolution, solve_zero_angle

__version__ = "1.0.0"
__all__ = [
    'Atmosphere',
    'TrajectoryCalculator', 'compute_sight_angle', 'compute_trajectory',
    'BallisticCoefficient', 'CurveSegment', 'DragCurve', 'DragTable', 'DragValueType',
    'calculate_by_curve', 'calculate_curve', 'create_ballistic_coefficient',
    'create_ballistic_coefficient_for_custom_drag', 'standard_curve',
    'BallisticsError', 'IntegrationDivergence', 'InvalidConfiguration', 'ZeroNotFound',
    'StopReason', 'TrajectoryIntegrator', 'TrajectoryPoint', 'TrajectoryResult',
    'calculation_step', 'integrate',
    'Ammunition', 'Projectile', 'ShotParameters', 'Weapon', 'WindInfo', 'ZeroInfo',
    'Angular', 'Distance', 'Energy', 'Pressure', 'Temperature', 'Velocity', 'Weight', 'convert',
    'ZeroSolution', 'solve_zero_angle',
]
