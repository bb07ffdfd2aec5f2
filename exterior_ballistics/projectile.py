"""
Shot Configuration
==================
Immutable records describing what is fired, from what, and how:

  - Projectile     : ballistic coefficient, weight, optional dimensions
  - Ammunition     : projectile + muzzle velocity
  - ZeroInfo       : zero distance (optionally with a different load/weather)
  - Weapon         : sight height above bore + zero
  - WindInfo       : one wind segment, valid up to a downrange distance
  - ShotParameters : sight angle and the range card to compute

All values are in the package base units (see ``units``): feet, ft/s,
grains, radians. Bad values are rejected here, not during integration.
"""

import math
from dataclasses import dataclass
from typing import Optional

from .atmosphere import Atmosphere
from .drag_model import BallisticCoefficient, DragValueType
from .errors import InvalidConfiguration

GRAINS_PER_POUND = 7000.0


def _require_positive(name: str, value: float):
    if not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        raise InvalidConfiguration(f"{name} must be a positive number, got {value!r}")


def _require_finite(name: str, value: float):
    if not isinstance(value, (int, float)) or not math.isfinite(value):
        raise InvalidConfiguration(f"{name} must be a finite number, got {value!r}")


@dataclass(frozen=True)
class Projectile:
    """
    A bullet: its drag description plus weight and (optionally) size.

    A form-factor coefficient needs the diameter, since the effective BC
    is the sectional density divided by the form factor.
    """
    ballistic_coefficient: BallisticCoefficient
    weight: float                        # grains
    diameter: Optional[float] = None     # feet
    length: Optional[float] = None       # feet

    def __post_init__(self):
        if not isinstance(self.ballistic_coefficient, BallisticCoefficient):
            raise InvalidConfiguration(
                f"Expected a BallisticCoefficient, got {self.ballistic_coefficient!r}"
            )
        _require_positive('Bullet weight', self.weight)
        if self.diameter is not None:
            _require_positive('Bullet diameter', self.diameter)
        if self.length is not None:
            _require_positive('Bullet length', self.length)
        if (self.ballistic_coefficient.value_type is DragValueType.FORM_FACTOR
                and self.diameter is None):
            raise InvalidConfiguration(
                "A form-factor coefficient requires the bullet diameter"
            )

    @property
    def sectional_density(self) -> Optional[float]:
        """Weight over diameter squared, lb/in²."""
        if self.diameter is None:
            return None
        diameter_in = self.diameter * 12.0
        return self.weight / GRAINS_PER_POUND / (diameter_in * diameter_in)

    @property
    def resolved_coefficient(self) -> BallisticCoefficient:
        """The coefficient expressed as a BC, ready for ``drag``."""
        sd = self.sectional_density
        return self.ballistic_coefficient.for_sectional_density(sd) if sd else self.ballistic_coefficient

    @property
    def effective_ballistic_coefficient(self) -> float:
        return self.resolved_coefficient.value


@dataclass(frozen=True)
class Ammunition:
    projectile: Projectile
    muzzle_velocity: float               # ft/s

    def __post_init__(self):
        if not isinstance(self.projectile, Projectile):
            raise InvalidConfiguration(f"Expected a Projectile, got {self.projectile!r}")
        _require_positive('Muzzle velocity', self.muzzle_velocity)


@dataclass(frozen=True)
class ZeroInfo:
    """
    Distance at which point of aim and point of impact coincide.

    The rifle may have been zeroed with another load or in other weather;
    when given, those are used for the zero instead of the shot's own.
    """
    distance: float                      # feet
    ammunition: Optional[Ammunition] = None
    atmosphere: Optional[Atmosphere] = None

    def __post_init__(self):
        _require_positive('Zero distance', self.distance)


@dataclass(frozen=True)
class Weapon:
    sight_height: float                  # feet above bore axis
    zero: ZeroInfo

    def __post_init__(self):
        _require_finite('Sight height', self.sight_height)
        if not isinstance(self.zero, ZeroInfo):
            raise InvalidConfiguration(f"Expected a ZeroInfo, got {self.zero!r}")


@dataclass(frozen=True)
class WindInfo:
    """
    Wind blowing at *velocity* from *direction*, up to *until_distance*.

    Direction 0 is a tailwind, positive angles come from the left.
    The last wind of a sequence extends to the end of the trajectory.
    """
    velocity: float                      # ft/s
    direction: float = 0.0               # radians
    until_distance: float = 0.0          # feet

    def __post_init__(self):
        _require_finite('Wind velocity', self.velocity)
        _require_finite('Wind direction', self.direction)
        _require_finite('Wind range', self.until_distance)


@dataclass(frozen=True)
class ShotParameters:
    """
    The range card to compute.

    sight_angle is the barrel elevation relative to the line of sight
    (usually from ``TrajectoryCalculator.sight_angle``); shot_angle tilts the
    line of sight for up/downhill shots and cant_angle rolls the rifle.
    """
    sight_angle: float                   # radians
    maximum_distance: float              # feet
    step: float                          # feet
    shot_angle: float = 0.0              # radians
    cant_angle: float = 0.0              # radians

    def __post_init__(self):
        _require_finite('Sight angle', self.sight_angle)
        _require_positive('Maximum distance', self.maximum_distance)
        _require_positive('Range step', self.step)
        _require_finite('Shot angle', self.shot_angle)
        _require_finite('Cant angle', self.cant_angle)
