"""
Units of Measure
================
Conversion factors between the units a shooter thinks in and the imperial
base units the ballistic tables are scaled for.

Base units used everywhere inside the package:
  - distance    : foot
  - velocity    : foot per second
  - weight      : grain
  - angle       : radian
  - temperature : degree Fahrenheit
  - pressure    : inch of mercury
  - energy      : foot-pound

Each unit member converts in both directions:

    >>> Distance.YARD.to_base(100)
    300.0
    >>> round(Velocity.MPS.from_base(2750), 1)
    838.2
"""

import math
from enum import Enum


class _LinearUnit(Enum):
    """Unit whose conversion to the base unit is a pure scale factor."""

    def __init__(self, factor: float, symbol: str):
        self.factor = factor
        self.symbol = symbol

    def to_base(self, value: float) -> float:
        return value * self.factor

    def from_base(self, value: float) -> float:
        return value / self.factor


class Distance(_LinearUnit):
    INCH = (1.0 / 12.0, 'in')
    FOOT = (1.0, 'ft')
    YARD = (3.0, 'yd')
    MILE = (5280.0, 'mi')
    NAUTICAL_MILE = (6076.1155, 'nm')
    MILLIMETER = (1.0 / 304.8, 'mm')
    CENTIMETER = (1.0 / 30.48, 'cm')
    METER = (1.0 / 0.3048, 'm')
    KILOMETER = (1000.0 / 0.3048, 'km')


class Velocity(_LinearUnit):
    FPS = (1.0, 'ft/s')
    MPS = (1.0 / 0.3048, 'm/s')
    KMH = (1000.0 / 0.3048 / 3600.0, 'km/h')
    MPH = (5280.0 / 3600.0, 'mph')
    KNOT = (6076.1155 / 3600.0, 'kt')


class Weight(_LinearUnit):
    GRAIN = (1.0, 'gr')
    GRAM = (15.4323584, 'g')
    KILOGRAM = (15432.3584, 'kg')
    OUNCE = (437.5, 'oz')
    POUND = (7000.0, 'lb')


class Angular(_LinearUnit):
    RADIAN = (1.0, 'rad')
    DEGREE = (math.pi / 180.0, '°')
    MOA = (math.pi / 180.0 / 60.0, 'MOA')
    MIL = (2.0 * math.pi / 6400.0, 'mil')
    MRAD = (1.0e-3, 'mrad')
    THOUSAND = (2.0 * math.pi / 6000.0, 'ths')
    INCHES_PER_100YD = (1.0 / 3600.0, 'in/100yd')
    CM_PER_100M = (1.0 / 10000.0, 'cm/100m')


class Pressure(_LinearUnit):
    INHG = (1.0, 'inHg')
    MMHG = (1.0 / 25.4, 'mmHg')
    BAR = (29.5299830714, 'bar')
    HPA = (0.0295299830714, 'hPa')
    PSI = (2.03602128864, 'psi')


class Energy(_LinearUnit):
    FOOT_POUND = (1.0, 'ft·lb')
    JOULE = (0.737562149277, 'J')


class Temperature(Enum):
    FAHRENHEIT = '°F'
    CELSIUS = '°C'
    KELVIN = 'K'
    RANKINE = '°R'

    @property
    def symbol(self) -> str:
        return self.value

    def to_base(self, value: float) -> float:
        if self is Temperature.CELSIUS:
            return value * 9.0 / 5.0 + 32.0
        if self is Temperature.KELVIN:
            return (value - 273.15) * 9.0 / 5.0 + 32.0
        if self is Temperature.RANKINE:
            return value - 459.67
        return value

    def from_base(self, value: float) -> float:
        if self is Temperature.CELSIUS:
            return (value - 32.0) * 5.0 / 9.0
        if self is Temperature.KELVIN:
            return (value - 32.0) * 5.0 / 9.0 + 273.15
        if self is Temperature.RANKINE:
            return value + 459.67
        return value


def convert(value: float, from_unit, to_unit) -> float:
    """Convert *value* between two units of the same kind."""
    if type(from_unit) is not type(to_unit):
        raise TypeError(
            f"Cannot convert {from_unit.name} to {to_unit.name}: "
            f"different kinds of unit"
        )
    return to_unit.from_base(from_unit.to_base(value))
