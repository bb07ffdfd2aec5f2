"""
Atmospheric Model for Small-Arms Ballistics
===========================================
Air density factor and speed of sound at the firing point and along the
trajectory, in the imperial units the standard drag tables are built for.

Conditions at the reference altitude come from temperature, barometric
pressure and relative humidity (saturation vapour pressure polynomial,
moist-air density correction). Away from the reference altitude the
temperature follows the ICAO lapse rate and the pressure the matching
barometric exponent.

Reference conditions (ICAO standard at sea level):
  - Temperature: 59 °F (518.67 °R)
  - Pressure:    29.92 inHg
  - Density:     0.076474 lb/ft³
  - Speed of sound: ~1116.45 ft/s
"""

import math
from dataclasses import dataclass
from functools import cached_property
from typing import Tuple

from .errors import InvalidConfiguration


# ── Constants ─────────────────────────────────────────────────────────────
ICAO_STANDARD_TEMPERATURE_R = 518.67    # °R
ICAO_FREEZING_POINT_R = 459.67          # °R offset of 0 °F
TEMPERATURE_GRADIENT = -3.56616e-03     # °F per foot
PRESSURE_EXPONENT = -5.255876
SPEED_OF_SOUND_FACTOR = 49.0223         # ft/s per sqrt(°R)
STANDARD_TEMPERATURE = 59.0             # °F
STANDARD_PRESSURE = 29.92               # inHg
STANDARD_DENSITY = 0.076474             # lb/ft³
STANDARD_HUMIDITY = 0.78                # fraction, default atmosphere

# Saturation vapour pressure polynomial (inHg, t in °F)
_A0 = 1.24871
_A1 = 0.0988438
_A2 = 0.00152907
_A3 = -3.07031e-06
_A4 = 4.21329e-07
_A5 = 3.342e-04

# Altitudes closer than this to the reference use the cached conditions
_ALTITUDE_TOLERANCE = 30.0              # ft


def _density_and_mach(temperature: float, pressure: float,
                      humidity: float) -> Tuple[float, float]:
    """
    Air density (lb/ft³) and speed of sound (ft/s) for a temperature in °F,
    pressure in inHg and relative humidity as a fraction.
    """
    if temperature > 0:
        et0 = _A0 + temperature * (_A1 + temperature * (_A2 + temperature * (_A3 + temperature * _A4)))
        et = _A5 * humidity * et0
        hc = (pressure - 0.3783 * et) / STANDARD_PRESSURE
    else:
        hc = 1.0

    density = STANDARD_DENSITY * (ICAO_STANDARD_TEMPERATURE_R / (temperature + ICAO_FREEZING_POINT_R)) * hc
    mach = math.sqrt(temperature + ICAO_FREEZING_POINT_R) * SPEED_OF_SOUND_FACTOR
    return density, mach


@dataclass(frozen=True)
class Atmosphere:
    """
    Atmospheric conditions at the firing point.

    altitude is in feet, pressure in inHg, temperature in °F and humidity
    either as a fraction (0-1) or a percentage (0-100).
    """
    altitude: float = 0.0
    pressure: float = STANDARD_PRESSURE
    temperature: float = STANDARD_TEMPERATURE
    humidity: float = STANDARD_HUMIDITY

    def __post_init__(self):
        humidity = self.humidity
        if humidity > 1.0:
            humidity = humidity / 100.0
        if not 0.0 <= humidity <= 1.0:
            raise InvalidConfiguration(f"Humidity must be within 0-100%, got {self.humidity}")
        if not math.isfinite(self.pressure) or self.pressure <= 0:
            raise InvalidConfiguration("Pressure must be finite and greater than zero")
        if not math.isfinite(self.temperature):
            raise InvalidConfiguration("Temperature must be finite")
        if self.temperature <= -ICAO_FREEZING_POINT_R:
            raise InvalidConfiguration("Temperature must be above absolute zero")
        if not math.isfinite(self.altitude):
            raise InvalidConfiguration("Altitude must be finite")
        object.__setattr__(self, 'humidity', humidity)

    @classmethod
    def default(cls) -> 'Atmosphere':
        """Sea level, 59 °F, 29.92 inHg, 78 % humidity."""
        return cls()

    @classmethod
    def icao(cls, altitude: float = 0.0) -> 'Atmosphere':
        """Dry ICAO standard atmosphere at the given altitude (ft)."""
        temperature = ICAO_STANDARD_TEMPERATURE_R + altitude * TEMPERATURE_GRADIENT - ICAO_FREEZING_POINT_R
        pressure = STANDARD_PRESSURE * math.pow(
            ICAO_STANDARD_TEMPERATURE_R / (temperature + ICAO_FREEZING_POINT_R),
            PRESSURE_EXPONENT,
        )
        return cls(altitude=altitude, pressure=pressure,
                   temperature=temperature, humidity=0.0)

    @cached_property
    def _reference(self) -> Tuple[float, float]:
        return _density_and_mach(self.temperature, self.pressure, self.humidity)

    @property
    def density(self) -> float:
        """Air density at the reference altitude (lb/ft³)."""
        return self._reference[0]

    @property
    def density_factor(self) -> float:
        """Density relative to the standard density the tables assume."""
        return self._reference[0] / STANDARD_DENSITY

    @property
    def speed_of_sound(self) -> float:
        """Speed of sound at the reference altitude (ft/s)."""
        return self._reference[1]

    def get_mach(self, velocity: float) -> float:
        """Convert velocity in ft/s to Mach number at the reference altitude."""
        return velocity / self._reference[1]

    def density_factor_and_mach(self, altitude: float) -> Tuple[float, float]:
        """
        Density factor and speed of sound (ft/s) at an absolute altitude (ft).
        """
        if math.fabs(self.altitude - altitude) < _ALTITUDE_TOLERANCE:
            density, mach = self._reference
            return density / STANDARD_DENSITY, mach

        t0 = self.temperature
        t = t0 + (altitude - self.altitude) * TEMPERATURE_GRADIENT
        p = self.pressure * math.pow(
            (t0 + ICAO_FREEZING_POINT_R) / (t + ICAO_FREEZING_POINT_R),
            PRESSURE_EXPONENT,
        )

        density, mach = _density_and_mach(t, p, self.humidity)
        return density / STANDARD_DENSITY, mach
