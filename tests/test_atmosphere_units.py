"""
Unit Tests for Atmosphere, Units and Shot Records
=================================================
Run: python -m pytest tests/ -v
"""

import sys
import os
import math
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from exterior_ballistics.atmosphere import Atmosphere, STANDARD_DENSITY
from exterior_ballistics.drag_model import (
    DragTable, DragValueType, create_ballistic_coefficient,
    create_ballistic_coefficient_for_custom_drag,
)
from exterior_ballistics.errors import BallisticsError, InvalidConfiguration
from exterior_ballistics.projectile import (
    Ammunition, Projectile, ShotParameters, Weapon, WindInfo, ZeroInfo,
)
from exterior_ballistics.units import (
    Angular, Distance, Energy, Pressure, Temperature, Velocity, Weight, convert,
)


class TestAtmosphere:
    """Density factor and speed of sound."""

    def test_default_conditions(self):
        atmo = Atmosphere.default()
        assert atmo.altitude == 0.0
        assert atmo.pressure == pytest.approx(29.92)
        assert atmo.temperature == pytest.approx(59.0)
        assert atmo.humidity == pytest.approx(0.78)

    def test_default_speed_of_sound(self):
        assert Atmosphere.default().speed_of_sound == pytest.approx(1116.45, abs=0.1)

    def test_default_density_factor_near_one(self):
        atmo = Atmosphere.default()
        assert atmo.density_factor == pytest.approx(1.0, abs=1e-3)
        assert atmo.density == pytest.approx(STANDARD_DENSITY, rel=1e-3)

    def test_humidity_lowers_density(self):
        dry = Atmosphere(humidity=0.0)
        wet = Atmosphere(humidity=1.0)
        assert wet.density < dry.density

    def test_humidity_percent_normalised(self):
        assert Atmosphere(humidity=50).humidity == pytest.approx(0.5)

    def test_near_reference_altitude_uses_reference(self):
        atmo = Atmosphere.default()
        assert atmo.density_factor_and_mach(-20.0) == (atmo.density_factor, atmo.speed_of_sound)

    def test_density_and_sound_fall_with_altitude(self):
        atmo = Atmosphere.default()
        df_0, a_0 = atmo.density_factor_and_mach(0.0)
        df_5, a_5 = atmo.density_factor_and_mach(5000.0)
        df_10, a_10 = atmo.density_factor_and_mach(10000.0)
        assert df_0 > df_5 > df_10
        assert a_0 > a_5 > a_10

    def test_lapse_matches_icao_profile(self):
        """Dry sea-level air lapsed to 5000 ft ~ ICAO 5000 ft."""
        lapsed = Atmosphere(humidity=0.0).density_factor_and_mach(5000.0)
        icao = Atmosphere.icao(5000.0)
        assert lapsed[0] == pytest.approx(icao.density_factor, rel=1e-6)
        assert lapsed[1] == pytest.approx(icao.speed_of_sound, rel=1e-6)

    def test_icao_temperature(self):
        assert Atmosphere.icao(0.0).temperature == pytest.approx(59.0)
        assert Atmosphere.icao(10000.0).temperature == pytest.approx(23.34, abs=0.01)

    @pytest.mark.parametrize('kwargs', [
        {'pressure': 0.0},
        {'humidity': 150},
        {'humidity': -0.1},
        {'temperature': -500.0},
        {'altitude': float('inf')},
        {'pressure': float('nan')},
        {'pressure': float('inf')},
        {'temperature': float('nan')},
    ])
    def test_invalid_conditions(self, kwargs):
        with pytest.raises(InvalidConfiguration):
            Atmosphere(**kwargs)

    def test_get_mach(self):
        atmo = Atmosphere.default()
        assert atmo.get_mach(2750.0) == pytest.approx(2.463, abs=0.001)


class TestUnits:

    def test_distance(self):
        assert Distance.YARD.to_base(100) == pytest.approx(300.0)
        assert Distance.INCH.from_base(1.0) == pytest.approx(12.0)
        assert convert(1.0, Distance.METER, Distance.CENTIMETER) == pytest.approx(100.0)
        assert convert(1.0, Distance.MILE, Distance.YARD) == pytest.approx(1760.0)

    def test_velocity(self):
        assert Velocity.MPS.from_base(2750) == pytest.approx(838.2, abs=0.05)
        assert Velocity.MPH.to_base(60) == pytest.approx(88.0)

    def test_weight(self):
        assert Weight.POUND.to_base(1) == pytest.approx(7000.0)
        assert convert(1.0, Weight.KILOGRAM, Weight.GRAM) == pytest.approx(1000.0)

    def test_angular(self):
        assert Angular.DEGREE.to_base(180) == pytest.approx(math.pi)
        assert convert(1.0, Angular.DEGREE, Angular.MOA) == pytest.approx(60.0)
        assert convert(6400, Angular.MIL, Angular.DEGREE) == pytest.approx(360.0)
        assert Angular.INCHES_PER_100YD.to_base(1.0) == pytest.approx(1.0 / 3600.0)

    def test_moa_is_about_an_inch_at_100_yards(self):
        one_moa_in = Distance.INCH.from_base(math.tan(Angular.MOA.to_base(1)) * 300.0)
        assert one_moa_in == pytest.approx(1.047, abs=1e-3)

    def test_temperature(self):
        assert Temperature.CELSIUS.to_base(100) == pytest.approx(212.0)
        assert Temperature.KELVIN.to_base(273.15) == pytest.approx(32.0)
        assert Temperature.RANKINE.from_base(59.0) == pytest.approx(518.67)
        assert convert(15.0, Temperature.CELSIUS, Temperature.FAHRENHEIT) == pytest.approx(59.0)

    def test_pressure_and_energy(self):
        assert Pressure.HPA.to_base(1013.25) == pytest.approx(29.92, abs=0.01)
        assert Pressure.MMHG.to_base(760) == pytest.approx(29.92, abs=0.01)
        assert Energy.JOULE.from_base(1.0) == pytest.approx(1.3558, abs=1e-4)

    def test_round_trip(self):
        for unit in Distance:
            assert unit.from_base(unit.to_base(12.5)) == pytest.approx(12.5)

    def test_mismatched_kinds(self):
        with pytest.raises(TypeError):
            convert(1.0, Distance.FOOT, Velocity.FPS)


class TestShotRecords:

    def setup_method(self):
        self.bc = create_ballistic_coefficient(0.223, DragTable.G7)

    def test_records_are_frozen(self):
        ammo = Ammunition(Projectile(self.bc, 168.0), 2750.0)
        with pytest.raises(AttributeError):
            ammo.muzzle_velocity = 3000.0

    @pytest.mark.parametrize('build', [
        lambda bc: Projectile(bc, 0.0),
        lambda bc: Projectile(bc, 168.0, diameter=-0.1),
        lambda bc: Projectile(0.223, 168.0),
        lambda bc: Ammunition(Projectile(bc, 168.0), 0.0),
        lambda bc: Ammunition(Projectile(bc, 168.0), float('nan')),
        lambda bc: ZeroInfo(0.0),
        lambda bc: Weapon(float('nan'), ZeroInfo(300.0)),
        lambda bc: Weapon(0.2, 300.0),
        lambda bc: ShotParameters(0.0, maximum_distance=0.0, step=300.0),
        lambda bc: ShotParameters(0.0, maximum_distance=3000.0, step=0.0),
        lambda bc: WindInfo(float('inf')),
    ])
    def test_invalid_records(self, build):
        with pytest.raises(InvalidConfiguration):
            build(self.bc)

    def test_form_factor_requires_diameter(self):
        ff = create_ballistic_coefficient_for_custom_drag(1.0, DragValueType.FORM_FACTOR,
                                                          lambda m: 0.2)
        with pytest.raises(InvalidConfiguration):
            Projectile(ff, 168.0)

    def test_sectional_density(self):
        projectile = Projectile(self.bc, 168.0, diameter=Distance.INCH.to_base(0.308))
        assert projectile.sectional_density == pytest.approx(0.253, abs=1e-3)
        assert Projectile(self.bc, 168.0).sectional_density is None

    def test_errors_share_a_root(self):
        assert issubclass(InvalidConfiguration, BallisticsError)
        assert issubclass(InvalidConfiguration, ValueError)
