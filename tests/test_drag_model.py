"""
Unit Tests for the Drag Model
=============================
Curve fitting, segment lookup and ballistic coefficients.
Run: python -m pytest tests/ -v
"""

import sys
import os
import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from exterior_ballistics.drag_model import (
    DRAG_CONSTANT, STANDARD_TABLES, BallisticCoefficient, CurveSegment, DragCurve,
    DragTable, DragValueType, calculate_by_curve, calculate_curve,
    create_ballistic_coefficient, create_ballistic_coefficient_for_custom_drag,
    standard_curve,
)
from exterior_ballistics.drag_tables import GI_TABLE, GS_TABLE
from exterior_ballistics.errors import InvalidConfiguration
from exterior_ballistics.projectile import Projectile
from exterior_ballistics.units import Distance


# Cd rises then falls, so neighbouring quadratics differ between samples
ZIGZAG = [(0.0, 0.0), (1.0, 1.0), (2.0, 0.0), (3.0, 1.0)]


class TestCurveFit:
    """Piecewise fit over the reference tables."""

    @pytest.mark.parametrize('table', list(STANDARD_TABLES))
    def test_one_segment_per_sample(self, table):
        data = STANDARD_TABLES[table]
        assert len(calculate_curve(data)) == len(data)

    @pytest.mark.parametrize('table', list(STANDARD_TABLES))
    def test_exact_at_nodes(self, table):
        data = STANDARD_TABLES[table]
        segments = calculate_curve(data)
        for (mach, cd), segment in zip(data, segments):
            assert segment.evaluate(mach) == pytest.approx(cd, abs=1e-9)

    @pytest.mark.parametrize('table', list(STANDARD_TABLES))
    def test_continuous_at_shared_breakpoints(self, table):
        data = STANDARD_TABLES[table]
        segments = calculate_curve(data)
        for i in range(len(data) - 1):
            for mach, _ in (data[i], data[i + 1]):
                assert segments[i].evaluate(mach) == pytest.approx(
                    segments[i + 1].evaluate(mach), abs=1e-9)

    def test_boundary_segments_are_linear(self):
        segments = calculate_curve(ZIGZAG)
        assert segments[0].a == 0.0
        assert segments[-1].a == 0.0
        assert segments[0] == CurveSegment(0.0, 1.0, 0.0)
        assert segments[-1].evaluate(2.0) == pytest.approx(0.0)
        assert segments[-1].evaluate(3.0) == pytest.approx(1.0)

    def test_interior_segment_is_quadratic(self):
        segments = calculate_curve(ZIGZAG)
        # y = -x² + 2x through (0, 0), (1, 1), (2, 0)
        assert segments[1].a == pytest.approx(-1.0)
        assert segments[1].b == pytest.approx(2.0)
        assert segments[1].c == pytest.approx(0.0, abs=1e-12)

    def test_two_sample_table(self):
        segments = calculate_curve([(0.5, 0.2), (1.5, 0.4)])
        assert len(segments) == 2
        for segment in segments:
            assert segment.evaluate(0.5) == pytest.approx(0.2)
            assert segment.evaluate(1.5) == pytest.approx(0.4)

    @pytest.mark.parametrize('table', [
        [(1.0, 0.3)],
        [],
        [(0.0, 0.1), (0.0, 0.2)],
        [(1.0, 0.1), (0.5, 0.2)],
        [(0.0, 0.1), (1.0, float('nan'))],
        [(0.0, 0.1, 0.3), (1.0, 0.2, 0.3)],
    ])
    def test_malformed_table_rejected(self, table):
        with pytest.raises(InvalidConfiguration):
            calculate_curve(table)

    def test_gs_reuses_gi_samples(self):
        assert GS_TABLE is GI_TABLE


class TestCurveLookup:
    """Nearest-segment binary search."""

    def setup_method(self):
        self.machs = [m for m, _ in ZIGZAG]
        self.segments = calculate_curve(ZIGZAG)

    def test_nearer_sample_wins(self):
        # segment 1 is -x² + 2x
        assert calculate_by_curve(self.machs, self.segments, 1.4) == pytest.approx(0.84)

    def test_tie_goes_to_upper_sample(self):
        # segment 2 is x² - 4x + 4
        assert calculate_by_curve(self.machs, self.segments, 1.5) == pytest.approx(0.25)

    def test_below_table_uses_first_segment(self):
        assert calculate_by_curve(self.machs, self.segments, -1.0) == pytest.approx(-1.0)

    def test_above_table_uses_last_segment(self):
        assert calculate_by_curve(self.machs, self.segments, 5.0) == pytest.approx(3.0)

    def test_vectorised_matches_scalar(self):
        curve = DragCurve(ZIGZAG)
        machs = np.array([-1.0, 0.0, 0.3, 1.0, 1.4, 1.5, 1.6, 2.5, 3.0, 5.0])
        expected = [curve.cd(m) for m in machs]
        np.testing.assert_allclose(curve.cd_array(machs), expected, atol=1e-12)

    def test_held_curve_clamps_to_edge_samples(self):
        curve = DragCurve(ZIGZAG, extrapolate=False)
        assert curve(5.0) == pytest.approx(1.0)
        assert curve(-1.0) == pytest.approx(0.0)
        np.testing.assert_allclose(curve.cd_array([-1.0, 5.0]), [0.0, 1.0], atol=1e-12)

    def test_standard_curves_are_shared(self):
        assert standard_curve(DragTable.G7) is standard_curve(DragTable.G7)

    def test_g1_transonic_drag_rise(self):
        g1 = standard_curve(DragTable.G1)
        assert g1(1.0) > g1(0.5)
        assert g1(0.0) == pytest.approx(0.2629, abs=1e-4)

    def test_standard_cd_positive(self):
        for table in STANDARD_TABLES:
            curve = standard_curve(table)
            low, high = curve.mach_range
            assert np.all(curve.cd_array(np.linspace(low, high, 200)) > 0)


class TestBallisticCoefficient:

    def test_drag_factor(self):
        bc = create_ballistic_coefficient(0.5, DragTable.G1)
        cd = standard_curve(DragTable.G1).cd(2.0)
        assert bc.drag(2.0) == pytest.approx(cd * DRAG_CONSTANT / 0.5)
        assert bc.drag_coefficient(2.0) == pytest.approx(cd)

    def test_accessors(self):
        bc = create_ballistic_coefficient(0.223, 'g7')
        assert bc.value == 0.223
        assert bc.table is DragTable.G7
        assert bc.value_type is DragValueType.BC

    @pytest.mark.parametrize('value', [0, -0.1, float('nan'), 'abc', None])
    def test_bad_value_rejected(self, value):
        with pytest.raises(InvalidConfiguration):
            create_ballistic_coefficient(value, DragTable.G1)

    @pytest.mark.parametrize('table', ['G9', 'Custom', DragTable.CUSTOM, 7, None])
    def test_unknown_family_rejected(self, table):
        with pytest.raises(InvalidConfiguration):
            create_ballistic_coefficient(0.3, table)

    def test_custom_requires_callable(self):
        with pytest.raises(InvalidConfiguration):
            create_ballistic_coefficient_for_custom_drag(1.0, DragValueType.BC, 0.3)
        with pytest.raises(InvalidConfiguration):
            BallisticCoefficient(1.0, DragTable.CUSTOM)

    def test_custom_bc_uses_function(self):
        bc = create_ballistic_coefficient_for_custom_drag(0.25, DragValueType.BC, lambda m: 0.5)
        assert bc.table is DragTable.CUSTOM
        assert bc.drag(1.3) == pytest.approx(0.5 * DRAG_CONSTANT / 0.25)

    def test_form_factor_needs_projectile(self):
        ff = create_ballistic_coefficient_for_custom_drag(1.184, DragValueType.FORM_FACTOR,
                                                          lambda m: 0.0)
        with pytest.raises(InvalidConfiguration):
            ff.drag(1.0)

    def test_bc_returned_by_projectile(self):
        bc = create_ballistic_coefficient(0.223, DragTable.G7)
        projectile = Projectile(bc, 69.0)
        assert projectile.effective_ballistic_coefficient == pytest.approx(0.223, abs=5e-4)

    def test_form_factor_resolved_by_projectile(self):
        ff = create_ballistic_coefficient_for_custom_drag(1.184, DragValueType.FORM_FACTOR,
                                                          lambda m: 0.0)
        projectile = Projectile(ff, 40.0, diameter=Distance.INCH.to_base(0.204),
                                length=Distance.INCH.to_base(1.0))
        assert ff.value == pytest.approx(1.184)
        assert projectile.effective_ballistic_coefficient == pytest.approx(0.116, abs=5e-4)
        assert projectile.resolved_coefficient.value_type is DragValueType.BC
