"""
Aerodynamic Drag Model
======================
Mach-dependent drag coefficients for the standard small-arms reference
projectiles (G1, G2, G5, G6, G7, G8, GI, GS) and for caller-supplied curves.

Each (Mach, Cd) table is fitted once with local polynomials:
  - interior sample i : exact quadratic through samples i-1, i, i+1
  - first/last sample : straight line through the two nearest samples

Lookup binary-searches the sample Mach values and evaluates the segment of
the nearest sample. Mach numbers outside the table fall onto the edge
segment, so the curve extrapolates linearly instead of failing.

The drag *deceleration* factor combines Cd with the ballistic coefficient:

    drag(M) = Cd(M) * 2.08551e-4 / BC

where the constant folds in the standard air density and the lb/in²
scaling of BC.
"""

import functools
import logging
from enum import Enum
from typing import Callable, List, NamedTuple, Sequence, Tuple

import numpy as np

from .drag_tables import (
    G1_TABLE, G2_TABLE, G5_TABLE, G6_TABLE, G7_TABLE, G8_TABLE,
    GI_TABLE, GS_TABLE,
)
from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)

DRAG_CONSTANT = 2.08551e-04


class DragTable(Enum):
    """Reference drag family a ballistic coefficient is expressed against."""
    G1 = 'G1'
    G2 = 'G2'
    G5 = 'G5'
    G6 = 'G6'
    G7 = 'G7'
    G8 = 'G8'
    GI = 'GI'
    GS = 'GS'
    CUSTOM = 'Custom'


class DragValueType(Enum):
    """How the number handed to a custom-drag coefficient is meant."""
    BC = 'BC'                     # already a ballistic coefficient
    FORM_FACTOR = 'FF'            # i = SD / BC, resolved against the bullet


STANDARD_TABLES = {
    DragTable.G1: G1_TABLE,
    DragTable.G2: G2_TABLE,
    DragTable.G5: G5_TABLE,
    DragTable.G6: G6_TABLE,
    DragTable.G7: G7_TABLE,
    DragTable.G8: G8_TABLE,
    DragTable.GI: GI_TABLE,
    DragTable.GS: GS_TABLE,
}


# ══════════════════════════════════════════════════════════════════════════
#  Curve fitting
# ══════════════════════════════════════════════════════════════════════════

class CurveSegment(NamedTuple):
    """cd = c + mach * (b + a * mach), valid around one table sample."""
    a: float
    b: float
    c: float

    def evaluate(self, mach: float) -> float:
        return self.c + mach * (self.b + self.a * mach)


def _as_table_array(table: Sequence[Tuple[float, float]]) -> np.ndarray:
    try:
        data = np.asarray(table, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"Drag table is not numeric: {exc}") from exc

    if data.ndim != 2 or data.shape[1] != 2:
        raise InvalidConfiguration(
            f"Drag table must be a sequence of (mach, cd) pairs, got shape {data.shape}"
        )
    if len(data) < 2:
        raise InvalidConfiguration("Drag table needs at least two samples")
    if not np.all(np.isfinite(data)):
        raise InvalidConfiguration("Drag table contains non-finite values")
    if not np.all(np.diff(data[:, 0]) > 0):
        raise InvalidConfiguration("Drag table Mach values must be strictly increasing")
    return data


def calculate_curve(table: Sequence[Tuple[float, float]]) -> Tuple[CurveSegment, ...]:
    """
    Fit one interpolation segment per sample of a (Mach, Cd) table.

    Parameters
    ----------
    table : sequence of (mach, cd)
        At least two samples, Mach strictly increasing.

    Returns
    -------
    tuple of CurveSegment
        Same length as *table*. Segments 0 and n-1 are linear; the rest
        are quadratics passing exactly through three neighbouring samples.
    """
    data = _as_table_array(table)
    x = data[:, 0]
    y = data[:, 1]

    rate = (y[1] - y[0]) / (x[1] - x[0])
    segments: List[CurveSegment] = [CurveSegment(0.0, float(rate), float(y[0] - x[0] * rate))]

    if len(data) > 2:
        x1, x2, x3 = x[:-2], x[1:-1], x[2:]
        y1, y2, y3 = y[:-2], y[1:-1], y[2:]
        a = (((y3 - y1) * (x2 - x1) - (y2 - y1) * (x3 - x1))
             / ((x3 * x3 - x1 * x1) * (x2 - x1) - (x2 * x2 - x1 * x1) * (x3 - x1)))
        b = (y2 - y1 - a * (x2 * x2 - x1 * x1)) / (x2 - x1)
        c = y1 - (a * x1 * x1 + b * x1)
        segments.extend(
            CurveSegment(*abc) for abc in zip(a.tolist(), b.tolist(), c.tolist())
        )

    rate = (y[-1] - y[-2]) / (x[-1] - x[-2])
    segments.append(CurveSegment(0.0, float(rate), float(y[-1] - x[-1] * rate)))
    return tuple(segments)


def calculate_by_curve(machs: Sequence[float], segments: Sequence[CurveSegment],
                       mach: float) -> float:
    """Evaluate the segment of the sample nearest to *mach* (ties go up)."""
    lo = 0
    hi = len(machs) - 1
    while hi - lo > 1:
        mid = (hi + lo) // 2
        if machs[mid] < mach:
            lo = mid
        else:
            hi = mid

    if machs[hi] - mach > mach - machs[lo]:
        segment = segments[lo]
    else:
        segment = segments[hi]
    return segment.c + mach * (segment.b + segment.a * mach)


class DragCurve:
    """
    Drag coefficient curve fitted to a (Mach, Cd) table.

    Instances are immutable and callable, so a curve built from a measured
    table can be handed straight to
    ``create_ballistic_coefficient_for_custom_drag``.

    Outside the table the edge segments extrapolate linearly. Measured
    tables that stop short of the flight's Mach range can pass
    ``extrapolate=False`` to hold the edge samples' Cd instead.
    """

    def __init__(self, table: Sequence[Tuple[float, float]], name: str = 'Custom',
                 extrapolate: bool = True):
        self.name = name
        self.extrapolate = extrapolate
        self._segments = calculate_curve(table)
        self._table = tuple((float(m), float(cd)) for m, cd in table)
        self._machs = tuple(m for m, _ in self._table)

    @property
    def table(self) -> Tuple[Tuple[float, float], ...]:
        return self._table

    @property
    def segments(self) -> Tuple[CurveSegment, ...]:
        return self._segments

    @property
    def mach_range(self) -> Tuple[float, float]:
        return self._machs[0], self._machs[-1]

    def cd(self, mach: float) -> float:
        """Return drag coefficient at the given Mach number."""
        if not self.extrapolate:
            mach = min(max(mach, self._machs[0]), self._machs[-1])
        return calculate_by_curve(self._machs, self._segments, mach)

    def __call__(self, mach: float) -> float:
        return self.cd(mach)

    def cd_array(self, mach_array: np.ndarray) -> np.ndarray:
        """Vectorized Cd lookup with the same segment choice as ``cd``."""
        mach_array = np.asarray(mach_array, dtype=float)
        machs = np.asarray(self._machs)
        if not self.extrapolate:
            mach_array = np.clip(mach_array, machs[0], machs[-1])
        coeffs = np.asarray(self._segments)

        hi = np.clip(np.searchsorted(machs, mach_array, side='left'), 1, len(machs) - 1)
        lo = hi - 1
        nearest = np.where(machs[hi] - mach_array > mach_array - machs[lo], lo, hi)
        a, b, c = coeffs[nearest, 0], coeffs[nearest, 1], coeffs[nearest, 2]
        return c + mach_array * (b + a * mach_array)

    def __repr__(self) -> str:
        return f"DragCurve({self.name!r}, samples={len(self._table)})"


@functools.lru_cache(maxsize=None)
def standard_curve(table: DragTable) -> DragCurve:
    """Fitted curve of a standard family, built on first use and shared."""
    if table not in STANDARD_TABLES:
        raise InvalidConfiguration(f"No reference table for drag family {table!r}")
    logger.debug("Fitting %s drag curve", table.value)
    return DragCurve(STANDARD_TABLES[table], name=table.value)


# ══════════════════════════════════════════════════════════════════════════
#  Ballistic coefficient
# ══════════════════════════════════════════════════════════════════════════

def _as_drag_table(table) -> DragTable:
    if isinstance(table, DragTable):
        return table
    if isinstance(table, str):
        try:
            return DragTable[table.strip().upper()]
        except KeyError:
            pass
    raise InvalidConfiguration(
        f"Unknown drag table {table!r}. "
        f"Available: {[t.value for t in STANDARD_TABLES]}"
    )


class BallisticCoefficient:
    """
    Ballistic coefficient bound to the drag curve it is expressed against.

    The curve is chosen once, here; ``drag`` never dispatches on the family.
    Use ``create_ballistic_coefficient`` or
    ``create_ballistic_coefficient_for_custom_drag`` rather than calling the
    constructor directly.
    """

    def __init__(self, value: float, table=DragTable.G1,
                 value_type: DragValueType = DragValueType.BC,
                 drag_function: Callable[[float], float] = None):
        if isinstance(value, bool) or not isinstance(value, (int, float, np.floating)):
            raise InvalidConfiguration(f"Ballistic coefficient must be a number, got {value!r}")
        if not np.isfinite(value) or value <= 0:
            raise InvalidConfiguration("Ballistic coefficient must be greater than zero")
        if not isinstance(value_type, DragValueType):
            raise InvalidConfiguration(f"Unknown coefficient value type {value_type!r}")

        table = _as_drag_table(table)
        if drag_function is None:
            if table is DragTable.CUSTOM:
                raise InvalidConfiguration("A custom drag table needs a drag function")
            drag_function = standard_curve(table)
        elif not callable(drag_function):
            raise InvalidConfiguration(f"Drag function {drag_function!r} is not callable")

        self._value = float(value)
        self._table = table
        self._value_type = value_type
        self._curve = drag_function

    @property
    def value(self) -> float:
        return self._value

    @property
    def table(self) -> DragTable:
        return self._table

    @property
    def value_type(self) -> DragValueType:
        return self._value_type

    def drag_coefficient(self, mach: float) -> float:
        """Raw drag coefficient of the reference curve."""
        return self._curve(mach)

    def drag(self, mach: float) -> float:
        """
        Drag deceleration factor at the given Mach number.

        Raises
        ------
        InvalidConfiguration
            The coefficient is a form factor not yet bound to a projectile;
            use ``Projectile.resolved_coefficient`` instead.
        """
        if self._value_type is DragValueType.FORM_FACTOR:
            raise InvalidConfiguration(
                "A form-factor coefficient has to be bound to a projectile "
                "with a diameter before drag can be evaluated"
            )
        return self._curve(mach) * DRAG_CONSTANT / self._value

    def for_sectional_density(self, sectional_density: float) -> 'BallisticCoefficient':
        """
        BC-equivalent coefficient for a bullet of the given sectional density
        (lb/in²). A coefficient that already is a BC is returned unchanged.
        """
        if self._value_type is DragValueType.BC:
            return self
        return BallisticCoefficient(sectional_density / self._value, self._table,
                                    DragValueType.BC, self._curve)

    def __repr__(self) -> str:
        return (f"BallisticCoefficient({self._value:.4g}, {self._table.value}, "
                f"{self._value_type.value})")


def create_ballistic_coefficient(value: float, table) -> BallisticCoefficient:
    """Coefficient against one of the eight standard families."""
    table = _as_drag_table(table)
    if table is DragTable.CUSTOM:
        raise InvalidConfiguration(
            "Use create_ballistic_coefficient_for_custom_drag for custom drag curves"
        )
    return BallisticCoefficient(value, table)


def create_ballistic_coefficient_for_custom_drag(
        value: float, value_type: DragValueType,
        drag_function: Callable[[float], float]) -> BallisticCoefficient:
    """
    Coefficient against a caller-supplied ``mach -> cd`` function.

    With ``DragValueType.FORM_FACTOR`` the value is a form factor: the
    effective BC becomes ``sectional_density / value`` once the coefficient
    is attached to a ``Projectile`` with a known diameter.
    """
    return BallisticCoefficient(value, DragTable.CUSTOM, value_type, drag_function)
