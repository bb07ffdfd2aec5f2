"""
Trajectory Integration Engine
=============================
Steps a point-mass bullet downrange under drag, gravity and wind.

Coordinate system (feet):
  x = downrange distance along the line of sight
  y = height relative to the line of sight (starts at -sight height)
  z = windage, positive to the right

The scheme advances a fixed downrange increment ``dx`` per step:

    dt  = dx / vx
    va  = v - wind                       (air-relative velocity)
    v  -= (va * drag(|va|) - g) * dt     drag = ρ/ρ0 · |va| · Cd(M)·K/BC
    r  += (dx, vy·dt, vz·dt)

Output: TrajectoryResult, a read-only sequence of TrajectoryPoint recorded
on a regular distance grid.
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .atmosphere import Atmosphere
from .errors import IntegrationDivergence
from .projectile import Ammunition, Weapon, WindInfo
from .units import Angular, Distance, Velocity

logger = logging.getLogger(__name__)


GRAVITY = -32.17405                 # ft/s²
MINIMUM_VELOCITY = 50.0             # ft/s, below this the bullet is spent
MAXIMUM_DROP = -15000.0             # ft below the line of sight
DEFAULT_MAXIMUM_STEP_SIZE = 1.0     # ft
MAXIMUM_STEPS = 5_000_000

# grid points are counted with this slack so 1500 m / 100 m gives 16 rows
_GRID_EPSILON = 1e-9


class StopReason(Enum):
    COMPLETE = 'complete'
    MINIMUM_VELOCITY = 'minimum velocity'
    MAXIMUM_DROP = 'maximum drop'


@dataclass(frozen=True)
class TrajectoryPoint:
    """Snapshot of the bullet at one recorded distance."""
    distance: float                 # ft
    time: float                     # s
    velocity: float                 # ft/s
    mach: float
    energy: float                   # ft·lb
    drop: float                     # ft, relative to the line of sight
    drop_adjustment: float          # rad
    windage: float                  # ft
    windage_adjustment: float       # rad
    optimal_game_weight: float      # lb

    def drop_adjustment_in(self, unit: Angular) -> float:
        return unit.from_base(self.drop_adjustment)

    def windage_adjustment_in(self, unit: Angular) -> float:
        return unit.from_base(self.windage_adjustment)


class TrajectoryResult(Sequence):
    """Recorded trajectory points, in increasing distance."""

    def __init__(self, points: Iterable[TrajectoryPoint],
                 stop_reason: StopReason = StopReason.COMPLETE,
                 barrel_elevation: float = 0.0):
        self._points = tuple(points)
        self.stop_reason = stop_reason
        self.barrel_elevation = barrel_elevation

    def __getitem__(self, index):
        return self._points[index]

    def __len__(self) -> int:
        return len(self._points)

    def __eq__(self, other):
        if not isinstance(other, TrajectoryResult):
            return NotImplemented
        return self._points == other._points

    __hash__ = None

    def _column(self, name: str) -> np.ndarray:
        return np.array([getattr(p, name) for p in self._points])

    @property
    def distance(self) -> np.ndarray:
        return self._column('distance')

    @property
    def time(self) -> np.ndarray:
        return self._column('time')

    @property
    def velocity(self) -> np.ndarray:
        return self._column('velocity')

    @property
    def mach(self) -> np.ndarray:
        return self._column('mach')

    @property
    def energy(self) -> np.ndarray:
        return self._column('energy')

    @property
    def drop(self) -> np.ndarray:
        return self._column('drop')

    @property
    def windage(self) -> np.ndarray:
        return self._column('windage')

    @property
    def completed(self) -> bool:
        return self.stop_reason is StopReason.COMPLETE

    def format_table(self, distance_unit: Distance = Distance.YARD,
                     offset_unit: Distance = Distance.INCH,
                     adjustment_unit: Angular = Angular.MOA,
                     velocity_unit: Velocity = Velocity.FPS) -> str:
        """Range card as fixed-width text."""
        header = (f"{'Range':>8} {'Time':>7} {'Vel':>8} {'Mach':>6} {'Energy':>8} "
                  f"{'Drop':>9} {'Adj':>7} {'Wind':>8} {'Adj':>7} {'OGW':>6}")
        units = (f"{distance_unit.symbol:>8} {'s':>7} {velocity_unit.symbol:>8} {'':>6} "
                 f"{'ft·lb':>8} {offset_unit.symbol:>9} {adjustment_unit.symbol:>7} "
                 f"{offset_unit.symbol:>8} {adjustment_unit.symbol:>7} {'lb':>6}")
        lines = [header, units, '-' * len(header)]
        for p in self._points:
            lines.append(
                f"{distance_unit.from_base(p.distance):>8.1f} {p.time:>7.3f} "
                f"{velocity_unit.from_base(p.velocity):>8.1f} {p.mach:>6.3f} "
                f"{p.energy:>8.1f} {offset_unit.from_base(p.drop):>9.2f} "
                f"{p.drop_adjustment_in(adjustment_unit):>7.2f} "
                f"{offset_unit.from_base(p.windage):>8.2f} "
                f"{p.windage_adjustment_in(adjustment_unit):>7.2f} "
                f"{p.optimal_game_weight:>6.0f}"
            )
        return '\n'.join(lines)

    def summary(self) -> str:
        """Human-readable summary string."""
        if not self._points:
            return "Empty trajectory"
        last = self._points[-1]
        lines = [
            f"╔══════════════════════════════════════════════════════╗",
            f"║  TRAJECTORY SUMMARY{'':<35s}║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Barrel elev  : {Angular.MOA.from_base(self.barrel_elevation):>10.2f} MOA{'':<22s} ║",
            f"║  Points       : {len(self._points):>10d}{'':<26s} ║",
            f"║  Stop reason  : {self.stop_reason.value:<36s} ║",
            f"╠══════════════════════════════════════════════════════╣",
            f"║  Last range   : {Distance.YARD.from_base(last.distance):>10.1f} yd{'':<23s} ║",
            f"║  Flight time  : {last.time:>10.3f} s{'':<24s} ║",
            f"║  Velocity     : {last.velocity:>10.1f} ft/s{'':<21s} ║",
            f"║  Energy       : {last.energy:>10.1f} ft·lb{'':<20s} ║",
            f"║  Drop         : {Distance.INCH.from_base(last.drop):>10.1f} in{'':<23s} ║",
            f"║  Windage      : {Distance.INCH.from_base(last.windage):>10.1f} in{'':<23s} ║",
            f"╚══════════════════════════════════════════════════════╝",
        ]
        return '\n'.join(lines)


# ══════════════════════════════════════════════════════════════════════════
#  Per-point quantities
# ══════════════════════════════════════════════════════════════════════════

def calculate_energy(bullet_weight: float, velocity: float) -> float:
    """Kinetic energy in ft·lb for a weight in grains and velocity in ft/s."""
    return bullet_weight * velocity * velocity / 450400.0


def calculate_optimal_game_weight(bullet_weight: float, velocity: float) -> float:
    """Matunas optimal game weight (lb): W² · V³ · 1.5e-12."""
    return bullet_weight * bullet_weight * velocity * velocity * velocity * 1.5e-12


def get_correction(distance: float, offset: float) -> float:
    """Angle subtended by *offset* at *distance*; zero at the muzzle."""
    if distance == 0:
        return 0.0
    return math.atan(offset / distance)


def calculation_step(step: float,
                     maximum_step_size: float = DEFAULT_MAXIMUM_STEP_SIZE) -> float:
    """
    Downrange integration increment for a recording step (both in feet).

    Half the recording step, scaled down by powers of ten until it is below
    one order of magnitude under *maximum_step_size*.
    """
    step = step / 2.0
    if step > maximum_step_size:
        step_order = int(math.floor(math.log10(step)))
        maximum_order = int(math.floor(math.log10(maximum_step_size)))
        step = step / math.pow(10, step_order - maximum_order + 1)
    return step


def wind_to_vector(wind: WindInfo, sight_angle: float,
                   cant_angle: float = 0.0) -> Tuple[float, float, float]:
    """Wind velocity in the shot frame (ft/s)."""
    sight_cos = math.cos(sight_angle)
    sight_sin = math.sin(sight_angle)
    cant_cos = math.cos(cant_angle)
    cant_sin = math.sin(cant_angle)
    range_velocity = wind.velocity * math.cos(wind.direction)
    cross_component = wind.velocity * math.sin(wind.direction)
    range_factor = -range_velocity * sight_sin
    return (range_velocity * sight_cos,
            range_factor * cant_cos + cross_component * cant_sin,
            cross_component * cant_cos - range_factor * cant_sin)


class _WindSock:
    """
    Wind vector for the current downrange position.

    Requests must come in order of increasing range; each wind holds until
    its ``until_distance`` and the last one holds forever.
    """

    def __init__(self, winds: Sequence, sight_angle: float, cant_angle: float):
        self._vectors = [wind_to_vector(w, sight_angle, cant_angle) for w in winds] or [(0.0, 0.0, 0.0)]
        self._limits = [w.until_distance for w in winds[:-1]]
        self._index = 0
        self._next_range = self._limits[0] if self._limits else math.inf

    def vector_for_range(self, x: float) -> Tuple[float, float, float]:
        while x >= self._next_range:
            self._index += 1
            if self._index < len(self._limits):
                self._next_range = self._limits[self._index]
            else:
                self._next_range = math.inf
        return self._vectors[self._index]


# ══════════════════════════════════════════════════════════════════════════
#  Integrator
# ══════════════════════════════════════════════════════════════════════════

class TrajectoryIntegrator:
    """
    One prepared shot: resolved drag, bullet constants and atmosphere.

    Building it does all the per-shot work once, so repeated ``run`` calls
    (as the zero solver makes) only pay for the stepping itself. Runs share
    nothing mutable.
    """

    def __init__(self, ammunition: Ammunition, atmosphere: Atmosphere,
                 sight_height: float,
                 maximum_step_size: float = DEFAULT_MAXIMUM_STEP_SIZE):
        self._drag = ammunition.projectile.resolved_coefficient.drag
        self._bullet_weight = ammunition.projectile.weight
        self._muzzle_velocity = ammunition.muzzle_velocity
        self._atmosphere = atmosphere
        self._sight_height = sight_height
        self.maximum_step_size = maximum_step_size

    def _point(self, distance: float, time: float, drop: float, windage: float,
               velocity: float) -> TrajectoryPoint:
        _, speed_of_sound = self._atmosphere.density_factor_and_mach(self._atmosphere.altitude + drop)
        return TrajectoryPoint(
            distance=distance,
            time=time,
            velocity=velocity,
            mach=velocity / speed_of_sound,
            energy=calculate_energy(self._bullet_weight, velocity),
            drop=drop,
            drop_adjustment=get_correction(distance, drop),
            windage=windage,
            windage_adjustment=get_correction(distance, windage),
            optimal_game_weight=calculate_optimal_game_weight(self._bullet_weight, velocity),
        )

    def run(self, barrel_elevation: float, maximum_distance: float, step: float,
            winds: Sequence = (), sight_angle: Optional[float] = None,
            cant_angle: float = 0.0,
            integration_step: Optional[float] = None) -> TrajectoryResult:
        """
        Fly the bullet from the muzzle and record a point every *step* feet
        out to *maximum_distance*.

        Parameters
        ----------
        barrel_elevation : launch angle above the line of sight (rad)
        maximum_distance, step : recording grid (ft)
        winds : WindInfo sequence, ordered by until_distance
        sight_angle : angle used to rotate winds into the shot frame;
            defaults to barrel_elevation
        cant_angle : rifle roll (rad)
        integration_step : downrange increment (ft); derived from *step*
            when omitted

        Raises
        ------
        IntegrationDivergence
            Step cap exceeded or the state stopped being physical.
        """
        dx = integration_step or calculation_step(step, self.maximum_step_size)
        count = int(math.floor(maximum_distance / step + _GRID_EPSILON)) + 1
        sock = _WindSock(tuple(winds), barrel_elevation if sight_angle is None else sight_angle,
                         cant_angle)
        atmosphere = self._atmosphere
        alt0 = atmosphere.altitude
        drag_of = self._drag

        velocity = self._muzzle_velocity
        vx = velocity * math.cos(barrel_elevation)
        vy = velocity * math.sin(barrel_elevation)
        vz = 0.0
        x, y, z = 0.0, -self._sight_height, 0.0
        t = 0.0

        points: List[TrajectoryPoint] = [self._point(0.0, 0.0, y, z, velocity)]
        next_index = 1
        steps = 0
        stop_reason = StopReason.COMPLETE

        while next_index < count:
            if velocity < MINIMUM_VELOCITY:
                stop_reason = StopReason.MINIMUM_VELOCITY
                break
            if y < MAXIMUM_DROP:
                stop_reason = StopReason.MAXIMUM_DROP
                break
            if steps >= MAXIMUM_STEPS:
                raise IntegrationDivergence("Step limit exceeded", steps)
            if vx <= 0:
                raise IntegrationDivergence(
                    f"Projectile stopped moving downrange (vx={vx:.4g} ft/s)", steps)

            wx, wy, wz = sock.vector_for_range(x)
            density_factor, speed_of_sound = atmosphere.density_factor_and_mach(alt0 + y)

            dt = dx / vx
            ax = vx - wx
            ay = vy - wy
            az = vz - wz
            air_speed = math.sqrt(ax * ax + ay * ay + az * az)
            drag = density_factor * air_speed * drag_of(air_speed / speed_of_sound)
            vx -= ax * drag * dt
            vy -= (ay * drag - GRAVITY) * dt
            vz -= az * drag * dt

            dy = vy * dt
            dz = vz * dt
            new_x = x + dx
            new_y = y + dy
            new_z = z + dz
            new_velocity = math.sqrt(vx * vx + vy * vy + vz * vz)
            new_t = t + math.sqrt(dx * dx + dy * dy + dz * dz) / new_velocity
            steps += 1

            if not (math.isfinite(new_y) and math.isfinite(new_z)
                    and math.isfinite(new_t)):
                raise IntegrationDivergence(
                    "Projectile state is no longer physical "
                    f"(vx={vx:.4g} ft/s, y={new_y:.4g} ft)", steps)

            while next_index < count and new_x >= next_index * step:
                target = next_index * step
                f = (target - x) / dx
                points.append(self._point(
                    target,
                    t + f * (new_t - t),
                    y + f * (new_y - y),
                    z + f * (new_z - z),
                    velocity + f * (new_velocity - velocity),
                ))
                next_index += 1

            x, y, z, t, velocity = new_x, new_y, new_z, new_t, new_velocity

        if stop_reason is not StopReason.COMPLETE:
            logger.debug("Trajectory stopped at %.1f ft: %s", x, stop_reason.value)
        return TrajectoryResult(points, stop_reason, barrel_elevation)


def integrate(ammunition: Ammunition, weapon: Weapon, atmosphere: Atmosphere,
              barrel_elevation: float, maximum_distance: float, step: float,
              winds: Optional[Sequence] = (), cant_angle: float = 0.0,
              calculation_step: Optional[float] = None,
              sight_angle: Optional[float] = None,
              maximum_step_size: float = DEFAULT_MAXIMUM_STEP_SIZE) -> TrajectoryResult:
    """Integrate one trajectory; see ``TrajectoryIntegrator.run``."""
    integrator = TrajectoryIntegrator(ammunition, atmosphere, weapon.sight_height,
                                      maximum_step_size)
    return integrator.run(barrel_elevation, maximum_distance, step, winds or (),
                          sight_angle, cant_angle, calculation_step)
