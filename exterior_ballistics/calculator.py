"""
Trajectory Calculator
=====================
Entry point tying the zero solver and the integrator together:

    calc = TrajectoryCalculator()
    angle = calc.sight_angle(ammunition, weapon, atmosphere)
    shot = ShotParameters(angle, maximum_distance=3000, step=300)
    result = calc.trajectory(ammunition, weapon, atmosphere, shot, winds)
"""

import logging
from typing import Optional, Sequence

from .atmosphere import Atmosphere
from .errors import InvalidConfiguration, ZeroNotFound
from .integrator import DEFAULT_MAXIMUM_STEP_SIZE, TrajectoryResult, integrate
from .projectile import Ammunition, ShotParameters, Weapon, WindInfo
from .zero_solver import solve_zero_angle

logger = logging.getLogger(__name__)


class TrajectoryCalculator:
    """Computes sight angles and range cards with one integration setting."""

    def __init__(self, maximum_step_size: float = DEFAULT_MAXIMUM_STEP_SIZE):
        if maximum_step_size <= 0:
            raise InvalidConfiguration("Maximum step size must be positive")
        self.maximum_step_size = maximum_step_size

    def sight_angle(self, ammunition: Ammunition, weapon: Weapon,
                    atmosphere: Atmosphere) -> float:
        """
        Barrel elevation (rad) relative to the line of sight for the
        weapon's zero.

        Raises
        ------
        ZeroNotFound
            The solver did not converge.
        """
        solution = solve_zero_angle(ammunition, weapon, atmosphere, self.maximum_step_size)
        if not solution.converged:
            raise ZeroNotFound(solution.angle, solution.miss, solution.iterations,
                               solution.reason)
        logger.debug("Sight angle %.6f rad after %d iterations",
                     solution.angle, solution.iterations)
        return solution.angle

    def trajectory(self, ammunition: Ammunition, weapon: Weapon, atmosphere: Atmosphere,
                   shot: ShotParameters,
                   winds: Optional[Sequence[WindInfo]] = None) -> TrajectoryResult:
        """Range card for *shot*, one point per ``shot.step`` feet."""
        return integrate(
            ammunition, weapon, atmosphere,
            shot.sight_angle + shot.shot_angle,
            shot.maximum_distance, shot.step,
            winds=winds or (),
            cant_angle=shot.cant_angle,
            sight_angle=shot.sight_angle,
            maximum_step_size=self.maximum_step_size,
        )


def compute_sight_angle(ammunition: Ammunition, weapon: Weapon,
                        atmosphere: Atmosphere) -> float:
    return TrajectoryCalculator().sight_angle(ammunition, weapon, atmosphere)


def compute_trajectory(ammunition: Ammunition, weapon: Weapon, atmosphere: Atmosphere,
                       shot: ShotParameters,
                       winds: Optional[Sequence[WindInfo]] = None) -> TrajectoryResult:
    return TrajectoryCalculator().trajectory(ammunition, weapon, atmosphere, shot, winds)
