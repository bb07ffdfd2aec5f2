"""
Zero Solver
===========
Finds the barrel elevation (relative to the line of sight) that puts the
bullet back on the sight line at the weapon's zero distance.

Each iteration flies the shot to the zero distance, measures the miss and
tilts the barrel by ``-miss / zero_distance``. If a correction makes the
miss grow, it is undone and the following ones are damped.
"""

import logging
import math
from dataclasses import dataclass

from .atmosphere import Atmosphere
from .errors import IntegrationDivergence
from .integrator import DEFAULT_MAXIMUM_STEP_SIZE, TrajectoryIntegrator, calculation_step
from .projectile import Ammunition, Weapon

logger = logging.getLogger(__name__)

ZERO_FINDING_ACCURACY = 5e-6    # ft
MAXIMUM_ITERATIONS = 20
DAMPING_RATE = 0.7


@dataclass(frozen=True)
class ZeroSolution:
    angle: float                # rad
    converged: bool
    iterations: int
    miss: float                 # ft at the zero distance
    reason: str = ''


def solve_zero_angle(ammunition: Ammunition, weapon: Weapon, atmosphere: Atmosphere,
                     maximum_step_size: float = DEFAULT_MAXIMUM_STEP_SIZE) -> ZeroSolution:
    """
    Barrel elevation that zeroes *weapon* for *ammunition* in *atmosphere*.

    If the weapon's ``ZeroInfo`` names its own ammunition or atmosphere,
    those are used instead. Failure to converge is reported through
    ``ZeroSolution.converged``, not raised. The returned miss is the one
    measured at the returned angle, NaN when that trial never reached the
    zero distance.
    """
    zero = weapon.zero
    ammunition = zero.ammunition or ammunition
    atmosphere = zero.atmosphere or atmosphere
    zero_distance = zero.distance

    integrator = TrajectoryIntegrator(ammunition, atmosphere, weapon.sight_height,
                                      maximum_step_size)
    dx = calculation_step(zero_distance / 10, maximum_step_size)

    angle = 0.0
    last_miss = math.inf
    correction = 0.0
    damping = 1.0

    for iterations in range(1, MAXIMUM_ITERATIONS + 1):
        try:
            result = integrator.run(angle, zero_distance, zero_distance, integration_step=dx)
        except IntegrationDivergence as exc:
            logger.debug("Zero iteration %d diverged: %s", iterations, exc)
            return ZeroSolution(angle, False, iterations, math.nan, 'trajectory diverged')
        if len(result) < 2:
            return ZeroSolution(angle, False, iterations, math.nan,
                                'zero distance is out of reach')

        miss = result[-1].drop
        logger.debug("Zero iteration %d: angle=%.8f rad, miss=%.3e ft",
                     iterations, angle, miss)

        if math.fabs(miss) <= ZERO_FINDING_ACCURACY:
            return ZeroSolution(angle, True, iterations, miss)
        if iterations == MAXIMUM_ITERATIONS:
            # report the trial just measured, not an untried correction
            return ZeroSolution(angle, False, iterations, miss, 'iteration limit reached')

        if math.fabs(miss) > math.fabs(last_miss):
            # undo the overshoot and retry from the better angle
            angle += correction
            damping *= DAMPING_RATE
            miss = last_miss
            logger.debug("Miss grew, damping corrections to %.3f", damping)
        else:
            last_miss = miss

        correction = miss / zero_distance * damping
        angle -= correction
    return ZeroSolution(angle, False, 0, math.nan, 'iteration limit reached')
