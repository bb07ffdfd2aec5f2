"""
Exceptions
==========
All errors raised by the package derive from ``BallisticsError``.

  - InvalidConfiguration : bad input caught when an object is built
  - IntegrationDivergence: the integrator hit its step cap or blew up
  - ZeroNotFound         : the zero solver ran out of iterations
"""


class BallisticsError(Exception):
    """Base class for every error raised by exterior_ballistics."""


class InvalidConfiguration(BallisticsError, ValueError):
    """A coefficient, drag table or configuration record is malformed."""


class IntegrationDivergence(BallisticsError, RuntimeError):
    """Trajectory integration stopped on its safety bound."""

    def __init__(self, message: str, steps: int):
        super().__init__(f"{message} (after {steps} steps)")
        self.steps = steps


class ZeroNotFound(BallisticsError):
    """Zero solver gave up before the miss fell within tolerance.

    Carries the last trial angle so callers can judge how close it got.
    """

    def __init__(self, angle: float, miss: float, iterations: int,
                 reason: str = 'iteration limit reached'):
        super().__init__(
            f"Zero not found: {reason} after {iterations} iterations "
            f"(last angle {angle:.6f} rad, miss {miss:.6f} ft)"
        )
        self.angle = angle
        self.miss = miss
        self.iterations = iterations
        self.reason = reason
