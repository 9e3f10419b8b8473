"""Exception types raised by the reconstruction pipeline.

Validation problems are reported immediately. Numeric bad luck (an unlucky
evaluation point or prime) is retried inside the stage that sees it and only
escapes once the stage runs out of attempts. Divergence of a doubling loop and
failure of the final rational reconstruction are always reported, never
papered over with a possibly wrong basis.
"""

from __future__ import annotations

from typing import Optional


class ParamGBError(Exception):
    """Base class for all errors raised by :mod:`paramgb`."""


class InvalidInputError(ParamGBError, ValueError):
    """The input polynomials cannot be handled (empty, mixed rings, bad field)."""


class UnluckyPointError(ParamGBError, ArithmeticError):
    """A specialization produced a basis that disagrees with the generic shape."""


class UnluckyPrimeError(UnluckyPointError):
    """A prime could not produce any basis conforming to the generic shape."""


class InterpolationDivergenceError(ParamGBError, RuntimeError):
    """A doubling loop did not converge within its round or time budget."""

    def __init__(self, message: str, *, stage: Optional[str] = None, rounds: int = 0) -> None:
        super().__init__(message)
        self.stage = stage
        self.rounds = int(rounds)


class ReconstructionFailureError(ParamGBError, ArithmeticError):
    """Rational numbers could not be recovered from the modular images."""
