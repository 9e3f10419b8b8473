from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .errors import InterpolationDivergenceError

_logger = logging.getLogger(__name__)

# Largest prime below 2^31.
DEFAULT_PRIME = 2**31 - 1

ProgressCallback = Callable[[str, int, int], None]


@dataclass
class ParamGBOptions:
    """Tunable knobs for :func:`paramgb.paramgb`.

    Parameters
    ----------
    eta:
        Number of additional random points used to confirm the basis shape.
    prime:
        Prime used for shape, degree and exponent discovery.
    seed:
        Seed for the NumPy random generator (``None`` for fresh entropy).
    max_shape_attempts:
        How many times Shape Discovery may resample when the vote has no
        strict majority.
    max_degree_rounds, max_exponent_rounds:
        Maximum number of doubling rounds in Degree Discovery and Exponent
        Interpolation.
    max_primes:
        Maximum number of primes used by Coefficient Reconstruction.
    deadline:
        Wall-clock budget in seconds for the whole call, or ``None``.
    max_workers:
        Number of worker threads evaluating the Groebner oracle in parallel.
    groebner_method:
        Method name handed to :func:`sympy.groebner` (``"buchberger"`` or ``"f5b"``).
    progress:
        Optional callable ``progress(stage, round, npoints)``.
    """

    eta: int = 2
    prime: int = DEFAULT_PRIME
    seed: Optional[int] = None
    max_shape_attempts: int = 3
    max_degree_rounds: int = 10
    max_exponent_rounds: int = 8
    max_primes: int = 6
    deadline: Optional[float] = None
    max_workers: int = 1
    groebner_method: str = "buchberger"
    progress: Optional[ProgressCallback] = None

    def __post_init__(self) -> None:
        if self.eta < 0:
            raise ValueError("eta must be nonnegative")
        if self.max_shape_attempts < 1:
            raise ValueError("max_shape_attempts must be positive")
        if self.max_degree_rounds < 1 or self.max_exponent_rounds < 1:
            raise ValueError("round limits must be positive")
        if self.max_primes < 2:
            raise ValueError("max_primes must be at least 2 (reconstruction compares two prime sets)")
        if self.deadline is not None and self.deadline <= 0:
            raise ValueError("deadline must be positive seconds")
        if self.max_workers < 1:
            raise ValueError("max_workers must be positive")
        if self.groebner_method not in ("buchberger", "f5b"):
            raise ValueError(f"Unknown groebner_method '{self.groebner_method}'")

    def expires_at(self) -> Optional[float]:
        """Absolute ``time.monotonic()`` value at which the call must stop."""
        if self.deadline is None:
            return None
        return time.monotonic() + float(self.deadline)


@dataclass
class RoundBudget:
    """Bounded round counter for a doubling loop.

    Iterating yields round numbers ``1, 2, ...``. When the round limit is
    reached, or the deadline has passed, iteration raises
    :class:`InterpolationDivergenceError` instead of stopping silently.
    """

    stage: str
    max_rounds: int
    expires_at: Optional[float] = None
    progress: Optional[ProgressCallback] = None

    def __iter__(self) -> Iterator[int]:
        for rnd in range(1, int(self.max_rounds) + 1):
            self.check_deadline(rnd - 1)
            yield rnd
        raise InterpolationDivergenceError(
            f"{self.stage} did not converge within {self.max_rounds} rounds",
            stage=self.stage,
            rounds=self.max_rounds,
        )

    def check_deadline(self, rounds_done: int) -> None:
        ensure_time_left(self.stage, self.expires_at, rounds_done)

    def report(self, rnd: int, npoints: int) -> None:
        _logger.debug("%s: round %d, using %d points", self.stage, rnd, npoints)
        if self.progress is not None:
            self.progress(self.stage, rnd, npoints)


def ensure_time_left(stage: str, expires_at: Optional[float], rounds_done: int = 0) -> None:
    """Raise :class:`InterpolationDivergenceError` once ``expires_at`` has passed."""
    if expires_at is not None and time.monotonic() > expires_at:
        raise InterpolationDivergenceError(
            f"{stage} ran out of time after {rounds_done} rounds",
            stage=stage,
            rounds=rounds_done,
        )
