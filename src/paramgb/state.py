from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

import sympy as sp

from .ideal import FractionFreePolynomial, Monom, ParametricIdeal
from .oracle import Shape
from .sparse import ModPoly

# Exact polynomial in the parameters.
RatPoly = Dict[Monom, sp.Rational]


class Stage(IntEnum):
    """Pipeline stages, in the only order they may be reached."""

    START = 0
    SHAPE_KNOWN = 1
    DEGREES_KNOWN = 2
    STRUCTURE_KNOWN = 3
    COEFFICIENTS_KNOWN = 4
    DONE = 5


@dataclass
class PipelineState:
    """Everything discovered about the parametric basis so far.

    Created once per call from the input ideal; each stage fills in its own
    fields and advances :attr:`stage`. The fraction-free generators and, once
    known, the shape are never modified afterwards.
    """

    ideal: ParametricIdeal
    stage: Stage = Stage.START
    shape: Optional[Shape] = None
    # (numerator degree, denominator degree) per basis element and shape monomial.
    param_degrees: Optional[List[List[Tuple[int, int]]]] = None
    # (numerator, denominator) over GF(prime) per slot, denominator lc normalised to 1.
    param_exponents: Optional[List[List[Tuple[ModPoly, ModPoly]]]] = None
    param_coeffs: Optional[List[List[Tuple[RatPoly, RatPoly]]]] = None
    primes: List[int] = field(default_factory=list)
    points_used: Dict[str, int] = field(default_factory=dict)

    @property
    def polys_fracfree(self) -> List[FractionFreePolynomial]:
        return self.ideal.fraction_free()

    @property
    def n_parameters(self) -> int:
        return self.ideal.n_parameters

    def slots(self) -> List[Tuple[int, int]]:
        """All (basis element, monomial) index pairs of the frozen shape."""
        if self.shape is None:
            raise RuntimeError("the shape is not known yet")
        return [(i, j) for i, monoms in enumerate(self.shape) for j in range(len(monoms))]

    def advance(self, stage: Stage) -> None:
        """Move to ``stage``; stages can only be entered one after another."""
        if stage != self.stage + 1:
            raise RuntimeError(f"cannot move from {self.stage.name} to {stage.name}")
        self.stage = stage

    def record_points(self, stage_name: str, npoints: int) -> None:
        self.points_used[stage_name] = self.points_used.get(stage_name, 0) + int(npoints)
