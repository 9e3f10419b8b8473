"""Exponent (structure) interpolation.

Recovers, modulo the working prime, the numerator and denominator of every
coefficient of the parametric basis with
:class:`~paramgb.interpolation.SparseRationalInterpolator`. The term bounds
``(Nt, Dt)`` double each round. A slot is accepted only if the recovered
total degrees are at least the degrees found by Degree Discovery; one failing
slot restarts the round for all of them.

Exactly one prime is used here.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .errors import InterpolationDivergenceError
from .interpolation import SparseRationalInterpolator
from .modular import ModularContext
from .options import RoundBudget
from .oracle import GroebnerOracle
from .sparse import ModPoly, total_degree
from .state import PipelineState, Stage

_logger = logging.getLogger(__name__)

STAGE = "exponents"


def interpolate_param_exponents(
    state: PipelineState,
    modular: ModularContext,
    oracle: GroebnerOracle,
    *,
    budget: RoundBudget,
) -> None:
    """Fill ``state.param_exponents`` with per-slot (P, Q) over ``GF(prime)``."""
    _logger.info("Interpolating the exponents in parameters..")
    degrees = state.param_degrees
    n = state.n_parameters
    Nd = max(d[0] for row in degrees for d in row)
    Dd = max(d[1] for row in degrees for d in row)
    Nds, Dds = [Nd] * n, [Dd] * n
    _logger.info("Interpolating for degrees: numerator %d, denominator %d", Nd, Dd)

    Nt, Dt = 1, 1
    for rnd in budget:
        Nt, Dt = 2 * Nt, 2 * Dt
        try:
            interpolator = SparseRationalInterpolator(modular, Nd, Dd, Nds, Dds, Nt, Dt)
        except ValueError as exc:
            raise InterpolationDivergenceError(str(exc), stage=STAGE, rounds=rnd) from exc
        points = interpolator.get_evaluation_points()
        budget.report(rnd, len(points))
        values = oracle.collect(points, state.shape)
        state.record_points(STAGE, len(points))
        if any(v is None for v in values):
            _logger.debug("Round %d hit unlucky points; retrying with a fresh scheme", rnd)
            continue

        exponents = _interpolate_slots(state, interpolator, values, degrees)
        if exponents is None:
            _logger.debug("Round %d with term bounds (%d, %d) did not converge", rnd, Nt, Dt)
            continue

        state.param_exponents = exponents
        state.advance(Stage.STRUCTURE_KNOWN)
        _logger.info("Success! %d points used.", len(points))
        _logger.debug("The exponents in the coefficients: %s", exponents)
        return


def _interpolate_slots(state, interpolator, values, degrees) -> Optional[List[List[Tuple[ModPoly, ModPoly]]]]:
    out: List[List[Tuple[ModPoly, ModPoly]]] = []
    for i, monoms in enumerate(state.shape):
        row: List[Tuple[ModPoly, ModPoly]] = []
        for j in range(len(monoms)):
            res = interpolator.interpolate([v[i][j] for v in values])
            if res is None:
                return None
            P, Q = res
            if total_degree(P) < degrees[i][j][0] or total_degree(Q) < degrees[i][j][1]:
                _logger.debug(
                    "Slot (%d, %d): recovered degrees (%d, %d) below bounds %s",
                    i, j, total_degree(P), total_degree(Q), degrees[i][j],
                )
                return None
            row.append((P, Q))
        out.append(row)
    return out
