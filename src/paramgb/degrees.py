"""Degree discovery.

Every coefficient of the parametric basis is a rational function of the
parameters. Restricted to a random line ``t -> shift + t * direction`` its
numerator and denominator degrees equal the total degrees with high
probability. They are found by Cauchy interpolation with trial bounds
``(N, D)`` that double every round; a round is accepted only if every slot
comes out with degrees strictly below ``N // 2`` and ``D // 2``, i.e. the
trial bounds were nowhere near tight.
"""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from sympy.polys.galoistools import gf_degree

from .cauchy import CauchyInterpolator
from .errors import UnluckyPointError
from .modular import ModularContext
from .options import RoundBudget
from .oracle import GroebnerOracle, Shape, SlotValues
from .state import PipelineState, Stage

_logger = logging.getLogger(__name__)

STAGE = "degrees"


def sample_line(
    oracle: GroebnerOracle,
    modular: ModularContext,
    shape: Shape,
    shift: Sequence[int],
    direction: Sequence[int],
    npoints: int,
    *,
    max_redraws: int = 3,
) -> Tuple[List[int], List[SlotValues]]:
    """Evaluate the basis at ``npoints`` distinct points of a line.

    Unlucky points are replaced by fresh points of the same line; after
    ``max_redraws`` passes that still leave unlucky points,
    :class:`UnluckyPointError` is raised.
    """
    p = oracle.prime
    ts = modular.distinct_elements(npoints, p)
    values: List = [None] * npoints
    pending = list(range(npoints))
    for _ in range(max_redraws + 1):
        points = [tuple((s + ts[i] * d) % p for s, d in zip(shift, direction)) for i in pending]
        for i, v in zip(pending, oracle.collect(points, shape)):
            values[i] = v
        pending = [i for i in pending if values[i] is None]
        if not pending:
            return ts, values
        _logger.debug("%d unlucky points on the line, redrawing", len(pending))
        fresh = modular.distinct_elements(len(pending), p, exclude=ts)
        for i, t in zip(pending, fresh):
            ts[i] = t
    raise UnluckyPointError(f"{len(pending)} points of the line stay unlucky after {max_redraws} redraws")


def discover_param_degrees(
    state: PipelineState,
    modular: ModularContext,
    oracle: GroebnerOracle,
    *,
    budget: RoundBudget,
) -> None:
    """Fill ``state.param_degrees`` with (numerator, denominator) degrees per slot."""
    _logger.info("Specializing at random points to guess the total degrees in parameters..")
    n = state.n_parameters
    shape = state.shape
    shift = modular.random_point(n)
    direction = modular.random_point(n)

    N, D = 1, 1
    for rnd in budget:
        N, D = 2 * N, 2 * D
        interpolator = CauchyInterpolator(modular.prime, N, D)
        npoints = interpolator.npoints
        budget.report(rnd, npoints)
        ts, values = sample_line(oracle, modular, shape, shift, direction, npoints)
        state.record_points(STAGE, npoints)

        degrees: List[List[Tuple[int, int]]] = []
        converged = True
        for i, monoms in enumerate(shape):
            row: List[Tuple[int, int]] = []
            for j in range(len(monoms)):
                ys = [v[i][j] for v in values]
                res = interpolator.interpolate(ts, ys)
                if res is None:
                    converged = False
                    row.append((N, D))
                    continue
                P, Q = res
                dp, dq = max(gf_degree(P), 0), gf_degree(Q)
                row.append((dp, dq))
                if not (dp < N // 2 and dq < D // 2):
                    converged = False
            degrees.append(row)

        if converged:
            state.param_degrees = degrees
            state.advance(Stage.DEGREES_KNOWN)
            _logger.info("Success! %d points used.", npoints)
            _logger.info("The total degrees in the coefficients: %s", degrees)
            return
        _logger.debug("Round %d with bounds (%d, %d) did not converge", rnd, N, D)
