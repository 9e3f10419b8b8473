"""Shape discovery.

The shape of the parametric basis (number of elements and the monomials of
each) is guessed from the bases of a few random specializations modulo a
prime. All but finitely many parameter values give the generic shape, so a
strict majority among ``1 + eta`` samples is taken as authoritative.
"""

from __future__ import annotations

import logging
import warnings
from collections import Counter
from typing import List, Sequence

from .errors import UnluckyPointError
from .modular import ModularContext
from .oracle import GroebnerOracle, ModularBasis, basis_shape
from .state import PipelineState, Stage

_logger = logging.getLogger(__name__)


def majority_rule(bases: Sequence[ModularBasis]) -> ModularBasis:
    """Return a basis whose shape is shared by a strict majority of ``bases``.

    Raises :class:`UnluckyPointError` when no shape wins more than half of
    the votes.
    """
    if not bases:
        raise ValueError("majority_rule needs at least one basis")
    if len(bases) == 1:
        return bases[0]
    votes = Counter(basis_shape(b) for b in bases)
    winner, count = votes.most_common(1)[0]
    if 2 * count <= len(bases):
        raise UnluckyPointError(
            f"no majority among {len(bases)} sampled bases ({len(votes)} distinct shapes)"
        )
    if count < len(bases):
        _logger.warning(
            "%d of %d sampled bases disagree with the majority shape", len(bases) - count, len(bases)
        )
    return next(b for b in bases if basis_shape(b) == winner)


def discover_shape(
    state: PipelineState,
    modular: ModularContext,
    oracle: GroebnerOracle,
    *,
    eta: int = 2,
    max_attempts: int = 3,
) -> None:
    """Fix ``state.shape`` from ``1 + eta`` random specializations.

    When the sampled bases have no majority shape, fresh points are drawn, up
    to ``max_attempts`` times.
    """
    if eta == 0:
        warnings.warn("Fixing the shape of the basis from 1 point is adventurous.", stacklevel=2)
    _logger.info("Specializing at 1 + %d random points to guess the basis shape..", eta)

    n = state.n_parameters
    last_error: UnluckyPointError = UnluckyPointError("shape discovery made no attempt")
    for attempt in range(1, int(max_attempts) + 1):
        points = [modular.random_point(n) for _ in range(1 + eta)]
        bases: List[ModularBasis] = oracle.bases_at(points)
        state.record_points("shape", len(points))
        try:
            basis = majority_rule(bases)
        except UnluckyPointError as exc:
            _logger.warning("Shape vote failed (attempt %d/%d): %s", attempt, max_attempts, exc)
            last_error = exc
            continue
        state.shape = basis_shape(basis)
        state.advance(Stage.SHAPE_KNOWN)
        _logger.info(
            "The shape of the basis is: %d polynomials with %s monomials",
            len(state.shape),
            [len(m) for m in state.shape],
        )
        _logger.debug("Shape: %s", state.shape)
        return
    raise last_error
