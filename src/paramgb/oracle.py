"""Black-box Groebner oracle over a prime field.

The oracle specializes the fraction-free generators at a point of
``GF(p)^n`` and hands the resulting polynomials to :func:`sympy.groebner`
(``order="grevlex"``, ``modulus=p``). The reduced basis is returned as plain
data: one list of ``(monomial, coefficient)`` pairs per basis element, in
descending grevlex order, each element made monic.

Identical input gives identical output, which is what makes shape comparison
and majority voting meaningful.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import sympy as sp
from sympy.polys.rings import PolyElement

from .errors import UnluckyPointError
from .ideal import FractionFreePolynomial, Monom
from .modular import inverse_mod
from .sparse import evaluate, gf_ring

_logger = logging.getLogger(__name__)

ModularBasis = List[List[Tuple[Monom, int]]]
Shape = Tuple[Tuple[Monom, ...], ...]
# Per basis element, per shape monomial: coefficient value at one point.
SlotValues = List[List[int]]


def reduce_modp(
    polys: Sequence[FractionFreePolynomial], prime: int
) -> List[List[Tuple[Monom, PolyElement]]]:
    """Reduce fraction-free generators modulo ``prime``.

    Coefficients become elements of ``GF(prime)[params]``; terms whose
    coefficient vanishes modulo ``prime`` are dropped.
    """
    out = []
    for f in polys:
        R = gf_ring(f.n_parameters, prime)
        reduced = [(monom, R.from_dict(dict(coeff))) for monom, coeff in f.terms]
        out.append([(monom, c) for monom, c in reduced if c])
    return out


def specialize(
    polys_modp: Sequence[Sequence[Tuple[Monom, PolyElement]]],
    point: Sequence[int],
) -> List[Dict[Monom, int]]:
    """Substitute ``point`` for the parameters; zero polynomials are dropped."""
    out: List[Dict[Monom, int]] = []
    for poly in polys_modp:
        values: Dict[Monom, int] = {}
        for monom, coeff in poly:
            c = evaluate(coeff, point)
            if c:
                values[monom] = c
        if values:
            out.append(values)
    return out


def groebner_modp(
    polys: Sequence[Dict[Monom, int]],
    gens: Sequence[sp.Symbol],
    prime: int,
    *,
    method: str = "buchberger",
) -> ModularBasis:
    """Reduced grevlex Groebner basis of ``polys`` over ``GF(prime)``."""
    exprs = [sp.Poly.from_dict(p, *gens, domain=sp.ZZ).as_expr() for p in polys if p]
    if not exprs:
        return []
    G = sp.groebner(exprs, *gens, order="grevlex", modulus=prime, method=method)
    basis: ModularBasis = []
    for g in G.polys:
        terms = [(tuple(m), int(c) % prime) for m, c in g.terms(order="grevlex")]
        terms = [(m, c) for m, c in terms if c]
        lc_inv = inverse_mod(terms[0][1], prime)
        basis.append([(m, c * lc_inv % prime) for m, c in terms])
    return basis


def basis_shape(basis: ModularBasis) -> Shape:
    """The ordered monomial supports of a basis."""
    return tuple(tuple(m for m, _ in poly) for poly in basis)


def basis_coefficients(basis: ModularBasis, shape: Shape) -> SlotValues:
    """Read the coefficient of every shape monomial from ``basis``.

    The basis must agree with ``shape`` in length and leading monomials, and
    may not contain monomials outside the shape. A shape monomial missing
    from the basis has coefficient zero at this point.
    """
    if len(basis) != len(shape):
        raise UnluckyPointError(
            f"basis has {len(basis)} elements, expected {len(shape)}"
        )
    out: SlotValues = []
    for poly, monoms in zip(basis, shape):
        if not poly or poly[0][0] != monoms[0]:
            raise UnluckyPointError("leading monomials differ from the generic shape")
        coeffs = dict(poly)
        if not set(coeffs) <= set(monoms):
            raise UnluckyPointError("basis element has monomials outside the generic shape")
        out.append([coeffs.get(m, 0) for m in monoms])
    return out


@dataclass
class GroebnerOracle:
    """Evaluate the parametric ideal's basis at points of ``GF(prime)^n``.

    Parameters
    ----------
    polys:
        Fraction-free generators.
    gens:
        Main variables (their order fixes the grevlex order).
    prime:
        Characteristic of the evaluation field.
    method:
        SymPy Groebner method.
    max_workers:
        With more than one worker, batches of points are evaluated on a
        thread pool; results keep the order of the points.
    """

    polys: Sequence[FractionFreePolynomial]
    gens: Tuple[sp.Symbol, ...]
    prime: int
    method: str = "buchberger"
    max_workers: int = 1
    calls: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self.gens = tuple(self.gens)
        self._polys_modp = reduce_modp(self.polys, self.prime)
        _logger.debug("Reduced %d generators modulo %d", len(self._polys_modp), self.prime)

    def at_prime(self, prime: int) -> "GroebnerOracle":
        """The same oracle over another prime field."""
        return GroebnerOracle(self.polys, self.gens, prime, self.method, self.max_workers)

    def basis_at(self, point: Sequence[int]) -> ModularBasis:
        specialized = specialize(self._polys_modp, point)
        return groebner_modp(specialized, self.gens, self.prime, method=self.method)

    def bases_at(self, points: Sequence[Sequence[int]]) -> List[ModularBasis]:
        """Evaluate a batch of independent points and wait for all of them."""
        self.calls += len(points)
        if self.max_workers <= 1 or len(points) <= 1:
            return [self.basis_at(pt) for pt in points]
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(self.basis_at, points))

    def collect(self, points: Sequence[Sequence[int]], shape: Shape) -> List[Optional[SlotValues]]:
        """Coefficient values of every slot at every point.

        Entries are ``None`` for points whose basis does not conform to
        ``shape`` (unlucky points).
        """
        out: List[Optional[SlotValues]] = []
        for point, basis in zip(points, self.bases_at(points)):
            try:
                out.append(basis_coefficients(basis, shape))
            except UnluckyPointError as exc:
                _logger.debug("Unlucky point %s: %s", point, exc)
                out.append(None)
        return out
