"""Univariate rational function interpolation over ``GF(p)`` (Cauchy interpolation).

Polynomials are dense lists of ints, highest degree first, as in
:mod:`sympy.polys.galoistools`. Given ``n`` distinct nodes the interpolating
polynomial ``f`` (degree < n) is computed in Newton form, then the extended
Euclidean algorithm on ``(prod (t - t_i), f)`` is stopped at the first
remainder of degree ``<= N``. Remainder and cofactor give ``P/Q``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from sympy.polys.domains import ZZ
from sympy.polys.galoistools import (
    gf_add,
    gf_degree,
    gf_div,
    gf_eval,
    gf_gcd,
    gf_LC,
    gf_mul,
    gf_mul_ground,
    gf_quo,
    gf_sub,
)

from .modular import inverse_mod

GFPoly = List[int]


def newton_interpolate(xs: Sequence[int], ys: Sequence[int], p: int) -> Tuple[GFPoly, GFPoly]:
    """Return ``(f, M)`` with ``f(x_i) = y_i``, ``deg f < n`` and ``M = prod (t - x_i)``."""
    f: GFPoly = []
    w: GFPoly = [1]
    for x, y in zip(xs, ys):
        wx = int(gf_eval(w, x, p, ZZ))
        if wx == 0:
            raise ValueError("interpolation nodes must be distinct")
        c = (int(y) - int(gf_eval(f, x, p, ZZ))) * inverse_mod(wx, p) % p
        f = gf_add(f, gf_mul_ground(w, c, p, ZZ), p, ZZ)
        w = gf_mul(w, [1, (-x) % p], p, ZZ)
    return f, w


def rational_interpolate(
    xs: Sequence[int], ys: Sequence[int], N: int, D: int, p: int
) -> Optional[Tuple[GFPoly, GFPoly]]:
    """Find ``P/Q`` with ``deg P <= N``, ``deg Q <= D`` and ``P(x_i) = y_i Q(x_i)``.

    The result is reduced and ``Q`` is monic. Returns ``None`` when no such
    fraction interpolates the data.
    """
    if len(xs) != len(ys):
        raise ValueError("xs and ys must have the same length")
    if len(xs) < N + D + 1:
        raise ValueError(f"need at least N + D + 1 = {N + D + 1} points; got {len(xs)}")

    f, M = newton_interpolate(xs, ys, p)
    r0, r1 = M, f
    t0: GFPoly = []
    t1: GFPoly = [1]
    while gf_degree(r1) > N:
        q, r = gf_div(r0, r1, p, ZZ)
        r0, r1 = r1, r
        t0, t1 = t1, gf_sub(t0, gf_mul(q, t1, p, ZZ), p, ZZ)

    P, Q = r1, t1
    if not Q:
        return None
    g = gf_gcd(P, Q, p, ZZ)
    if gf_degree(g) > 0:
        P = gf_quo(P, g, p, ZZ)
        Q = gf_quo(Q, g, p, ZZ)
    inv = inverse_mod(int(gf_LC(Q, ZZ)), p)
    P = [int(c) for c in gf_mul_ground(P, inv, p, ZZ)]
    Q = [int(c) for c in gf_mul_ground(Q, inv, p, ZZ)]

    if gf_degree(P) > N or gf_degree(Q) > D:
        return None
    for x, y in zip(xs, ys):
        qx = int(gf_eval(Q, x, p, ZZ))
        if qx == 0 or int(gf_eval(P, x, p, ZZ)) != int(y) * qx % p:
            return None
    return P, Q


def coefficient(f: GFPoly, k: int) -> int:
    """Coefficient of ``t^k`` in ``f``."""
    d = len(f) - 1
    if k < 0 or k > d:
        return 0
    return int(f[d - k])


@dataclass
class CauchyInterpolator:
    """Rational interpolation with fixed degree bounds ``(N, D)``."""

    prime: int
    N: int
    D: int

    @property
    def npoints(self) -> int:
        return self.N + self.D + 2

    def interpolate(self, xs: Sequence[int], ys: Sequence[int]) -> Optional[Tuple[GFPoly, GFPoly]]:
        return rational_interpolate(xs, ys, self.N, self.D, self.prime)

    def interpolate_normalized(
        self, xs: Sequence[int], ys: Sequence[int]
    ) -> Optional[Tuple[GFPoly, GFPoly]]:
        """Like :meth:`interpolate`, but scaled so that ``Q(0) = 1``.

        Returns ``None`` if ``Q(0) = 0``.
        """
        res = self.interpolate(xs, ys)
        if res is None:
            return None
        P, Q = res
        q0 = coefficient(Q, 0)
        if q0 == 0:
            return None
        inv = inverse_mod(q0, self.prime)
        P = [int(c) for c in gf_mul_ground(P, inv, self.prime, ZZ)]
        Q = [int(c) for c in gf_mul_ground(Q, inv, self.prime, ZZ)]
        return P, Q
