"""Sparse polynomial interpolation over ``GF(p)`` and helpers for polynomials over ``GF(p)``.

A polynomial ``F = sum c_k x^{e_k}`` with at most ``T`` terms is recovered from
its values at the geometric sequence ``xi_i = (w_1^i, ..., w_n^i)``,
``i = 0, 1, ...``, where ``w_j = g^{(d+1)^(j-1)}`` for a primitive root ``g``.
Each term contributes ``c_k m_k^i`` with ``m_k = g^{K(e_k)}`` and ``K`` the
Kronecker encoding of the exponent vector in base ``d + 1``. Berlekamp--Massey
finds the minimal recurrence of the value sequence, its roots are the
``m_k``, discrete logarithms give back ``K(e_k)``, and a transposed
Vandermonde system yields the ``c_k``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import sympy as sp
from sympy.ntheory import discrete_log, primitive_root
from sympy.polys.domains import GF, ZZ
from sympy.polys.galoistools import gf_factor_sqf, gf_sqf_p
from sympy.polys.monomials import monomial_deg
from sympy.polys.orderings import grevlex
from sympy.polys.rings import PolyElement, PolyRing, ring

from .modular import inverse_mod, solve_mod

_logger = logging.getLogger(__name__)

Monom = Tuple[int, ...]
# Residues modulo p of a polynomial in the parameters; the form stored between stages.
ModPoly = Dict[Monom, int]


# -----------------------------
# Polynomials over GF(p)
# -----------------------------


def gf_ring(n_vars: int, p: int) -> PolyRing:
    """Sparse polynomial ring ``GF(p)[t0, ..., t{n-1}]`` ordered by grevlex."""
    gens = sp.symbols(f"t:{int(n_vars)}")
    return ring(list(gens), GF(int(p)), grevlex)[0]


def from_residues(R: PolyRing, poly: ModPoly) -> PolyElement:
    return R.from_dict(dict(poly))


def residues(f: PolyElement) -> ModPoly:
    """Coefficients of ``f`` as integers in ``[0, p)``."""
    p = f.ring.domain.mod
    return {m: int(c) % p for m, c in f.iterterms()}


def evaluate(f: PolyElement, point: Sequence[int]) -> int:
    """Value of ``f`` at ``point`` as an integer in ``[0, p)``."""
    if not f:
        return 0
    return int(f(*point)) % f.ring.domain.mod


def total_degree(poly) -> int:
    """Total degree; -1 for the zero polynomial."""
    return max((monomial_deg(m) for m in poly), default=-1)


def homogeneous_part(f: PolyElement, k: int) -> PolyElement:
    return f.ring.from_dict({m: c for m, c in f.iterterms() if monomial_deg(m) == k})


def shift(f: PolyElement, point: Sequence[int]) -> PolyElement:
    """``f(t + point)``."""
    R = f.ring
    return f.compose([(t, t + s) for t, s in zip(R.gens, point)])


# -----------------------------
# Berlekamp--Massey
# -----------------------------


def berlekamp_massey(seq: Sequence[int], p: int) -> List[int]:
    """Minimal connection polynomial ``[1, c_1, ..., c_L]`` of ``seq`` over ``GF(p)``.

    The returned coefficients satisfy
    ``seq[i] + c_1 seq[i-1] + ... + c_L seq[i-L] = 0`` for ``L <= i < len(seq)``.
    """
    C = [1]
    B = [1]
    L = 0
    m = 1
    b = 1
    for n in range(len(seq)):
        d = seq[n] % p
        for i in range(1, L + 1):
            if i < len(C):
                d = (d + C[i] * seq[n - i]) % p
        if d == 0:
            m += 1
            continue
        coef = d * inverse_mod(b, p) % p
        T = list(C)
        if len(C) < len(B) + m:
            C = C + [0] * (len(B) + m - len(C))
        for i, bi in enumerate(B):
            C[i + m] = (C[i + m] - coef * bi) % p
        if 2 * L <= n:
            L = n + 1 - L
            B = T
            b = d
            m = 1
        else:
            m += 1
    C = (C + [0] * (L + 1))[: L + 1]
    return C


# -----------------------------
# Kronecker substitution
# -----------------------------


@dataclass(frozen=True)
class KroneckerMap:
    """Exponent vectors with entries ``<= degree`` <-> integers in base ``degree + 1``."""

    n_vars: int
    degree: int

    @property
    def base(self) -> int:
        return self.degree + 1

    @property
    def size(self) -> int:
        return self.base ** self.n_vars

    def encode(self, monom: Monom) -> int:
        k = 0
        for e in reversed(monom):
            if e < 0 or e > self.degree:
                raise ValueError(f"exponent {e} out of range [0, {self.degree}]")
            k = k * self.base + e
        return k

    def decode(self, k: int) -> Optional[Monom]:
        if k < 0 or k >= self.size:
            return None
        out = []
        for _ in range(self.n_vars):
            k, e = divmod(k, self.base)
            out.append(e)
        return tuple(out)


# -----------------------------
# Sparse interpolation
# -----------------------------


def _roots(charpoly: List[int], p: int) -> Optional[List[int]]:
    """Distinct roots of a monic polynomial that splits into linear factors, else None."""
    if len(charpoly) == 1:
        return []
    if not gf_sqf_p(charpoly, p, ZZ):
        return None
    _, factors = gf_factor_sqf(charpoly, p, ZZ)
    roots = []
    for f in factors:
        if len(f) != 2:
            return None
        roots.append(int(-f[1]) % p)
    return roots


@dataclass
class SparseInterpolator:
    """Recover polynomials with at most ``terms`` terms and partial degrees ``<= degree``.

    Parameters
    ----------
    prime:
        Field characteristic.
    n_vars:
        Number of variables.
    degree:
        Bound on every partial degree.
    terms:
        Bound on the number of terms. ``2 * terms + 1`` values are used, the
        last one as a check.
    """

    prime: int
    n_vars: int
    degree: int
    terms: int

    def __post_init__(self) -> None:
        self.kronecker = KroneckerMap(self.n_vars, self.degree)
        if self.kronecker.size >= self.prime - 1:
            raise ValueError(
                f"prime {self.prime} is too small for {self.n_vars} variables of degree {self.degree}"
            )
        self.generator = int(primitive_root(self.prime))
        self.omegas = tuple(
            pow(self.generator, self.kronecker.base ** j, self.prime) for j in range(self.n_vars)
        )
        self.ring = gf_ring(self.n_vars, self.prime)

    @property
    def npoints(self) -> int:
        return 2 * self.terms + 1

    def evaluation_points(self) -> List[Tuple[int, ...]]:
        """``xi_i = (w_1^i, ..., w_n^i)`` for ``i = 0..npoints-1``."""
        return [tuple(pow(w, i, self.prime) for w in self.omegas) for i in range(self.npoints)]

    def interpolate(self, values: Sequence[int], *, homogeneous: Optional[int] = None) -> Optional[PolyElement]:
        """Recover the polynomial from its values at :meth:`evaluation_points`.

        Returns ``None`` if the values are not explained by a polynomial with
        at most ``terms`` terms (and, when ``homogeneous`` is given, of that
        total degree).
        """
        p = self.prime
        vals = [int(v) % p for v in values]
        if len(vals) < self.npoints:
            raise ValueError(f"need {self.npoints} values; got {len(vals)}")
        if not any(vals):
            return self.ring.zero

        conn = berlekamp_massey(vals, p)
        L = len(conn) - 1
        if L > self.terms or 2 * L >= len(vals):
            return None
        roots = _roots(conn, p)
        if roots is None or len(roots) != L or 0 in roots:
            return None

        monoms: List[Monom] = []
        for r in roots:
            try:
                k = int(discrete_log(p, r, self.generator))
            except ValueError:
                return None
            m = self.kronecker.decode(k)
            if m is None:
                return None
            if homogeneous is not None and monomial_deg(m) != homogeneous:
                return None
            monoms.append(m)

        A = [[pow(r, i, p) for r in roots] for i in range(L)]
        coeffs = solve_mod(A, vals[:L], p)
        if coeffs is None:
            return None
        f = self.ring.from_dict(dict(zip(monoms, coeffs)))
        # The remaining values must be reproduced exactly.
        points = self.evaluation_points()
        if any(evaluate(f, points[i]) != vals[i] for i in range(L, len(vals))):
            return None
        return f
