"""Sparse multivariate rational function interpolation over ``GF(p)``.

The scheme recovers ``f = P/Q`` in ``n`` parameters from black-box values.

1. Pick a random shift ``s`` and put ``g(y) = f(y + s)``. With high
   probability ``Q(s) != 0``, so ``g = A/B`` with ``B(0) = 1`` where
   ``A = P(y + s)/Q(s)`` and ``B = Q(y + s)/Q(s)``.
2. For a direction ``xi``, ``t -> g(t xi)`` is univariate with numerator and
   denominator degrees ``<= Nd, Dd``. Cauchy interpolation from ``Nd + Dd + 2``
   values of ``t``, normalised to ``B(0) = 1``, yields the values at ``xi`` of
   every homogeneous component ``A_k`` and ``B_k``.
3. The directions run through the geometric sequence of
   :class:`~paramgb.sparse.SparseInterpolator`, so every homogeneous
   component can be interpolated sparsely. The shift spoils sparsity of
   ``A_k`` except for the top degree, hence components are peeled from the
   top: ``P_k / Q(s) = A_k - sum_{j > k} [P_j(y + s)/Q(s)]_k``.

The result is normalised so that the grevlex leading coefficient of ``Q``
is 1.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from sympy.polys.rings import PolyElement

from .cauchy import CauchyInterpolator, coefficient
from .modular import ModularContext
from .sparse import ModPoly, SparseInterpolator, evaluate, homogeneous_part, residues, shift

Point = Tuple[int, ...]


@dataclass
class SparseRationalInterpolator:
    """Interpolation scheme for rational functions with known degree bounds.

    Parameters
    ----------
    modular:
        Source of the prime and of the random shift and line parameters.
    Nd, Dd:
        Total degree bounds of numerator and denominator.
    Nds, Dds:
        Per-variable degree bounds of numerator and denominator.
    Nt, Dt:
        Bounds on the number of terms of every homogeneous component of the
        numerator and denominator.
    """

    modular: ModularContext
    Nd: int
    Dd: int
    Nds: Sequence[int]
    Dds: Sequence[int]
    Nt: int
    Dt: int

    def __post_init__(self) -> None:
        p = self.modular.prime
        n = len(self.Nds)
        if len(self.Dds) != n:
            raise ValueError("Nds and Dds must have the same length")
        degree = max(list(self.Nds) + list(self.Dds) + [0])
        self._numerator = SparseInterpolator(p, n, degree, self.Nt)
        self._denominator = SparseInterpolator(p, n, degree, self.Dt)
        widest = self._numerator if self.Nt >= self.Dt else self._denominator
        self._directions = widest.evaluation_points()
        self._cauchy = CauchyInterpolator(p, self.Nd, self.Dd)
        self._ts = self.modular.distinct_elements(self._cauchy.npoints)
        self.shift: Point = self.modular.random_point(n)

    @property
    def prime(self) -> int:
        return self.modular.prime

    def get_evaluation_points(self) -> List[Point]:
        """Points ``s + t * xi``, grouped by direction ``xi``."""
        p = self.prime
        return [
            tuple((s + t * x) % p for s, x in zip(self.shift, xi))
            for xi in self._directions
            for t in self._ts
        ]

    def interpolate(self, values: Sequence[int]) -> Optional[Tuple[ModPoly, ModPoly]]:
        """Recover ``(P, Q)`` from values at :meth:`get_evaluation_points`.

        Returns ``None`` when the bounds are too small for the data or the
        random choices were unlucky.
        """
        m = len(self._ts)
        if len(values) != m * len(self._directions):
            raise ValueError("values do not match the evaluation points")

        num_comps = [[0] * len(self._directions) for _ in range(self.Nd + 1)]
        den_comps = [[0] * len(self._directions) for _ in range(self.Dd + 1)]
        for i in range(len(self._directions)):
            res = self._cauchy.interpolate_normalized(self._ts, values[i * m : (i + 1) * m])
            if res is None:
                return None
            A, B = res
            for k in range(self.Nd + 1):
                num_comps[k][i] = coefficient(A, k)
            for k in range(self.Dd + 1):
                den_comps[k][i] = coefficient(B, k)

        P = self._peel(num_comps, self._numerator)
        Q = self._peel(den_comps, self._denominator)
        if P is None or Q is None or not Q:
            return None
        lc = Q.LC
        return residues(P.quo_ground(lc)), residues(Q.monic())

    def _peel(self, comps: List[List[int]], sparse: SparseInterpolator) -> Optional[PolyElement]:
        p = self.prime
        npts = sparse.npoints
        poly = sparse.ring.zero
        for k in reversed(range(len(comps))):
            shifted = homogeneous_part(shift(poly, self.shift), k)
            vals = [
                (comps[k][i] - evaluate(shifted, self._directions[i])) % p
                for i in range(npts)
            ]
            part = sparse.interpolate(vals, homogeneous=k)
            if part is None:
                return None
            poly += part
        return poly
