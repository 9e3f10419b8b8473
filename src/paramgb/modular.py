"""Modular context: the finite field used for evaluation.

The pipeline never does arithmetic in the field of rational functions. It
reduces the fraction-free input modulo a prime ``p``, specializes the
parameters at random elements of ``GF(p)`` and asks the Groebner oracle for the
basis of the resulting zero-parameter ideal.

A point (or prime) is *lucky* when the specialized basis has the generic
shape. Luckiness cannot be tested in isolation; it is judged against the
shape voted for in :mod:`paramgb.shape`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import sympy as sp
from sympy.polys.domains import GF
from sympy.polys.matrices import DomainMatrix

from .options import DEFAULT_PRIME

_logger = logging.getLogger(__name__)

Point = Tuple[int, ...]


@dataclass
class ModularContext:
    """Finite field ``GF(prime)`` plus the random source used for sampling.

    Parameters
    ----------
    prime:
        The working prime. Shape, degree and exponent discovery all use it.
    seed:
        Seed for :func:`numpy.random.default_rng`.
    """

    prime: int = DEFAULT_PRIME
    seed: Optional[int] = None
    primes_used: List[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.prime = int(self.prime)
        if not sp.isprime(self.prime):
            raise ValueError(f"prime must be a prime number; got {self.prime}")
        if self.prime < 2**16:
            raise ValueError("prime is too small for probabilistic reconstruction (need >= 2^16)")
        self._rng = np.random.default_rng(self.seed)
        if not self.primes_used:
            self.primes_used = [self.prime]

    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    def random_element(self, prime: Optional[int] = None) -> int:
        """A uniformly random nonzero element of ``GF(prime)``."""
        p = self.prime if prime is None else int(prime)
        return int(self._rng.integers(1, p))

    def random_point(self, n: int, prime: Optional[int] = None) -> Point:
        return tuple(self.random_element(prime) for _ in range(int(n)))

    def distinct_elements(self, count: int, prime: Optional[int] = None, *, exclude: Sequence[int] = ()) -> List[int]:
        """``count`` pairwise distinct nonzero field elements not in ``exclude``."""
        p = self.prime if prime is None else int(prime)
        if count > p - 1 - len(exclude):
            raise ValueError("field too small for the requested number of points")
        seen = set(int(e) % p for e in exclude)
        out: List[int] = []
        while len(out) < count:
            c = self.random_element(p)
            if c not in seen:
                seen.add(c)
                out.append(c)
        return out

    def next_prime(self) -> int:
        """Return a fresh prime below every prime handed out so far."""
        p = int(sp.prevprime(min(self.primes_used)))
        self.primes_used.append(p)
        _logger.debug("Switching to a new prime %d", p)
        return p


def inverse_mod(a: int, p: int) -> int:
    """Inverse of ``a`` modulo the prime ``p`` (raises ``ZeroDivisionError`` for 0)."""
    a %= p
    if a == 0:
        raise ZeroDivisionError(f"0 has no inverse modulo {p}")
    return pow(a, -1, p)


def solve_mod(A: Sequence[Sequence[int]], b: Sequence[int], p: int) -> Optional[List[int]]:
    """Solve ``A x = b`` over ``GF(p)`` from the reduced row echelon form of ``[A | b]``.

    ``A`` may have more rows than columns. Returns ``None`` when the system is
    inconsistent or does not determine ``x`` uniquely.
    """
    rows = len(A)
    cols = len(A[0]) if rows else 0
    if cols == 0:
        return None if any(int(rhs) % p for rhs in b) else []
    augmented = [[int(v) for v in row] + [int(rhs)] for row, rhs in zip(A, b)]
    M, pivots = DomainMatrix.from_list(augmented, GF(p)).rref()
    # A pivot in the last column reads 0 = 1; a missing one leaves a free unknown.
    if cols in pivots or len(pivots) < cols:
        return None
    reduced = M.to_list()
    return [int(reduced[i][cols]) % p for i in range(cols)]
