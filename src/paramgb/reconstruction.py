"""Coefficient reconstruction.

The numerators and denominators found modulo the first prime are lifted to
rational numbers. Each coefficient is combined across primes by the Chinese
remainder theorem and then passed through rational-number reconstruction.
Further primes reuse the exponent structure: only the coefficients are
unknown, and they follow from a small linear system per slot. Primes are
added until two consecutive prime sets reconstruct the same rationals.
"""

from __future__ import annotations

import logging
from math import isqrt
from typing import List, Optional, Sequence, Tuple

import sympy as sp
from sympy.ntheory.modular import crt

from .errors import ReconstructionFailureError, UnluckyPrimeError
from .modular import ModularContext, solve_mod
from .oracle import GroebnerOracle
from .sparse import ModPoly, evaluate, from_residues, gf_ring
from .state import PipelineState, RatPoly, Stage

_logger = logging.getLogger(__name__)

STAGE = "coefficients"

SlotImage = Tuple[ModPoly, ModPoly]


def rational_reconstruction(c: int, N: int, bound: Optional[int] = None) -> sp.Rational:
    """Find ``a/b == c (mod N)`` with ``|a| <= bound`` and ``0 < b <= bound``.

    ``bound`` defaults to ``floor(sqrt(N / 2))``, which makes the answer
    unique. Raises :class:`ReconstructionFailureError` if there is none.
    """
    if N <= 1:
        raise ValueError("modulus must be > 1")
    if bound is None:
        bound = isqrt(N // 2)
    c %= N
    if c == 0:
        return sp.Integer(0)

    r0, r1 = N, c
    t0, t1 = 0, 1
    while r1 > bound:
        q = r0 // r1
        r0, r1 = r1, r0 - q * r1
        t0, t1 = t1, t0 - q * t1

    a, b = r1, t1
    if b == 0 or abs(b) > bound:
        raise ReconstructionFailureError(f"No reconstruction for c={c}, N={N}, bound={bound}")
    if b < 0:
        a, b = -a, -b
    if (a - c * b) % N != 0 or sp.igcd(a, b) != 1:
        raise ReconstructionFailureError(f"Validation failed for c={c}, N={N}: got {a}/{b}")
    return sp.Rational(a, b)


def crt_lift(residues: Sequence[int], moduli: Sequence[int]) -> Tuple[int, int]:
    """Combine residues modulo pairwise coprime moduli; returns ``(value, product)``."""
    res = crt(list(moduli), [int(r) for r in residues])
    if res is None:
        raise ReconstructionFailureError("inconsistent residues for the Chinese remainder theorem")
    return int(res[0]), int(res[1])


def reconstruct_poly(images: Sequence[ModPoly], primes: Sequence[int]) -> RatPoly:
    """Rational polynomial whose reductions modulo ``primes`` are ``images``.

    The support is taken from the first image; later images may lack
    monomials whose coefficient vanishes modulo their prime.
    """
    out: RatPoly = {}
    for m in images[0]:
        value, modulus = crt_lift([img.get(m, 0) for img in images], primes)
        c = rational_reconstruction(value, modulus)
        if c != 0:
            out[m] = c
    return out


def reconstruct_all(
    images: Sequence[List[List[SlotImage]]], primes: Sequence[int]
) -> Optional[List[List[Tuple[RatPoly, RatPoly]]]]:
    """Reconstruct every slot, or ``None`` if some coefficient does not lift yet."""
    out: List[List[Tuple[RatPoly, RatPoly]]] = []
    try:
        for i, row in enumerate(images[0]):
            new_row = []
            for j in range(len(row)):
                P = reconstruct_poly([img[i][j][0] for img in images], primes)
                Q = reconstruct_poly([img[i][j][1] for img in images], primes)
                new_row.append((P, Q))
            out.append(new_row)
    except ReconstructionFailureError as exc:
        _logger.debug("Reconstruction with %d primes failed: %s", len(primes), exc)
        return None
    return out


def solve_known_structure(
    numerator: Sequence, denominator: Sequence, lead, points: Sequence[Sequence[int]], ys: Sequence[int], p: int
) -> Optional[SlotImage]:
    """Coefficients of ``P/Q`` on known supports from values ``ys`` at ``points``.

    ``Q`` is normalised to have coefficient 1 at ``lead``. Returns ``None``
    if the values are inconsistent with the supports or do not determine
    the coefficients.
    """
    R = gf_ring(len(lead), p)
    free_den = [m for m in denominator if m != lead]
    A: List[List[int]] = []
    b: List[int] = []
    for x, y in zip(points, ys):
        row = [evaluate(R.from_dict({m: 1}), x) for m in numerator]
        row += [(-y * evaluate(R.from_dict({m: 1}), x)) % p for m in free_den]
        A.append(row)
        b.append(y * evaluate(R.from_dict({lead: 1}), x) % p)
    sol = solve_mod(A, b, p)
    if sol is None:
        return None
    P = {m: c for m, c in zip(numerator, sol[: len(numerator)]) if c}
    Q = {m: c for m, c in zip(free_den, sol[len(numerator):]) if c}
    Q[lead] = 1
    return P, Q


def images_at_prime(
    state: PipelineState,
    modular: ModularContext,
    oracle: GroebnerOracle,
    *,
    extra_points: int = 2,
    max_redraws: int = 3,
) -> List[List[SlotImage]]:
    """Images of every slot modulo ``oracle.prime``, reusing the known structure."""
    p = oracle.prime
    structure = state.param_exponents
    n = state.n_parameters
    R = gf_ring(n, p)
    unknowns = max(len(P) + len(Q) - 1 for row in structure for P, Q in row)
    npoints = unknowns + extra_points

    points = [modular.random_point(n, p) for _ in range(npoints)]
    values: List = [None] * npoints
    pending = list(range(npoints))
    for _ in range(max_redraws + 1):
        for i, v in zip(pending, oracle.collect([points[i] for i in pending], state.shape)):
            values[i] = v
        pending = [i for i in pending if values[i] is None]
        if not pending:
            break
        for i in pending:
            points[i] = modular.random_point(n, p)
    if pending:
        raise UnluckyPrimeError(f"prime {p}: {len(pending)} points stay unlucky")
    state.record_points(STAGE, npoints)

    out: List[List[SlotImage]] = []
    for i, row in enumerate(structure):
        new_row: List[SlotImage] = []
        for j, (P0, Q0) in enumerate(row):
            ys = [v[i][j] for v in values]
            img = solve_known_structure(list(P0), list(Q0), from_residues(R, Q0).LM, points, ys, p)
            if img is None:
                raise UnluckyPrimeError(f"prime {p}: slot ({i}, {j}) does not fit the known structure")
            new_row.append(img)
        out.append(new_row)
    return out


def recover_coefficients(
    state: PipelineState,
    modular: ModularContext,
    oracle: GroebnerOracle,
    *,
    max_primes: int = 6,
) -> None:
    """Fill ``state.param_coeffs`` with exact (P, Q) per slot.

    Primes are added one at a time; the process stops as soon as the
    reconstruction from the current prime set agrees with the one from the
    previous set. Raises :class:`ReconstructionFailureError` after
    ``max_primes`` primes have been tried.
    """
    _logger.info("Recovering the coefficients..")
    primes: List[int] = [oracle.prime]
    images: List[List[List[SlotImage]]] = [state.param_exponents]
    candidate = reconstruct_all(images, primes)
    tried = 1
    while True:
        if tried >= max_primes:
            raise ReconstructionFailureError(
                f"Rational reconstruction did not stabilise with {len(primes)} primes "
                f"({tried} tried)"
            )
        p = modular.next_prime()
        tried += 1
        try:
            img = images_at_prime(state, modular, oracle.at_prime(p))
        except UnluckyPrimeError as exc:
            _logger.warning("Skipping prime %d: %s", p, exc)
            continue
        primes.append(p)
        images.append(img)
        new = reconstruct_all(images, primes)
        if new is not None and new == candidate:
            break
        candidate = new

    state.param_coeffs = candidate
    state.primes = primes
    state.advance(Stage.COEFFICIENTS_KNOWN)
    _logger.info("Success! Used %d primes in total.", len(primes))
