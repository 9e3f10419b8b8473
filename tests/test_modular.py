import pytest
import sympy as sp

from paramgb import ReconstructionFailureError
from paramgb.modular import ModularContext, inverse_mod, solve_mod
from paramgb.options import DEFAULT_PRIME
from paramgb.reconstruction import (
    crt_lift,
    rational_reconstruction,
    reconstruct_poly,
    solve_known_structure,
)
from paramgb.sparse import evaluate, gf_ring


def test_modular_context_validates_prime():
    with pytest.raises(ValueError):
        ModularContext(2**31)
    with pytest.raises(ValueError):
        ModularContext(101)


def test_random_points_are_nonzero_and_reproducible():
    m1 = ModularContext(seed=42)
    m2 = ModularContext(seed=42)
    pts1 = [m1.random_point(3) for _ in range(5)]
    pts2 = [m2.random_point(3) for _ in range(5)]
    assert pts1 == pts2
    assert all(0 < c < DEFAULT_PRIME for pt in pts1 for c in pt)


def test_distinct_elements_respect_exclusions():
    m = ModularContext(seed=1)
    first = m.distinct_elements(20)
    second = m.distinct_elements(20, exclude=first)
    assert len(set(first)) == 20
    assert not set(first) & set(second)


def test_next_prime_gives_fresh_smaller_primes():
    m = ModularContext(seed=0)
    p1 = m.next_prime()
    p2 = m.next_prime()
    assert DEFAULT_PRIME > p1 > p2
    assert sp.isprime(p1) and sp.isprime(p2)
    assert m.primes_used == [DEFAULT_PRIME, p1, p2]


def test_inverse_mod():
    p = 101
    assert inverse_mod(7, p) * 7 % p == 1
    with pytest.raises(ZeroDivisionError):
        inverse_mod(0, p)


def test_solve_mod_square_and_overdetermined():
    p = 101
    assert solve_mod([[2, 1], [1, 3]], [5, 10], p) == [1, 3]
    # Extra consistent row.
    assert solve_mod([[2, 1], [1, 3], [1, 1]], [5, 10, 4], p) == [1, 3]
    # Extra inconsistent row.
    assert solve_mod([[2, 1], [1, 3], [1, 1]], [5, 10, 5], p) is None
    # Singular.
    assert solve_mod([[1, 2], [2, 4]], [1, 2], p) is None
    # More unknowns than equations.
    assert solve_mod([[1, 2, 3]], [4], p) is None
    # Negative entries are reduced modulo p.
    assert solve_mod([[-1, 0], [0, 1]], [-3, 2], p) == [3, 2]
    assert solve_mod([[], []], [0, 0], p) == []
    assert solve_mod([[], []], [0, 1], p) is None


def test_rational_reconstruction_recovers_small_fractions():
    p1 = DEFAULT_PRIME
    p2 = int(sp.prevprime(p1))
    N = p1 * p2
    for q in [sp.Rational(22, 7), sp.Rational(-5, 3), sp.Rational(123456, 789), sp.Integer(-17)]:
        c = int(q.p) * inverse_mod(int(q.q), N) % N
        assert rational_reconstruction(c, N) == q
    assert rational_reconstruction(0, N) == 0


def test_rational_reconstruction_fails_without_small_solution():
    # Modulo 11 with bound 2 the residue 3 is not a/b with |a|, b <= 2.
    with pytest.raises(ReconstructionFailureError):
        rational_reconstruction(3, 11)


def test_crt_lift():
    assert crt_lift([2, 3], [5, 7]) == (17, 35)


def test_reconstruct_poly_across_primes():
    p1 = DEFAULT_PRIME
    p2 = int(sp.prevprime(p1))
    target = {(1, 0): sp.Rational(3, 7), (0, 2): sp.Rational(-1, 2)}

    def image(p):
        return {m: int(c.p) * inverse_mod(int(c.q), p) % p for m, c in target.items()}

    assert reconstruct_poly([image(p1), image(p2)], [p1, p2]) == target


def test_solve_known_structure_recovers_coefficients():
    p = DEFAULT_PRIME
    m = ModularContext(seed=3)
    # f = (2a + 5b) / (a*b + 3)
    P = {(1, 0): 2, (0, 1): 5}
    Q = {(1, 1): 1, (0, 0): 3}
    points = [m.random_point(2) for _ in range(6)]
    R = gf_ring(2, p)
    ys = [evaluate(R.from_dict(P), pt) * inverse_mod(evaluate(R.from_dict(Q), pt), p) % p for pt in points]
    res = solve_known_structure(list(P), list(Q), (1, 1), points, ys, p)
    assert res == (P, Q)
