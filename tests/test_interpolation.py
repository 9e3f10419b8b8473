import pytest

from paramgb.cauchy import CauchyInterpolator, rational_interpolate
from paramgb.interpolation import SparseRationalInterpolator
from paramgb.modular import ModularContext, inverse_mod
from paramgb.options import DEFAULT_PRIME
from paramgb.sparse import (
    KroneckerMap,
    SparseInterpolator,
    berlekamp_massey,
    evaluate,
    from_residues,
    gf_ring,
    homogeneous_part,
    residues,
    shift,
    total_degree,
)

P = DEFAULT_PRIME


def _value(poly, pt, p=P):
    return evaluate(from_residues(gf_ring(len(pt), p), poly), pt)


def _ratfun_values(num, den, points, p=P):
    return [_value(num, pt, p) * inverse_mod(_value(den, pt, p), p) % p for pt in points]


def test_polynomial_helpers():
    R = gf_ring(2, P)
    f = R.from_dict({(2, 0): 3, (1, 1): 1, (0, 0): 5})
    assert total_degree(residues(f)) == 2
    assert total_degree({}) == -1
    assert residues(homogeneous_part(f, 2)) == {(2, 0): 3, (1, 1): 1}
    assert evaluate(f, (2, 3)) == 3 * 4 + 6 + 5
    assert evaluate(R.zero, (2, 3)) == 0
    assert residues(R.from_dict({(1, 0): -1})) == {(1, 0): P - 1}


def test_shift_expands_binomial():
    R = gf_ring(1, P)
    # (x + 1)^2 = x^2 + 2x + 1
    assert residues(shift(R.from_dict({(2,): 1}), (1,))) == {(2,): 1, (1,): 2, (0,): 1}
    assert not shift(R.zero, (1,))


def test_grevlex_leading_monomial():
    # Ties in total degree are broken by the smallest power of the last variable.
    assert gf_ring(2, P).from_dict({(1, 0): 1, (0, 1): 1}).LM == (1, 0)
    R = gf_ring(3, P)
    assert R.from_dict({(0, 2, 0): 1, (1, 0, 1): 1}).LM == (0, 2, 0)
    assert R.from_dict({(0, 0, 3): 1, (2, 0, 0): 1}).LM == (2, 0, 0)


def test_cauchy_recovers_univariate_rational_function():
    # (t^2 + 1) / (t + 3)
    xs = list(range(1, 9))
    ys = [(x * x + 1) * inverse_mod(x + 3, P) % P for x in xs]
    res = rational_interpolate(xs, ys, 3, 3, P)
    assert res == ([1, 0, 1], [1, 3])


def test_cauchy_normalizes_constant_term():
    interp = CauchyInterpolator(P, 2, 2)
    assert interp.npoints == 6
    xs = list(range(1, 7))
    ys = [(x * x + 1) * inverse_mod(x + 3, P) % P for x in xs]
    num, den = interp.interpolate_normalized(xs, ys)
    inv3 = inverse_mod(3, P)
    assert den == [inv3, 1]
    assert num == [inv3, 0, inv3]


def test_cauchy_rejects_too_small_bounds():
    xs = list(range(1, 7))
    # t^4 + 1 cannot be written with degrees (1, 1).
    ys = [(x**4 + 1) % P for x in xs]
    assert rational_interpolate(xs, ys, 1, 1, P) is None
    with pytest.raises(ValueError):
        rational_interpolate(xs[:2], ys[:2], 1, 1, P)


def test_berlekamp_massey_finds_fibonacci_recurrence():
    seq = [0, 1, 1, 2, 3, 5, 8, 13]
    assert berlekamp_massey(seq, 101) == [1, 100, 100]


def test_kronecker_map():
    k = KroneckerMap(3, 4)
    assert k.size == 125
    assert k.decode(k.encode((1, 4, 2))) == (1, 4, 2)
    assert k.decode(125) is None
    with pytest.raises(ValueError):
        k.encode((5, 0, 0))


def test_sparse_interpolation_recovers_polynomial():
    f = {(3, 0): 5, (1, 2): 7, (0, 0): 11}
    interp = SparseInterpolator(P, 2, 3, 3)
    values = [_value(f, pt) for pt in interp.evaluation_points()]
    assert residues(interp.interpolate(values)) == f
    assert interp.interpolate(values, homogeneous=3) is None


def test_sparse_interpolation_detects_too_many_terms():
    f = {(3, 0): 5, (1, 2): 7, (0, 0): 11, (2, 1): 1, (0, 3): 4}
    interp = SparseInterpolator(P, 2, 3, 2)
    values = [_value(f, pt) for pt in interp.evaluation_points()]
    assert interp.interpolate(values) is None


def test_sparse_interpolation_rejects_tiny_prime():
    with pytest.raises(ValueError):
        SparseInterpolator(101, 3, 10, 2)


def test_sparse_rational_interpolation():
    # (a^2 + b) / (a*b + 1)
    num = {(2, 0): 1, (0, 1): 1}
    den = {(1, 1): 1, (0, 0): 1}
    scheme = SparseRationalInterpolator(ModularContext(seed=7), 2, 2, [2, 2], [2, 2], 2, 2)
    values = _ratfun_values(num, den, scheme.get_evaluation_points())
    assert scheme.interpolate(values) == (num, den)


def test_sparse_rational_interpolation_normalizes_denominator():
    # 6a / (2b^2 + 4) == 3a / (b^2 + 2)
    num = {(1, 0): 6}
    den = {(0, 2): 2, (0, 0): 4}
    scheme = SparseRationalInterpolator(ModularContext(seed=11), 1, 2, [2, 2], [2, 2], 2, 2)
    values = _ratfun_values(num, den, scheme.get_evaluation_points())
    assert scheme.interpolate(values) == ({(1, 0): 3}, {(0, 2): 1, (0, 0): 2})


def test_sparse_rational_interpolation_fails_with_too_few_terms():
    # The degree-1 part of the numerator has three terms.
    num = {(1, 0, 0): 1, (0, 1, 0): 2, (0, 0, 1): 3}
    den = {(0, 0, 0): 1}
    scheme = SparseRationalInterpolator(ModularContext(seed=5), 1, 0, [1] * 3, [0] * 3, 1, 1)
    values = _ratfun_values(num, den, scheme.get_evaluation_points())
    assert scheme.interpolate(values) is None
