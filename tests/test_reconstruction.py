from dataclasses import dataclass

import pytest
import sympy as sp

from paramgb import ParametricIdeal, ReconstructionFailureError, linear_ideal, paramgb
from paramgb.modular import ModularContext, inverse_mod
from paramgb.options import DEFAULT_PRIME
from paramgb.reconstruction import recover_coefficients
from paramgb.sparse import evaluate, gf_ring
from paramgb.state import PipelineState, Stage

P = DEFAULT_PRIME
P2 = int(sp.prevprime(P))

# Basis shape of an ideal in x, y: {x + c1, y + c2}.
SHAPE = (((1, 0), (0, 0)), ((0, 1), (0, 0)))

ONE = ({(0, 0): sp.Integer(1)}, {(0, 0): sp.Integer(1)})
# (a/2 + 3) / (b + 2/3)
SMALL = ({(1, 0): sp.Rational(1, 2), (0, 0): sp.Integer(3)}, {(0, 1): sp.Integer(1), (0, 0): sp.Rational(2, 3)})
# (2^40 + 1)/3 * a, too large to lift from fewer than three primes near 2^31.
LARGE = ({(1, 0): sp.Rational(2**40 + 1, 3)}, {(0, 0): sp.Integer(1)})


def _mod(poly, p):
    return {m: int(c.p) * inverse_mod(int(c.q), p) % p for m, c in poly.items()}


@dataclass
class RationalOracle:
    """Evaluates exact rational functions modulo the current prime."""

    slots: list
    prime: int = P
    unlucky_primes: tuple = ()
    calls: int = 0

    def at_prime(self, p):
        return RationalOracle(self.slots, p, self.unlucky_primes)

    def _value(self, poly, pt):
        return evaluate(gf_ring(len(pt), self.prime).from_dict(_mod(poly, self.prime)), pt)

    def collect(self, points, shape):
        assert shape == SHAPE
        self.calls += len(points)
        if self.prime in self.unlucky_primes:
            return [None] * len(points)
        p = self.prime
        return [
            [[self._value(num, pt) * inverse_mod(self._value(den, pt), p) % p for num, den in row] for row in self.slots]
            for pt in points
        ]


def _state_with_structure(slots):
    state = PipelineState(linear_ideal())
    state.shape = SHAPE
    state.advance(Stage.SHAPE_KNOWN)
    state.param_degrees = [[(0, 0), (1, 1)], [(0, 0), (1, 1)]]
    state.advance(Stage.DEGREES_KNOWN)
    state.param_exponents = [[(_mod(num, P), _mod(den, P)) for num, den in row] for row in slots]
    state.advance(Stage.STRUCTURE_KNOWN)
    return state


def test_recover_coefficients_from_two_primes():
    slots = [[ONE, SMALL], [ONE, SMALL]]
    state = _state_with_structure(slots)
    recover_coefficients(state, ModularContext(seed=3), RationalOracle(slots))
    assert state.param_coeffs == slots
    assert state.primes == [P, P2]
    assert state.stage is Stage.COEFFICIENTS_KNOWN
    assert state.points_used["coefficients"] == 5


def test_recover_coefficients_skips_unlucky_prime():
    slots = [[ONE, SMALL], [ONE, SMALL]]
    state = _state_with_structure(slots)
    modular = ModularContext(seed=3)
    recover_coefficients(state, modular, RationalOracle(slots, unlucky_primes=(P2,)))
    assert state.param_coeffs == slots
    assert P2 in modular.primes_used
    assert P2 not in state.primes
    assert state.primes == [P, int(sp.prevprime(P2))]


def test_recover_coefficients_adds_primes_until_stable():
    slots = [[ONE, LARGE], [ONE, SMALL]]
    state = _state_with_structure(slots)
    recover_coefficients(state, ModularContext(seed=3), RationalOracle(slots))
    assert state.param_coeffs == slots
    # Three primes to lift, a fourth to confirm.
    assert len(state.primes) == 4


def test_recover_coefficients_fails_when_primes_run_out():
    slots = [[ONE, LARGE], [ONE, SMALL]]
    state = _state_with_structure(slots)
    with pytest.raises(ReconstructionFailureError):
        recover_coefficients(state, ModularContext(seed=3), RationalOracle(slots), max_primes=3)
    assert state.param_coeffs is None
    assert state.stage is Stage.STRUCTURE_KNOWN


def test_paramgb_reports_reconstruction_failure():
    a, x = sp.symbols("a x")
    ideal = ParametricIdeal.from_exprs([3 * x - (2**40 + 1) * a], [x], [a])
    with pytest.raises(ReconstructionFailureError):
        paramgb(ideal, seed=1, max_primes=2)
    basis = paramgb(ideal, seed=1)
    (g,) = basis.exprs()
    assert sp.expand(g - (x - sp.Rational(2**40 + 1, 3) * a)) == 0
    assert len(basis.primes) == 4
