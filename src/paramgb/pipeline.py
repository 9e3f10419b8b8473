from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import sympy as sp

from .degrees import discover_param_degrees
from .exponents import interpolate_param_exponents
from .ideal import Monom, ParametricIdeal, parameter_substitution
from .modular import ModularContext
from .options import ParamGBOptions, RoundBudget, ensure_time_left
from .oracle import GroebnerOracle, Shape
from .reconstruction import recover_coefficients
from .shape import discover_shape
from .state import PipelineState, RatPoly, Stage

_logger = logging.getLogger(__name__)


def _rat_poly_expr(poly: RatPoly, parameters: Sequence[sp.Symbol]) -> sp.Expr:
    return sp.Add(*[c * sp.Mul(*[s**e for s, e in zip(parameters, m)]) for m, c in poly.items()])


@dataclass
class ParametricBasis:
    """Reduced Groebner basis over ``QQ(params)`` in grevlex order.

    Attributes
    ----------
    polys:
        Monic basis polynomials as SymPy ``Poly`` over ``QQ(params)``.
    shape:
        Monomial supports (exponent vectors in the main variables).
    param_degrees:
        Numerator/denominator degrees of every coefficient.
    primes:
        Primes used for the final reconstruction.
    points_used:
        Number of oracle evaluations per stage.
    """

    polys: List[sp.Poly]
    variables: Tuple[sp.Symbol, ...]
    parameters: Tuple[sp.Symbol, ...]
    shape: Shape
    param_degrees: List[List[Tuple[int, int]]] = field(default_factory=list)
    primes: List[int] = field(default_factory=list)
    points_used: Dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.polys)

    def __iter__(self) -> Iterator[sp.Poly]:
        return iter(self.polys)

    def __getitem__(self, i: int) -> sp.Poly:
        return self.polys[i]

    def exprs(self) -> List[sp.Expr]:
        return [f.as_expr() for f in self.polys]

    def specialize(self, values: Union[Mapping[sp.Symbol, sp.Expr], Sequence[sp.Expr]]) -> List[sp.Expr]:
        """Substitute rational parameter values into every basis element."""
        subs = parameter_substitution(self.parameters, values)
        out = []
        for f in self.polys:
            expr = sp.together(f.as_expr().subs(subs))
            if expr.has(sp.zoo, sp.nan):
                raise ZeroDivisionError(f"parameter values {subs} hit a pole of the basis")
            out.append(sp.expand(expr))
        return out


def construct_basis(state: PipelineState) -> ParametricBasis:
    """Assemble the reconstructed coefficients against the frozen shape."""
    ideal = state.ideal
    params = ideal.parameters
    gens = ideal.variables
    domain = ideal.coefficient_field
    polys: List[sp.Poly] = []
    for monoms, row in zip(state.shape, state.param_coeffs):
        terms: Dict[Monom, Any] = {}
        for m, (P, Q) in zip(monoms, row):
            terms[m] = _rat_poly_expr(P, params) / _rat_poly_expr(Q, params)
        expr = sp.Add(*[c * sp.Mul(*[x**e for x, e in zip(gens, m)]) for m, c in terms.items()])
        polys.append(sp.Poly(expr, *gens, domain=domain))
    state.advance(Stage.DONE)
    return ParametricBasis(
        polys=polys,
        variables=gens,
        parameters=params,
        shape=state.shape,
        param_degrees=state.param_degrees,
        primes=list(state.primes),
        points_used=dict(state.points_used),
    )


@dataclass
class ParametricGroebner:
    """Driver for the reconstruction pipeline.

    Parameters
    ----------
    ideal:
        The input ideal.
    options:
        Pipeline configuration.

    Notes
    -----
    Stages run in a fixed order, each looping internally until its own
    convergence criterion holds:
    shape -> degrees -> exponents -> coefficients -> basis.
    """

    ideal: ParametricIdeal
    options: ParamGBOptions = field(default_factory=ParamGBOptions)

    def run(self) -> ParametricBasis:
        opt = self.options
        ideal = self.ideal
        _logger.info(
            "Given %d polynomials in K(%s)[%s]",
            len(ideal.polys),
            ", ".join(map(str, ideal.parameters)),
            ", ".join(map(str, ideal.variables)),
        )
        modular = ModularContext(opt.prime, opt.seed)
        state = PipelineState(ideal)
        oracle = GroebnerOracle(
            ideal.fraction_free(),
            ideal.variables,
            modular.prime,
            method=opt.groebner_method,
            max_workers=opt.max_workers,
        )
        expires_at = opt.expires_at()

        discover_shape(state, modular, oracle, eta=opt.eta, max_attempts=opt.max_shape_attempts)
        discover_param_degrees(
            state,
            modular,
            oracle,
            budget=RoundBudget("degrees", opt.max_degree_rounds, expires_at, opt.progress),
        )
        interpolate_param_exponents(
            state,
            modular,
            oracle,
            budget=RoundBudget("exponents", opt.max_exponent_rounds, expires_at, opt.progress),
        )
        ensure_time_left("coefficients", expires_at)
        recover_coefficients(state, modular, oracle, max_primes=opt.max_primes)
        basis = construct_basis(state)
        _logger.info("Done: %d basis elements, %d oracle calls", len(basis), oracle.calls)
        return basis


def paramgb(
    polys: Union[ParametricIdeal, Sequence[sp.Poly]],
    *,
    options: Optional[ParamGBOptions] = None,
    **overrides: Any,
) -> ParametricBasis:
    """Groebner basis of an ideal with rational-function coefficients.

    The algorithm is probabilistic and succeeds with high probability.

    Parameters
    ----------
    polys:
        A :class:`ParametricIdeal` or a sequence of SymPy ``Poly`` over
        ``QQ(params)`` / ``QQ[params]``.
    options:
        Base configuration; keyword ``overrides`` replace single fields.

    Examples
    --------
    >>> a, b, x, y, z = sp.symbols("a b x y z")
    >>> I = ParametricIdeal.from_exprs([a*x**2 + 1, y**2*z + y/b], [x, y, z], [a, b])
    >>> paramgb(I, seed=1).exprs()
    [y**2*z + y/b, x**2 + 1/a]
    """
    ideal = polys if isinstance(polys, ParametricIdeal) else ParametricIdeal(list(polys))
    opt = options or ParamGBOptions()
    if overrides:
        opt = dataclasses.replace(opt, **overrides)
    return ParametricGroebner(ideal, opt).run()
