from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import sympy as sp
from sympy.polys.polyerrors import CoercionFailed, PolynomialError

from .errors import InvalidInputError

Monom = Tuple[int, ...]


class CoefficientRing(Enum):
    """How the coefficients of the input are presented."""

    FRACTIONS = "fractions"  # QQ(params)
    POLYNOMIALS = "polynomials"  # QQ[params]


def coefficient_ring(domain) -> Tuple[CoefficientRing, Tuple[sp.Symbol, ...]]:
    """Classify a SymPy domain as ``QQ(params)`` or ``QQ[params]``.

    Returns the tag and the parameter symbols. Any other domain (no
    parameters, floating point, finite fields, algebraic extensions) is
    rejected with :class:`InvalidInputError`.
    """
    if domain.is_FractionField:
        tag = CoefficientRing.FRACTIONS
    elif domain.is_PolynomialRing:
        tag = CoefficientRing.POLYNOMIALS
    else:
        raise InvalidInputError(
            f"Unknown coefficient ring {domain}; expected QQ(params) or QQ[params]."
        )
    ground = domain.domain
    if not (ground.is_QQ or ground.is_ZZ):
        raise InvalidInputError(f"Coefficient ring must be over QQ; got ground domain {ground}.")
    params = tuple(domain.symbols)
    if not params:
        raise InvalidInputError("The coefficient ring has no parameters.")
    return tag, params


@dataclass(frozen=True)
class FractionFreePolynomial:
    """A polynomial in the main variables with coefficients in ``ZZ[params]``.

    Obtained by multiplying an input polynomial by the lcm of all coefficient
    denominators (parameter polynomials and integers). Over ``QQ(params)``
    this is a unit multiple, so the ideal is unchanged.
    """

    terms: Tuple[Tuple[Monom, Tuple[Tuple[Monom, int], ...]], ...]
    n_parameters: int


def _fraction_free(poly: sp.Poly, parameters: Sequence[sp.Symbol]) -> FractionFreePolynomial:
    terms = poly.terms()
    nums: List[sp.Expr] = []
    dens: List[sp.Expr] = []
    for _, c in terms:
        num, den = sp.fraction(sp.cancel(sp.together(c)))
        nums.append(num)
        dens.append(den)

    common = sp.lcm_list(dens, *parameters) if dens else sp.Integer(1)
    lifted: List[sp.Poly] = []
    for num, den in zip(nums, dens):
        q = sp.cancel(num * common / den)
        lifted.append(sp.Poly(q, *parameters, domain=sp.QQ))

    # Clear the remaining integer denominators.
    scale = 1
    for p in lifted:
        for c in p.coeffs():
            scale = sp.ilcm(scale, sp.Rational(c).q)

    out = []
    for (monom, _), p in zip(terms, lifted):
        coeff = tuple((tuple(e), int(sp.Rational(c) * scale)) for e, c in p.terms())
        out.append((tuple(monom), coeff))
    return FractionFreePolynomial(tuple(out), len(parameters))


@dataclass
class ParametricIdeal:
    """An ideal generated by polynomials with rational-function coefficients.

    Parameters
    ----------
    polys:
        SymPy ``Poly`` objects in the main variables. Their domain must be
        ``QQ(params)`` or ``QQ[params]`` (``ZZ`` ground is accepted as well),
        and all of them must live in the same ring.

    Notes
    -----
    Zero generators are dropped. Coefficients are lifted once to the
    fraction-free form used by every modular computation.
    """

    polys: List[sp.Poly]
    ring: CoefficientRing = field(init=False)
    _fracfree: Optional[List[FractionFreePolynomial]] = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        polys = list(self.polys)
        if not polys:
            raise InvalidInputError("Empty input is invalid.")
        if any(not isinstance(f, sp.Poly) for f in polys):
            raise InvalidInputError("All generators must be sympy.Poly objects.")
        first = polys[0]
        for f in polys[1:]:
            if f.gens != first.gens or f.domain != first.domain:
                raise InvalidInputError("All polynomials must be in the same ring.")
        self.ring, self._parameters = coefficient_ring(first.domain)
        if set(self._parameters) & set(first.gens):
            raise InvalidInputError("Parameters and main variables must be disjoint.")

        self._variables = tuple(first.gens)
        self.polys = [f for f in polys if not f.is_zero]
        if not self.polys:
            raise InvalidInputError("All generators are zero.")

    @property
    def variables(self) -> Tuple[sp.Symbol, ...]:
        """Main indeterminates, ordered as in the input ring."""
        return self._variables

    @property
    def parameters(self) -> Tuple[sp.Symbol, ...]:
        return self._parameters

    @property
    def n_variables(self) -> int:
        return len(self._variables)

    @property
    def n_parameters(self) -> int:
        return len(self._parameters)

    @property
    def over_fractions(self) -> bool:
        return self.ring is CoefficientRing.FRACTIONS

    @property
    def coefficient_field(self):
        """The coefficient field ``QQ(params)`` of the output basis."""
        return sp.QQ.frac_field(*self._parameters)

    def fraction_free(self) -> List[FractionFreePolynomial]:
        """Generators with denominators cleared (computed once, then cached)."""
        if self._fracfree is None:
            self._fracfree = [_fraction_free(f, self._parameters) for f in self.polys]
        return self._fracfree

    def specialize(self, values: Union[Mapping[sp.Symbol, sp.Expr], Sequence[sp.Expr]]) -> List[sp.Expr]:
        """Substitute rational values for the parameters.

        Generators whose coefficients have a pole at ``values`` raise
        ``ZeroDivisionError``.
        """
        subs = parameter_substitution(self._parameters, values)
        out: List[sp.Expr] = []
        for f in self.polys:
            expr = sp.together(f.as_expr().subs(subs))
            if expr.has(sp.zoo, sp.nan):
                raise ZeroDivisionError(f"parameter values {subs} hit a pole")
            out.append(sp.expand(expr))
        return out

    def summary(self) -> str:
        """Human-readable summary."""
        lines = []
        lines.append(f"ParametricIdeal(n_generators={len(self.polys)}, ring={self.ring.value})")
        lines.append("Variables: " + ", ".join(str(s) for s in self.variables))
        lines.append("Parameters: " + ", ".join(str(s) for s in self.parameters))
        for f in self.polys:
            lines.append("  " + sp.sstr(f.as_expr()))
        return "\n".join(lines)

    # -----------------------------
    # Constructors
    # -----------------------------

    @classmethod
    def from_exprs(
        cls,
        exprs: Sequence[sp.Expr],
        variables: Sequence[sp.Symbol],
        parameters: Sequence[sp.Symbol],
    ) -> "ParametricIdeal":
        """Build an ideal from SymPy expressions over ``QQ(parameters)``."""
        if not exprs:
            raise InvalidInputError("Empty input is invalid.")
        if not parameters:
            raise InvalidInputError("At least one parameter is required.")
        domain = sp.QQ.frac_field(*parameters)
        try:
            polys = [sp.Poly(sp.sympify(e), *variables, domain=domain) for e in exprs]
        except (PolynomialError, CoercionFailed) as exc:
            raise InvalidInputError(f"Could not interpret the generators over {domain}: {exc}") from exc
        return cls(polys)

    @classmethod
    def from_string(
        cls,
        text: str,
        variables: Union[str, Sequence[str]],
        parameters: Union[str, Sequence[str]],
    ) -> "ParametricIdeal":
        """Parse generators from a string.

        Parameters
        ----------
        text:
            Generators separated by newlines or semicolons. ``^`` means power,
            e.g. ``"a*x^2 + 1; y^2*z + y/b"``.
        variables, parameters:
            Names of the main variables and the parameters, either as a
            sequence or a whitespace/comma separated string.
        """
        from .parser import IdealParser

        parser = IdealParser(variables=variables, parameters=parameters)
        return parser.parse_ideal(text)


def parameter_substitution(
    parameters: Sequence[sp.Symbol],
    values: Union[Mapping[sp.Symbol, sp.Expr], Sequence[sp.Expr]],
) -> Dict[sp.Symbol, sp.Expr]:
    if isinstance(values, Mapping):
        missing = [s for s in parameters if s not in values]
        if missing:
            raise ValueError(f"Missing values for parameters {missing}")
        return {s: sp.nsimplify(values[s]) for s in parameters}
    vals = list(values)
    if len(vals) != len(parameters):
        raise ValueError(f"Expected {len(parameters)} parameter values; got {len(vals)}")
    return {s: sp.nsimplify(v) for s, v in zip(parameters, vals)}
