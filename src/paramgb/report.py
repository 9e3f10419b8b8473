"""Human-readable reporting utilities.

Helpers to turn a :class:`~paramgb.pipeline.ParametricBasis` into console /
Markdown text:

- the shape (leading monomial and support size of every element),
- the table of numerator/denominator degrees in the parameters, and
- the basis polynomials themselves.

Nothing here is required for the computation; it is strictly presentation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import sympy as sp

from .ideal import Monom
from .pipeline import ParametricBasis


def _monom_str(monom: Monom, variables: Sequence[sp.Symbol]) -> str:
    expr = sp.Mul(*[x**e for x, e in zip(variables, monom)])
    return sp.sstr(expr)


def format_shape(basis: ParametricBasis) -> List[str]:
    """One line per basis element: leading monomial and number of terms."""
    out: List[str] = []
    for i, monoms in enumerate(basis.shape):
        lead = _monom_str(monoms[0], basis.variables)
        out.append(f"g{i+1}: lead {lead}, {len(monoms)} terms")
    return out


def format_degree_table(basis: ParametricBasis, *, max_items: int = 10) -> List[str]:
    """Numerator/denominator degrees of the coefficients, per basis element."""
    out: List[str] = []
    rows = list(zip(basis.shape, basis.param_degrees))
    for i, (monoms, degrees) in enumerate(rows[: int(max_items)]):
        cells = ", ".join(
            f"{_monom_str(m, basis.variables)}: {dn}/{dd}" for m, (dn, dd) in zip(monoms, degrees)
        )
        out.append(f"g{i+1}: {cells}")
    if len(rows) > max_items:
        out.append(f"... ({len(rows) - max_items} more)")
    return out


def format_basis(basis: ParametricBasis, *, max_items: int = 10, factor: bool = True) -> List[str]:
    """Format the basis polynomials, optionally with factored coefficients."""
    out: List[str] = []
    for i, f in enumerate(basis.polys[: int(max_items)]):
        expr = f.as_expr()
        if factor:
            expr = sp.Add(
                *[sp.factor(c) * sp.Mul(*[x**e for x, e in zip(basis.variables, m)]) for m, c in f.terms()]
            )
        out.append(f"g{i+1} = {sp.sstr(expr)}")
    if len(basis.polys) > max_items:
        out.append(f"... ({len(basis.polys) - max_items} more)")
    return out


@dataclass
class BasisReportOptions:
    """Tunable knobs for report verbosity."""

    max_polys: int = 12
    show_shape: bool = True
    show_degrees: bool = True
    factor_coefficients: bool = True


def format_basis_report(
    basis: ParametricBasis,
    *,
    title: str = "Groebner basis",
    options: Optional[BasisReportOptions] = None,
) -> str:
    """Format a full report for one basis."""
    opt = options or BasisReportOptions()
    lines: List[str] = []

    lines.append(f"### {title}")
    params = ", ".join(str(s) for s in basis.parameters)
    gens = ", ".join(str(s) for s in basis.variables)
    lines.append(f"Ring: QQ({params})[{gens}], grevlex")
    lines.append(f"{len(basis)} polynomials, primes used: {len(basis.primes)}")

    if opt.show_shape:
        lines.append("Shape:")
        lines.extend(["  " + s for s in format_shape(basis)])

    if opt.show_degrees and basis.param_degrees:
        lines.append("Degrees in parameters (numerator/denominator):")
        lines.extend(["  " + s for s in format_degree_table(basis, max_items=opt.max_polys)])

    lines.append("Basis:")
    lines.extend(
        ["  " + s for s in format_basis(basis, max_items=opt.max_polys, factor=opt.factor_coefficients)]
    )

    if basis.points_used:
        used = ", ".join(f"{k}={v}" for k, v in basis.points_used.items())
        lines.append(f"Points used: {used}")

    return "\n".join(lines) + "\n"
