from __future__ import annotations

import re
from tokenize import TokenError
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple, Union

import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication,
    parse_expr,
    standard_transformations,
)

from .errors import InvalidInputError


_TRANSFORMS = standard_transformations + (convert_xor, implicit_multiplication)

# Names accepted for variables and parameters.
_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _split_names(names: Union[str, Sequence[str]]) -> List[str]:
    """Split 'x, y z' or ['x', 'y', 'z'] into a list of names."""
    if isinstance(names, str):
        parts = [p for p in re.split(r"[\s,]+", names.strip()) if p]
    else:
        parts = [str(p).strip() for p in names]
    for p in parts:
        if not _NAME_RE.match(p):
            raise InvalidInputError(f"Invalid symbol name '{p}'")
    if len(parts) != len(set(parts)):
        raise InvalidInputError("Symbol names must be distinct")
    return parts


def _split_generators(text: str) -> List[str]:
    """Split generator text on ';' and newlines, dropping blanks and '#' comments."""
    raw_lines: List[str] = []
    for chunk in text.split(";"):
        raw_lines.extend(chunk.splitlines())
    return [ln.strip() for ln in raw_lines if ln.strip() and not ln.strip().startswith("#")]


@dataclass
class IdealParser:
    """Parse generator strings into a :class:`~paramgb.ideal.ParametricIdeal`.

    Syntax
    ------
    - generators separated by ';' or newlines, '#' starts a comment line
    - '^' and '**' both mean power, implicit multiplication is allowed
      ('2x y' is '2*x*y')
    - only the declared variables and parameters may appear

    Examples
    --------
    >>> IdealParser("x y z", "a b").parse_ideal("a*x^2 + 1; y^2*z + y/b")
    """

    variables: Union[str, Sequence[str]]
    parameters: Union[str, Sequence[str]]

    def __post_init__(self) -> None:
        self._var_names = _split_names(self.variables)
        self._param_names = _split_names(self.parameters)
        if not self._var_names:
            raise InvalidInputError("At least one variable is required")
        if not self._param_names:
            raise InvalidInputError("At least one parameter is required")
        if set(self._var_names) & set(self._param_names):
            raise InvalidInputError("Variables and parameters must be disjoint")

    @property
    def symbols(self) -> Tuple[Tuple[sp.Symbol, ...], Tuple[sp.Symbol, ...]]:
        """(variable symbols, parameter symbols)."""
        return (
            tuple(sp.Symbol(n) for n in self._var_names),
            tuple(sp.Symbol(n) for n in self._param_names),
        )

    def parse_expr(self, line: str) -> sp.Expr:
        xs, ps = self.symbols
        local_dict: Dict[str, sp.Symbol] = {str(s): s for s in xs + ps}
        try:
            expr = parse_expr(line, local_dict=local_dict, transformations=_TRANSFORMS)
        except (SyntaxError, TypeError, TokenError, sp.SympifyError) as exc:
            raise InvalidInputError(f"Could not parse generator '{line}': {exc}") from exc
        unknown = expr.free_symbols - set(local_dict.values())
        if unknown:
            names = ", ".join(sorted(str(s) for s in unknown))
            raise InvalidInputError(f"Unknown symbols {names} in generator '{line}'")
        return expr

    def parse_ideal(self, text: str):
        lines = _split_generators(text)
        if not lines:
            raise InvalidInputError("No generators found in input")
        exprs = [self.parse_expr(ln) for ln in lines]

        from .ideal import ParametricIdeal  # local import to avoid circular import

        xs, ps = self.symbols
        return ParametricIdeal.from_exprs(exprs, variables=xs, parameters=ps)
