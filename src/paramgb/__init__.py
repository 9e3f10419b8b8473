"""Top-level package API for paramgb.

This package computes reduced Groebner bases (grevlex) of polynomial ideals
whose coefficients are rational functions in a set of parameters. The basis
over ``QQ(params)`` is never computed directly: it is reconstructed from
bases of random specializations modulo primes, by interpolation in the
parameters and rational-number reconstruction.

Public API:
- paramgb, ParametricGroebner, ParametricBasis
- ParametricIdeal, IdealParser
- ParamGBOptions
- Error types
- Report helpers and built-in example ideals
"""

from .errors import (
    ParamGBError,
    InvalidInputError,
    UnluckyPointError,
    UnluckyPrimeError,
    InterpolationDivergenceError,
    ReconstructionFailureError,
)
from .options import ParamGBOptions
from .ideal import CoefficientRing, ParametricIdeal
from .parser import IdealParser
from .pipeline import ParametricBasis, ParametricGroebner, paramgb
from .report import (
    BasisReportOptions,
    format_basis,
    format_basis_report,
    format_degree_table,
    format_shape,
)
from .examples import (
    two_polynomial_ideal,
    linear_ideal,
    circle_line_ideal,
)

__all__ = [
    "paramgb",
    "ParametricGroebner",
    "ParametricBasis",
    "ParametricIdeal",
    "CoefficientRing",
    "IdealParser",
    "ParamGBOptions",
    "ParamGBError",
    "InvalidInputError",
    "UnluckyPointError",
    "UnluckyPrimeError",
    "InterpolationDivergenceError",
    "ReconstructionFailureError",
    "BasisReportOptions",
    "format_basis",
    "format_basis_report",
    "format_degree_table",
    "format_shape",
    "two_polynomial_ideal",
    "linear_ideal",
    "circle_line_ideal",
]
