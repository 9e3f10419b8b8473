from __future__ import annotations

import sympy as sp

from .ideal import ParametricIdeal


def two_polynomial_ideal() -> ParametricIdeal:
    """Two generators in x, y, z over QQ(a, b).

    Ideal:
        a*x^2 + 1,  y^2*z + y/b

    Its reduced basis is {x^2 + 1/a, y^2*z + y/b}.
    """
    a, b = sp.symbols("a b")
    x, y, z = sp.symbols("x y z")
    return ParametricIdeal.from_exprs([a * x**2 + 1, y**2 * z + y / b], [x, y, z], [a, b])


def linear_ideal() -> ParametricIdeal:
    """A linear system with a parametric solution.

    Ideal:
        x + a*y - 1,  x - b*y

    Its reduced basis is {x - b/(a + b), y - 1/(a + b)}.
    """
    a, b = sp.symbols("a b")
    x, y = sp.symbols("x y")
    return ParametricIdeal.from_exprs([x + a * y - 1, x - b * y], [x, y], [a, b])


def circle_line_ideal() -> ParametricIdeal:
    """Intersection of the circle x^2 + y^2 = r^2 with the line y = m*x.

    Coefficients come from the polynomial ring QQ[m, r].
    """
    m, r = sp.symbols("m r")
    x, y = sp.symbols("x y")
    domain = sp.QQ[m, r]
    polys = [
        sp.Poly(x**2 + y**2 - r**2, x, y, domain=domain),
        sp.Poly(y - m * x, x, y, domain=domain),
    ]
    return ParametricIdeal(polys)
