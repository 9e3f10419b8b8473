"""Solve a linear system with parametric coefficients.

The ideal is read from text, the way a user would type it. Its reduced
basis is the generic solution of the system; the printed denominators
vanish exactly on the parameter values where the generic solution fails.

Run:
    python examples/parametric_linear_system.py
"""

from __future__ import annotations

import logging

import sympy as sp

from paramgb import ParamGBOptions, ParametricIdeal, format_basis, paramgb

SYSTEM = """
# three equations in x, y, z
x + a*y + z - 1
x - b*y + 2*z
a*x + y - b*z - 3
"""


def main() -> None:
    logging.basicConfig(level=logging.WARNING)

    ideal = ParametricIdeal.from_string(SYSTEM, "x y z", "a b")
    options = ParamGBOptions(seed=7, eta=3, max_workers=2)

    stages = []
    basis = paramgb(ideal, options=options, progress=lambda stage, rnd, n: stages.append((stage, rnd, n)))

    print("Generic solution:")
    for line in format_basis(basis):
        print("  " + line)

    print("\nRounds:")
    for stage, rnd, n in stages:
        print(f"  {stage:10s} round {rnd}: {n} points")

    dens = set()
    for f in basis:
        for c in f.coeffs():
            dens.add(sp.factor(sp.denom(c)))
    print("\nDenominators:", ", ".join(sp.sstr(d) for d in dens if d != 1))


if __name__ == "__main__":
    main()
