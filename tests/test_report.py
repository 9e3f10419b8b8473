import sympy as sp

from paramgb import (
    BasisReportOptions,
    ParametricBasis,
    format_basis,
    format_basis_report,
    format_degree_table,
    format_shape,
)

a, b = sp.symbols("a b")
x, y = sp.symbols("x y")


def _linear_basis():
    K = sp.QQ.frac_field(a, b)
    return ParametricBasis(
        polys=[
            sp.Poly(x - b / (a + b), x, y, domain=K),
            sp.Poly(y - 1 / (a + b), x, y, domain=K),
        ],
        variables=(x, y),
        parameters=(a, b),
        shape=(((1, 0), (0, 0)), ((0, 1), (0, 0))),
        param_degrees=[[(0, 0), (1, 1)], [(0, 0), (0, 1)]],
        primes=[2147483647, 2147483629],
        points_used={"shape": 3},
    )


def test_format_shape():
    assert format_shape(_linear_basis()) == ["g1: lead x, 2 terms", "g2: lead y, 2 terms"]


def test_format_degree_table():
    lines = format_degree_table(_linear_basis())
    assert lines == ["g1: x: 0/0, 1: 1/1", "g2: y: 0/0, 1: 0/1"]
    assert format_degree_table(_linear_basis(), max_items=1)[-1] == "... (1 more)"


def test_format_basis():
    lines = format_basis(_linear_basis(), factor=False)
    assert len(lines) == 2
    assert lines[0].startswith("g1 = ")
    assert "a + b" in lines[1]


def test_format_basis_report_sections():
    text = format_basis_report(_linear_basis(), title="Linear system")
    assert text.startswith("### Linear system\n")
    assert "Ring: QQ(a, b)[x, y], grevlex" in text
    assert "2 polynomials, primes used: 2" in text
    assert "Shape:" in text
    assert "Degrees in parameters" in text
    assert "Points used: shape=3" in text
    assert text.endswith("\n")


def test_format_basis_report_options():
    opt = BasisReportOptions(show_shape=False, show_degrees=False, max_polys=1)
    text = format_basis_report(_linear_basis(), options=opt)
    assert "Shape:" not in text
    assert "Degrees in parameters" not in text
    assert "... (1 more)" in text
