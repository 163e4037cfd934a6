"""
Characteristic polynomial derivation shown on the calculator page.

Everything here is a pure function of the input matrix. The eigenvalues and
eigenvectors are never derived from these strings; the solver result is only
substituted back into ``A - λI`` for display.

2x2, with A = [[a, b], [c, d]]:
    λ² - (a + d)λ + (ad - bc) = 0

3x3, with rows [a, b, c], [d, e, f], [g, h, i]:
    λ³ - trace·λ² + minor_sum·λ - det = 0
    minor_sum = (ae - bd) + (ai - cg) + (ei - fh)
    det       = a(ei - fh) - b(di - fg) + c(dh - eg)

4x4 gets an explanatory note only.
"""

from __future__ import annotations

import math
from typing import Optional

import sympy as sp
from pydantic import BaseModel, Field, field_serializer

from .adapter import EigenResult
from .matrix import MatrixModel
from .numeric import DERIVATION_DECIMALS, FormatError, format_real

LAMBDA = "λ"

GENERAL_FORMS = {
    2: "λ² - (a + d)λ + (ad - bc) = 0",
    3: "λ³ - (trace)λ² + (sum of 2×2 minors)λ - det(A) = 0",
    4: "λ⁴ - (trace)λ³ + ... = 0",
}

QUADRATIC_HINT = "Using the quadratic formula: λ = (trace ± √(trace² - 4·det)) / 2"

QUARTIC_NOTE = (
    "For 4×4 matrices, the characteristic polynomial involves computing 4th degree "
    "terms. The numerical solver handles this automatically."
)


class PolynomialSummary(BaseModel):
    """Scalars of the characteristic polynomial, computed from the matrix."""

    size: int
    trace: float
    determinant: float
    minor_sum: Optional[float] = Field(default=None, description="Sum of principal 2x2 minors (3x3 only)")

    @field_serializer("trace", "determinant", "minor_sum", when_used="json")
    def _finite_or_null(self, value: Optional[float]) -> Optional[float]:
        # JSON has no infinity; overflowed values go out as null
        if value is None or not math.isfinite(value):
            return None
        return value


class EigenStep(BaseModel):
    """Display data for one eigenpair: A - λᵢI and the claimed eigenvector."""

    index: int
    eigenvalue: str
    shifted_matrix: list[list[str]]
    eigenvector: list[str]


class Derivation(BaseModel):
    """Text of the step-by-step derivation panels."""

    size: int
    characteristic_matrix: list[list[str]]
    general_form: str
    summary: Optional[PolynomialSummary] = None
    variables: Optional[str] = None
    substitution_steps: list[str] = Field(default_factory=list)
    polynomial: str
    tex: Optional[str] = None
    note: Optional[str] = None


def _fmt(value: float) -> str:
    # trace, minors and determinant of a finite matrix can still overflow
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"
    return format_real(value, DERIVATION_DECIMALS)


def _signed(raw: float, negative_token: str, positive_token: str) -> str:
    """Sign token picked from the raw value, followed by the formatted magnitude."""
    token = negative_token if raw >= 0 else positive_token
    return f"{token} {_fmt(abs(raw))}"


def summarize(matrix: MatrixModel) -> Optional[PolynomialSummary]:
    """Trace, determinant and (3x3) minor sum; None for 4x4."""
    m = matrix.rows
    if matrix.size == 2:
        (a, b), (c, d) = m
        return PolynomialSummary(size=2, trace=a + d, determinant=a * d - b * c)

    if matrix.size == 3:
        (a, b, c), (d, e, f), (g, h, i) = m
        trace = a + e + i
        minor_sum = (a * e - b * d) + (a * i - c * g) + (e * i - f * h)
        det = a * (e * i - f * h) - b * (d * i - f * g) + c * (d * h - e * g)
        return PolynomialSummary(size=3, trace=trace, determinant=det, minor_sum=minor_sum)

    return None


def polynomial_string(summary: PolynomialSummary) -> str:
    """
    Final characteristic polynomial with numbers substituted.

    Examples:
        >>> polynomial_string(PolynomialSummary(size=2, trace=7, determinant=10))
        'λ² - 7λ + 10 = 0'
    """
    if summary.size == 2:
        return (
            f"λ² {_signed(summary.trace, '-', '+')}λ "
            f"{_signed(summary.determinant, '+', '-')} = 0"
        )
    return (
        f"λ³ {_signed(summary.trace, '-', '+')}λ² "
        f"{_signed(summary.minor_sum, '+', '-')}λ "
        f"{_signed(summary.determinant, '-', '+')} = 0"
    )


def characteristic_matrix(matrix: MatrixModel) -> list[list[str]]:
    """Symbolic ``A - λI``: diagonal cells read ``a - λ`` (``-λ`` for zero)."""
    rendered = []
    for i, row in enumerate(matrix.rows):
        cells = []
        for j, value in enumerate(row):
            if i != j:
                cells.append(_fmt(value))
            elif value == 0:
                cells.append(f"-{LAMBDA}")
            else:
                cells.append(f"{_fmt(value)} - {LAMBDA}")
        rendered.append(cells)
    return rendered


def shifted_matrix(matrix: MatrixModel, eigenvalue_real: float) -> list[list[float]]:
    """``A - λI`` for a concrete eigenvalue, using only its real part."""
    return [
        [value - eigenvalue_real if i == j else value for j, value in enumerate(row)]
        for i, row in enumerate(matrix.rows)
    ]


def _exact(value: float) -> sp.Expr:
    """Exact SymPy number for a matrix cell, from its shortest decimal repr."""
    return sp.nsimplify(value, rational=True)


def _fits_float(coeff: sp.Rational) -> bool:
    try:
        return math.isfinite(float(coeff))
    except OverflowError:
        return False


def _tex_coefficient(coeff: sp.Rational) -> sp.Expr:
    if coeff.q == 1 and abs(coeff) < 2 ** 52:
        return coeff
    return sp.Float(_fmt(float(coeff)))


def characteristic_tex(matrix: MatrixModel) -> Optional[str]:
    """TeX of det(λI - A) expanded; None for 4x4."""
    if matrix.size not in (2, 3):
        return None

    lam = sp.Symbol("lambda")
    a = sp.Matrix([[_exact(v) for v in row] for row in matrix.rows])
    coeffs = a.charpoly(lam).all_coeffs()
    if not all(_fits_float(c) for c in coeffs):
        return None
    degree = len(coeffs) - 1
    expr = sp.Add(*[
        _tex_coefficient(c) * lam ** (degree - k)
        for k, c in enumerate(coeffs)
    ])
    return f"{sp.latex(expr)} = 0"


def derive(matrix: MatrixModel) -> Derivation:
    """
    Build all derivation panels for ``matrix``.

    Raises:
        FormatError: If a cell is NaN or infinite
    """
    if not all(math.isfinite(v) for row in matrix.rows for v in row):
        raise FormatError("Cannot derive a polynomial for a matrix with non-finite cells")

    size = matrix.size
    summary = summarize(matrix)
    char_matrix = characteristic_matrix(matrix)

    if size == 2:
        (a, b), (c, d) = matrix.rows
        steps = [
            GENERAL_FORMS[2],
            f"λ² - ({_fmt(a)} + {_fmt(d)})λ + ({_fmt(a)}×{_fmt(d)} - {_fmt(b)}×{_fmt(c)}) = 0",
            f"λ² - ({_fmt(summary.trace)})λ + ({_fmt(a * d)} - {_fmt(b * c)}) = 0",
        ]
        return Derivation(
            size=size,
            characteristic_matrix=char_matrix,
            general_form=GENERAL_FORMS[2],
            summary=summary,
            variables=f"a={_fmt(a)}, b={_fmt(b)}, c={_fmt(c)}, d={_fmt(d)}",
            substitution_steps=steps,
            polynomial=polynomial_string(summary),
            tex=characteristic_tex(matrix),
            note=QUADRATIC_HINT,
        )

    if size == 3:
        a, e, i = matrix.diagonal()
        steps = [
            f"trace = {_fmt(a)} + {_fmt(e)} + {_fmt(i)} = {_fmt(summary.trace)}",
            f"sum of 2×2 minors = {_fmt(summary.minor_sum)}",
            f"det(A) = {_fmt(summary.determinant)}",
        ]
        return Derivation(
            size=size,
            characteristic_matrix=char_matrix,
            general_form=GENERAL_FORMS[3],
            summary=summary,
            substitution_steps=steps,
            polynomial=polynomial_string(summary),
            tex=characteristic_tex(matrix),
        )

    return Derivation(
        size=size,
        characteristic_matrix=char_matrix,
        general_form=GENERAL_FORMS[4],
        polynomial=GENERAL_FORMS[4],
        note=QUARTIC_NOTE,
    )


def eigen_steps(matrix: MatrixModel, result: EigenResult) -> list[EigenStep]:
    """Per-eigenvalue ``A - λᵢI`` matrices paired with the solver's eigenvectors."""
    steps = []
    for index, (value, vector) in enumerate(result.pairs(), start=1):
        shifted = shifted_matrix(matrix, value.real)
        steps.append(
            EigenStep(
                index=index,
                eigenvalue=value.to_string(DERIVATION_DECIMALS),
                shifted_matrix=[[_fmt(x) for x in row] for row in shifted],
                eigenvector=vector.to_strings(DERIVATION_DECIMALS),
            )
        )
    return steps
