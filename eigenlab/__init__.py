"""
eigenlab - eigenvalue and eigenvector explorer

Small square matrices (2x2 to 4x4) decomposed with NumPy, with:
- Uniform real/complex result values
- Human-readable number formatting
- Step-by-step characteristic polynomial derivation
- Eigenpair verification
"""

from .adapter import EigenAdapter, EigenResult, EigenVector, SolverError, compute, numpy_solver
from .matrix import EXAMPLES, SUPPORTED_SIZES, MatrixError, MatrixModel, parse_cell
from .numeric import (
    ComplexScalar,
    FormatError,
    RealScalar,
    Scalar,
    format_complex,
    format_real,
)
from .polynomial import Derivation, EigenStep, PolynomialSummary, derive, eigen_steps, summarize
from .session import CalculatorSession, PageState
from .verification import VerificationReport, verify

__all__ = [
    "EigenAdapter",
    "EigenResult",
    "EigenVector",
    "SolverError",
    "compute",
    "numpy_solver",
    "EXAMPLES",
    "SUPPORTED_SIZES",
    "MatrixError",
    "MatrixModel",
    "parse_cell",
    "RealScalar",
    "ComplexScalar",
    "Scalar",
    "FormatError",
    "format_real",
    "format_complex",
    "PolynomialSummary",
    "Derivation",
    "EigenStep",
    "derive",
    "eigen_steps",
    "summarize",
    "CalculatorSession",
    "PageState",
    "VerificationReport",
    "verify",
]
