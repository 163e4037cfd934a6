"""
Adapter around the external eigendecomposition routine.

The solver is treated as a black box. Its output can mix plain numbers and
complex-number objects, and eigenvalues can come back either as a plain
sequence or as an array-like container with a ``tolist()`` conversion. This
module resolves all of that into ``EigenResult`` once, so that formatting and
rendering code only ever sees ``RealScalar``/``ComplexScalar`` values.
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Mapping
from typing import Any, Callable, Iterator, Sequence

import numpy as np
from pydantic import BaseModel, Field, model_validator

from .matrix import SUPPORTED_SIZES, MatrixModel
from .numeric import RESULT_DECIMALS, ComplexScalar, RealScalar, Scalar

logger = logging.getLogger(__name__)


class SolverError(Exception):
    """Raised when the matrix cannot be decomposed."""


# A solver takes an n x n float array and returns a mapping with
#   "values":       eigenvalues (sequence or array-like)
#   "eigenvectors": sequence of {"value": ..., "vector": [...]} pairings
Solver = Callable[[np.ndarray], Mapping[str, Any]]


def numpy_solver(array: np.ndarray) -> dict[str, Any]:
    """
    Decompose ``array`` with ``numpy.linalg.eig``.

    NumPy returns eigenvectors as the columns of a matrix; they are regrouped
    into ``{"value", "vector"}`` pairings so every solver exposes one shape.
    """
    values, vectors = np.linalg.eig(array)
    pairings = [
        {"value": values[i], "vector": vectors[:, i]}
        for i in range(len(values))
    ]
    return {"values": values, "eigenvectors": pairings}


class EigenVector(BaseModel):
    """Eigenvector components split into parallel real and imaginary parts."""

    real: list[float] = Field(default_factory=list)
    imag: list[float] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_parallel(self) -> EigenVector:
        if len(self.real) != len(self.imag):
            raise ValueError("Real and imaginary parts must have the same length")
        return self

    def __len__(self) -> int:
        return len(self.real)

    def components(self) -> list[ComplexScalar]:
        return [ComplexScalar(real=r, imag=i) for r, i in zip(self.real, self.imag)]

    def to_strings(self, decimals: int = RESULT_DECIMALS) -> list[str]:
        return [c.to_string(decimals) for c in self.components()]

    def to_numpy(self) -> np.ndarray:
        return np.array(self.real, dtype=float) + 1j * np.array(self.imag, dtype=float)


class EigenResult(BaseModel):
    """
    Eigenvalues paired index-for-index with eigenvectors.

    ``eigenvectors[i]`` belongs to ``eigenvalues[i]``; ordering is whatever the
    solver produced.
    """

    eigenvalues: list[Scalar] = Field(default_factory=list)
    eigenvectors: list[EigenVector] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_shape(self) -> EigenResult:
        n = len(self.eigenvalues)
        if len(self.eigenvectors) != n:
            raise ValueError(
                f"Expected {n} eigenvectors, got {len(self.eigenvectors)}"
            )
        for vector in self.eigenvectors:
            if len(vector) != n:
                raise ValueError(
                    f"Eigenvector has {len(vector)} components, expected {n}"
                )
        return self

    @property
    def size(self) -> int:
        return len(self.eigenvalues)

    def pairs(self) -> Iterator[tuple[RealScalar | ComplexScalar, EigenVector]]:
        return iter(zip(self.eigenvalues, self.eigenvectors))


def as_scalar(value: Any) -> RealScalar | ComplexScalar:
    """
    Resolve one raw solver value into the RealOrComplex variant.

    Plain real numbers (Python, NumPy) become RealScalar. Anything else that
    exposes a real and an imaginary part, as attributes (``real``/``imag``)
    or as mapping keys (``re``/``im``), becomes ComplexScalar.

    Raises:
        SolverError: If the value is neither
    """
    if isinstance(value, (RealScalar, ComplexScalar)):
        return value
    if isinstance(value, numbers.Real):
        return RealScalar(value=float(value))
    try:
        if isinstance(value, Mapping) and "re" in value and "im" in value:
            return ComplexScalar(real=float(value["re"]), imag=float(value["im"]))
        if hasattr(value, "real") and hasattr(value, "imag"):
            return ComplexScalar(real=float(value.real), imag=float(value.imag))
    except (TypeError, ValueError) as e:
        raise SolverError(f"Solver returned a non-numeric part in {value!r}") from e
    raise SolverError(f"Solver returned an unsupported value: {value!r}")


def as_sequence(container: Any) -> list[Any]:
    """Convert a plain sequence or an array-like container into a list."""
    if isinstance(container, (list, tuple)):
        return list(container)
    to_list = getattr(container, "tolist", None)
    if callable(to_list):
        converted = to_list()
        return converted if isinstance(converted, list) else [converted]
    try:
        return list(container)
    except TypeError as exc:
        raise SolverError(f"Solver returned an unsupported container: {container!r}") from exc


def split_vector(components: Any) -> EigenVector:
    """Split vector components into parallel real and imaginary sequences."""
    real: list[float] = []
    imag: list[float] = []
    for component in as_sequence(components):
        scalar = as_scalar(component)
        real.append(scalar.real)
        imag.append(scalar.imag)
    return EigenVector(real=real, imag=imag)


def _square_array(matrix: MatrixModel | Sequence[Sequence[float]] | np.ndarray) -> np.ndarray:
    """Validate the solver input and return it as a float array."""
    if isinstance(matrix, MatrixModel):
        return matrix.to_numpy()

    try:
        array = np.asarray(matrix, dtype=float)
    except (TypeError, ValueError) as exc:
        raise SolverError(f"Matrix must contain only numbers: {exc}") from exc

    if array.size == 0:
        raise SolverError("Matrix is empty")
    if array.ndim != 2 or array.shape[0] != array.shape[1]:
        raise SolverError(f"Matrix must be square, got shape {array.shape}")
    if array.shape[0] not in SUPPORTED_SIZES:
        raise SolverError(
            f"Unsupported matrix size {array.shape[0]}; "
            f"expected one of {list(SUPPORTED_SIZES)}"
        )
    return array


class EigenAdapter:
    """
    Calls the external solver and normalizes its output.

    Example:
        >>> result = EigenAdapter().compute([[4, 2], [1, 3]])
        >>> result.size
        2
    """

    def __init__(self, solver: Solver | None = None):
        self.solver = solver or numpy_solver

    def compute(self, matrix: MatrixModel | Sequence[Sequence[float]] | np.ndarray) -> EigenResult:
        """
        Decompose ``matrix`` into eigenvalues and eigenvectors.

        Raises:
            SolverError: If the input is not a supported square matrix, contains
                non-finite values, or the solver itself fails
        """
        array = _square_array(matrix)
        if not np.all(np.isfinite(array)):
            raise SolverError("Matrix contains non-finite values (NaN or infinity)")

        n = array.shape[0]
        logger.debug(f"Decomposing {n}x{n} matrix")

        try:
            raw = self.solver(array)
        except Exception as e:
            logger.warning(f"Eigen solver failed: {e}")
            raise SolverError(str(e) or e.__class__.__name__) from e

        try:
            eigenvalues = [as_scalar(v) for v in as_sequence(raw["values"])]
            eigenvectors = [split_vector(pairing["vector"]) for pairing in raw["eigenvectors"]]
        except (KeyError, TypeError, ValueError) as e:
            raise SolverError(f"Solver returned an unexpected shape: {e}") from e

        try:
            result = EigenResult(eigenvalues=eigenvalues, eigenvectors=eigenvectors)
        except ValueError as e:
            raise SolverError(f"Solver returned an inconsistent result: {e}") from e

        if result.size != n:
            raise SolverError(f"Solver returned {result.size} eigenvalues for a {n}x{n} matrix")

        logger.debug(f"Found {result.size} eigenpairs")
        return result


_default_adapter = EigenAdapter()


def compute(matrix: MatrixModel | Sequence[Sequence[float]] | np.ndarray) -> EigenResult:
    """Decompose ``matrix`` with the default NumPy-backed adapter."""
    return _default_adapter.compute(matrix)

