"""
Square input matrix edited cell by cell on the calculator page.

A MatrixModel is always exactly n x n with n in ``SUPPORTED_SIZES`` and every
cell a float. Resizing never happens in place: a new model is created.
"""

from __future__ import annotations

import copy
import re
from typing import Any, Sequence

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator


SUPPORTED_SIZES: tuple[int, ...] = (2, 3, 4)

# Preset matrices offered by "Load Example", keyed by size
EXAMPLES: dict[int, list[list[float]]] = {
    2: [[4, 2], [1, 3]],
    3: [[2, 0, 0], [0, 3, 4], [0, 4, 9]],
    4: [[4, 1, 0, 0], [1, 4, 1, 0], [0, 1, 4, 1], [0, 0, 1, 4]],
}

# Leading numeric prefix of a cell entry, e.g. "3.5abc" -> "3.5"
_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


class MatrixError(ValueError):
    """Raised for unsupported sizes or out-of-range cell positions."""


def check_size(size: int) -> int:
    """Return ``size`` if it is a supported matrix size, else raise MatrixError."""
    if size not in SUPPORTED_SIZES:
        raise MatrixError(
            f"Unsupported matrix size {size}; expected one of {list(SUPPORTED_SIZES)}"
        )
    return size


def parse_cell(text: str | float | int | None) -> float:
    """
    Parse a cell entry typed by the user.

    Empty or unparsable text becomes 0. A valid numeric prefix is kept
    ("2.5x" -> 2.5), and NaN is treated as unparsable. Infinity is passed
    through so that the calculation step can reject it with a clear message.

    Examples:
        >>> parse_cell("")
        0.0
        >>> parse_cell("-1.25")
        -1.25
        >>> parse_cell("abc")
        0.0
    """
    if text is None:
        return 0.0
    if isinstance(text, (int, float)):
        value = float(text)
        return 0.0 if value != value else value

    stripped = text.strip()
    if not stripped:
        return 0.0

    try:
        value = float(stripped)
    except ValueError:
        match = _NUMBER_PREFIX.match(stripped)
        if not match:
            return 0.0
        value = float(match.group(0))

    # NaN compares unequal to itself
    if value != value:
        return 0.0
    return value


class MatrixModel(BaseModel):
    """
    The current n x n real matrix held by the calculator page.

    Example:
        >>> m = MatrixModel.zeros(2)
        >>> m.set_cell(0, 1, "5")
        >>> m.to_python()
        [[0.0, 5.0], [0.0, 0.0]]
    """

    model_config = ConfigDict(validate_assignment=True)

    rows: list[list[float]] = Field(description="Matrix entries, row-major")

    @field_validator("rows", mode="before")
    @classmethod
    def _coerce_rows(cls, value: Any) -> Any:
        if isinstance(value, np.ndarray):
            return value.tolist()
        return value

    @field_validator("rows")
    @classmethod
    def _validate_square(cls, rows: list[list[float]]) -> list[list[float]]:
        size = len(rows)
        check_size(size)
        if any(len(row) != size for row in rows):
            raise MatrixError(f"Matrix must be square ({size}x{size})")
        return rows

    @classmethod
    def zeros(cls, size: int) -> MatrixModel:
        """Create an all-zero matrix of the given size."""
        check_size(size)
        return cls(rows=[[0.0] * size for _ in range(size)])

    @classmethod
    def example(cls, size: int) -> MatrixModel:
        """Create a fresh copy of the preset example for ``size``."""
        check_size(size)
        return cls(rows=copy.deepcopy(EXAMPLES[size]))

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]]) -> MatrixModel:
        """Build a matrix from raw cell entries, parsing each one like user input."""
        return cls(rows=[[parse_cell(cell) for cell in row] for row in rows])

    @property
    def size(self) -> int:
        return len(self.rows)

    def __getitem__(self, index: tuple[int, int]) -> float:
        row, col = index
        return self.rows[row][col]

    def set_cell(self, row: int, col: int, value: str | float | int | None) -> None:
        """
        Set one cell from user input.

        Raises:
            MatrixError: If (row, col) lies outside the matrix
        """
        if not (0 <= row < self.size and 0 <= col < self.size):
            raise MatrixError(f"Cell ({row}, {col}) is outside a {self.size}x{self.size} matrix")
        self.rows[row][col] = parse_cell(value)

    def diagonal(self) -> list[float]:
        return [self.rows[i][i] for i in range(self.size)]

    def to_python(self) -> list[list[float]]:
        """Return a deep copy of the entries as nested lists."""
        return [list(row) for row in self.rows]

    def to_numpy(self) -> np.ndarray:
        return np.array(self.rows, dtype=float)
