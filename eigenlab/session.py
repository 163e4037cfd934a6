"""
Calculator page state.

One CalculatorSession holds the single current matrix and the latest result:

    IDLE --calculate--> CALCULATING --+--> READY   (fresh EigenResult)
                                      +--> FAILED  (error message)

Resizing, resetting, loading an example or editing a cell returns the session
to IDLE and discards the previous result or error.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from .adapter import EigenAdapter, EigenResult, SolverError
from .matrix import MatrixModel, check_size
from .polynomial import Derivation, EigenStep, derive, eigen_steps
from .verification import VerificationReport, verify

logger = logging.getLogger(__name__)

DEFAULT_SIZE = 3


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PageState(str, Enum):
    IDLE = "idle"
    CALCULATING = "calculating"
    READY = "ready"
    FAILED = "failed"


class CalculatorSession(BaseModel):
    """State of one calculator page."""

    session_id: UUID = Field(default_factory=uuid4)
    size: int = DEFAULT_SIZE
    matrix: MatrixModel = Field(default_factory=lambda: MatrixModel.zeros(DEFAULT_SIZE))
    state: PageState = PageState.IDLE
    result: Optional[EigenResult] = None
    error: Optional[str] = None
    calculations: int = 0
    last_activity: datetime = Field(default_factory=_now)

    @classmethod
    def new(cls, size: int = DEFAULT_SIZE) -> CalculatorSession:
        check_size(size)
        return cls(size=size, matrix=MatrixModel.zeros(size))

    def _discard_result(self) -> None:
        self.result = None
        self.error = None
        self.state = PageState.IDLE
        self.last_activity = _now()

    def resize(self, size: int) -> None:
        """Switch to a fresh all-zero matrix of ``size``."""
        check_size(size)
        self.size = size
        self.matrix = MatrixModel.zeros(size)
        self._discard_result()

    def reset(self) -> None:
        """Clear the matrix to zeros, keeping the size."""
        self.matrix = MatrixModel.zeros(self.size)
        self._discard_result()

    def load_example(self) -> None:
        """Replace the matrix with the preset example for the current size."""
        self.matrix = MatrixModel.example(self.size)
        self._discard_result()

    def set_cell(self, row: int, col: int, value: str | float | None) -> None:
        self.matrix.set_cell(row, col, value)
        self._discard_result()

    def set_matrix(self, matrix: MatrixModel) -> None:
        """Replace every cell at once; the size follows the new matrix."""
        self.size = matrix.size
        self.matrix = matrix
        self._discard_result()

    def calculate(self, adapter: EigenAdapter | None = None) -> Optional[EigenResult]:
        """
        Run the decomposition synchronously.

        A failure does not raise: the session moves to FAILED and keeps the
        message in ``error``, so it never stays in CALCULATING.

        Returns:
            The fresh result, or None when the calculation failed
        """
        adapter = adapter or EigenAdapter()
        self.state = PageState.CALCULATING
        self.result = None
        self.error = None
        self.calculations += 1
        self.last_activity = _now()

        try:
            self.result = adapter.compute(self.matrix)
        except SolverError as e:
            self.error = str(e) or "Failed to calculate eigenvalues"
            self.state = PageState.FAILED
            logger.info(f"Calculation failed for session {self.session_id}: {self.error}")
            return None
        except Exception as e:
            self.error = str(e) or "Failed to calculate eigenvalues"
            self.state = PageState.FAILED
            logger.exception(f"Unexpected calculation error for session {self.session_id}")
            return None

        self.state = PageState.READY
        logger.info(f"Found {self.result.size} eigenvalue(s) for session {self.session_id}")
        return self.result

    async def calculate_async(self, adapter: EigenAdapter | None = None) -> Optional[EigenResult]:
        """Same as ``calculate`` but run in a worker thread."""
        return await asyncio.to_thread(self.calculate, adapter)

    def derivation(self) -> Optional[Derivation]:
        if self.state is not PageState.READY:
            return None
        return derive(self.matrix)

    def steps(self) -> list[EigenStep]:
        if self.result is None:
            return []
        return eigen_steps(self.matrix, self.result)

    def verification(self) -> Optional[VerificationReport]:
        if self.result is None:
            return None
        return verify(self.matrix, self.result)
