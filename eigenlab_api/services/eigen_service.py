"""
Eigen service for stateless calculations.

Backs the JSON endpoints: one request in, one decomposition or derivation out.
"""

import asyncio
from typing import Any, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from eigenlab import (
    Derivation,
    EigenAdapter,
    EigenResult,
    FormatError,
    MatrixError,
    MatrixModel,
    SolverError,
    VerificationReport,
    derive,
    verify,
)

from ..core.errors import CalculationError, InvalidMatrixError, ValidationError
from ..core.logging import get_logger
from ..core.config import settings

logger = get_logger(__name__)


class EigenService:
    """
    Service for eigen decomposition operations.

    Wraps the core adapter and presenter, translating their errors into API errors.
    """

    def __init__(self, adapter: Optional[EigenAdapter] = None):
        self.adapter = adapter or EigenAdapter()

        logger.debug("EigenService initialized")

    def parse_matrix(self, rows: Sequence[Sequence[Any]]) -> MatrixModel:
        """
        Build a MatrixModel from submitted rows.

        Raises:
            InvalidMatrixError: If the rows do not form a supported square matrix
        """
        try:
            return MatrixModel.from_rows(rows)
        except (PydanticValidationError, MatrixError) as e:
            raise InvalidMatrixError(self._first_error(e))

    async def decompose(
        self,
        matrix: MatrixModel
    ) -> tuple[EigenResult, VerificationReport, Derivation]:
        """
        Decompose a matrix and build its derivation.

        Args:
            matrix: Matrix to decompose

        Returns:
            Tuple of (result, verification_report, derivation)

        Raises:
            CalculationError: If the solver cannot decompose the matrix
        """
        logger.info(
            "Decomposing matrix",
            extra_data={"size": matrix.size}
        )

        try:
            result = await asyncio.to_thread(self.adapter.compute, matrix)
        except SolverError as e:
            logger.warning(
                "Decomposition failed",
                extra_data={"size": matrix.size, "error": str(e)}
            )
            raise CalculationError(str(e), matrix.size)

        report = verify(matrix, result, settings.RESIDUAL_TOLERANCE)
        derivation = derive(matrix)

        logger.info(
            "Decomposition completed",
            extra_data={
                "size": matrix.size,
                "eigenvalues": result.size,
                "verified": report.verified_count
            }
        )

        return result, report, derivation

    async def derive(self, matrix: MatrixModel) -> Derivation:
        """
        Build the characteristic polynomial derivation only.

        Raises:
            InvalidMatrixError: If a cell cannot be displayed (NaN or infinity)
        """
        try:
            return derive(matrix)
        except FormatError as e:
            raise InvalidMatrixError(str(e))

    def example(self, size: int) -> MatrixModel:
        """
        Get the preset example matrix for a size.

        Raises:
            ValidationError: If the size is not supported
        """
        try:
            return MatrixModel.example(size)
        except MatrixError as e:
            raise ValidationError(str(e), field="size")

    @staticmethod
    def _first_error(error: Exception) -> str:
        if isinstance(error, PydanticValidationError):
            errors = error.errors()
            if errors:
                return errors[0]["msg"]
        return str(error)


# Factory function for dependency injection
def get_eigen_service() -> EigenService:
    """Create eigen service instance"""
    return EigenService()
