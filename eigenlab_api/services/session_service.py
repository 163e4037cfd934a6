"""
Session service for the calculator page.

Drives the page state machine of each visitor's CalculatorSession.
"""

from typing import Mapping, Optional
from uuid import UUID

from eigenlab import CalculatorSession, EigenAdapter, MatrixError, MatrixModel

from ..repositories.session_repository import SessionRepositoryInterface
from ..core.errors import SessionNotFoundError, ValidationError
from ..core.logging import get_context_logger, get_logger

logger = get_logger(__name__)


def cell_name(row: int, col: int) -> str:
    """Form field name of a matrix cell"""
    return f"cell-{row}-{col}"


class SessionService:
    """
    Service for calculator session operations.

    Every mutation discards the previous result, then stores the session.
    """

    def __init__(
        self,
        repository: SessionRepositoryInterface,
        adapter: Optional[EigenAdapter] = None
    ):
        self.repository = repository
        self.adapter = adapter or EigenAdapter()

    async def get_or_create(self, session_id: Optional[str]) -> CalculatorSession:
        """Get the session for a cookie value, creating one if missing or stale"""
        if session_id:
            try:
                return await self.repository.get(UUID(session_id))
            except (ValueError, SessionNotFoundError):
                logger.debug(
                    "Replacing unknown session",
                    extra_data={"session_id": session_id}
                )

        return await self.repository.create()

    async def resize(self, session: CalculatorSession, size: int) -> CalculatorSession:
        """Switch the session to a fresh zero matrix of a new size"""
        try:
            session.resize(size)
        except MatrixError as e:
            raise ValidationError(str(e), field="size")

        logger.info(
            "Matrix resized",
            extra_data={"session_id": str(session.session_id), "size": size}
        )

        await self.repository.save(session)
        return session

    async def update_cells(
        self,
        session: CalculatorSession,
        form: Mapping[str, str]
    ) -> CalculatorSession:
        """
        Apply submitted cell values.

        Cells missing from the form keep their value; empty or unparsable
        entries become 0.
        """
        rows = []
        for i, row in enumerate(session.matrix.rows):
            rows.append([
                form.get(cell_name(i, j), value)
                for j, value in enumerate(row)
            ])

        session.set_matrix(MatrixModel.from_rows(rows))
        await self.repository.save(session)
        return session

    async def calculate(self, session: CalculatorSession) -> CalculatorSession:
        """Run the calculation; failures are recorded on the session"""
        log = get_context_logger(__name__, session_id=str(session.session_id))
        log.info("Calculating eigenvalues", extra_data={"size": session.size})

        await session.calculate_async(self.adapter)

        if session.error:
            log.warning("Calculation failed", extra_data={"error": session.error})

        await self.repository.save(session)
        return session

    async def reset(self, session: CalculatorSession) -> CalculatorSession:
        """Clear the matrix"""
        session.reset()
        await self.repository.save(session)
        return session

    async def load_example(self, session: CalculatorSession) -> CalculatorSession:
        """Load the preset example for the current size"""
        session.load_example()

        logger.info(
            "Example matrix loaded",
            extra_data={"session_id": str(session.session_id), "size": session.size}
        )

        await self.repository.save(session)
        return session


# Factory function for dependency injection
def get_session_service(
    repository: SessionRepositoryInterface
) -> SessionService:
    """Create session service instance"""
    return SessionService(repository)
