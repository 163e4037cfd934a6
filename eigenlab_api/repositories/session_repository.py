"""
Calculator session repository.

Implements the Repository pattern for calculator page state. Sessions live in
process memory only and are never persisted.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
from uuid import UUID

from eigenlab import CalculatorSession

from ..core.errors import SessionNotFoundError
from ..core.logging import get_logger
from ..core.config import settings

logger = get_logger(__name__)


class SessionRepositoryInterface(ABC):
    """Abstract interface for session repository"""

    @abstractmethod
    async def get(self, session_id: UUID) -> CalculatorSession:
        """Get session by ID"""
        pass

    @abstractmethod
    async def create(self, size: Optional[int] = None) -> CalculatorSession:
        """Create and store a new session"""
        pass

    @abstractmethod
    async def save(self, session: CalculatorSession) -> None:
        """Store session state"""
        pass

    @abstractmethod
    async def delete(self, session_id: UUID) -> None:
        """Remove a session"""
        pass

    @abstractmethod
    async def exists(self, session_id: UUID) -> bool:
        """Check if session exists"""
        pass


class InMemorySessionRepository(SessionRepositoryInterface):
    """
    Dictionary-backed session repository.

    Holds at most ``max_sessions`` sessions; the least recently active one is
    dropped when the limit is reached.
    """

    def __init__(self, max_sessions: Optional[int] = None, default_size: Optional[int] = None):
        self.max_sessions = max_sessions or settings.MAX_SESSIONS
        self.default_size = default_size or settings.DEFAULT_MATRIX_SIZE
        self._sessions: Dict[UUID, CalculatorSession] = {}

        logger.info(
            "Initialized InMemorySessionRepository",
            extra_data={"max_sessions": self.max_sessions}
        )

    async def get(self, session_id: UUID) -> CalculatorSession:
        """Get session by ID"""
        session = self._sessions.get(session_id)

        if session is None:
            logger.debug(
                "Session not found",
                extra_data={"session_id": str(session_id)}
            )
            raise SessionNotFoundError(str(session_id))

        return session

    async def create(self, size: Optional[int] = None) -> CalculatorSession:
        """Create and store a new session"""
        session = CalculatorSession.new(size or self.default_size)
        await self.save(session)

        logger.info(
            "Session created",
            extra_data={"session_id": str(session.session_id), "size": session.size}
        )

        return session

    async def save(self, session: CalculatorSession) -> None:
        """Store session state"""
        if session.session_id not in self._sessions and len(self._sessions) >= self.max_sessions:
            self._evict_oldest()
        self._sessions[session.session_id] = session

    async def delete(self, session_id: UUID) -> None:
        """Remove a session"""
        self._sessions.pop(session_id, None)

    async def exists(self, session_id: UUID) -> bool:
        """Check if session exists"""
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def _evict_oldest(self) -> None:
        oldest = min(self._sessions.values(), key=lambda s: s.last_activity)
        del self._sessions[oldest.session_id]

        logger.info(
            "Session evicted",
            extra_data={"session_id": str(oldest.session_id)}
        )


# Singleton instance
_session_repository: Optional[InMemorySessionRepository] = None


def get_session_repository() -> InMemorySessionRepository:
    """Get session repository instance (singleton)"""
    global _session_repository

    if _session_repository is None:
        _session_repository = InMemorySessionRepository()

    return _session_repository
