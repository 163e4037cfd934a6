"""Repositories package"""

from .session_repository import (
    SessionRepositoryInterface,
    InMemorySessionRepository,
    get_session_repository,
)

__all__ = [
    "SessionRepositoryInterface",
    "InMemorySessionRepository",
    "get_session_repository",
]
