"""
Shared pytest fixtures for the eigenlab core and the eigenlab_api web app.

This module provides:
- Preset matrices and fake solvers with the shapes the adapter must accept
- Repositories and services backed by fresh in-memory state
- A TestClient bound to the FastAPI app
"""

from typing import Any

import numpy as np
import pytest
from fastapi.testclient import TestClient
from pydantic import BaseModel, ValidationError

from eigenlab import EigenAdapter, MatrixModel


class ArrayLike:
    """Container that only exposes ``tolist()``, like a solver's matrix type."""

    def __init__(self, items: list[Any]):
        self._items = items

    def tolist(self) -> list[Any]:
        return list(self._items)


def mixed_output_solver(array: np.ndarray) -> dict[str, Any]:
    """
    Rotation-by-90° eigenpairs in the mixed shape an external solver may use:
    values in an array-like container, complex parts as ``re``/``im`` mappings
    and some plain numbers among the vector components.
    """
    return {
        "values": ArrayLike([{"re": 0, "im": 1}, {"re": 0, "im": -1}]),
        "eigenvectors": [
            {"value": {"re": 0, "im": 1}, "vector": [1, {"re": 0, "im": -1}]},
            {"value": {"re": 0, "im": -1}, "vector": ArrayLike([1, complex(0, 1)])},
        ],
    }


def failing_solver(array: np.ndarray) -> dict[str, Any]:
    raise RuntimeError("solver did not converge")


@pytest.fixture
def matrix_2x2() -> MatrixModel:
    return MatrixModel.example(2)


@pytest.fixture
def matrix_3x3() -> MatrixModel:
    return MatrixModel.example(3)


@pytest.fixture
def matrix_4x4() -> MatrixModel:
    return MatrixModel.example(4)


@pytest.fixture
def rotation() -> MatrixModel:
    """90° rotation: eigenvalues ±i."""
    return MatrixModel(rows=[[0, -1], [1, 0]])


@pytest.fixture
def mixed_adapter() -> EigenAdapter:
    return EigenAdapter(solver=mixed_output_solver)


@pytest.fixture
def failing_adapter() -> EigenAdapter:
    return EigenAdapter(solver=failing_solver)


@pytest.fixture
def repository():
    """Fresh in-memory session repository."""
    from eigenlab_api.repositories import InMemorySessionRepository

    return InMemorySessionRepository(max_sessions=10, default_size=3)


@pytest.fixture
def session_service(repository):
    from eigenlab_api.services import SessionService

    return SessionService(repository)


@pytest.fixture
def eigen_service():
    from eigenlab_api.services import EigenService

    return EigenService()


@pytest.fixture
def client():
    """TestClient with its own cookie jar, so every test gets a fresh session."""
    from eigenlab_api.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def assert_validation_error():
    """Helper to assert that building a model raises ValidationError."""
    def _assert_validation(
        model_class: type[BaseModel],
        data: dict[str, Any],
        expected_message: str | None = None,
    ) -> ValidationError:
        with pytest.raises(ValidationError) as exc_info:
            model_class(**data)

        error = exc_info.value
        if expected_message:
            assert any(
                expected_message in e["msg"] for e in error.errors()
            ), f"Expected an error containing '{expected_message}'"

        return error

    return _assert_validation


@pytest.fixture
def eigenvalue_texts():
    """Formatted eigenvalues, sorted so tests do not depend on solver order."""
    def _texts(result, decimals: int = 4) -> list[str]:
        return sorted(v.to_string(decimals) for v in result.eigenvalues)

    return _texts
