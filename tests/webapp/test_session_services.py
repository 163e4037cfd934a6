"""
Tests for the session repository and the services.

Unit tests for session and eigen service logic.
"""

from uuid import uuid4

import pytest

from eigenlab import MatrixModel, PageState
from eigenlab_api.core.errors import (
    CalculationError,
    InvalidMatrixError,
    SessionNotFoundError,
    ValidationError,
)
from eigenlab_api.repositories import InMemorySessionRepository
from eigenlab_api.services import EigenService, SessionService, cell_name


# Repository

@pytest.mark.asyncio
async def test_create_and_get_session(repository):
    """Test creating and fetching a session"""
    session = await repository.create()

    assert session.size == 3
    assert await repository.exists(session.session_id)
    assert await repository.get(session.session_id) is session


@pytest.mark.asyncio
async def test_create_session_with_size(repository):
    """Test creating a session with a size"""
    session = await repository.create(size=2)
    assert session.matrix.size == 2


@pytest.mark.asyncio
async def test_get_session_not_found(repository):
    """Test getting non-existent session raises error"""
    with pytest.raises(SessionNotFoundError):
        await repository.get(uuid4())


@pytest.mark.asyncio
async def test_delete_session(repository):
    """Test deleting a session"""
    session = await repository.create()
    await repository.delete(session.session_id)

    assert not await repository.exists(session.session_id)
    assert len(repository) == 0


@pytest.mark.asyncio
async def test_evicts_least_recently_active_session():
    """Test the session limit"""
    repository = InMemorySessionRepository(max_sessions=2)
    first = await repository.create()
    second = await repository.create()

    # Touch the first session so the second becomes the oldest
    first.reset()
    await repository.save(first)

    third = await repository.create()

    assert len(repository) == 2
    assert await repository.exists(first.session_id)
    assert not await repository.exists(second.session_id)
    assert await repository.exists(third.session_id)


# SessionService

@pytest.mark.asyncio
async def test_get_or_create_without_cookie(session_service, repository):
    """Test a visitor without a cookie gets a stored session"""
    session = await session_service.get_or_create(None)
    assert await repository.exists(session.session_id)


@pytest.mark.asyncio
async def test_get_or_create_returns_existing(session_service):
    """Test a known cookie returns the same session"""
    session = await session_service.get_or_create(None)
    again = await session_service.get_or_create(str(session.session_id))
    assert again is session


@pytest.mark.asyncio
@pytest.mark.parametrize("cookie", ["not-a-uuid", str(uuid4())])
async def test_get_or_create_replaces_unknown(session_service, cookie):
    """Test a malformed or stale cookie gets a new session"""
    session = await session_service.get_or_create(cookie)
    assert str(session.session_id) != cookie


@pytest.mark.asyncio
async def test_update_cells(session_service):
    """Test applying submitted cells"""
    session = await session_service.get_or_create(None)
    await session_service.resize(session, 2)

    form = {
        cell_name(0, 0): "4",
        cell_name(0, 1): "2",
        cell_name(1, 0): "1",
        cell_name(1, 1): "x",
    }
    await session_service.update_cells(session, form)

    assert session.matrix.to_python() == [[4.0, 2.0], [1.0, 0.0]]


@pytest.mark.asyncio
async def test_update_cells_keeps_missing_cells(session_service):
    """Test cells absent from the form keep their value"""
    session = await session_service.get_or_create(None)
    await session_service.load_example(session)

    await session_service.update_cells(session, {cell_name(2, 2): "10"})

    assert session.matrix.to_python() == [[2, 0, 0], [0, 3, 4], [0, 4, 10]]


@pytest.mark.asyncio
async def test_calculate(session_service):
    """Test calculating the 3x3 example"""
    session = await session_service.get_or_create(None)
    await session_service.load_example(session)
    await session_service.calculate(session)

    assert session.state is PageState.READY
    assert session.result.size == 3


@pytest.mark.asyncio
async def test_calculate_failure_is_recorded(repository, failing_adapter):
    """Test solver failures end in the failed state"""
    service = SessionService(repository, adapter=failing_adapter)
    session = await service.get_or_create(None)
    await service.calculate(session)

    assert session.state is PageState.FAILED
    assert session.error == "solver did not converge"


@pytest.mark.asyncio
async def test_resize_unsupported(session_service):
    """Test resizing to an unsupported size raises error"""
    session = await session_service.get_or_create(None)

    with pytest.raises(ValidationError) as exc_info:
        await session_service.resize(session, 7)

    assert exc_info.value.details == {"field": "size"}


@pytest.mark.asyncio
async def test_reset(session_service):
    """Test clearing the matrix"""
    session = await session_service.get_or_create(None)
    await session_service.load_example(session)
    await session_service.reset(session)

    assert session.matrix.to_python() == [[0.0] * 3 for _ in range(3)]


# EigenService

def test_parse_matrix(eigen_service):
    """Test parsing submitted rows"""
    matrix = eigen_service.parse_matrix([[4, "2"], ["1", None]])
    assert matrix.to_python() == [[4.0, 2.0], [1.0, 0.0]]


@pytest.mark.parametrize("rows", [[], [[1, 2], [3]], [[1, 2, 3], [4, 5, 6]], [[0] * 5] * 5])
def test_parse_invalid_matrix(eigen_service, rows):
    """Test rows that do not form a supported square matrix"""
    with pytest.raises(InvalidMatrixError) as exc_info:
        eigen_service.parse_matrix(rows)

    assert exc_info.value.status_code == 422
    assert exc_info.value.message.startswith("Invalid matrix:")


@pytest.mark.asyncio
async def test_decompose(eigen_service, matrix_2x2):
    """Test decomposing the 2x2 example"""
    result, report, derivation = await eigen_service.decompose(matrix_2x2)

    assert result.size == 2
    assert report.all_verified
    assert derivation.polynomial == "λ² - 7λ + 10 = 0"


@pytest.mark.asyncio
async def test_decompose_failure(failing_adapter, matrix_2x2):
    """Test solver failures raise CalculationError"""
    service = EigenService(adapter=failing_adapter)

    with pytest.raises(CalculationError) as exc_info:
        await service.decompose(matrix_2x2)

    assert exc_info.value.details == {"size": 2, "error": "solver did not converge"}


@pytest.mark.asyncio
async def test_decompose_non_finite(eigen_service):
    """Test infinite cells fail the calculation"""
    matrix = MatrixModel.from_rows([["inf", 0], [0, 1]])

    with pytest.raises(CalculationError):
        await eigen_service.decompose(matrix)


@pytest.mark.asyncio
async def test_derive_non_finite(eigen_service):
    """Test infinite cells cannot be derived"""
    matrix = MatrixModel.from_rows([["inf", 0], [0, 1]])

    with pytest.raises(InvalidMatrixError):
        await eigen_service.derive(matrix)


def test_example(eigen_service):
    """Test preset example lookup"""
    assert eigen_service.example(4).size == 4


def test_example_unsupported(eigen_service):
    """Test preset example for an unsupported size raises error"""
    with pytest.raises(ValidationError):
        eigen_service.example(5)
