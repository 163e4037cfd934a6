"""Tests for EigenAdapter and the normalization of solver output."""

import math

import numpy as np
import pytest

from eigenlab import (
    ComplexScalar,
    EigenAdapter,
    EigenResult,
    EigenVector,
    MatrixModel,
    RealScalar,
    SolverError,
    compute,
)
from eigenlab.adapter import as_scalar, as_sequence, split_vector


def assert_eigenpairs(matrix: MatrixModel, result: EigenResult) -> None:
    a = matrix.to_numpy()
    for value, vector in result.pairs():
        v = vector.to_numpy()
        assert np.allclose(a @ v, value.to_python() * v, atol=1e-8)


class TestAsScalar:
    """Test resolving raw solver values into RealScalar/ComplexScalar."""

    def test_python_numbers_are_real(self):
        assert as_scalar(2) == RealScalar(value=2.0)
        assert as_scalar(2.5) == RealScalar(value=2.5)

    def test_numpy_floats_are_real(self):
        assert isinstance(as_scalar(np.float64(3.0)), RealScalar)

    def test_complex_objects(self):
        value = as_scalar(complex(1, -2))
        assert isinstance(value, ComplexScalar)
        assert (value.real, value.imag) == (1.0, -2.0)

        assert isinstance(as_scalar(np.complex128(1j)), ComplexScalar)

    def test_re_im_mappings(self):
        value = as_scalar({"re": 0.5, "im": 2})
        assert value == ComplexScalar(real=0.5, imag=2.0)

    def test_complex_with_zero_imaginary_part_stays_complex(self):
        value = as_scalar(complex(4, 0))
        assert isinstance(value, ComplexScalar)
        assert value.is_real
        assert value.to_string() == "4"

    @pytest.mark.parametrize("raw", [{"re": "x", "im": 0}, {"re": 1, "im": None}])
    def test_non_numeric_parts(self, raw):
        with pytest.raises(SolverError, match="non-numeric"):
            as_scalar(raw)

    @pytest.mark.parametrize("raw", ["1", None, {"re": 1}])
    def test_unsupported_values(self, raw):
        with pytest.raises(SolverError):
            as_scalar(raw)


class TestAsSequence:
    def test_plain_sequences(self):
        assert as_sequence([1, 2]) == [1, 2]
        assert as_sequence((1, 2)) == [1, 2]

    def test_array_like(self):
        assert as_sequence(np.array([1.0, 2.0])) == [1.0, 2.0]

    def test_iterables(self):
        assert as_sequence(iter([3])) == [3]

    def test_unsupported_container(self):
        with pytest.raises(SolverError):
            as_sequence(42)


class TestSplitVector:
    def test_mixed_components(self):
        vector = split_vector([1, {"re": 0, "im": -1}, complex(2, 3)])
        assert vector.real == [1.0, 0.0, 2.0]
        assert vector.imag == [0.0, -1.0, 3.0]
        assert len(vector) == 3

    def test_parallel_parts_enforced(self):
        with pytest.raises(ValueError):
            EigenVector(real=[1.0, 2.0], imag=[0.0])

    def test_to_strings(self):
        vector = EigenVector(real=[0.7071067811865475, 0.0], imag=[0.0, -0.7071067811865475])
        assert vector.to_strings() == ["0.707107", "-0.707107i"]
        assert vector.to_strings(4) == ["0.7071", "-0.7071i"]


class TestNumpySolver:
    """Test decompositions with the default NumPy solver."""

    def test_2x2_example(self, matrix_2x2, eigenvalue_texts):
        result = compute(matrix_2x2)
        assert result.size == 2
        assert eigenvalue_texts(result) == ["2", "5"]
        assert all(v.is_real for v in result.eigenvalues)
        assert_eigenpairs(matrix_2x2, result)

    def test_3x3_symmetric_example_is_real(self, matrix_3x3, eigenvalue_texts):
        result = compute(matrix_3x3)
        assert result.size == 3
        assert all(v.is_real for v in result.eigenvalues)
        assert sorted(eigenvalue_texts(result), key=float) == ["1", "2", "11"]
        assert math.isclose(sum(v.real for v in result.eigenvalues), 14.0)
        assert_eigenpairs(matrix_3x3, result)

    def test_4x4_example(self, matrix_4x4, eigenvalue_texts):
        result = compute(matrix_4x4)
        assert result.size == 4
        assert all(len(vector) == 4 for vector in result.eigenvectors)
        assert sorted(eigenvalue_texts(result), key=float) == ["2.382", "3.382", "4.618", "5.618"]
        assert_eigenpairs(matrix_4x4, result)

    def test_rotation_has_complex_eigenvalues(self, rotation):
        result = compute(rotation)
        assert all(isinstance(v, ComplexScalar) for v in result.eigenvalues)
        assert sorted(v.to_string() for v in result.eigenvalues) == ["-1i", "1i"]
        assert not any(v.is_real for v in result.eigenvalues)
        assert_eigenpairs(rotation, result)

    def test_zero_matrix(self):
        result = compute(MatrixModel.zeros(2))
        assert [v.to_string() for v in result.eigenvalues] == ["0", "0"]

    def test_accepts_nested_lists(self):
        result = EigenAdapter().compute([[4, 2], [1, 3]])
        assert result.size == 2

    def test_eigenvalue_order_matches_eigenvector_order(self, matrix_2x2):
        result = compute(matrix_2x2)
        for value, vector in result.pairs():
            v = vector.to_numpy()
            assert np.allclose(matrix_2x2.to_numpy() @ v, value.real * v)


class TestCustomSolver:
    """Test solvers that return mixed output shapes."""

    def test_mixed_output_is_normalized(self, mixed_adapter, rotation):
        result = mixed_adapter.compute(rotation)
        assert [v.to_string() for v in result.eigenvalues] == ["1i", "-1i"]
        assert result.eigenvectors[0].real == [1.0, 0.0]
        assert result.eigenvectors[0].imag == [0.0, -1.0]
        assert result.eigenvectors[1].imag == [0.0, 1.0]
        assert_eigenpairs(rotation, result)

    def test_solver_failure(self, failing_adapter, matrix_2x2):
        with pytest.raises(SolverError, match="did not converge"):
            failing_adapter.compute(matrix_2x2)

    def test_solver_failure_without_message(self, matrix_2x2):
        def silent(array):
            raise ArithmeticError()

        with pytest.raises(SolverError, match="ArithmeticError"):
            EigenAdapter(solver=silent).compute(matrix_2x2)

    def test_missing_keys(self, matrix_2x2):
        adapter = EigenAdapter(solver=lambda array: {"values": [1, 2]})
        with pytest.raises(SolverError, match="unexpected shape"):
            adapter.compute(matrix_2x2)

    def test_inconsistent_vector_length(self, matrix_2x2):
        adapter = EigenAdapter(solver=lambda array: {
            "values": [1, 2],
            "eigenvectors": [{"value": 1, "vector": [1]}, {"value": 2, "vector": [0, 1]}],
        })
        with pytest.raises(SolverError, match="inconsistent"):
            adapter.compute(matrix_2x2)

    def test_wrong_number_of_eigenvalues(self, matrix_3x3):
        adapter = EigenAdapter(solver=lambda array: {
            "values": [1, 2],
            "eigenvectors": [{"value": 1, "vector": [1, 0]}, {"value": 2, "vector": [0, 1]}],
        })
        with pytest.raises(SolverError, match="2 eigenvalues for a 3x3"):
            adapter.compute(matrix_3x3)

    def test_non_numeric_eigenvalue(self, matrix_2x2):
        adapter = EigenAdapter(solver=lambda array: {
            "values": [{"re": "x", "im": 0}, 1],
            "eigenvectors": [{"value": 1, "vector": [1, 0]}, {"value": 1, "vector": [0, 1]}],
        })
        with pytest.raises(SolverError, match="non-numeric"):
            adapter.compute(matrix_2x2)


class TestInvalidInput:
    """Test rejection of matrices the solver cannot take."""

    def test_non_square(self):
        with pytest.raises(SolverError, match="square"):
            compute([[1, 2, 3], [4, 5, 6]])

    def test_empty(self):
        with pytest.raises(SolverError, match="empty"):
            compute([])

    def test_unsupported_size(self):
        with pytest.raises(SolverError, match="Unsupported matrix size 5"):
            compute(np.eye(5))

    def test_ragged(self):
        with pytest.raises(SolverError):
            compute([[1, 2], [3]])

    def test_non_numeric(self):
        with pytest.raises(SolverError):
            compute([["a", "b"], ["c", "d"]])

    @pytest.mark.parametrize("bad", [math.inf, -math.inf, math.nan])
    def test_non_finite(self, bad):
        with pytest.raises(SolverError, match="non-finite"):
            compute([[bad, 0], [0, 1]])

    def test_non_finite_matrix_model(self):
        matrix = MatrixModel.zeros(2)
        matrix.set_cell(0, 0, "inf")
        with pytest.raises(SolverError, match="non-finite"):
            compute(matrix)
