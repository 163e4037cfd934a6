"""
Request and response models for the JSON API.

Core values (MatrixModel, EigenResult, Derivation) live in ``eigenlab``; these
models shape them for clients, adding the formatted display strings.
"""

from typing import List, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from eigenlab import (
    ComplexScalar,
    EigenResult,
    EigenVector,
    MatrixModel,
    RealScalar,
    VerificationReport,
)
from eigenlab.numeric import RESULT_DECIMALS

# A cell may be sent as a number or as the raw text typed into the form
Cell = Union[float, str, None]


class MatrixRequest(BaseModel):
    """Matrix submitted for decomposition or derivation"""
    matrix: List[List[Cell]] = Field(..., description="Square matrix rows (2x2 to 4x4)")


class ScalarResponse(BaseModel):
    """One real or complex value with its display text"""
    real: float
    imag: float
    text: str

    @classmethod
    def from_domain(
        cls, value: Union[RealScalar, ComplexScalar], decimals: int = RESULT_DECIMALS
    ) -> "ScalarResponse":
        return cls(real=value.real, imag=value.imag, text=value.to_string(decimals))


class EigenvectorResponse(BaseModel):
    """Eigenvector with parallel real/imaginary parts and display text"""
    real: List[float]
    imag: List[float]
    text: List[str]

    @classmethod
    def from_domain(cls, vector: EigenVector, decimals: int = RESULT_DECIMALS) -> "EigenvectorResponse":
        return cls(real=vector.real, imag=vector.imag, text=vector.to_strings(decimals))


class VerificationResponse(BaseModel):
    """Av = λv residual check"""
    residuals: List[float]
    verified: List[bool]
    summary: str

    @classmethod
    def from_domain(cls, report: VerificationReport) -> "VerificationResponse":
        return cls(
            residuals=[c.residual for c in report.checks],
            verified=[c.verified for c in report.checks],
            summary=report.summary(),
        )


class EigenResponse(BaseModel):
    """Eigen decomposition response"""
    size: int
    eigenvalues: List[ScalarResponse]
    eigenvectors: List[EigenvectorResponse]
    verification: VerificationResponse
    polynomial: str

    @classmethod
    def from_domain(
        cls,
        result: EigenResult,
        report: VerificationReport,
        polynomial: str,
        decimals: int = RESULT_DECIMALS,
    ) -> "EigenResponse":
        return cls(
            size=result.size,
            eigenvalues=[ScalarResponse.from_domain(v, decimals) for v in result.eigenvalues],
            eigenvectors=[EigenvectorResponse.from_domain(v, decimals) for v in result.eigenvectors],
            verification=VerificationResponse.from_domain(report),
            polynomial=polynomial,
        )


class ExampleResponse(BaseModel):
    """Preset example matrix"""
    size: int
    matrix: List[List[float]]

    @classmethod
    def from_domain(cls, matrix: MatrixModel) -> "ExampleResponse":
        return cls(size=matrix.size, matrix=matrix.to_python())


class SessionResponse(BaseModel):
    """Calculator session state"""
    session_id: UUID
    size: int
    state: str
    matrix: List[List[float]]
    error: Optional[str] = None
    eigenvalues: List[ScalarResponse] = Field(default_factory=list)
