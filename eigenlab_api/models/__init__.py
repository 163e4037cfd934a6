"""API models package"""

from .api import (
    MatrixRequest,
    ScalarResponse,
    EigenvectorResponse,
    VerificationResponse,
    EigenResponse,
    ExampleResponse,
    SessionResponse,
)

__all__ = [
    "MatrixRequest",
    "ScalarResponse",
    "EigenvectorResponse",
    "VerificationResponse",
    "EigenResponse",
    "ExampleResponse",
    "SessionResponse",
]
