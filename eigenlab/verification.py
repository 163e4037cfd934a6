"""
Check eigenpairs against Av = λv.
"""

from __future__ import annotations

import logging

import numpy as np
from pydantic import BaseModel

from .adapter import EigenResult
from .matrix import MatrixModel

logger = logging.getLogger(__name__)

# Relative residual tolerance, scaled by max(1, ||A||)
RESIDUAL_TOLERANCE = 1e-6


class PairCheck(BaseModel):
    index: int
    residual: float
    verified: bool


class VerificationReport(BaseModel):
    checks: list[PairCheck]

    @property
    def verified_count(self) -> int:
        return sum(1 for check in self.checks if check.verified)

    @property
    def all_verified(self) -> bool:
        return self.verified_count == len(self.checks)

    def summary(self) -> str:
        if self.all_verified:
            return f"✓ All {len(self.checks)} eigenpairs have been verified"
        return f"{self.verified_count} of {len(self.checks)} eigenpairs verified"


def verify(matrix: MatrixModel, result: EigenResult, tolerance: float = RESIDUAL_TOLERANCE) -> VerificationReport:
    """
    Compute ||Av - λv|| for every eigenpair.

    Args:
        matrix: The decomposed matrix
        result: Eigenpairs returned by the adapter
        tolerance: Relative residual below which a pair counts as verified

    Returns:
        One PairCheck per eigenpair, in result order
    """
    # Work on A / max|a_ij| so that norms of very large matrices do not overflow
    a = matrix.to_numpy()
    scale = max(1.0, float(np.max(np.abs(a))))
    a_scaled = a / scale
    bound = tolerance * max(1.0 / scale, float(np.linalg.norm(a_scaled)))

    checks = []
    for index, (value, vector) in enumerate(result.pairs(), start=1):
        v = vector.to_numpy()
        scaled = float(np.linalg.norm(a_scaled @ v - (value.to_python() / scale) * v))
        checks.append(
            PairCheck(index=index, residual=scaled * scale, verified=scaled <= bound)
        )

    report = VerificationReport(checks=checks)
    if not report.all_verified:
        logger.warning(f"Eigenpair verification failed: {report.summary()}")
    return report
