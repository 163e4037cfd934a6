"""
Numeric display values: RealScalar, ComplexScalar and the number formatter.

Solver output is resolved once into the ``Scalar`` union (see
``eigenlab.adapter``); everything downstream of the adapter reads ``real`` and
``imag`` from these models and never inspects raw solver values again.
"""

from __future__ import annotations

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


# Values with magnitude below this are displayed as exactly zero
ZERO_TOLERANCE = 1e-10

# Decimal places used in the derivation panels and in the result panel
DERIVATION_DECIMALS = 4
RESULT_DECIMALS = 6


class FormatError(ValueError):
    """Raised when a value cannot be rendered (NaN or infinity)."""


def snap_round(value: float, decimals: int = DERIVATION_DECIMALS) -> float:
    """
    Snap near-zero values to 0 and round the rest half-up to ``decimals`` places.

    Args:
        value: Number to round
        decimals: Number of decimal places to keep

    Returns:
        The rounded value (never ``-0.0``)

    Raises:
        FormatError: If ``value`` is NaN or infinite
    """
    value = float(value)
    if not math.isfinite(value):
        raise FormatError(f"Cannot format non-finite value: {value}")

    if abs(value) < ZERO_TOLERANCE:
        return 0.0
    if abs(value) >= 2 ** 52:
        # already integral
        return value

    quantum = Decimal(1).scaleb(-decimals)
    rounded = float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))
    return rounded + 0.0  # -0.0 -> 0.0


def _to_text(value: float, decimals: int) -> str:
    """Render an already rounded value with trailing zeros stripped."""
    text = f"{value:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text


def format_real(value: float, decimals: int = DERIVATION_DECIMALS) -> str:
    """
    Format a real number for display.

    Examples:
        >>> format_real(3.14159265)
        '3.1416'
        >>> format_real(1e-12)
        '0'
        >>> format_real(7.0)
        '7'
    """
    return _to_text(snap_round(value, decimals), decimals)


def format_complex(real: float, imag: float, decimals: int = DERIVATION_DECIMALS) -> str:
    """
    Format a complex number as ``a + bi``.

    Each part is snapped and rounded on its own before choosing the layout, so a
    real part of ``1e-12`` next to an imaginary part of ``5`` renders as ``5i``.

    Examples:
        >>> format_complex(2, 3)
        '2 + 3i'
        >>> format_complex(2, -3)
        '2 - 3i'
        >>> format_complex(0, -5)
        '-5i'
    """
    real_part = snap_round(real, decimals)
    imag_part = snap_round(imag, decimals)

    if imag_part == 0:
        return _to_text(real_part, decimals)
    if real_part == 0:
        return f"{_to_text(imag_part, decimals)}i"

    sign = "+" if imag_part > 0 else "-"
    return f"{_to_text(real_part, decimals)} {sign} {_to_text(abs(imag_part), decimals)}i"


class RealScalar(BaseModel):
    """A real value returned by the solver."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["real"] = "real"
    value: float = Field(description="The real value")

    @property
    def real(self) -> float:
        return self.value

    @property
    def imag(self) -> float:
        return 0.0

    @property
    def is_real(self) -> bool:
        return True

    def to_string(self, decimals: int = DERIVATION_DECIMALS) -> str:
        return format_real(self.value, decimals)

    def to_python(self) -> complex:
        return complex(self.value, 0.0)

    def __str__(self) -> str:
        return self.to_string()


class ComplexScalar(BaseModel):
    """A value returned by the solver with both a real and an imaginary part."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["complex"] = "complex"
    real: float = Field(description="The real part")
    imag: float = Field(default=0.0, description="The imaginary part")

    @property
    def is_real(self) -> bool:
        """True when the imaginary part vanishes within the display tolerance."""
        return abs(self.imag) < ZERO_TOLERANCE

    def to_string(self, decimals: int = DERIVATION_DECIMALS) -> str:
        return format_complex(self.real, self.imag, decimals)

    def to_python(self) -> complex:
        return complex(self.real, self.imag)

    def __str__(self) -> str:
        return self.to_string()


# Discriminated RealOrComplex variant
Scalar = Annotated[Union[RealScalar, ComplexScalar], Field(discriminator="kind")]
