"""Provides support for mypy type checking of the package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, Protocol

import numpy as np
from numpy.typing import ArrayLike  # noqa: F401

if TYPE_CHECKING:
    from ..fields.wave import WaveField  # noqa: F401


# array types:
NumericArray = np.ndarray[Any, np.dtype[np.number]]  # array of numbers (incl complex)
FloatingArray = np.ndarray[Any, np.dtype[np.floating]]
ComplexArray = np.ndarray[Any, np.dtype[np.complexfloating]]

# miscellaneous types:
BackendType = Literal["numpy", "numba"]
BoundaryType = Literal["clamp", "periodic", "zero"]
StabilityCheckType = Literal["off", "warn", "raise"]


class OperatorType(Protocol):
    """An operator that acts on an array and writes into `out`."""

    def __call__(self, arr: NumericArray, out: NumericArray) -> None:
        """Evaluate the operator."""


class RHSType(Protocol):
    """Right hand side of the evolution equation acting on raw data."""

    def __call__(self, state_data: NumericArray, t: float) -> NumericArray:
        """Evaluate the evolution rate."""


class StepperType(Protocol):
    def __call__(
        self, state_data: NumericArray, t: float, out: NumericArray
    ) -> None:
        """Advance `state_data` by one step, storing the result in `out`."""
