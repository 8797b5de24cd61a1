"""Defines the base class for all fields.

.. autosummary::
   :nosignatures:

   FieldBase
"""

from __future__ import annotations

import logging
from abc import ABCMeta
from typing import Any, TypeVar

import numpy as np

from ..grids.grid import UniformGrid
from ..tools.typing import ArrayLike, NumericArray

_base_logger = logging.getLogger(__name__.rsplit(".", 1)[0])
""":class:`logging.Logger`: Base logger for fields."""

TField = TypeVar("TField", bound="FieldBase")


class FieldBase(metaclass=ABCMeta):
    """Abstract base class describing data on a uniform grid."""

    dtype: type = float
    """type: the data type of all values stored in the field"""

    _logger: logging.Logger

    def __init__(
        self,
        grid: UniformGrid,
        data: ArrayLike | None = None,
        *,
        label: str | None = None,
    ):
        """
        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                Grid defining the space on which this field is defined.
            data (:class:`~numpy.ndarray`, optional):
                Field values at the support points of the grid. Scalars are broadcast
                to the full grid and `None` initializes the field with zeros. The data
                is always copied.
            label (str, optional):
                Name of the field
        """
        if not isinstance(grid, UniformGrid):
            raise TypeError(f"Fields require a UniformGrid, not {grid!r}")
        self._grid = grid
        self.label = label

        if data is None:
            values = np.zeros(grid.shape, dtype=self.dtype)
        else:
            if np.shape(data) not in {(), grid.shape}:
                raise ValueError(
                    f"Data shape {np.shape(data)} does not match grid {grid.shape}"
                )
            values = np.array(np.broadcast_to(data, grid.shape), dtype=self.dtype)
        self._data = values

    def __init_subclass__(cls, **kwargs):
        """Initialize class-level attributes of subclasses."""
        super().__init_subclass__(**kwargs)
        # create logger for this specific field class
        cls._logger = _base_logger.getChild(cls.__qualname__)

    @property
    def grid(self) -> UniformGrid:
        """:class:`~qwave.grids.grid.UniformGrid`: Underlying grid of the field"""
        return self._grid

    @property
    def data(self) -> NumericArray:
        """:class:`~numpy.ndarray`: discretized data at the support points"""
        return self._data

    @property
    def readonly(self) -> bool:
        """bool: whether the data of the field can be modified"""
        return not self._data.flags.writeable

    @property
    def state(self) -> dict[str, Any]:
        """dict: the state of the field without the data"""
        return {"label": self.label, "grid": self.grid.state}

    def copy(self: TField, *, label: str | None = None) -> TField:
        """Return a copy of the field.

        Args:
            label (str, optional):
                Name of the returned field. If omitted, the current label is used.
        """
        if label is None:
            label = self.label
        return self.__class__(self.grid, self.data, label=label)  # type: ignore

    def __eq__(self, other) -> bool:
        if not isinstance(other, self.__class__):
            return NotImplemented
        return (
            self.grid == other.grid
            and self.label == other.label
            and np.array_equal(self.data, other.data)
        )

    def __repr__(self) -> str:
        class_name = self.__class__.__name__
        result = f"{class_name}(grid={self.grid!r}, data=Array{self.data.shape}"
        if self.label:
            result += f', label="{self.label}"'
        return result + ")"

    def assert_compatible(self, other: FieldBase | UniformGrid) -> None:
        """Check whether `other` is defined on the same grid.

        Args:
            other: Another field or a grid

        Raises:
            ValueError: if the grids differ
        """
        grid = other.grid if isinstance(other, FieldBase) else other
        if grid != self.grid:
            raise ValueError(f"Grids {self.grid} and {grid} are incompatible")
