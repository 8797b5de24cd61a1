"""Defines the static potential acting on the wave field.

.. autosummary::
   :nosignatures:

   PotentialField
   POTENTIAL_SHAPES

The potentials are built in normalized coordinates. Free space has a potential of
exactly zero, while walls and barriers carry positive values.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

import numpy as np

from ..grids.grid import UniformGrid
from ..tools.typing import ArrayLike, FloatingArray
from .base import FieldBase

POTENTIAL_SHAPES: tuple[str, ...] = ("free", "square_well", "two_slit", "barrier")
"""tuple: names of the shapes supported by :meth:`PotentialField.from_shape`"""

DEFAULT_SLITS: tuple[tuple[float, float], ...] = ((0.4, 0.45), (0.55, 0.6))
"""tuple: the two gaps in the barrier of the two-slit potential"""


def _check_positive(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"`{name}` must be positive, not {value!r}")
    return value


def _check_non_negative(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"`{name}` must be non-negative, not {value!r}")
    return value


class PotentialField(FieldBase):
    """Real, non-negative potential that does not change during a simulation.

    The data of the field is read-only. Use the class methods to construct the typical
    shapes, like a square well enclosing the domain or the two-slit barrier.
    """

    dtype = float

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
                Non-negative values of the potential. `None` creates free space.
            label (str, optional):
                Name of the field
        """
        super().__init__(grid, data, label=label)
        if not np.all(np.isfinite(self._data)):
            raise ValueError("Potential must be finite")
        if np.any(self._data < 0):
            raise ValueError("Potential must be non-negative")
        self._data.flags.writeable = False

    @property
    def max_value(self) -> float:
        """float: the largest value of the potential"""
        return float(self.data.max())

    @property
    def is_free(self) -> np.ndarray:
        """:class:`~numpy.ndarray`: boolean mask of cells without potential"""
        return self.data == 0

    @property
    def wall_mask(self) -> np.ndarray:
        """:class:`~numpy.ndarray`: boolean mask of cells with a positive potential"""
        return self.data > 0

    @classmethod
    def free(cls, grid: UniformGrid, *, label: str | None = "free") -> PotentialField:
        """Create a potential that vanishes everywhere.

        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                The grid on which the potential is defined
            label (str, optional):
                Name of the field
        """
        return cls(grid, label=label)

    @classmethod
    def _wall_values(
        cls, grid: UniformGrid, wall_value: float, wall_width: float | None
    ) -> FloatingArray:
        """Values of walls of a given width along the edges of the unit square."""
        wall_value = _check_non_negative("wall_value", wall_value)
        if wall_width is None:
            wall_width = 2 * grid.dx
        wall_width = _check_positive("wall_width", wall_width)

        coords = grid.cell_coords
        x, y = coords[..., 0], coords[..., 1]
        inside_wall = (
            (y > 1 - wall_width)
            | (y < wall_width)
            | (x > 1 - wall_width)
            | (x < wall_width)
        )
        return wall_value * inside_wall

    @classmethod
    def square_well(
        cls,
        grid: UniformGrid,
        *,
        wall_value: float = 1.0,
        wall_width: float | None = None,
        label: str | None = "square_well",
    ) -> PotentialField:
        """Create walls enclosing the domain.

        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                The grid on which the potential is defined
            wall_value (float):
                The potential inside the walls
            wall_width (float, optional):
                The width of the walls in normalized coordinates. The default value
                corresponds to twice the spatial step of the grid.
            label (str, optional):
                Name of the field
        """
        return cls(grid, cls._wall_values(grid, wall_value, wall_width), label=label)

    @classmethod
    def two_slit(
        cls,
        grid: UniformGrid,
        *,
        wall_value: float = 1.0,
        wall_width: float | None = None,
        barrier_value: float = 3.0,
        barrier_position: float = 0.5,
        barrier_width: float | None = None,
        slits: Sequence[Sequence[float]] = DEFAULT_SLITS,
        label: str | None = "two_slit",
    ) -> PotentialField:
        """Create a square well with a horizontal barrier containing gaps.

        The barrier covers all cells whose `y` coordinate lies within `barrier_width`
        of `barrier_position`. Cells whose `x` coordinate falls inside one of the
        closed intervals given by `slits` are left open. The barrier adds to the
        potential of the walls where they overlap.

        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                The grid on which the potential is defined
            wall_value (float):
                The potential inside the walls
            wall_width (float, optional):
                The width of the walls in normalized coordinates. The default value
                corresponds to twice the spatial step of the grid.
            barrier_value (float):
                The potential of the barrier
            barrier_position (float):
                The `y` coordinate of the center of the barrier
            barrier_width (float, optional):
                Half the thickness of the barrier in normalized coordinates. The default
                value is the spatial step of the grid.
            slits (list):
                Intervals `(x_min, x_max)` along the `x` axis where the barrier is open
            label (str, optional):
                Name of the field
        """
        values = cls._wall_values(grid, wall_value, wall_width)

        barrier_value = _check_non_negative("barrier_value", barrier_value)
        barrier_position = float(barrier_position)
        if not 0 <= barrier_position <= 1:
            raise ValueError("`barrier_position` must lie in [0, 1]")
        if barrier_width is None:
            barrier_width = grid.dx
        barrier_width = _check_positive("barrier_width", barrier_width)

        coords = grid.cell_coords
        x, y = coords[..., 0], coords[..., 1]
        in_barrier = np.abs(y - barrier_position) < barrier_width
        for slit in slits:
            x_min, x_max = (float(v) for v in slit)
            if not x_min <= x_max:
                raise ValueError(f"Slit interval {slit} must be ordered")
            in_barrier &= (x < x_min) | (x > x_max)

        return cls(grid, values + barrier_value * in_barrier, label=label)

    @classmethod
    def barrier(
        cls, grid: UniformGrid, *, label: str | None = "barrier", **kwargs
    ) -> PotentialField:
        r"""Create a square well with a closed horizontal barrier.

        This is useful for studying reflection and tunneling.

        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                The grid on which the potential is defined
            label (str, optional):
                Name of the field
            \**kwargs:
                Arguments of :meth:`two_slit`, except `slits`
        """
        if "slits" in kwargs:
            raise TypeError("A closed barrier does not support `slits`")
        return cls.two_slit(grid, slits=(), label=label, **kwargs)

    @classmethod
    def from_shape(cls, grid: UniformGrid, shape: str, **kwargs) -> PotentialField:
        r"""Create a potential from the name of its shape.

        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                The grid on which the potential is defined
            shape (str):
                One of the names listed in :data:`POTENTIAL_SHAPES`
            \**kwargs:
                Geometric parameters passed to the respective constructor

        Returns:
            :class:`PotentialField`: The constructed potential
        """
        if shape not in POTENTIAL_SHAPES:
            raise ValueError(
                f"Unknown potential shape `{shape}`. Possible values are "
                + ", ".join(f"'{s}'" for s in POTENTIAL_SHAPES)
            )
        return getattr(cls, shape)(grid, **kwargs)  # type: ignore

    @classmethod
    def from_data(cls, grid: UniformGrid, data: Any) -> PotentialField:
        """Create a potential from various data formats.

        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                The grid on which the potential is defined
            data:
                Either an instance of :class:`PotentialField`, the name of a shape, a
                dictionary with the item `shape` and additional geometric
                parameters, or an array of values.
        """
        if isinstance(data, PotentialField):
            data.assert_compatible(grid)
            return data
        elif isinstance(data, str):
            return cls.from_shape(grid, data)
        elif isinstance(data, dict):
            kwargs = data.copy()
            try:
                shape = kwargs.pop("shape")
            except KeyError:
                msg = "Potential data must contain the item `shape`"
                raise ValueError(msg) from None
            return cls.from_shape(grid, shape, **kwargs)
        elif data is None:
            return cls.free(grid)
        else:
            return cls(grid, data)
