r"""Uniform two-dimensional grid in normalized coordinates.

The grid covers the unit square :math:`[0, 1]^2`. Cell centers are located at

.. math::
    x_i = \frac{i + \frac12}{N_x} \quad \text{and} \quad
    y_j = \frac{j + \frac12}{N_y}

for :math:`i=0, \ldots, N_x-1` and :math:`j=0, \ldots, N_y-1`. The first axis of
every data array is associated with `x` and the second with `y`.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Sequence
from typing import Any

import numpy as np

from ..tools.docstrings import fill_in_docstring
from ..tools.typing import BoundaryType, FloatingArray

_logger = logging.getLogger(__name__)
""":class:`logging.Logger`: Logger for grids."""

BOUNDARY_MODES: tuple[str, ...] = ("clamp", "periodic", "zero")


def _check_shape(shape: Sequence[int]) -> tuple[int, int]:
    """Checks the consistency of shape tuples."""
    if not hasattr(shape, "__iter__"):
        raise ValueError(f"Shape must be a sequence of two integers, not {shape!r}")
    shape_list = list(shape)
    if len(shape_list) != 2:
        raise ValueError(f"Require exactly two dimensions, got {len(shape_list)}")

    result = []
    for dim in shape_list:
        try:
            valid = dim == int(dim) and dim >= 1
        except (TypeError, ValueError):
            valid = False
        if not valid:
            raise ValueError(f"{dim!r} is not a valid number of support points")
        result.append(int(dim))
    return result[0], result[1]


class UniformGrid:
    """Uniform grid of cells covering the unit square.

    The spatial step `dx` is measured in normalized coordinates and determines which
    cells are considered neighbors by the stencil: along each axis the neighbors of a
    cell are found `round(dx * n)` cells away, where `n` is the number of cells along
    that axis. The default step of two cells reproduces the classic setup where the
    step is derived from the resolution, `dx = 1 / (nx / 2)`.
    """

    @fill_in_docstring
    def __init__(
        self,
        shape: Sequence[int],
        dx: float | None = None,
        boundary: BoundaryType = "clamp",
    ):
        """
        Args:
            shape (tuple):
                The number of support points along the `x` and the `y` axis
            dx (float, optional):
                The spatial step in normalized coordinates. If omitted, the step is
                derived from the resolution as `1 / (shape[0] / 2)`.
            boundary (str):
                {ARG_BOUNDARY}
        """
        self._shape = _check_shape(shape)
        if dx is None:
            dx = 1 / (self._shape[0] / 2)
        dx = float(dx)
        if not math.isfinite(dx) or dx <= 0:
            raise ValueError(f"Spatial step `dx` must be positive, not {dx!r}")
        self._dx = dx

        if boundary not in BOUNDARY_MODES:
            raise ValueError(
                f"Boundary `{boundary}` is not supported. Possible values are "
                + ", ".join(f"'{b}'" for b in BOUNDARY_MODES)
            )
        self._boundary: str = boundary

        strides = []
        for axis, n in zip("xy", self._shape):
            stride_exact = dx * n
            stride = int(round(stride_exact))
            if not 1 <= stride < n:
                raise ValueError(
                    f"Spatial step dx={dx:g} corresponds to {stride_exact:g} cells "
                    f"along the {axis}-axis, but must lie between 1 and {n - 1} cells"
                )
            if not math.isclose(stride, stride_exact, rel_tol=1e-9):
                _logger.warning(
                    "Spatial step dx=%g is not a multiple of the cell size along the "
                    "%s-axis. Using a stencil offset of %d cells.",
                    dx,
                    axis,
                    stride,
                )
            strides.append(stride)
        self._strides = (strides[0], strides[1])

    @property
    def shape(self) -> tuple[int, int]:
        """tuple: the number of support points along each axis"""
        return self._shape

    @property
    def dx(self) -> float:
        """float: the spatial step in normalized coordinates"""
        return self._dx

    @property
    def boundary(self) -> str:
        """str: how the stencil samples points beyond the edge of the grid"""
        return self._boundary

    @property
    def strides(self) -> tuple[int, int]:
        """tuple: the offset (in cells) between a cell and its stencil neighbors"""
        return self._strides

    @property
    def num_cells(self) -> int:
        """int: the total number of cells"""
        return self._shape[0] * self._shape[1]

    @property
    def discretization(self) -> FloatingArray:
        """:class:`numpy.ndarray`: the linear size of a cell along each axis"""
        return 1 / np.array(self._shape, dtype=float)

    @property
    def axes_coords(self) -> tuple[FloatingArray, FloatingArray]:
        """tuple: coordinates of the cell centers along the two axes"""
        nx, ny = self._shape
        return (np.arange(nx) + 0.5) / nx, (np.arange(ny) + 0.5) / ny

    @property
    def cell_coords(self) -> FloatingArray:
        """:class:`numpy.ndarray`: coordinates of all cell centers

        The array has shape `(nx, ny, 2)`, where the last axis holds `(x, y)`.
        """
        xs, ys = self.axes_coords
        return np.stack(np.meshgrid(xs, ys, indexing="ij"), axis=-1)

    @property
    def state(self) -> dict[str, Any]:
        """dict: the state of the grid"""
        return {"shape": self.shape, "dx": self.dx, "boundary": self.boundary}

    @property
    def state_serialized(self) -> str:
        """str: JSON-serialized version of the state of this grid"""
        state = self.state
        state["class"] = self.__class__.__name__
        return json.dumps(state)

    @classmethod
    def from_state(cls, state: dict[str, Any]) -> UniformGrid:
        """Create a grid from a stored `state`.

        Args:
            state (dict):
                The state from which the grid is reconstructed.
        """
        state_copy = state.copy()
        obj = cls(
            shape=state_copy.pop("shape"),
            dx=state_copy.pop("dx"),
            boundary=state_copy.pop("boundary"),
        )
        if state_copy:
            raise ValueError(f"State items {state_copy.keys()} were not used")
        return obj

    def copy(self) -> UniformGrid:
        """Return a copy of the grid."""
        return self.__class__.from_state(self.state)

    __copy__ = copy

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(shape={self.shape}, dx={self.dx:g}, "
            f'boundary="{self.boundary}")'
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, self.__class__):
            return NotImplemented
        return (
            self.shape == other.shape
            and self.dx == other.dx
            and self.boundary == other.boundary
        )

    def __hash__(self) -> int:
        return hash((self.shape, self.dx, self.boundary))

    def contains_point(self, points: np.ndarray) -> np.ndarray:
        """Check whether points lie within the unit square covered by the grid.

        Args:
            points (:class:`numpy.ndarray`):
                Coordinates of the points, with the last axis holding `(x, y)`

        Returns:
            :class:`numpy.ndarray`: A boolean array
        """
        points = np.asarray(points, dtype=float)
        if points.shape[-1] != 2:
            raise ValueError(f"Array of shape {points.shape} cannot denote points")
        return np.all((points >= 0) & (points <= 1), axis=-1)

    def point_to_cell(self, points: np.ndarray) -> np.ndarray:
        """Determine the cells containing the given points.

        Points on the upper edge are assigned to the last cell.

        Args:
            points (:class:`numpy.ndarray`):
                Coordinates of the points, with the last axis holding `(x, y)`

        Returns:
            :class:`numpy.ndarray`: The integer indices of the respective cells
        """
        points = np.asarray(points, dtype=float)
        if points.shape[-1] != 2:
            raise ValueError(f"Array of shape {points.shape} cannot denote points")
        if not np.all(self.contains_point(points)):
            raise ValueError("Points lie outside of the grid")
        cells = np.floor(points * np.array(self.shape)).astype(int)
        return np.minimum(cells, np.array(self.shape) - 1)
