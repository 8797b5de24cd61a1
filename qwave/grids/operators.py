r"""Discrete differential operators on uniform grids.

.. autosummary::
   :nosignatures:

   neighbor_indices
   make_laplace

The Laplacian uses the classic 5-point stencil

.. math::
    L_{ij} = \psi_{i,j+s_y} + \psi_{i+s_x,j} + \psi_{i,j-s_y} + \psi_{i-s_x,j}
        - 4 \psi_{ij}

where :math:`s_x` and :math:`s_y` are the stencil offsets given by
:attr:`~qwave.grids.grid.UniformGrid.strides`. Following the lattice convention of
the wave simulations, the result is not divided by the square of the step size.
"""

from __future__ import annotations

import logging

import numba as nb
import numpy as np

from .. import config
from ..tools.numba import jit
from ..tools.typing import BackendType, NumericArray, OperatorType
from .grid import UniformGrid

_logger = logging.getLogger(__name__)
""":class:`logging.Logger`: Logger for operators."""

_PAD_MODES = {"clamp": "edge", "periodic": "wrap", "zero": "constant"}


def neighbor_indices(
    num: int, stride: int, boundary: str
) -> tuple[np.ndarray, np.ndarray]:
    """Determine the indices of the lower and upper stencil neighbors along an axis.

    Args:
        num (int):
            The number of cells along the axis
        stride (int):
            The offset between a cell and its neighbors
        boundary (str):
            The boundary mode. For 'zero', neighbors outside the grid get index -1.

    Returns:
        tuple: Two integer arrays with the indices of the lower and upper neighbors
    """
    idx = np.arange(num)
    lower, upper = idx - stride, idx + stride
    if boundary == "clamp":
        return np.clip(lower, 0, num - 1), np.clip(upper, 0, num - 1)
    elif boundary == "periodic":
        return lower % num, upper % num
    elif boundary == "zero":
        lower[lower < 0] = -1
        upper[upper >= num] = -1
        return lower, upper
    else:
        raise ValueError(f"Boundary `{boundary}` is not supported")


def _make_laplace_numpy(grid: UniformGrid) -> OperatorType:
    """Make a Laplace operator using numpy broadcasting.

    Args:
        grid (:class:`~qwave.grids.grid.UniformGrid`):
            The grid for which the operator is created

    Returns:
        A function that can be applied to an array of values
    """
    dim_x, dim_y = grid.shape
    sx, sy = grid.strides
    pad_mode = _PAD_MODES[grid.boundary]

    def laplace(arr: NumericArray, out: NumericArray) -> None:
        """Apply Laplace operator to array `arr`"""
        padded = np.pad(arr, ((sx, sx), (sy, sy)), mode=pad_mode)
        center_x = slice(sx, sx + dim_x)
        center_y = slice(sy, sy + dim_y)
        out[...] = (
            padded[center_x, 2 * sy : 2 * sy + dim_y]  # y + dx
            + padded[2 * sx : 2 * sx + dim_x, center_y]  # x + dx
            + padded[center_x, :dim_y]  # y - dx
            + padded[:dim_x, center_y]  # x - dx
            - 4 * arr
        )

    return laplace


def _make_laplace_numba(grid: UniformGrid) -> OperatorType:
    """Make a Laplace operator using numba compilation.

    Args:
        grid (:class:`~qwave.grids.grid.UniformGrid`):
            The grid for which the operator is created

    Returns:
        A function that can be applied to an array of values
    """
    dim_x, dim_y = grid.shape
    x_lower, x_upper = neighbor_indices(dim_x, grid.strides[0], grid.boundary)
    y_lower, y_upper = neighbor_indices(dim_y, grid.strides[1], grid.boundary)

    # use parallel processing for large enough arrays
    parallel = grid.num_cells >= config["numba.multithreading_threshold"]

    @jit(parallel=parallel)
    def laplace(arr: np.ndarray, out: np.ndarray) -> None:
        """Apply Laplace operator to array `arr`"""
        for i in nb.prange(dim_x):
            i_lo, i_hi = x_lower[i], x_upper[i]
            for j in range(dim_y):
                j_lo, j_hi = y_lower[j], y_upper[j]
                val = -4 * arr[i, j]
                if j_hi >= 0:
                    val += arr[i, j_hi]
                if i_hi >= 0:
                    val += arr[i_hi, j]
                if j_lo >= 0:
                    val += arr[i, j_lo]
                if i_lo >= 0:
                    val += arr[i_lo, j]
                out[i, j] = val

    return laplace  # type: ignore


def make_laplace(grid: UniformGrid, backend: BackendType = "numpy") -> OperatorType:
    """Make a discretized Laplace operator for a uniform grid.

    The returned function has the signature `(arr, out)`, reads the full array `arr`
    and writes the result into the separate array `out`, so no cell ever reads a
    value that was already updated.

    Args:
        grid (:class:`~qwave.grids.grid.UniformGrid`):
            The grid for which the operator is created
        backend (str):
            Backend used for calculating the Laplace operator, either 'numpy' or
            'numba'.

    Returns:
        A function that can be applied to an array of values
    """
    if not isinstance(grid, UniformGrid):
        raise TypeError(f"Laplace operator requires a UniformGrid, not {grid!r}")

    if backend == "numpy":
        laplace = _make_laplace_numpy(grid)
    elif backend == "numba":
        laplace = _make_laplace_numba(grid)
    else:
        raise ValueError(f"Backend `{backend}` is not defined")

    _logger.debug("Created %s Laplace operator for %s", backend, grid)
    return laplace
