"""Defines the complex field evolved by the simulation.

.. autosummary::
   :nosignatures:

   WaveField
"""

from __future__ import annotations

import numpy as np

from ..grids.grid import UniformGrid
from ..tools.typing import ArrayLike, ComplexArray, FloatingArray
from .base import FieldBase


class WaveField(FieldBase):
    """Complex amplitudes of a wave function on a uniform grid.

    The real and imaginary part of each amplitude are stored as a single complex
    number. External consumers that expect pairs of `(real, imaginary)` components,
    like renderers, can use :meth:`to_pairs`.
    """

    dtype = complex

    @classmethod
    def from_pairs(
        cls, grid: UniformGrid, pairs: ArrayLike, *, label: str | None = None
    ) -> WaveField:
        """Create a field from an array of `(real, imaginary)` pairs.

        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                Grid defining the space on which this field is defined
            pairs (:class:`~numpy.ndarray`):
                Array of shape `(nx, ny, 2)`
            label (str, optional):
                Name of the field
        """
        pairs = np.asarray(pairs, dtype=float)
        if pairs.shape != grid.shape + (2,):
            raise ValueError(
                f"Pairs must have shape {grid.shape + (2,)}, not {pairs.shape}"
            )
        return cls(grid, pairs[..., 0] + 1j * pairs[..., 1], label=label)

    @classmethod
    def from_buffer(
        cls, grid: UniformGrid, buffer: ComplexArray, *, label: str | None = None
    ) -> WaveField:
        """Wrap an existing buffer in a read-only field without copying it.

        The returned field shares memory with `buffer`, so it reflects later
        modifications of the buffer. This is used to hand out views of simulation
        buffers when copying them is not desired.

        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                Grid defining the space on which this field is defined
            buffer (:class:`~numpy.ndarray`):
                Complex array with the shape of the grid
            label (str, optional):
                Name of the field
        """
        if buffer.shape != grid.shape or buffer.dtype != np.dtype(cls.dtype):
            raise ValueError("Buffer does not match the grid")
        obj = cls.__new__(cls)
        obj._grid = grid
        obj.label = label
        obj._data = buffer.view()
        obj._data.flags.writeable = False
        return obj

    def snapshot(self) -> WaveField:
        """Return a read-only copy of the field.

        Snapshots are handed to external consumers, which can keep them around
        without observing later updates of the simulation.
        """
        result = self.copy()
        result._data.flags.writeable = False
        return result

    @property
    def real(self) -> FloatingArray:
        """:class:`~numpy.ndarray`: the real part of the amplitudes"""
        return self.data.real

    @property
    def imag(self) -> FloatingArray:
        """:class:`~numpy.ndarray`: the imaginary part of the amplitudes"""
        return self.data.imag

    @property
    def magnitude(self) -> FloatingArray:
        """:class:`~numpy.ndarray`: the absolute value of the amplitudes"""
        return np.abs(self.data)

    @property
    def phase(self) -> FloatingArray:
        """:class:`~numpy.ndarray`: the phase of the amplitudes in (-pi, pi]"""
        return np.angle(self.data)

    @property
    def total_magnitude(self) -> float:
        """float: the sum of the absolute values of all amplitudes"""
        return float(np.abs(self.data).sum())

    @property
    def norm_squared(self) -> float:
        """float: the sum of the squared absolute values of all amplitudes"""
        return float((self.data.real**2 + self.data.imag**2).sum())

    @property
    def is_finite(self) -> bool:
        """bool: whether all amplitudes are finite"""
        return bool(np.all(np.isfinite(self.data)))

    def to_pairs(self) -> FloatingArray:
        """Return the amplitudes as `(real, imaginary)` pairs.

        Returns:
            :class:`~numpy.ndarray`: Array of shape `(nx, ny, 2)`
        """
        return np.stack([self.data.real, self.data.imag], axis=-1)
