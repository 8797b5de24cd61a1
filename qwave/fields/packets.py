r"""Generates the initial condition of a simulation.

.. autosummary::
   :nosignatures:

   WaveParameters
   wave_packet
   overlaps_potential

The initial state is a plane wave modulated by a Gaussian envelope,

.. math::
    \psi(\boldsymbol p) = \exp\left(-\sigma |\boldsymbol p - \boldsymbol c|^2\right)
        \exp\left(i k \, \hat{\boldsymbol d} \cdot \boldsymbol p\right)

where :math:`\boldsymbol c` is the center of the packet, :math:`\hat{\boldsymbol d}`
the unit vector along the direction of propagation, :math:`k` the wave number, and
:math:`\sigma` determines the width of the envelope. Note that larger values of
:math:`\sigma` result in narrower packets.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any

import numpy as np

from ..grids.grid import UniformGrid
from .potential import PotentialField
from .wave import WaveField

_logger = logging.getLogger(__name__)
""":class:`logging.Logger`: Logger for wave packets."""


class WaveParameters:
    """Immutable description of the initial wave packet.

    Example:
        A packet launched along the diagonal can be created using

        .. code-block:: python

            params = WaveParameters(center=(0.2, 0.2), direction=(1, 1))
            faster = params.copy(wavenumber=150)
    """

    __slots__ = ["_center", "_direction", "_wavenumber", "_width"]

    def __init__(
        self,
        center: Sequence[float] = (0.5, 0.25),
        direction: Sequence[float] = (0, 1),
        wavenumber: float = 100,
        width: float = 70,
    ):
        """
        Args:
            center (tuple):
                The center of the envelope in normalized coordinates
            direction (tuple):
                Direction of propagation, which is normalized to unit length
            wavenumber (float):
                The wave number `k` of the carrier wave
            width (float):
                The parameter `sigma` of the Gaussian envelope
        """
        center_arr = np.array(center, dtype=float)
        if center_arr.shape != (2,) or not np.all(np.isfinite(center_arr)):
            raise ValueError(f"Center must be two finite numbers, not {center!r}")

        direction_arr = np.array(direction, dtype=float)
        if direction_arr.shape != (2,) or not np.all(np.isfinite(direction_arr)):
            raise ValueError(f"Direction must be two finite numbers, not {direction!r}")
        length = math.hypot(*direction_arr)
        if length == 0:
            raise ValueError("Direction must not be the zero vector")

        wavenumber = float(wavenumber)
        if not math.isfinite(wavenumber):
            raise ValueError(f"Wave number must be finite, not {wavenumber!r}")
        width = float(width)
        if not math.isfinite(width) or width < 0:
            raise ValueError(f"Width must be non-negative, not {width!r}")

        self._center = (float(center_arr[0]), float(center_arr[1]))
        self._direction = (direction_arr[0] / length, direction_arr[1] / length)
        self._wavenumber = wavenumber
        self._width = width

    @classmethod
    def from_angle(cls, angle: float, **kwargs) -> WaveParameters:
        r"""Create parameters from the angle of the direction of propagation.

        Args:
            angle (float):
                Angle in radians measured counter-clockwise from the `x` axis
            \**kwargs:
                The remaining arguments of :class:`WaveParameters`
        """
        if "direction" in kwargs:
            raise TypeError("Specify either `angle` or `direction`")
        return cls(direction=(math.cos(angle), math.sin(angle)), **kwargs)

    @property
    def center(self) -> tuple[float, float]:
        """tuple: the center of the envelope"""
        return self._center

    @property
    def direction(self) -> tuple[float, float]:
        """tuple: unit vector along the direction of propagation"""
        return self._direction

    @property
    def angle(self) -> float:
        """float: angle of the direction of propagation with the `x` axis"""
        return math.atan2(self._direction[1], self._direction[0])

    @property
    def wavenumber(self) -> float:
        """float: the wave number of the carrier wave"""
        return self._wavenumber

    @property
    def width(self) -> float:
        """float: the parameter of the Gaussian envelope"""
        return self._width

    @property
    def state(self) -> dict[str, Any]:
        """dict: the parameters as a dictionary"""
        return {
            "center": self.center,
            "direction": self.direction,
            "wavenumber": self.wavenumber,
            "width": self.width,
        }

    def copy(self, **changes) -> WaveParameters:
        r"""Return a copy with some parameters replaced.

        Args:
            \**changes:
                Replacements for the arguments of :class:`WaveParameters`. The special
                argument `angle` replaces the direction.
        """
        state = self.state
        if "angle" in changes:
            angle = changes.pop("angle")
            if "direction" in changes:
                raise TypeError("Specify either `angle` or `direction`")
            changes["direction"] = (math.cos(angle), math.sin(angle))
        unknown = changes.keys() - state.keys()
        if unknown:
            raise TypeError(f"Unknown wave parameters {sorted(unknown)}")
        state.update(changes)
        return self.__class__(**state)

    def __eq__(self, other) -> bool:
        if not isinstance(other, WaveParameters):
            return NotImplemented
        return self.state == other.state

    def __hash__(self) -> int:
        return hash(tuple(self.state.values()))

    def __repr__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.state.items())
        return f"{self.__class__.__name__}({args})"


def _envelope(grid: UniformGrid, parameters: WaveParameters) -> np.ndarray:
    """Evaluate the Gaussian envelope at all cell centers."""
    coords = grid.cell_coords
    dist2 = ((coords - np.array(parameters.center)) ** 2).sum(axis=-1)
    return np.exp(-parameters.width * dist2)


def wave_packet(
    grid: UniformGrid,
    parameters: WaveParameters | None = None,
    *,
    label: str | None = "wave",
    **kwargs,
) -> WaveField:
    r"""Create a Gaussian wave packet on a grid.

    Args:
        grid (:class:`~qwave.grids.grid.UniformGrid`):
            The grid on which the packet is defined
        parameters (:class:`WaveParameters`, optional):
            The parameters of the packet. Defaults are used if omitted.
        label (str, optional):
            Name of the returned field
        \**kwargs:
            Changes applied to `parameters`, e.g., a new `center`

    Returns:
        :class:`~qwave.fields.wave.WaveField`: The wave packet
    """
    if parameters is None:
        parameters = WaveParameters()
    if kwargs:
        parameters = parameters.copy(**kwargs)

    coords = grid.cell_coords
    projection = coords @ np.array(parameters.direction)
    phase = parameters.wavenumber * projection
    data = _envelope(grid, parameters) * (np.cos(phase) + 1j * np.sin(phase))
    return WaveField(grid, data, label=label)


def overlaps_potential(
    parameters: WaveParameters, potential: PotentialField, threshold: float = 0.1
) -> bool:
    """Check whether the envelope of a packet reaches into the potential.

    A packet that starts inside a wall is permitted, but usually unintended, so
    callers can use this function to warn about it.

    Args:
        parameters (:class:`WaveParameters`):
            The parameters of the packet
        potential (:class:`~qwave.fields.potential.PotentialField`):
            The potential of the simulation
        threshold (float):
            Envelope amplitude, relative to the peak value of one, above which a
            cell counts as occupied

    Returns:
        bool: Whether any cell with a positive potential is occupied
    """
    envelope = _envelope(potential.grid, parameters)
    return bool(np.any(envelope[potential.wall_mask] > threshold))
