"""Module defining when trackers interrupt a simulation.

Interrupts are measured in ticks, i.e., the number of completed time steps.

.. autosummary::
   :nosignatures:

   ConstantInterrupts
   FixedInterrupts
   parse_interrupt
"""

from __future__ import annotations

import copy
import math
from abc import ABCMeta, abstractmethod
from collections.abc import Sequence
from typing import Union

import numpy as np


class InterruptsBase(metaclass=ABCMeta):
    """Base class for implementing interrupts."""

    def copy(self):
        return copy.copy(self)

    @abstractmethod
    def initialize(self, tick: int) -> float:
        """Initialize the interrupt class.

        Args:
            tick (int): The tick at which the simulation starts

        Returns:
            float: The first tick at which the simulation needs to be interrupted
        """

    @abstractmethod
    def next(self, tick: int) -> float:
        """Computes the next tick at which the simulation is interrupted.

        Args:
            tick (int):
                The current tick of the simulation. The returned tick lies later, so
                interrupts might be skipped.

        Returns:
            float: The next tick or `math.inf` if no interrupts follow
        """


class FixedInterrupts(InterruptsBase):
    """Interrupts at fixed, predetermined ticks."""

    def __init__(self, interrupts: np.ndarray | Sequence[int]):
        self.interrupts = np.atleast_1d(np.asarray(interrupts, dtype=int))
        if self.interrupts.ndim != 1:
            raise ValueError("`interrupts` must be a 1d sequence")
        self.interrupts = np.unique(self.interrupts)
        self._index = -1

    def __repr__(self):
        return f"{self.__class__.__name__}(interrupts={self.interrupts})"

    def copy(self):
        return self.__class__(interrupts=self.interrupts.copy())

    def initialize(self, tick: int) -> float:
        self._index = -1
        # the initial tick itself might be requested
        return self._next_from(tick)

    def next(self, tick: int) -> float:
        return self._next_from(tick + 1)

    def _next_from(self, tick: int) -> float:
        """Return the first interrupt that is not earlier than `tick`."""
        index = int(np.searchsorted(self.interrupts, tick))
        if index >= len(self.interrupts):
            # iterator has been exhausted -> never break again
            self._index = len(self.interrupts)
            return math.inf
        self._index = index
        return int(self.interrupts[index])


class ConstantInterrupts(InterruptsBase):
    """Interrupts equidistantly spaced in ticks."""

    def __init__(self, interval: int = 1, start: int | None = None):
        """
        Args:
            interval (int):
                The number of ticks between subsequent interrupts
            start (int, optional):
                The tick after which the tracker becomes active. If omitted, the tracker
                starts right away.
        """
        if interval != int(interval) or interval < 1:
            raise ValueError(f"Interval must be a positive integer, not {interval!r}")
        self.interval = int(interval)
        self.start = None if start is None else int(start)
        self._next_tick: int | None = None

    def __repr__(self):
        name = self.__class__.__name__
        return f"{name}(interval={self.interval}, start={self.start})"

    def initialize(self, tick: int) -> float:
        if self.start is None:
            self._next_tick = tick
        else:
            self._next_tick = max(tick, self.start)
        return self._next_tick

    def next(self, tick: int) -> float:
        assert self._next_tick is not None
        self._next_tick += self.interval
        # make sure that the new interrupt lies in the future
        if self._next_tick <= tick:
            n = (tick - self._next_tick) // self.interval + 1
            self._next_tick += n * self.interval
        return self._next_tick


InterruptData = Union[InterruptsBase, int, float, Sequence[int], np.ndarray]


def parse_interrupt(data: InterruptData) -> InterruptsBase:
    """Create interrupt class from various data formats.

    Args:
        data (int or list or :class:`InterruptsBase`):
            Data determining the interrupt class. If this is a :class:`InterruptsBase`,
            it is simply returned, numbers imply :class:`ConstantInterrupts`, and
            sequences are interpreted as :class:`FixedInterrupts`.

    Returns:
        :class:`InterruptsBase`: An instance that represents the interrupt
    """
    if isinstance(data, InterruptsBase):
        # is already the correct class
        return data

    elif isinstance(data, (int, float)):
        # is a number, so we assume a constant interrupt of that many ticks
        return ConstantInterrupts(data)  # type: ignore

    elif hasattr(data, "__iter__") and not isinstance(data, str):
        # a sequence is supposed to give fixed ticks for interrupts
        return FixedInterrupts(data)

    else:
        # anything else we cannot handle
        raise TypeError(f"Cannot parse interrupt data `{data}`")
