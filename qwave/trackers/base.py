"""Base classes for trackers.

Trackers are the interface between a running simulation and external consumers, like
renderers. They receive :class:`~qwave.solvers.simulation.Frame` objects, which hold
read-only snapshots of the wave function.
"""

from __future__ import annotations

import logging
import math
from abc import ABCMeta, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Optional, Union

from ..tools.docstrings import fill_in_docstring
from .interrupts import InterruptData, parse_interrupt

if TYPE_CHECKING:
    from ..solvers.simulation import Frame

_base_logger = logging.getLogger(__name__.rsplit(".", 1)[0])
""":class:`logging.Logger`: Base logger for trackers."""

InfoDict = Optional[dict[str, Any]]
TrackerDataType = Union["TrackerBase", str]


class FinishedSimulation(StopIteration):
    """Exception for signaling that simulation finished successfully."""


class TrackerBase(metaclass=ABCMeta):
    """Base class for implementing trackers."""

    _logger: logging.Logger
    _subclasses: dict[str, type[TrackerBase]] = {}  # all named trackers

    @fill_in_docstring
    def __init__(self, interrupts: InterruptData = 1):
        """
        Args:
            interrupts:
                {ARG_TRACKER_INTERRUPT}
        """
        self.interrupt = parse_interrupt(interrupts)

    def __init_subclass__(cls, **kwargs):
        """Initialize class-level attributes of subclasses."""
        super().__init_subclass__(**kwargs)

        # create logger for this specific tracker class
        cls._logger = _base_logger.getChild(cls.__qualname__)

        # register all named subclasses to reconstruct them later
        if hasattr(cls, "name"):
            cls._subclasses[cls.name] = cls

    @classmethod
    def from_data(cls, data: TrackerDataType, **kwargs) -> TrackerBase:
        """Create tracker class from given data.

        Args:
            data (str or TrackerBase): Data describing the tracker

        Returns:
            :class:`TrackerBase`: An instance representing the tracker
        """
        if isinstance(data, TrackerBase):
            return data
        elif isinstance(data, str):
            try:
                tracker_cls = cls._subclasses[data]
            except KeyError as err:
                trackers = sorted(cls._subclasses.keys())
                raise ValueError(f"Tracker `{data}` is not in {trackers}") from err
            return tracker_cls(**kwargs)
        else:
            raise ValueError(f"Unsupported tracker format: `{data}`.")

    def initialize(self, frame: Frame, info: InfoDict = None) -> float:
        """Initialize the tracker with information about the simulation.

        Args:
            frame (:class:`~qwave.solvers.simulation.Frame`):
                The initial frame of the simulation
            info (dict):
                Extra information from the simulation

        Returns:
            float: The first tick at which the tracker needs to handle data
        """
        return self.interrupt.initialize(frame.tick)

    @abstractmethod
    def handle(self, frame: Frame) -> None:
        """Handle data supplied to this tracker.

        Args:
            frame (:class:`~qwave.solvers.simulation.Frame`):
                The current state of the simulation
        """

    def finalize(self, info: InfoDict = None) -> None:
        """Finalize the tracker, supplying additional information.

        Args:
            info (dict):
                Extra information from the simulation
        """


TrackerCollectionDataType = Union[Sequence[TrackerDataType], TrackerDataType, None]


class TrackerCollection:
    """List of trackers providing methods to handle them efficiently.

    Attributes:
        trackers (list):
            List of the trackers in the collection
    """

    tracker_action_ticks: list[float]
    """list: Ticks at which the trackers need to be handled next"""
    tick_next_action: float
    """float: The tick of the next interrupt of the simulation"""

    def __init__(self, trackers: list[TrackerBase] | None = None):
        """
        Args:
            trackers: List of trackers that are to be handled.
        """
        if trackers is None:
            self.trackers: list[TrackerBase] = []
        elif not hasattr(trackers, "__iter__"):
            raise ValueError(f"`trackers` must be a list of trackers, not {trackers}")
        else:
            self.trackers = list(trackers)

        # do not check trackers before everything was initialized
        self.tracker_action_ticks = []
        self.tick_next_action = math.inf

    def __len__(self) -> int:
        """Returns the number of trackers in the collection."""
        return len(self.trackers)

    @classmethod
    def from_data(cls, data: TrackerCollectionDataType, **kwargs) -> TrackerCollection:
        """Create tracker collection from given data.

        Args:
            data: Data describing the tracker collection. The special value `auto`
                displays a progress bar and checks the state for consistency.

        Returns:
            :class:`TrackerCollection`:
            An instance representing the tracker collection
        """
        if data == "auto":
            data = ("progress", "consistency")

        if data is None:
            trackers: list[TrackerBase] = []
        elif isinstance(data, TrackerCollection):
            trackers = data.trackers
        elif isinstance(data, TrackerBase):
            trackers = [data]
        elif isinstance(data, str):
            trackers = [TrackerBase.from_data(data, **kwargs)]
        elif isinstance(data, (list, tuple)):
            # initialize trackers from a sequence
            trackers, interrupt_ids = [], set()
            for tracker in data:
                if tracker is not None:
                    tracker_obj = TrackerBase.from_data(tracker)
                    if id(tracker_obj.interrupt) in interrupt_ids:
                        # different trackers must never share the same interrupt
                        tracker_obj.interrupt = tracker_obj.interrupt.copy()
                    interrupt_ids.add(id(tracker_obj.interrupt))
                    trackers.append(tracker_obj)
        else:
            raise TypeError(f"Cannot initialize trackers from class `{data.__class__}`")

        return cls(trackers)

    def initialize(self, frame: Frame, info: InfoDict = None) -> float:
        """Initialize the trackers with information about the simulation.

        Args:
            frame (:class:`~qwave.solvers.simulation.Frame`):
                The initial frame of the simulation
            info (dict):
                Extra information from the simulation

        Returns:
            float: The first tick at which a tracker needs to handle data
        """
        self.tracker_action_ticks = [
            tracker.initialize(frame, info) for tracker in self.trackers
        ]

        if self.trackers:
            self.tick_next_action = min(self.tracker_action_ticks)
        else:
            self.tick_next_action = math.inf

        return self.tick_next_action

    def reset_interrupts(self, tick: int) -> float:
        """Restart the interrupts of all trackers without re-initializing them.

        Args:
            tick (int):
                The tick from which the simulation continues

        Returns:
            float: The first tick at which a tracker needs to handle data
        """
        self.tracker_action_ticks = [
            tracker.interrupt.initialize(tick) for tracker in self.trackers
        ]
        self.tick_next_action = min(self.tracker_action_ticks, default=math.inf)
        return self.tick_next_action

    def handle(self, frame: Frame) -> float:
        """Handle all trackers that are due.

        Args:
            frame (:class:`~qwave.solvers.simulation.Frame`):
                The current state of the simulation

        Returns:
            float: The next tick at which the simulation needs to handle a tracker

        Raises:
            StopIteration: if any tracker requested to stop the simulation. All due
                trackers are handled before the exception is raised.
        """
        stop_iteration_err = None
        for i, tick_next in enumerate(self.tracker_action_ticks):
            if frame.tick >= tick_next:
                try:
                    self.trackers[i].handle(frame)
                except StopIteration as err:
                    # handle the remaining trackers before stopping
                    stop_iteration_err = err

                self.tracker_action_ticks[i] = self.trackers[i].interrupt.next(
                    frame.tick
                )

        if stop_iteration_err is not None:
            raise stop_iteration_err

        if self.trackers:
            self.tick_next_action = min(self.tracker_action_ticks)
        return self.tick_next_action

    def finalize(self, info: InfoDict = None) -> None:
        """Finalize the trackers, supplying additional information.

        Args:
            info (dict):
                Extra information from the simulation
        """
        for tracker in self.trackers:
            tracker.finalize(info=info)


def get_named_trackers() -> dict[str, type[TrackerBase]]:
    """Returns all named trackers.

    Returns:
        dict: a mapping of names to the actual tracker classes.
    """
    return TrackerBase._subclasses.copy()
