"""Defines the loop driving a simulation tick by tick.

.. autosummary::
   :nosignatures:

   LoopStatus
   SimulationState
   Frame
   SimulationLoop

A simulation advances the wave function by one time step per tick. Two preallocated
buffers alternate between holding the current state and receiving the next state, so
the stepper never reads values that it has already overwritten. Trackers receive a
:class:`Frame` after every tick they are interested in.
"""

from __future__ import annotations

import datetime
import enum
import logging
import math
import time
from collections.abc import Iterator
from typing import Any, Callable, NamedTuple

import numpy as np

from .. import __version__, config
from ..fields.packets import WaveParameters, overlaps_potential, wave_packet
from ..fields.potential import PotentialField
from ..fields.wave import WaveField
from ..grids.grid import UniformGrid
from ..pdes.schroedinger import SchroedingerPDE
from ..tools.docstrings import fill_in_docstring
from ..tools.numba import JIT_COUNT
from ..tools.typing import BackendType, StabilityCheckType, StepperType
from ..trackers.base import (
    FinishedSimulation,
    TrackerCollection,
    TrackerCollectionDataType,
)
from .base import SolverBase

_logger = logging.getLogger(__name__)
""":class:`logging.Logger`: Logger for simulations."""


def _check_ticks(ticks: int | None) -> None:
    """Check the number of ticks requested by the user."""
    if ticks is None:
        return
    if isinstance(ticks, bool) or ticks != int(ticks) or ticks < 0:
        raise ValueError(f"Number of ticks must be non-negative, not {ticks!r}")


class LoopStatus(enum.Enum):
    """The states of the life cycle of a :class:`SimulationLoop`."""

    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    STOPPED = "stopped"


class SimulationState:
    """Bookkeeping of the temporal progress of a simulation."""

    def __init__(self, grid: UniformGrid, dt: float = 0.25, tick_limit: int = -1):
        """
        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                The grid of the simulation
            dt (float):
                The time step, which must be positive
            tick_limit (int):
                The number of ticks after which the simulation stops. The special value
                `-1` lets the simulation run indefinitely.
        """
        dt = float(dt)
        if not math.isfinite(dt) or dt <= 0:
            raise ValueError(f"Time step must be positive and finite, not {dt!r}")
        if isinstance(tick_limit, bool) or tick_limit != int(tick_limit):
            raise ValueError(f"Tick limit must be an integer, not {tick_limit!r}")
        if tick_limit < -1:
            raise ValueError(f"Tick limit must be at least -1, not {tick_limit}")

        self.grid = grid
        self.dt = dt
        self.tick_limit = int(tick_limit)
        self.tick = 0

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(shape={self.shape}, dx={self.dx:g}, "
            f"dt={self.dt:g}, tick={self.tick}, tick_limit={self.tick_limit})"
        )

    @property
    def dx(self) -> float:
        """float: the spatial step of the grid"""
        return self.grid.dx

    @property
    def shape(self) -> tuple[int, int]:
        """tuple: the number of cells along each axis"""
        return self.grid.shape

    @property
    def time(self) -> float:
        """float: the simulation time associated with the current tick"""
        return self.tick * self.dt

    @property
    def reached_limit(self) -> bool:
        """bool: whether the tick limit has been reached"""
        return self.tick_limit >= 0 and self.tick >= self.tick_limit

    def reset(self) -> None:
        """Rewind the simulation to the first tick."""
        self.tick = 0


class Frame(NamedTuple):
    """The state of a simulation after a given tick."""

    tick: int
    """int: the number of completed time steps"""
    time: float
    """float: the associated simulation time"""
    wave: WaveField
    """:class:`~qwave.fields.wave.WaveField`: read-only wave function"""
    potential: PotentialField
    """:class:`~qwave.fields.potential.PotentialField`: the static potential"""


class SimulationLoop:
    """Class driving a simulation tick by tick.

    The loop owns the wave function, the potential, and the stepper. It starts in the
    status :attr:`LoopStatus.UNINITIALIZED`, runs after calling :meth:`start`, and
    stops when the tick limit is reached, a tracker requests it, or :meth:`stop` is
    called. Stopped simulations can be started again from the first tick.

    Example:
        A simulation of the two-slit experiment can be run using

        .. code-block:: python

            grid = UniformGrid((128, 128), dx=1 / 64)
            sim = SimulationLoop(grid, "two_slit", tick_limit=100)
            frame = sim.run()
            print(frame.wave.magnitude.max())

    Diagnostic information about the last run is stored in :attr:`diagnostics`.
    """

    diagnostics: dict[str, Any]
    """dict: diagnostic information about the simulation"""

    _get_current_time: Callable = time.process_time
    """callable: function to determine the current time for profiling purposes"""

    @fill_in_docstring
    def __init__(
        self,
        grid: UniformGrid,
        potential: PotentialField | str | dict[str, Any] | None = "square_well",
        parameters: WaveParameters | None = None,
        *,
        dt: float = 0.25,
        tick_limit: int = -1,
        solver: str = "runge-kutta",
        backend: BackendType | str = "auto",
        tracker: TrackerCollectionDataType = None,
        stability_check: StabilityCheckType | None = None,
    ):
        """
        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                The grid of the simulation
            potential:
                The static potential. Either a
                :class:`~qwave.fields.potential.PotentialField`, the name of a shape
                (see :data:`~qwave.fields.potential.POTENTIAL_SHAPES`), or a dictionary
                with the item `shape` and additional geometric parameters.
            parameters (:class:`~qwave.fields.packets.WaveParameters`, optional):
                The parameters of the initial wave packet
            dt (float):
                The time step, which must be positive
            tick_limit (int):
                The number of ticks after which the simulation stops. The special value
                `-1` lets the simulation run indefinitely.
            solver (str):
                The name of the time stepping scheme, see
                :func:`~qwave.solvers.base.registered_solvers`
            backend (str):
                {ARG_BACKEND}
            tracker:
                Defines trackers that process the frames of the simulation. A tracker
                is either an instance of :class:`~qwave.trackers.base.TrackerBase` or a
                string identifying a tracker (possible identifiers can be obtained by
                calling :func:`~qwave.trackers.base.get_named_trackers`). Multiple
                trackers can be specified as a list.
            stability_check (str, optional):
                {ARG_STABILITY_CHECK}
        """
        if not isinstance(grid, UniformGrid):
            raise TypeError(f"Simulations require a UniformGrid, not {grid!r}")
        if parameters is None:
            parameters = WaveParameters()
        elif not isinstance(parameters, WaveParameters):
            raise TypeError(f"Parameters must be WaveParameters, not {parameters!r}")

        self.grid = grid
        self._state = SimulationState(grid, dt=dt, tick_limit=tick_limit)
        self._parameters = parameters
        # the potential is computed once and never changes afterwards
        self._potential = PotentialField.from_data(grid, potential)
        self.pde = SchroedingerPDE(self._potential)
        self.solver = SolverBase.from_name(
            solver, self.pde, backend=backend, stability_check=stability_check
        )
        self.trackers = TrackerCollection.from_data(tracker)

        self.status = LoopStatus.UNINITIALIZED
        self._stepper: StepperType | None = None
        self._buffers: list[np.ndarray] = []
        self._current = 0

        # initialize some diagnostic information
        self.info: dict[str, Any] = {
            "dt": self._state.dt,
            "tick_limit": self._state.tick_limit,
            "tick_end": self._state.tick_limit if self._state.tick_limit >= 0 else None,
        }
        self.diagnostics = {"loop": self.info, "package_version": __version__}

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(grid={self.grid!r}, "
            f'potential="{self._potential.label}", status={self.status.value})'
        )

    @property
    def state(self) -> SimulationState:
        """:class:`SimulationState`: the temporal progress of the simulation"""
        return self._state

    @property
    def parameters(self) -> WaveParameters:
        """:class:`~qwave.fields.packets.WaveParameters`: the current wave packet"""
        return self._parameters

    @property
    def potential(self) -> PotentialField:
        """:class:`~qwave.fields.potential.PotentialField`: the static potential"""
        return self._potential

    @property
    def tick_index(self) -> int:
        """int: the number of completed time steps, i.e., the current tick index"""
        return self._state.tick

    @property
    def time(self) -> float:
        """float: the current simulation time"""
        return self._state.time

    @property
    def wave(self) -> WaveField:
        """:class:`~qwave.fields.wave.WaveField`: read-only copy of the current state

        Raises:
            RuntimeError: if the simulation has not been started
        """
        if not self._buffers:
            raise RuntimeError("Simulation has not been started")
        return WaveField.from_buffer(
            self.grid, self._buffers[self._current], label="wave"
        ).snapshot()

    def _require_status(self, *allowed: LoopStatus, action: str) -> None:
        """Ensure that the simulation is in one of the `allowed` states."""
        if self.status not in allowed:
            raise RuntimeError(
                f"Cannot {action} a simulation in status `{self.status.value}`"
            )

    def _make_frame(self) -> Frame:
        """Create a frame representing the current state."""
        wave = WaveField.from_buffer(
            self.grid, self._buffers[self._current], label="wave"
        )
        if config["simulation.snapshot_frames"]:
            wave = wave.snapshot()
        return Frame(self._state.tick, self._state.time, wave, self._potential)

    def _load_initial_state(self) -> WaveField:
        """Write the wave packet into the buffers and rewind the simulation."""
        wave = wave_packet(self.grid, self._parameters)
        if overlaps_potential(self._parameters, self._potential):
            _logger.warning(
                "The initial wave packet overlaps with the potential at %s",
                self._parameters.center,
            )
        if not self._buffers:
            self._buffers = [wave.data.copy(), np.empty_like(wave.data)]
        else:
            self._buffers[0][...] = wave.data
        self._current = 0
        self._state.reset()
        return wave

    def _handle_trackers(self, frame: Frame) -> None:
        """Hand a frame to the trackers and stop the simulation if requested."""
        if frame.tick < self.trackers.tick_next_action:
            return
        prof_start = self._get_current_time()
        try:
            self.trackers.handle(frame)
        except StopIteration as err:
            # a tracker requested to stop the simulation
            reason = err.value if getattr(err, "value", None) else None
            if isinstance(err, FinishedSimulation):
                self._finish(reason or "Tracker raised FinishedSimulation", True)
            else:
                self._finish(reason or "Tracker raised StopIteration", False)
        finally:
            self.info["profiler"]["tracker"] += self._get_current_time() - prof_start

    def _finish(self, reason: str, successful: bool) -> None:
        """Stop the simulation and finalize the trackers."""
        self.status = LoopStatus.STOPPED
        self.info["stop_reason"] = reason
        self.info["successful"] = successful
        self.info["tick_final"] = self._state.tick
        self.info["t_final"] = self._state.time
        self.info["jit_count"]["simulation"] = int(JIT_COUNT) - self._jit_count_start
        self.trackers.finalize(info=self.diagnostics)

        msg = f"Simulation stopped at tick {self._state.tick} ({reason})"
        _logger.log(logging.INFO if successful else logging.WARNING, msg)
        profiler = self.info["profiler"]
        if profiler["tracker"] > max(profiler["solver"], 1):
            _logger.warning(
                "Spent more time on handling trackers (%.3g) than on the actual "
                "simulation (%.3g)",
                profiler["tracker"],
                profiler["solver"],
            )

    def start(self) -> Frame:
        """Start the simulation from the first tick.

        The wave function is created from the current parameters, while the
        potential is reused. The trackers receive the initial frame.

        Returns:
            :class:`Frame`: The initial frame

        Raises:
            RuntimeError: if the simulation is already running
        """
        self._require_status(
            LoopStatus.UNINITIALIZED, LoopStatus.STOPPED, action="start"
        )
        jit_count_base = int(JIT_COUNT)
        prof_start = self._get_current_time()

        wave = self._load_initial_state()
        if self._stepper is None:
            # grid and time step never change, so the stepper is reused
            self._stepper = self.solver.make_stepper(wave, self._state.dt)

        self._jit_count_start = int(JIT_COUNT)
        jit_count = {"make_stepper": self._jit_count_start - jit_count_base}
        self.info["jit_count"] = jit_count
        self.info["profiler"] = {
            "compilation": self._get_current_time() - prof_start,
            "solver": 0.0,
            "tracker": 0.0,
        }
        self.info["start"] = str(datetime.datetime.now())
        self.info.pop("stop_reason", None)
        self.info.pop("successful", None)
        self.diagnostics["solver"] = self.solver.info

        self.status = LoopStatus.RUNNING
        frame = self._make_frame()
        self.trackers.initialize(frame, info=self.diagnostics)
        _logger.info("Started simulation with %s", self._parameters)
        self._handle_trackers(frame)
        if self.status is LoopStatus.RUNNING and self._state.reached_limit:
            self._finish("Reached tick limit", True)
        return frame

    def tick(self) -> Frame:
        """Advance the simulation by a single time step.

        Returns:
            :class:`Frame`: The frame after the step

        Raises:
            RuntimeError: if the simulation is not running
        """
        self._require_status(LoopStatus.RUNNING, action="advance")
        assert self._stepper is not None

        prof_start = self._get_current_time()
        source = self._buffers[self._current]
        target = self._buffers[1 - self._current]
        self._stepper(source, self._state.time, target)
        self._current = 1 - self._current
        self._state.tick += 1
        self.info["profiler"]["solver"] += self._get_current_time() - prof_start

        frame = self._make_frame()
        _logger.debug("Finished tick %d", frame.tick)
        self._handle_trackers(frame)
        if self.status is LoopStatus.RUNNING and self._state.reached_limit:
            self._finish("Reached tick limit", True)
        return frame

    def reset(
        self,
        parameters: WaveParameters | None = None,
        *,
        center: tuple[float, float] | None = None,
        direction: tuple[float, float] | None = None,
        angle: float | None = None,
    ) -> Frame:
        """Restart the running simulation with a new wave packet.

        The potential is kept, while the wave function is rebuilt and the tick count
        is set back to zero.

        Args:
            parameters (:class:`~qwave.fields.packets.WaveParameters`, optional):
                The new parameters. If omitted, the current parameters are used.
            center (tuple, optional):
                New center of the wave packet
            direction (tuple, optional):
                New direction of propagation
            angle (float, optional):
                New direction of propagation given as an angle with the `x` axis

        Returns:
            :class:`Frame`: The initial frame of the new run

        Raises:
            RuntimeError: if the simulation is not running
        """
        self._require_status(LoopStatus.RUNNING, action="reset")
        if direction is not None and angle is not None:
            raise TypeError("Specify either `angle` or `direction`")

        if parameters is None:
            parameters = self._parameters
        changes: dict[str, Any] = {}
        if center is not None:
            changes["center"] = center
        if direction is not None:
            changes["direction"] = direction
        if angle is not None:
            changes["angle"] = angle
        if changes:
            parameters = parameters.copy(**changes)

        self._parameters = parameters
        self._load_initial_state()
        self.info["resets"] = self.info.get("resets", 0) + 1
        _logger.info("Reset simulation with %s", parameters)

        frame = self._make_frame()
        self.trackers.reset_interrupts(frame.tick)
        self._handle_trackers(frame)
        return frame

    def stop(self) -> None:
        """Stop the running simulation between two ticks.

        Raises:
            RuntimeError: if the simulation is not running
        """
        self._require_status(LoopStatus.RUNNING, action="stop")
        self._finish("Simulation was stopped", True)

    def frames(self, ticks: int | None = None) -> Iterator[Frame]:
        """Iterate over the frames of the simulation.

        The simulation is started if necessary. The iteration ends when the simulation
        stops or after `ticks` steps.

        Args:
            ticks (int, optional):
                The maximal number of ticks

        Yields:
            :class:`Frame`: The frame after each tick
        """
        _check_ticks(ticks)
        if self.status is not LoopStatus.RUNNING:
            self.start()
        yield from self._advance(ticks)

    def _advance(self, ticks: int | None) -> Iterator[Frame]:
        """Tick the running simulation until it stops or `ticks` steps are done."""
        count = 0
        while self.status is LoopStatus.RUNNING and (ticks is None or count < ticks):
            yield self.tick()
            count += 1

    def run(self, ticks: int | None = None) -> Frame:
        """Run the simulation.

        The simulation is started if necessary and then advanced until the tick limit
        is reached, a tracker stops it, the user interrupts it, or `ticks` steps have
        been done. In the last case, the simulation keeps running and can be
        continued. Without tick limit and `ticks`, only trackers can end the loop.

        Args:
            ticks (int, optional):
                The maximal number of ticks

        Returns:
            :class:`Frame`: The last frame
        """
        _check_ticks(ticks)
        if self.status is not LoopStatus.RUNNING:
            # tell trackers like the progress bar when the run will end
            tick_end = self._state.tick_limit if self._state.tick_limit >= 0 else None
            if ticks is not None:
                tick_end = ticks if tick_end is None else min(ticks, tick_end)
            self.info["tick_end"] = tick_end
            frame = self.start()
        else:
            frame = self._make_frame()

        run_start = datetime.datetime.now()
        _logger.debug("Run simulation from tick %d", self._state.tick)
        try:
            for frame in self._advance(ticks):
                pass

        except KeyboardInterrupt:
            # iteration has been interrupted by the user
            frame = self._make_frame()
            self.diagnostics["last_frame"] = frame
            if self.status is LoopStatus.RUNNING:
                self._finish("User interrupted simulation", False)

        except Exception:
            # any other exception
            self.diagnostics["last_frame"] = self._make_frame()
            raise

        self.info["run_duration"] = str(datetime.datetime.now() - run_start)
        return frame
