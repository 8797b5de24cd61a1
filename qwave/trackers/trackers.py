"""Module defining classes for tracking simulations.

The trackers defined in this module are:

.. autosummary::
   :nosignatures:

   CallbackTracker
   ProgressTracker
   PrintTracker
   PlotTracker
   DataTracker
   ConsistencyTracker
"""

from __future__ import annotations

import inspect
import sys
from collections.abc import Callable
from typing import IO, TYPE_CHECKING, Any

from ..tools.docstrings import fill_in_docstring
from ..tools.output import get_progress_bar_class
from .base import InfoDict, TrackerBase
from .interrupts import InterruptData

if TYPE_CHECKING:
    from ..solvers.simulation import Frame


class CallbackTracker(TrackerBase):
    """Tracker calling a function periodically.

    This is the natural hook for renderers, which receive every frame they are
    interested in.

    Example:
        The callback tracker can be used to check for conditions during the simulation:

        .. code-block:: python

            def check_simulation(frame):
                if frame.wave.total_magnitude < 1e-3:
                    raise StopIteration

            tracker = CallbackTracker(check_simulation, interrupts=10)

        Adding :code:`tracker` to the simulation will perform a check every 10 ticks.
    """

    @fill_in_docstring
    def __init__(self, func: Callable, interrupts: InterruptData = 1):
        """
        Args:
            func:
                The function to call periodically. The function signature should be
                `(frame)` or `(wave, time)`, where `frame` is the current
                :class:`~qwave.solvers.simulation.Frame`, `wave` its read-only wave
                function, and `time` the associated time. The function can interrupt
                the simulation by raising the special exception :class:`StopIteration`.
            interrupts:
                {ARG_TRACKER_INTERRUPT}
        """
        super().__init__(interrupts=interrupts)
        self._callback = func
        self._num_args = len(inspect.signature(func).parameters)
        if not 0 < self._num_args < 3:
            raise ValueError(
                "`func` must be a function accepting one or two arguments, not "
                f"{self._num_args}"
            )

    def _call(self, frame: Frame) -> Any:
        if self._num_args == 1:
            return self._callback(frame)
        else:
            return self._callback(frame.wave, frame.time)

    def handle(self, frame: Frame) -> None:
        """Handle data supplied to this tracker.

        Args:
            frame (:class:`~qwave.solvers.simulation.Frame`):
                The current state of the simulation
        """
        self._call(frame)


class ProgressTracker(TrackerBase):
    """Tracker showing the progress of the simulation using :mod:`tqdm`."""

    name = "progress"

    @fill_in_docstring
    def __init__(
        self,
        interrupts: InterruptData = 1,
        *,
        fancy: bool = True,
        leave: bool = True,
    ):
        """
        Args:
            interrupts:
                {ARG_TRACKER_INTERRUPT}
            fancy (bool):
                Flag determining whether a fancy progress bar should be used in jupyter
                notebooks (if :mod:`ipywidgets` is installed)
            leave (bool):
                Whether to leave the progress bar after the simulation has finished
        """
        super().__init__(interrupts=interrupts)
        self.fancy = fancy
        self.leave = leave

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
        result = super().initialize(frame, info)

        loop_info = {} if info is None else info.get("loop", {})
        pb_cls = get_progress_bar_class(self.fancy)
        self.progress_bar = pb_cls(
            total=loop_info.get("tick_end"), initial=frame.tick, leave=self.leave
        )
        self.progress_bar.set_description("Initializing")
        return result

    def handle(self, frame: Frame) -> None:
        """Handle data supplied to this tracker.

        Args:
            frame (:class:`~qwave.solvers.simulation.Frame`):
                The current state of the simulation
        """
        if self.progress_bar.total:
            self.progress_bar.n = min(frame.tick, self.progress_bar.total)
        else:
            self.progress_bar.n = frame.tick
        self.progress_bar.set_description("")
        self.progress_bar.refresh()

    def finalize(self, info: InfoDict = None) -> None:
        """Finalize the tracker, supplying additional information.

        Args:
            info (dict):
                Extra information from the simulation
        """
        super().finalize(info)
        loop_info = {} if info is None else info.get("loop", {})
        if loop_info.get("successful", False) and self.progress_bar.total:
            self.progress_bar.n = self.progress_bar.total
            self.progress_bar.refresh()
        self.progress_bar.close()

    def __del__(self):
        if hasattr(self, "progress_bar") and not self.progress_bar.disable:
            self.progress_bar.close()


class PrintTracker(TrackerBase):
    """Tracker printing summary statistics to a stream (default: stdout)."""

    name = "print"

    @fill_in_docstring
    def __init__(self, interrupts: InterruptData = 1, stream: IO[str] = sys.stdout):
        """
        Args:
            interrupts:
                {ARG_TRACKER_INTERRUPT}
            stream:
                The stream used for printing
        """
        super().__init__(interrupts=interrupts)
        self.stream = stream

    def handle(self, frame: Frame) -> None:
        """Handle data supplied to this tracker.

        Args:
            frame (:class:`~qwave.solvers.simulation.Frame`):
                The current state of the simulation
        """
        wave = frame.wave
        data = f"|psi|={wave.total_magnitude:.5g}, |psi|^2={wave.norm_squared:.5g}"
        self.stream.write(f"tick={frame.tick}, t={frame.time:g}, {data}\n")
        self.stream.flush()


class DataTracker(CallbackTracker):
    """Tracker storing custom data obtained by calling a function.

    Example:
        The data tracker can be used to gather statistics during the run

        .. code-block:: python

            def get_statistics(frame):
                wave = frame.wave
                return {"norm": wave.norm_squared, "max": wave.magnitude.max()}

            data_tracker = DataTracker(get_statistics, interrupts=10)

        After the simulation, the recorded values are available via the :attr:`data`
        attribute.

    Attributes:
        ticks (list):
            The ticks at which the data is stored
        times (list):
            The associated times
        data (list):
            The actually stored data, which is a list of the objects returned by
            the callback function.
    """

    @fill_in_docstring
    def __init__(self, func: Callable, interrupts: InterruptData = 1):
        """
        Args:
            func:
                The function to call periodically. The function signature should be
                `(frame)` or `(wave, time)`. Typical return values of the function are
                either a single number, a numpy array, or a dictionary to return
                multiple numbers with assigned labels.
            interrupts:
                {ARG_TRACKER_INTERRUPT}
        """
        super().__init__(func=func, interrupts=interrupts)
        self.ticks: list[int] = []
        self.times: list[float] = []
        self.data: list[Any] = []

    def handle(self, frame: Frame) -> None:
        """Handle data supplied to this tracker.

        Args:
            frame (:class:`~qwave.solvers.simulation.Frame`):
                The current state of the simulation
        """
        self.ticks.append(frame.tick)
        self.times.append(frame.time)
        self.data.append(self._call(frame))


class ConsistencyTracker(TrackerBase):
    """Tracker interrupting the simulation when the wave function is not finite.

    The simulation itself does not detect divergence, so this tracker can be used to
    stop simulations whose time step exceeds the stability limit.
    """

    name = "consistency"

    @fill_in_docstring
    def __init__(self, interrupts: InterruptData = 1):
        """
        Args:
            interrupts:
                {ARG_TRACKER_INTERRUPT}
        """
        super().__init__(interrupts=interrupts)

    def handle(self, frame: Frame) -> None:
        """Handle data supplied to this tracker.

        Args:
            frame (:class:`~qwave.solvers.simulation.Frame`):
                The current state of the simulation
        """
        if not frame.wave.is_finite:
            raise StopIteration(f"Wave function was not finite at tick {frame.tick}")


class PlotTracker(TrackerBase):
    """Tracker plotting the wave function with :mod:`matplotlib`.

    The tracker either updates an image file, which can be used to monitor long
    simulations, or shows the figure interactively.

    Example:
        To update the file `frame.png` every 50 ticks, use

        .. code-block:: python

            tracker = PlotTracker(50, output_file="frame.png", style="phase")
    """

    @fill_in_docstring
    def __init__(
        self,
        interrupts: InterruptData = 1,
        *,
        style: str = "components",
        title: str = "Tick: {tick}",
        output_file: str | None = None,
        show: bool | None = None,
    ):
        """
        Args:
            interrupts:
                {ARG_TRACKER_INTERRUPT}
            style (str):
                The rendering style passed to
                :func:`~qwave.visualization.rendering.field_to_rgb`
            title (str):
                Title of the figure, in which the placeholders `tick` and `time` are
                replaced by the current values
            output_file (str, optional):
                Specifies a single image file, which is updated periodically
            show (bool, optional):
                Determines whether the plot is shown while the simulation is running. If
                `None`, images are only shown if `output_file` is not set.
        """
        super().__init__(interrupts=interrupts)
        self.style = style
        self.title = title
        self.output_file = output_file
        self.show = output_file is None if show is None else show
        self.num_plots = 0

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
        import matplotlib.pyplot as plt

        self.fig, self.ax = plt.subplots()
        self._image = None
        return super().initialize(frame, info)

    def handle(self, frame: Frame) -> None:
        """Handle data supplied to this tracker.

        Args:
            frame (:class:`~qwave.solvers.simulation.Frame`):
                The current state of the simulation
        """
        import matplotlib.pyplot as plt

        from ..visualization.rendering import plot_frame, update_image

        if self._image is None:
            self._image = plot_frame(frame, ax=self.ax, style=self.style)
        else:
            update_image(self._image, frame, style=self.style)
        self.ax.set_title(self.title.format(tick=frame.tick, time=frame.time))

        if self.output_file:
            self.fig.savefig(self.output_file)
        if self.show:
            plt.pause(1e-3)
        self.num_plots += 1

    def finalize(self, info: InfoDict = None) -> None:
        """Finalize the tracker, supplying additional information.

        Args:
            info (dict):
                Extra information from the simulation
        """
        import matplotlib.pyplot as plt

        super().finalize(info)
        if not self.show:
            plt.close(self.fig)
