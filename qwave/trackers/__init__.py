"""Classes for tracking simulations.

Trackers receive frames while the simulation is running, which makes them the hook
for renderers and for analyzing intermediate results. The interrupts at which a
tracker is called are measured in ticks.

.. autosummary::
   :nosignatures:

   ~trackers.CallbackTracker
   ~trackers.ProgressTracker
   ~trackers.PrintTracker
   ~trackers.PlotTracker
   ~trackers.DataTracker
   ~trackers.ConsistencyTracker
   ~interrupts.ConstantInterrupts
   ~interrupts.FixedInterrupts
   ~base.get_named_trackers
"""

from .base import FinishedSimulation, TrackerCollection, get_named_trackers
from .interrupts import ConstantInterrupts, FixedInterrupts, parse_interrupt
from .trackers import (
    CallbackTracker,
    ConsistencyTracker,
    DataTracker,
    PlotTracker,
    PrintTracker,
    ProgressTracker,
)

__all__ = [
    "CallbackTracker",
    "ConsistencyTracker",
    "ConstantInterrupts",
    "DataTracker",
    "FinishedSimulation",
    "FixedInterrupts",
    "PlotTracker",
    "PrintTracker",
    "ProgressTracker",
    "TrackerCollection",
    "get_named_trackers",
    "parse_interrupt",
]
