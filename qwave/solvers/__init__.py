"""Solvers define how the wave function is advanced in time.

.. autosummary::
   :nosignatures:

   ~simulation.SimulationLoop
   ~explicit.EulerSolver
   ~explicit.RungeKuttaSolver
   ~base.registered_solvers


Inheritance structure of the classes:


.. inheritance-diagram::
        explicit.EulerSolver
        explicit.RungeKuttaSolver
   :parts: 1
"""

from .base import SolverBase, StabilityError, registered_solvers
from .explicit import EulerSolver, RungeKuttaSolver
from .simulation import Frame, LoopStatus, SimulationLoop, SimulationState

__all__ = [
    "EulerSolver",
    "Frame",
    "LoopStatus",
    "RungeKuttaSolver",
    "SimulationLoop",
    "SimulationState",
    "SolverBase",
    "StabilityError",
    "registered_solvers",
]
