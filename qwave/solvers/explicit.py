"""Defines explicit solvers with fixed time steps.

.. autosummary::
   :nosignatures:

   EulerSolver
   RungeKuttaSolver
"""

from __future__ import annotations

import math

from ..fields.base import FieldBase
from ..tools.numba import jit
from ..tools.typing import NumericArray, StepperType
from .base import SolverBase


class EulerSolver(SolverBase):
    """Explicit Euler solver.

    The scheme is unconditionally unstable for purely oscillatory equations, like the
    Schrödinger equation, so it is only useful for comparisons over few steps.
    """

    name = "euler"
    stability_radius = 0

    def _make_single_step_fixed_dt(self, state: FieldBase, dt: float) -> StepperType:
        """Make a simple Euler stepper with fixed time step.

        Args:
            state (:class:`~qwave.fields.base.FieldBase`):
                An example for the state from which the grid and other information can
                be extracted
            dt (float):
                Time step of the explicit stepping.

        Returns:
            Function with signature `(state_data, t, out)` doing a single step
        """
        self.info["scheme"] = "euler"
        rhs = self._make_pde_rhs(state)

        def stepper(state_data: NumericArray, t: float, out: NumericArray) -> None:
            """Perform a single Euler step."""
            out[:, :] = state_data + dt * rhs(state_data, t)

        if self.backend == "numba":
            stepper = jit(stepper)

        self._logger.info("Init explicit Euler stepper with dt=%g", dt)
        return stepper  # type: ignore


class RungeKuttaSolver(SolverBase):
    r"""Explicit Runge-Kutta solver of order 4.

    Each of the four stages evaluates the right hand side on the full grid before the
    next stage is started. The stages are combined as

    .. math::
        \psi_{n+1} = \psi_n + \frac{\Delta t}{6}\left(k_1 + 2 k_2 + 2 k_3 + k_4\right)
    """

    name = "runge-kutta"
    aliases = ("rk4",)
    stability_radius = 2 * math.sqrt(2)

    def _make_single_step_fixed_dt(self, state: FieldBase, dt: float) -> StepperType:
        """Make function doing a single explicit Runge-Kutta step of order 4.

        Args:
            state (:class:`~qwave.fields.base.FieldBase`):
                An example for the state from which the grid and other information can
                be extracted
            dt (float):
                Time step of the explicit stepping.

        Returns:
            Function with signature `(state_data, t, out)` doing a single step
        """
        self.info["scheme"] = "runge-kutta"
        rhs = self._make_pde_rhs(state)

        def stepper(state_data: NumericArray, t: float, out: NumericArray) -> None:
            """Perform a single Runge-Kutta step."""
            k1 = rhs(state_data, t)
            k2 = rhs(state_data + 0.5 * dt * k1, t + 0.5 * dt)
            k3 = rhs(state_data + 0.5 * dt * k2, t + 0.5 * dt)
            k4 = rhs(state_data + dt * k3, t + dt)
            out[:, :] = state_data + dt * (k1 + 2 * k2 + 2 * k3 + k4) / 6

        if self.backend == "numba":
            stepper = jit(stepper)

        self._logger.info("Init explicit Runge-Kutta stepper with dt=%g", dt)
        return stepper  # type: ignore
