"""Base class for defining the evolution equations of fields.

.. autosummary::
   :nosignatures:

   PDEBase
"""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from collections.abc import Callable
from typing import Any, Literal

import numpy as np

from ..fields.base import FieldBase
from ..grids.grid import UniformGrid
from ..tools.docstrings import fill_in_docstring
from ..tools.typing import BackendType, NumericArray, RHSType

_base_logger = logging.getLogger(__name__.rsplit(".", 1)[0])
""":class:`logging.Logger`: Base logger for PDEs."""


class PDEBase(metaclass=ABCMeta):
    """Base class for defining deterministic evolution equations.

    Subclasses specify the evolution rate by implementing
    :meth:`PDEBase.evolution_rate` for the `numpy` backend and
    :meth:`PDEBase.make_pde_rhs_numba` for the `numba` backend.
    """

    diagnostics: dict[str, Any]
    """dict: Diagnostic information about the last consistency check"""

    explicit_time_dependence: bool = False
    """bool: Flag indicating whether the right hand side has an explicit time
    dependence."""

    complex_valued: bool = False
    """bool: Flag indicating whether the right hand side is complex-valued, which
    requires all involved variables to have complex data type."""

    _logger: logging.Logger

    def __init__(self):
        self.diagnostics = {}

    def __init_subclass__(cls, **kwargs):
        """Initialize class-level attributes of subclasses."""
        super().__init_subclass__(**kwargs)
        # create logger for this specific PDE class
        cls._logger = _base_logger.getChild(cls.__qualname__)

    @abstractmethod
    def evolution_rate(self, state: FieldBase, t: float = 0) -> FieldBase:
        """Evaluate the right hand side of the equation.

        Args:
            state (:class:`~qwave.fields.base.FieldBase`):
                The field at the current time point
            t (float):
                The current time point

        Returns:
            :class:`~qwave.fields.base.FieldBase`:
                Field describing the evolution rate
        """

    def make_pde_rhs_numpy(self, state: FieldBase) -> RHSType:
        """Create a function evaluating the right hand side using numpy.

        The default implementation wraps :meth:`evolution_rate`.

        Args:
            state (:class:`~qwave.fields.base.FieldBase`):
                An example for the state from which the grid is extracted

        Returns:
            A function with signature `(state_data, t)`
        """
        template = state.copy()

        def pde_rhs(state_data: NumericArray, t: float) -> NumericArray:
            """Evaluate the right hand side of the equation."""
            template.data[...] = state_data
            return self.evolution_rate(template, t).data

        return pde_rhs

    def make_pde_rhs_numba(self, state: FieldBase) -> RHSType:
        """Create a compiled function for evaluating the right hand side.

        Args:
            state (:class:`~qwave.fields.base.FieldBase`):
                An example for the state from which the grid is extracted

        Returns:
            A function that takes two arguments (the current state as a numpy array and
            the current time) and returns the associated evolution rate as a numpy array
            of the same shape and dtype.
        """
        msg = (
            "The right-hand side of the equation is not implemented using the `numba` "
            "backend. To add the implementation, provide the method "
            "`make_pde_rhs_numba`, which should return a numba-compiled function "
            "calculating the right-hand side using numpy arrays as input and output."
        )
        raise NotImplementedError(msg)

    @fill_in_docstring
    def make_pde_rhs(
        self, state: FieldBase, backend: BackendType | Literal["auto"] = "auto"
    ) -> RHSType:
        """Return a function for evaluating the right hand side of the equation.

        Args:
            state (:class:`~qwave.fields.base.FieldBase`):
                An example for the state from which the grid and other information can
                be extracted.
            backend (str):
                {ARG_BACKEND}

        Returns:
            callable: Function determining the right hand side of the equation
        """
        if self.complex_valued and not np.iscomplexobj(state.data):
            raise TypeError("The equation requires a complex-valued state")

        rhs: RHSType
        if backend == "auto":
            # try using the numba backend, if it is implemented
            try:
                rhs = self.make_pde_rhs_numba(state)
            except NotImplementedError:
                backend = "numpy"
                rhs = self.make_pde_rhs_numpy(state)
            else:
                backend = "numba"
        elif backend == "numpy":
            rhs = self.make_pde_rhs_numpy(state)
        elif backend == "numba":
            rhs = self.make_pde_rhs_numba(state)
        else:
            raise ValueError(f"Backend `{backend}` is not defined")

        self._logger.info("Created right hand side using backend `%s`", backend)
        return rhs

    def check_rhs_consistency(
        self,
        rhs_implementation: Callable[[NumericArray, float], NumericArray],
        state: FieldBase,
        t: float = 0,
        *,
        tol: float = 1e-7,
    ) -> None:
        """Checks an implementation of the right hand side versus the numpy variant.

        Args:
            rhs_implementation (callable):
                The implementation that is to be checked
            state (:class:`~qwave.fields.base.FieldBase`):
                The state for which the evolution rates should be compared
            t (float):
                The associated time point
            tol (float):
                Acceptance tolerance. The check passes if the evolution rates differ by
                less then this value

        Raises:
            AssertionError: if the implementations differ
        """
        # obtain evolution rate from the numpy implementation
        res_numpy = self.evolution_rate(state.copy(), t).data
        if not np.all(np.isfinite(res_numpy)):
            self._logger.warning(
                "The numpy implementation of the equation returned non-finite values."
            )

        # obtain evolution rate from the tested implementation
        res_tested = rhs_implementation(state.copy().data, t)
        if not np.all(np.isfinite(res_tested)):
            self._logger.warning(
                "The tested implementation of the equation returned non-finite values."
            )

        msg = (
            "The tested implementation of the right hand side is not compatible with "
            "the numpy implementation. Additional information is available in "
            "`diagnostics['check']`."
        )
        try:
            np.testing.assert_allclose(
                res_tested, res_numpy, err_msg=msg, rtol=tol, atol=tol, equal_nan=True
            )
        except AssertionError:
            # store diagnostic information for debugging
            self.diagnostics["check"] = {
                "state": state,
                "rhs_numpy": state.__class__(state.grid, res_numpy, label="numpy"),
                "rhs_tested": state.__class__(state.grid, res_tested, label="tested"),
            }
            raise

    def spectral_radius(self, grid: UniformGrid) -> float:
        """Estimate the largest magnitude of the eigenvalues of the linear operator.

        Explicit time steppers use this estimate to determine their stability limit.

        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                The grid on which the equation is discretized

        Returns:
            float: An upper bound of the spectral radius
        """
        raise NotImplementedError
