"""Package that contains base classes for solvers.

.. autosummary::
   :nosignatures:

   StabilityError
   SolverBase
   registered_solvers
"""

from __future__ import annotations

import logging
import math
import warnings
from inspect import isabstract
from typing import Any, Literal

from .. import config
from ..fields.base import FieldBase
from ..pdes.base import PDEBase
from ..tools.docstrings import fill_in_docstring
from ..tools.typing import (
    BackendType,
    NumericArray,
    RHSType,
    StabilityCheckType,
    StepperType,
)

_base_logger = logging.getLogger(__name__.rsplit(".", 1)[0])
""":class:`logging.Logger`: Base logger for solvers."""

STABILITY_CHECK_MODES: tuple[str, ...] = ("off", "warn", "raise")


class StabilityError(RuntimeError):
    """Indicates that the time step exceeds the stability limit of a scheme."""


class SolverBase:
    """Base class for explicit solvers with fixed time steps.

    Subclasses implement :meth:`_make_single_step_fixed_dt` and are registered under
    their class name, their :attr:`name`, and all their :attr:`aliases`.
    """

    name: str = ""
    """str: the name under which the solver is registered"""

    aliases: tuple[str, ...] = ()
    """tuple: alternative names under which the solver is registered"""

    stability_radius: float = 0
    """float: radius of the stability region of the scheme along the imaginary axis.
    A value of zero indicates that the scheme is unstable for purely oscillatory
    equations."""

    _subclasses: dict[str, type[SolverBase]] = {}
    """dict: dictionary of all inheriting classes"""

    _logger: logging.Logger

    @fill_in_docstring
    def __init__(
        self,
        pde: PDEBase,
        *,
        backend: BackendType | Literal["auto"] = "auto",
        stability_check: StabilityCheckType | None = None,
    ):
        """
        Args:
            pde (:class:`~qwave.pdes.base.PDEBase`):
                The equation that should be solved
            backend (str):
                {ARG_BACKEND}
            stability_check (str, optional):
                {ARG_STABILITY_CHECK}
        """
        if not isinstance(pde, PDEBase):
            raise TypeError(f"Solvers require a PDEBase instance, not {pde!r}")
        if backend not in {"auto", "numpy", "numba"}:
            raise ValueError(f"Backend `{backend}` is not defined")
        if stability_check is None:
            stability_check = config["solvers.stability_check"]
        if stability_check not in STABILITY_CHECK_MODES:
            raise ValueError(
                f"Stability check `{stability_check}` is not supported. Possible "
                "values are " + ", ".join(f"'{m}'" for m in STABILITY_CHECK_MODES)
            )

        self.pde = pde
        self.backend: BackendType | Literal["auto"] = backend
        self.stability_check: str = stability_check
        self.info: dict[str, Any] = {
            "class": self.__class__.__name__,
            "pde_class": self.pde.__class__.__name__,
        }

    def __init_subclass__(cls, **kwargs):
        """Initialize class-level attributes of subclasses."""
        super().__init_subclass__(**kwargs)

        # create logger for this specific solver class
        cls._logger = _base_logger.getChild(cls.__qualname__)

        # register all subclasses to reconstruct them later
        if not isabstract(cls):
            if cls.__name__ in cls._subclasses:
                warnings.warn(f"Redefining class {cls.__name__}", stacklevel=2)
            cls._subclasses[cls.__name__] = cls
        for name in (cls.name,) + tuple(cls.aliases):
            if name and cls._subclasses.get(name) is not cls:
                if name in cls._subclasses:
                    _base_logger.warning("Solver `%s` is already registered", name)
                cls._subclasses[name] = cls

    @classmethod
    def from_name(cls, name: str, pde: PDEBase, **kwargs) -> SolverBase:
        r"""Create solver class based on its name.

        Solver classes are automatically registered when they inherit from
        :class:`SolverBase`.

        Args:
            name (str):
                The name of the solver to construct
            pde (:class:`~qwave.pdes.base.PDEBase`):
                The equation that should be solved
            \**kwargs:
                Additional arguments for the constructor of the solver

        Returns:
            An instance of a subclass of :class:`SolverBase`
        """
        try:
            # obtain the solver class associated with `name`
            solver_class = cls._subclasses[name]
        except KeyError:
            # solver was not registered
            solvers = (f"'{solver}'" for solver in registered_solvers())
            raise ValueError(
                f"Unknown solver method '{name}'. Registered solvers are "
                + ", ".join(solvers)
            ) from None

        return solver_class(pde, **kwargs)

    def _make_pde_rhs(self, state: FieldBase) -> RHSType:
        """Return a function for evaluating the right hand side of the equation.

        This function also decides which backend will be used.

        Args:
            state (:class:`~qwave.fields.base.FieldBase`):
                An example for the state from which the grid and other information can
                be extracted.

        Returns:
            callable: Function determining the right hand side of the equation
        """
        if self.backend == "auto":
            # try using the numba backend, if it is implemented
            try:
                rhs = self.pde.make_pde_rhs_numba(state)
            except NotImplementedError:
                rhs = self.pde.make_pde_rhs(state, backend="numpy")
                self.backend = "numpy"
            else:
                self.backend = "numba"
            return rhs

        return self.pde.make_pde_rhs(state, backend=self.backend)

    def stability_limit(self, state: FieldBase) -> float:
        """Estimate the largest time step for which the scheme is stable.

        Args:
            state (:class:`~qwave.fields.base.FieldBase`):
                An example for the state from which the grid is extracted

        Returns:
            float: The largest stable time step
        """
        return self.stability_radius / self.pde.spectral_radius(state.grid)

    def check_stability(self, state: FieldBase, dt: float) -> bool:
        """Compare a time step to the stability limit of the scheme.

        Depending on :attr:`stability_check`, a violation is either ignored, logged,
        or raises an exception.

        Args:
            state (:class:`~qwave.fields.base.FieldBase`):
                An example for the state from which the grid is extracted
            dt (float):
                The time step

        Returns:
            bool: Whether the time step lies within the stability limit

        Raises:
            StabilityError: if the limit is exceeded and the check is in `raise` mode
        """
        if self.stability_check == "off":
            return True
        limit = self.stability_limit(state)
        self.info["stability_limit"] = limit
        if dt <= limit:
            return True

        msg = (
            f"Time step dt={dt:g} exceeds the estimated stability limit {limit:g} of "
            f"the {self.info.get('scheme', self.name)} scheme"
        )
        if self.stability_check == "raise":
            raise StabilityError(msg)
        self._logger.warning(msg)
        return False

    def _make_single_step_fixed_dt(self, state: FieldBase, dt: float) -> StepperType:
        """Return a function doing a single step with a fixed time step.

        Args:
            state (:class:`~qwave.fields.base.FieldBase`):
                An example for the state from which the grid and other information can
                be extracted
            dt (float):
                Time step of the explicit stepping.
        """
        msg = "Fixed stepper has not been defined"
        raise NotImplementedError(msg)

    def make_stepper(self, state: FieldBase, dt: float) -> StepperType:
        """Return a function advancing the state by a single time step.

        The returned function has the signature `(state_data, t, out)`. It reads the
        data of the current state from `state_data` and writes the data of the next
        state into `out`, leaving `state_data` untouched.

        Args:
            state (:class:`~qwave.fields.base.FieldBase`):
                An example for the state from which the grid and other information can
                be extracted
            dt (float):
                Time step of the explicit stepping. A vanishing time step results in a
                stepper that copies the state.

        Returns:
            Function that advances the state by one step
        """
        dt_float = float(dt)
        if not math.isfinite(dt_float) or dt_float < 0:
            raise ValueError(f"Time step must be finite and non-negative, not {dt!r}")

        single_step = self._make_single_step_fixed_dt(state, dt_float)
        self.check_stability(state, dt_float)

        self.info["dt"] = dt_float
        self.info["backend"] = self.backend
        self.info["steps"] = 0

        def stepper(state_data: NumericArray, t: float, out: NumericArray) -> None:
            """Advance `state_data` by one step and store the result in `out`."""
            single_step(state_data, t, out)
            self.info["steps"] += 1

        self._logger.info(
            "Created %s stepper with dt=%g using backend `%s`",
            self.info.get("scheme", self.name),
            dt_float,
            self.backend,
        )
        return stepper


def registered_solvers() -> list[str]:
    """Return the names of all registered solvers.

    Returns:
        list of str: the names under which solvers can be created
    """
    return sorted(
        name for name in SolverBase._subclasses if not name.endswith("Solver")
    )
