r"""The Schrödinger equation of a particle in a static potential.

.. autosummary::
   :nosignatures:

   SchroedingerPDE
"""

from __future__ import annotations

import numpy as np

from ..fields.potential import PotentialField
from ..fields.wave import WaveField
from ..grids.grid import UniformGrid
from ..grids.operators import make_laplace
from ..tools.numba import jit
from ..tools.typing import NumericArray, RHSType
from .base import PDEBase


class SchroedingerPDE(PDEBase):
    r"""The Schrödinger equation in lattice units.

    The mathematical definition is

    .. math::
        i \partial_t \psi = -\nabla^2 \psi + V(\boldsymbol r) \psi

    where :math:`\psi` is the complex wave function and :math:`V` a static,
    non-negative potential. The Laplacian is the 5-point stencil provided by
    :func:`~qwave.grids.operators.make_laplace`, which is not scaled by the spatial
    step. The evolution rate is thus

    .. math::
        \partial_t \psi = -i \left(V \psi - L \psi \right)

    which rotates the complex number :math:`V \psi - L \psi` by 270 degrees, i.e., the
    pair `(re, im)` is mapped to `(im, -re)`.
    """

    explicit_time_dependence = False
    complex_valued = True

    def __init__(self, potential: PotentialField | None = None):
        """
        Args:
            potential (:class:`~qwave.fields.potential.PotentialField`, optional):
                The static potential. If omitted, the particle moves in free space.
        """
        super().__init__()
        if potential is not None and not isinstance(potential, PotentialField):
            raise TypeError(f"Potential must be a PotentialField, not {potential!r}")
        self.potential = potential

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(potential={self.potential!r})"

    def _get_potential_data(self, grid: UniformGrid) -> np.ndarray:
        """Return the potential values on a grid.

        Raises:
            ValueError: if the potential is defined on another grid
        """
        if self.potential is None:
            return np.zeros(grid.shape)
        self.potential.assert_compatible(grid)
        return self.potential.data

    def evolution_rate(  # type: ignore
        self, state: WaveField, t: float = 0
    ) -> WaveField:
        """Evaluate the right hand side of the equation.

        Args:
            state (:class:`~qwave.fields.wave.WaveField`):
                The wave function at the current time point
            t (float):
                The current time point

        Returns:
            :class:`~qwave.fields.wave.WaveField`:
                Field describing the evolution rate
        """
        if not isinstance(state, WaveField):
            raise TypeError(f"State must be a WaveField, not {state!r}")
        potential = self._get_potential_data(state.grid)
        laplace = make_laplace(state.grid, backend="numpy")

        lap = np.empty_like(state.data)
        laplace(state.data, lap)
        rate = -1j * (potential * state.data - lap)
        return WaveField(state.grid, rate, label="evolution rate")

    def make_pde_rhs_numpy(self, state: WaveField) -> RHSType:  # type: ignore
        """Create a function evaluating the right hand side using numpy.

        Args:
            state (:class:`~qwave.fields.wave.WaveField`):
                An example for the state defining the grid and data types

        Returns:
            A function with signature `(state_data, t)`
        """
        potential = self._get_potential_data(state.grid)
        laplace = make_laplace(state.grid, backend="numpy")
        lap = np.empty(state.grid.shape, dtype=complex)

        def pde_rhs(state_data: NumericArray, t: float) -> NumericArray:
            """Evaluate the evolution rate of the wave function."""
            laplace(state_data, lap)
            return -1j * (potential * state_data - lap)  # type: ignore

        return pde_rhs

    def make_pde_rhs_numba(self, state: WaveField) -> RHSType:  # type: ignore
        """Create a compiled function evaluating the right hand side.

        Args:
            state (:class:`~qwave.fields.wave.WaveField`):
                An example for the state defining the grid and data types

        Returns:
            A function with signature `(state_data, t)`, which can be called with an
            instance of :class:`numpy.ndarray` of the state data and the time to
            obtain an instance of :class:`numpy.ndarray` giving the evolution rate.
        """
        dim_x, dim_y = state.grid.shape
        potential = np.ascontiguousarray(self._get_potential_data(state.grid))
        laplace = make_laplace(state.grid, backend="numba")

        @jit
        def pde_rhs(state_data: np.ndarray, t: float) -> np.ndarray:
            """Compiled helper function evaluating right hand side."""
            out = np.empty_like(state_data)
            laplace(state_data, out)
            for i in range(dim_x):
                for j in range(dim_y):
                    out[i, j] = -1j * (potential[i, j] * state_data[i, j] - out[i, j])
            return out

        return pde_rhs  # type: ignore

    def spectral_radius(self, grid: UniformGrid) -> float:
        """Estimate the largest magnitude of the eigenvalues of the linear operator.

        The 5-point stencil contributes at most 8 and the potential at most its
        maximal value, which follows from Gershgorin's circle theorem.

        Args:
            grid (:class:`~qwave.grids.grid.UniformGrid`):
                The grid on which the equation is discretized

        Returns:
            float: An upper bound of the spectral radius
        """
        potential = self._get_potential_data(grid)
        return 8.0 + float(potential.max(initial=0))
