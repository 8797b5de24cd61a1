"""Grids define the discretization of the unit square and the stencil operators.

.. autosummary::
   :nosignatures:

   ~grid.UniformGrid
   ~operators.make_laplace
"""

from .grid import UniformGrid
from .operators import make_laplace

__all__ = ["UniformGrid", "make_laplace"]
