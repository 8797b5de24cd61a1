"""Package that defines the evolution equations of the wave function.

.. autosummary::
   :nosignatures:

   ~schroedinger.SchroedingerPDE

Additional equations can be implemented by subclassing
:class:`~qwave.pdes.base.PDEBase`.
"""

from .base import PDEBase
from .schroedinger import SchroedingerPDE

__all__ = ["PDEBase", "SchroedingerPDE"]
