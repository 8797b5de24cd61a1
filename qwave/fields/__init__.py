"""Defines fields, which contain the actual data stored on a uniform grid.

.. autosummary::
   :nosignatures:

   ~wave.WaveField
   ~potential.PotentialField
   ~packets.WaveParameters
   ~packets.wave_packet

Inheritance structure of the classes:

.. inheritance-diagram:: qwave.fields.wave qwave.fields.potential
   :parts: 1
"""

from .packets import WaveParameters, overlaps_potential, wave_packet
from .potential import POTENTIAL_SHAPES, PotentialField
from .wave import WaveField

__all__ = [
    "POTENTIAL_SHAPES",
    "PotentialField",
    "WaveField",
    "WaveParameters",
    "overlaps_potential",
    "wave_packet",
]
