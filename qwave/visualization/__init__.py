"""Functions for visualizing simulations.

.. autosummary::
   :nosignatures:

   ~rendering.field_to_rgb
   ~rendering.plot_frame
"""

from .rendering import RENDER_STYLES, field_to_rgb, plot_frame, update_image

__all__ = ["RENDER_STYLES", "field_to_rgb", "plot_frame", "update_image"]
