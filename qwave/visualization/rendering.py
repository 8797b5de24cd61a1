"""Functions for turning wave functions into images.

.. autosummary::
   :nosignatures:

   field_to_rgb
   plot_frame
   update_image

Two styles are supported. The style `components` maps the real part of the wave
function to the green channel and the imaginary part to the blue channel. The style
`phase` encodes the phase as the hue and the magnitude as the brightness of each
pixel. In both cases, the potential is overlaid in gray.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from matplotlib.colors import hsv_to_rgb

from ..fields.potential import PotentialField
from ..fields.wave import WaveField
from ..tools.typing import FloatingArray

if TYPE_CHECKING:
    from matplotlib.axes import Axes
    from matplotlib.image import AxesImage

    from ..solvers.simulation import Frame

RENDER_STYLES: tuple[str, ...] = ("components", "phase")


def field_to_rgb(
    wave: WaveField, potential: PotentialField | None = None, style: str = "components"
) -> FloatingArray:
    """Convert a wave function to colors.

    Args:
        wave (:class:`~qwave.fields.wave.WaveField`):
            The wave function
        potential (:class:`~qwave.fields.potential.PotentialField`, optional):
            The potential, which is overlaid in gray
        style (str):
            Either 'components' or 'phase'

    Returns:
        :class:`~numpy.ndarray`: RGB values in [0, 1] with shape `(nx, ny, 3)`
    """
    if style == "components":
        rgb = np.zeros(wave.grid.shape + (3,))
        rgb[..., 1] = wave.real
        rgb[..., 2] = wave.imag
    elif style == "phase":
        hue = np.mod(wave.phase / (2 * np.pi), 1)
        hsv = np.stack([hue, np.ones_like(hue), np.ones_like(hue)], axis=-1)
        rgb = 1.5 * wave.magnitude[..., np.newaxis] * hsv_to_rgb(hsv)
    else:
        raise ValueError(
            f"Unknown style `{style}`. Possible values are "
            + ", ".join(f"'{s}'" for s in RENDER_STYLES)
        )

    if potential is not None:
        wave.assert_compatible(potential)
        overlay = potential.data if style == "components" else 1.25 * potential.data
        rgb += overlay[..., np.newaxis]
    return np.clip(rgb, 0, 1)


def _as_image(rgb: FloatingArray) -> FloatingArray:
    """Swap the axes so the `y` axis runs vertically."""
    return np.ascontiguousarray(rgb.transpose(1, 0, 2))


def plot_frame(
    frame: Frame, ax: Axes | None = None, style: str = "components"
) -> AxesImage:
    """Plot a single frame of a simulation.

    Args:
        frame (:class:`~qwave.solvers.simulation.Frame`):
            The frame to plot
        ax (:class:`matplotlib.axes.Axes`, optional):
            The axes into which the frame is drawn. If omitted, the current axes are
            used.
        style (str):
            Either 'components' or 'phase'

    Returns:
        :class:`matplotlib.image.AxesImage`: The image, which can be updated with
        :func:`update_image`
    """
    if ax is None:
        import matplotlib.pyplot as plt

        ax = plt.gca()

    rgb = field_to_rgb(frame.wave, frame.potential, style)
    image = ax.imshow(
        _as_image(rgb), origin="lower", extent=(0, 1, 0, 1), interpolation="nearest"
    )
    ax.set_xlabel("x")
    ax.set_ylabel("y")
    return image


def update_image(image: AxesImage, frame: Frame, style: str = "components") -> None:
    """Replace the data shown by an image created with :func:`plot_frame`.

    Args:
        image (:class:`matplotlib.image.AxesImage`):
            The image to update
        frame (:class:`~qwave.solvers.simulation.Frame`):
            The new frame
        style (str):
            Either 'components' or 'phase'
    """
    image.set_data(_as_image(field_to_rgb(frame.wave, frame.potential, style)))
