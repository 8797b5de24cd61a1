"""Python functions for handling output.

.. autosummary::
   :nosignatures:

   get_progress_bar_class
"""

from __future__ import annotations

import tqdm

from .misc import module_available


def get_progress_bar_class(fancy: bool = True):
    """Returns a class that behaves as progress bar.

    Args:
        fancy (bool):
            Flag determining whether a fancy progress bar should be used in jupyter
            notebooks (if :mod:`ipywidgets` is installed)
    """
    if fancy and module_available("ipywidgets"):
        # use the fancier version of the progress bar in jupyter
        from tqdm.auto import tqdm as progress_bar_class
    else:
        progress_bar_class = tqdm.tqdm

    return progress_bar_class
