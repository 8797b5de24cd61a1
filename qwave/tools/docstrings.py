"""Methods for automatic transformation of docstrings.

.. autosummary::
   :nosignatures:

   get_text_block
   fill_in_docstring
"""

from __future__ import annotations

import re
import textwrap
from typing import TypeVar

DOCSTRING_REPLACEMENTS = {
    # description of function arguments
    "ARG_BOUNDARY": """
        Determines how the stencil samples neighbors that lie beyond the edge of
        the grid. Possible values are 'clamp' (use the value of the closest
        cell at the edge), 'periodic' (wrap around to the opposite edge), and
        'zero' (treat all values outside the grid as zero). The default
        'clamp' relies on a potential wall to suppress artifacts at the edge.
        """,
    "ARG_BACKEND": """
        Determines how the function is created. Accepted values are 'numpy'
        and 'numba'. Alternatively, 'auto' lets the code decide for the most
        optimal backend.
        """,
    "ARG_STABILITY_CHECK": """
        Determines what happens when the time step exceeds the estimated
        stability limit of the explicit scheme. Possible values are 'off'
        (proceed silently), 'warn' (log a warning and proceed), and 'raise'
        (raise :class:`~qwave.solvers.base.StabilityError`). If `None`, the
        value is read from the configuration `solvers.stability_check`.
        """,
    "ARG_TRACKER_INTERRUPT": """
        Determines when the tracker interrupts the simulation. A single number
        determines an interval (measured in ticks), while a sequence of numbers
        defines fixed ticks at which the tracker is called. Finally, instances
        of the classes defined in :mod:`~qwave.trackers.interrupts` can be
        given for more control.
        """,
}
DOCSTRING_REPLACEMENTS = {k: v[1:-1] for k, v in DOCSTRING_REPLACEMENTS.items()}


def get_text_block(identifier: str) -> str:
    """Return a single text block.

    Args:
        identifier (str): The name of the text block

    Returns:
        str: the text block as one long line.
    """
    raw_text = DOCSTRING_REPLACEMENTS[identifier]
    return "".join(textwrap.dedent(raw_text))


TFunc = TypeVar("TFunc")


def fill_in_docstring(f: TFunc) -> TFunc:
    """Decorator that replaces text in the docstring of a function."""
    if f.__doc__ is None:  # docstrings might have been stripped
        return f

    tw = textwrap.TextWrapper(
        width=88, expand_tabs=True, replace_whitespace=True, drop_whitespace=True
    )

    for name, value in DOCSTRING_REPLACEMENTS.items():

        def repl(matchobj) -> str:
            tw.initial_indent = tw.subsequent_indent = matchobj.group(1)
            return tw.fill(textwrap.dedent(value))

        token = "{" + name + "}"
        f.__doc__ = re.sub(  # type: ignore
            f"^([ \t]*){token}",
            repl,
            f.__doc__,
            flags=re.MULTILINE,
        )
    return f
