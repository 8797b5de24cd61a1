"""Package containing several tools required in py-qwave.

.. autosummary::
   :nosignatures:

   config
   docstrings
   misc
   numba
   output
   typing
"""
