r"""
Two-slit experiment
===================

This example sends a wave packet through a wall containing two slits. The wave function
evolves according to the Schrödinger equation in non-dimensional form,

.. math::
    i \partial_t \psi = -\nabla^2 \psi + V \psi

where the potential :math:`V` describes the wall. The interference pattern forms behind
the slits.
"""

import matplotlib.pyplot as plt

from qwave import SimulationLoop, UniformGrid, WaveParameters, plot_frame

grid = UniformGrid((128, 128), dx=1 / 64)  # generate grid
params = WaveParameters(center=(0.5, 0.25), direction=(0, 1), wavenumber=100)

# the default time step exceeds the conservative stability estimate
sim = SimulationLoop(
    grid, "two_slit", params, tick_limit=80, tracker="progress", stability_check="off"
)
frame = sim.run()

plot_frame(frame, style="phase")
plt.title(f"Two slits after {frame.tick} ticks")
plt.show()
