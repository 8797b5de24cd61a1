"""
Restarting with new wave packets
================================

This example shows how an interactive front end drives a simulation. Frames are pulled
one by one, and the wave packet is relaunched from a new position and direction, like
a user clicking into the domain would do.
"""

import math

import qwave

grid = qwave.UniformGrid((64, 64))
sim = qwave.SimulationLoop(grid, "square_well", tick_limit=200)

for frame in sim.frames(ticks=20):
    pass
print(f"Initial packet: max |psi| = {frame.wave.magnitude.max():.3f}")

# relaunch the packet towards the upper left corner
frame = sim.reset(center=(0.7, 0.3), angle=3 * math.pi / 4)
for frame in sim.frames(ticks=20):
    pass
print(f"Relaunched packet: max |psi| = {frame.wave.magnitude.max():.3f}")
print(f"Parameters: {sim.parameters}")
