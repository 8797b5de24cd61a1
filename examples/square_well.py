"""
Wave packet in a square well
============================

This example traps a wave packet between four walls and records the total weight of
the wave function, which is approximately conserved during the simulation.
"""

import qwave

grid = qwave.UniformGrid((64, 64))  # generate grid
params = qwave.WaveParameters(center=(0.3, 0.5), direction=(1, 0), wavenumber=40)

# record the norm every 10 ticks
norms = qwave.DataTracker(lambda frame: frame.wave.norm_squared, interrupts=10)

sim = qwave.SimulationLoop(
    grid,
    {"shape": "square_well", "wall_value": 2},
    params,
    tick_limit=100,
    tracker=[norms, "consistency"],
)
sim.run()

for tick, norm in zip(norms.ticks, norms.data):
    print(f"tick {tick:3d}: |psi|^2 = {norm:.4f}")
