"""Integration tests that use multiple modules together."""

import numpy as np
import pytest

from qwave import (
    PotentialField,
    SimulationLoop,
    UniformGrid,
    WaveParameters,
    wave_packet,
)


def _reference_run(grid, potential, psi, dt, ticks):
    """Evolve the wave function cell by cell using pure python.

    The amplitudes are kept as separate lists of real and imaginary parts, the stencil
    clamps indices at the edge, and the evolution rate rotates `V psi - L psi` by 270
    degrees, i.e., `(re, im)` is mapped to `(im, -re)`.
    """
    nx, ny = grid.shape
    sx, sy = grid.strides
    pot = potential.data.tolist()

    def rate(re, im):
        res_re = [[0.0] * ny for _ in range(nx)]
        res_im = [[0.0] * ny for _ in range(nx)]
        for i in range(nx):
            i_lo, i_hi = max(i - sx, 0), min(i + sx, nx - 1)
            for j in range(ny):
                j_lo, j_hi = max(j - sy, 0), min(j + sy, ny - 1)
                lap_re = (
                    re[i][j_hi] + re[i_hi][j] + re[i][j_lo] + re[i_lo][j] - 4 * re[i][j]
                )
                lap_im = (
                    im[i][j_hi] + im[i_hi][j] + im[i][j_lo] + im[i_lo][j] - 4 * im[i][j]
                )
                val_re = -lap_re + pot[i][j] * re[i][j]
                val_im = -lap_im + pot[i][j] * im[i][j]
                res_re[i][j], res_im[i][j] = val_im, -val_re
        return res_re, res_im

    def axpy(a, x, y):
        return [[y[i][j] + a * x[i][j] for j in range(ny)] for i in range(nx)]

    def combine(y, k1, k2, k3, k4):
        return [
            [
                y[i][j] + dt * (k1[i][j] + 2 * k2[i][j] + 2 * k3[i][j] + k4[i][j]) / 6
                for j in range(ny)
            ]
            for i in range(nx)
        ]

    re, im = psi.real.tolist(), psi.imag.tolist()
    for _ in range(ticks):
        k1 = rate(re, im)
        k2 = rate(axpy(dt / 2, k1[0], re), axpy(dt / 2, k1[1], im))
        k3 = rate(axpy(dt / 2, k2[0], re), axpy(dt / 2, k2[1], im))
        k4 = rate(axpy(dt, k3[0], re), axpy(dt, k3[1], im))
        re, im = (
            combine(re, k1[0], k2[0], k3[0], k4[0]),
            combine(im, k1[1], k2[1], k3[1], k4[1]),
        )
    return np.array(re) + 1j * np.array(im)


@pytest.mark.parametrize("backend", ["numpy", "numba"])
def test_square_well_reference(backend):
    """test a concrete simulation against a cell-by-cell computation"""
    grid = UniformGrid((64, 64), dx=1 / 32)
    params = WaveParameters(
        center=(0.5, 0.25), direction=(0, 1), wavenumber=100, width=100
    )
    sim = SimulationLoop(grid, "square_well", params, dt=0.25, backend=backend)
    frame0 = sim.start()
    frame1 = sim.tick()

    expect = _reference_run(grid, sim.potential, frame0.wave.data, 0.25, 1)
    np.testing.assert_allclose(frame1.wave.data, expect, rtol=1e-9, atol=1e-12)
    # the center cell carries a small but finite amplitude
    center = frame1.wave.data[32, 32]
    assert abs(center) > 1e-4
    assert center == pytest.approx(expect[32, 32], rel=1e-9)

    for _ in range(2):
        frame = sim.tick()
    expect = _reference_run(grid, sim.potential, frame1.wave.data, 0.25, 2)
    np.testing.assert_allclose(frame.wave.data, expect, rtol=1e-9, atol=1e-12)


@pytest.mark.parametrize("backend", ["numpy", "numba"])
def test_square_well_center_value(backend):
    """test the amplitude at the center cell against stored values"""
    grid = UniformGrid((64, 64), dx=1 / 32)
    params = WaveParameters(
        center=(0.5, 0.25), direction=(0, 1), wavenumber=100, width=100
    )
    sim = SimulationLoop(grid, "square_well", params, dt=0.25, backend=backend)

    frame = sim.start()
    expect = 0.0011225050201751172 + 0.00063641029571729669j
    assert frame.wave.data[32, 32] == pytest.approx(expect, rel=1e-9)

    frame = sim.tick()
    expect = 0.00051034033071606648 - 0.0012563519503726284j
    assert frame.wave.data[32, 32] == pytest.approx(expect, rel=1e-9)


def _wall_fraction(frame):
    """Return the fraction of the squared amplitudes located in the walls."""
    weight = np.abs(frame.wave.data) ** 2
    return weight[frame.potential.wall_mask].sum() / weight.sum()


def test_square_well_containment():
    """test that the walls keep the wave inside the domain"""
    grid = UniformGrid((64, 64))
    params = WaveParameters(center=(0.5, 0.5), wavenumber=0, width=70)

    sim = SimulationLoop(
        grid, {"shape": "square_well", "wall_value": 3}, params, backend="numpy"
    )
    frame_well = sim.run(ticks=80)
    # weight in the same cells without any potential
    walls = PotentialField.square_well(grid).wall_mask
    sim_free = SimulationLoop(grid, "free", params, backend="numpy")
    frame_free = sim_free.run(ticks=80)

    fraction_well = _wall_fraction(frame_well)
    weight_free = np.abs(frame_free.wave.data) ** 2
    fraction_free = weight_free[walls].sum() / weight_free.sum()
    assert fraction_well < 0.05
    assert fraction_well < fraction_free / 2


def test_norm_approximately_conserved():
    """test that smooth wave packets keep their norm without renormalization"""
    grid = UniformGrid((64, 64))
    params = WaveParameters(center=(0.5, 0.5), wavenumber=20, width=70)
    sim = SimulationLoop(grid, "square_well", params, tick_limit=40, backend="numpy")
    norm_initial = wave_packet(grid, params).norm_squared
    frame = sim.run()
    assert frame.wave.norm_squared == pytest.approx(norm_initial, rel=0.05)


def test_two_slit_interference():
    """test that the two-slit barrier produces several intensity maxima"""
    pytest.importorskip("scipy")
    from scipy.signal import find_peaks

    grid = UniformGrid((128, 128), dx=1 / 64)
    sims = {
        shape: SimulationLoop(grid, shape, stability_check="off", backend="numpy")
        for shape in ["two_slit", "barrier"]
    }
    frames = {shape: sim.run(ticks=70) for shape, sim in sims.items()}

    ys = grid.axes_coords[1]
    downstream = (ys > 0.55) & (ys < 0.8)
    intensity = {
        shape: (np.abs(frame.wave.data[:, downstream]) ** 2).sum(axis=1)
        for shape, frame in frames.items()
    }

    # the slits let considerably more weight pass than the closed barrier
    assert intensity["two_slit"].sum() > 2 * intensity["barrier"].sum()

    profile = intensity["two_slit"]
    peaks, _ = find_peaks(profile, prominence=0.05 * profile.max())
    assert len(peaks) >= 2
