import numpy as np
import pytest

from qwave import UniformGrid
from qwave.grids.operators import make_laplace, neighbor_indices


def _apply(laplace, arr):
    out = np.empty_like(arr)
    laplace(arr, out)
    return out


def test_neighbor_indices():
    """test the indices of neighbors for all boundary modes"""
    lower, upper = neighbor_indices(5, 2, "clamp")
    np.testing.assert_array_equal(lower, [0, 0, 0, 1, 2])
    np.testing.assert_array_equal(upper, [2, 3, 4, 4, 4])

    lower, upper = neighbor_indices(5, 2, "periodic")
    np.testing.assert_array_equal(lower, [3, 4, 0, 1, 2])
    np.testing.assert_array_equal(upper, [2, 3, 4, 0, 1])

    lower, upper = neighbor_indices(5, 2, "zero")
    np.testing.assert_array_equal(lower, [-1, -1, 0, 1, 2])
    np.testing.assert_array_equal(upper, [2, 3, 4, -1, -1])

    with pytest.raises(ValueError):
        neighbor_indices(5, 2, "reflect")


def test_laplace_constant():
    """test that constant fields have a vanishing Laplacian"""
    grid = UniformGrid((16, 16))
    arr = np.full(grid.shape, 2 - 3j)
    for boundary in ["clamp", "periodic"]:
        laplace = make_laplace(UniformGrid((16, 16), boundary=boundary))
        np.testing.assert_allclose(_apply(laplace, arr), 0, atol=1e-14)

    # values outside the grid vanish for the zero boundary condition
    laplace = make_laplace(UniformGrid((16, 16), boundary="zero"))
    res = _apply(laplace, arr)
    assert res[8, 8] == 0
    assert res[0, 8] == pytest.approx(-(2 - 3j))
    assert res[0, 0] == pytest.approx(-2 * (2 - 3j))


def test_laplace_stencil():
    """test the stencil of the Laplacian on a single cell"""
    grid = UniformGrid((8, 8), dx=0.25, boundary="zero")
    assert grid.strides == (2, 2)
    arr = np.zeros(grid.shape, dtype=complex)
    arr[4, 4] = 1 + 1j
    res = _apply(make_laplace(grid), arr)

    expect = np.zeros(grid.shape, dtype=complex)
    expect[4, 4] = -4 * (1 + 1j)
    for i, j in [(2, 4), (6, 4), (4, 2), (4, 6)]:
        expect[i, j] = 1 + 1j
    np.testing.assert_allclose(res, expect)


def test_laplace_plane_wave():
    """test that plane waves are eigenfunctions on periodic grids"""
    n, m = 32, 3
    grid = UniformGrid((n, n), dx=1 / n, boundary="periodic")
    idx = np.arange(n)
    theta = 2 * np.pi * m / n
    arr = np.exp(1j * theta * (idx[:, np.newaxis] + 2 * idx[np.newaxis, :]))
    eigenvalue = 2 * (np.cos(theta) - 1) + 2 * (np.cos(2 * theta) - 1)
    res = _apply(make_laplace(grid), arr)
    np.testing.assert_allclose(res, eigenvalue * arr, atol=1e-12)


def test_laplace_clamp_boundary():
    """test that the clamped boundary repeats the edge values"""
    grid = UniformGrid((6, 6), dx=1 / 6, boundary="clamp")
    arr = np.zeros(grid.shape)
    arr[0, :] = 1
    res = _apply(make_laplace(grid), arr)
    # the missing neighbor of the edge cell is replaced by the edge cell itself
    np.testing.assert_allclose(res[0, 2:4], -1)
    np.testing.assert_allclose(res[1, 2:4], 1)


@pytest.mark.parametrize("boundary", ["clamp", "periodic", "zero"])
def test_laplace_linearity(boundary, rng):
    """test that the Laplacian is linear"""
    grid = UniformGrid((16, 24), dx=0.125, boundary=boundary)
    laplace = make_laplace(grid)
    a = rng.normal(size=grid.shape) + 1j * rng.normal(size=grid.shape)
    b = rng.normal(size=grid.shape) + 1j * rng.normal(size=grid.shape)
    alpha, beta = 0.3 - 2j, -1.5 + 0.5j

    lhs = _apply(laplace, alpha * a + beta * b)
    rhs = alpha * _apply(laplace, a) + beta * _apply(laplace, b)
    np.testing.assert_allclose(lhs, rhs, atol=1e-12)


@pytest.mark.parametrize("boundary", ["clamp", "periodic", "zero"])
@pytest.mark.parametrize("shape", [(16, 16), (24, 16)])
def test_laplace_backends(boundary, shape, rng):
    """test that the numpy and the numba implementation agree"""
    grid = UniformGrid(shape, dx=0.125, boundary=boundary)
    arr = rng.normal(size=shape) + 1j * rng.normal(size=shape)

    res_numpy = _apply(make_laplace(grid, backend="numpy"), arr)
    res_numba = _apply(make_laplace(grid, backend="numba"), arr)
    np.testing.assert_allclose(res_numba, res_numpy, atol=1e-12)


def test_laplace_does_not_modify_input(rng):
    """test that the Laplacian only writes to the output array"""
    grid = UniformGrid((16, 16))
    arr = rng.normal(size=grid.shape) + 0j
    arr_copy = arr.copy()
    for backend in ["numpy", "numba"]:
        _apply(make_laplace(grid, backend=backend), arr)
        np.testing.assert_array_equal(arr, arr_copy)


def test_laplace_errors():
    """test errors when creating Laplace operators"""
    with pytest.raises(ValueError):
        make_laplace(UniformGrid((8, 8)), backend="fortran")
    with pytest.raises(TypeError):
        make_laplace((8, 8))
