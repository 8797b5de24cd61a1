import logging

import numpy as np
import pytest

from qwave import UniformGrid


def test_grid_defaults():
    """test the default spatial step derived from the resolution"""
    grid = UniformGrid((64, 64))
    assert grid.shape == (64, 64)
    assert grid.dx == pytest.approx(1 / 32)
    assert grid.strides == (2, 2)
    assert grid.boundary == "clamp"
    assert grid.num_cells == 64**2
    np.testing.assert_allclose(grid.discretization, [1 / 64, 1 / 64])


def test_grid_coordinates():
    """test the coordinates of the cell centers"""
    grid = UniformGrid((4, 8), dx=0.25)
    xs, ys = grid.axes_coords
    np.testing.assert_allclose(xs, [0.125, 0.375, 0.625, 0.875])
    np.testing.assert_allclose(ys, (np.arange(8) + 0.5) / 8)

    coords = grid.cell_coords
    assert coords.shape == (4, 8, 2)
    np.testing.assert_allclose(coords[2, 5], [xs[2], ys[5]])
    assert grid.strides == (1, 2)


@pytest.mark.parametrize("shape", [(4,), (4, 4, 4), (0, 4), (4, 2.5), "ab", 4])
def test_grid_invalid_shape(shape):
    """test that invalid shapes are rejected"""
    with pytest.raises(ValueError):
        UniformGrid(shape)


@pytest.mark.parametrize("dx", [0, -0.1, np.inf, np.nan, 1.0, 1e-4])
def test_grid_invalid_dx(dx):
    """test that spatial steps not matching the grid are rejected"""
    with pytest.raises(ValueError):
        UniformGrid((16, 16), dx=dx)


def test_grid_invalid_boundary():
    """test that unknown boundary modes are rejected"""
    with pytest.raises(ValueError):
        UniformGrid((16, 16), boundary="reflect")


def test_grid_rounded_stride(caplog):
    """test that steps between cells are rounded to full cells"""
    with caplog.at_level(logging.WARNING):
        grid = UniformGrid((16, 16), dx=0.15)
    assert grid.strides == (2, 2)
    assert "not a multiple" in caplog.text


def test_grid_state():
    """test serializing and copying grids"""
    grid = UniformGrid((16, 8), dx=0.125, boundary="periodic")
    grid2 = UniformGrid.from_state(grid.state)
    assert grid == grid2
    assert grid == grid.copy()
    assert hash(grid) == hash(grid2)
    assert grid != UniformGrid((16, 8), dx=0.125)
    assert "periodic" in grid.state_serialized
    assert "UniformGrid" in repr(grid)

    with pytest.raises(ValueError):
        UniformGrid.from_state({**grid.state, "extra": 1})


def test_grid_points():
    """test mapping points to cells"""
    grid = UniformGrid((4, 4), dx=0.25)
    points = np.array([[0, 0], [0.3, 0.6], [1, 1]])
    np.testing.assert_array_equal(grid.contains_point(points), [True, True, True])
    np.testing.assert_array_equal(grid.point_to_cell(points), [[0, 0], [1, 2], [3, 3]])
    assert not grid.contains_point([1.5, 0.5])

    with pytest.raises(ValueError):
        grid.point_to_cell([1.5, 0.5])
    with pytest.raises(ValueError):
        grid.point_to_cell([0.5, 0.5, 0.5])
