import numpy as np
import pytest

from qwave import POTENTIAL_SHAPES, PotentialField, UniformGrid


def test_potential_free():
    """test the potential of free space"""
    grid = UniformGrid((16, 16))
    pot = PotentialField.free(grid)
    assert pot.max_value == 0
    assert np.all(pot.is_free)
    assert not np.any(pot.wall_mask)
    assert pot.readonly
    with pytest.raises(ValueError):
        pot.data[0, 0] = 1


def test_potential_square_well():
    """test walls along the edges of the domain"""
    grid = UniformGrid((64, 64))  # dx = 1 / 32
    pot = PotentialField.square_well(grid)
    xs = grid.axes_coords[0]
    # walls are twice the spatial step wide
    in_wall = (xs < 2 / 32) | (xs > 1 - 2 / 32)
    assert in_wall.sum() == 8
    np.testing.assert_array_equal(pot.data[:, 32], in_wall.astype(float))
    np.testing.assert_array_equal(pot.data[32, :], in_wall.astype(float))
    assert pot.data[0, 0] == 1
    assert pot.data[32, 32] == 0
    assert pot.max_value == 1
    np.testing.assert_array_equal(pot.is_free, ~pot.wall_mask)

    pot = PotentialField.square_well(grid, wall_value=5, wall_width=0.25)
    assert pot.max_value == 5
    assert pot.wall_mask[:, 32].sum() == 32


def test_potential_two_slit():
    """test the barrier with two slits"""
    grid = UniformGrid((128, 128))  # dx = 1 / 64
    pot = PotentialField.two_slit(grid)
    xs, ys = grid.axes_coords

    in_band = np.abs(ys - 0.5) < 1 / 64
    assert in_band.sum() == 4
    row = int(np.flatnonzero(in_band)[0])

    # the barrier is open in the slits and closed elsewhere
    for x, value in [(0.2, 3), (0.425, 0), (0.5, 3), (0.575, 0), (0.8, 3)]:
        i = int(np.argmin(np.abs(xs - x)))
        assert pot.data[i, row] == value
    # slit edges are part of the slits
    assert pot.data[xs.searchsorted(0.4), row] == 0
    assert pot.data[xs.searchsorted(0.45) - 1, row] == 0

    # the barrier adds to the walls
    assert pot.data[0, row] == 4
    assert pot.max_value == 4
    assert pot.data[64, 32] == 0


def test_potential_two_slit_custom():
    """test the barrier with custom geometry"""
    grid = UniformGrid((32, 32))
    pot = PotentialField.two_slit(
        grid, wall_value=0, barrier_value=2, barrier_position=0.25, slits=[(0, 0.5)]
    )
    xs, ys = grid.axes_coords
    row = int(np.argmin(np.abs(ys - 0.25)))
    assert np.all(pot.data[xs < 0.5, row] == 0)
    assert np.all(pot.data[xs > 0.5, row] == 2)


def test_potential_barrier():
    """test the closed barrier"""
    grid = UniformGrid((64, 64))
    pot = PotentialField.barrier(grid, barrier_value=10)
    ys = grid.axes_coords[1]
    row = int(np.flatnonzero(np.abs(ys - 0.5) < 1 / 32)[0])
    assert np.all(pot.data[:, row] >= 10)

    with pytest.raises(TypeError):
        PotentialField.barrier(grid, slits=[(0.4, 0.5)])


@pytest.mark.parametrize("shape", POTENTIAL_SHAPES)
def test_potential_from_shape(shape):
    """test creating potentials from their names"""
    grid = UniformGrid((32, 32))
    pot = PotentialField.from_shape(grid, shape)
    assert pot.label == shape
    assert pot == PotentialField.from_data(grid, shape)
    assert pot == PotentialField.from_data(grid, {"shape": shape})


def test_potential_from_data():
    """test creating potentials from different formats"""
    grid = UniformGrid((16, 16))
    pot = PotentialField.square_well(grid, wall_value=2)
    assert PotentialField.from_data(grid, pot) is pot
    assert PotentialField.from_data(grid, None).max_value == 0
    assert PotentialField.from_data(grid, 0.5).max_value == 0.5
    pot2 = PotentialField.from_data(grid, {"shape": "square_well", "wall_value": 2})
    np.testing.assert_array_equal(pot2.data, pot.data)

    with pytest.raises(ValueError):
        PotentialField.from_data(UniformGrid((8, 8)), pot)
    with pytest.raises(ValueError):
        PotentialField.from_data(grid, {"wall_value": 2})
    with pytest.raises(ValueError):
        PotentialField.from_data(grid, "three_slit")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"wall_value": -1},
        {"wall_width": 0},
        {"barrier_value": np.inf},
        {"barrier_width": -0.1},
        {"barrier_position": 1.5},
        {"slits": [(0.6, 0.5)]},
    ],
)
def test_potential_invalid_geometry(kwargs):
    """test that invalid geometries are rejected"""
    grid = UniformGrid((32, 32))
    with pytest.raises(ValueError):
        PotentialField.two_slit(grid, **kwargs)


def test_potential_invalid_values():
    """test that invalid values are rejected"""
    grid = UniformGrid((8, 8))
    with pytest.raises(ValueError):
        PotentialField(grid, -1)
    with pytest.raises(ValueError):
        PotentialField(grid, np.nan)
