import numpy as np
import pytest

from qwave import PotentialField, UniformGrid, WaveField


def test_wave_field_basic():
    """test basic properties of wave fields"""
    grid = UniformGrid((8, 8))
    field = WaveField(grid, 3 + 4j, label="psi")
    assert field.data.dtype == complex
    assert field.data.shape == (8, 8)
    np.testing.assert_allclose(field.real, 3)
    np.testing.assert_allclose(field.imag, 4)
    np.testing.assert_allclose(field.magnitude, 5)
    assert field.total_magnitude == pytest.approx(5 * 64)
    assert field.norm_squared == pytest.approx(25 * 64)
    assert field.is_finite
    assert not field.readonly
    assert "psi" in repr(field)
    assert field.state["grid"] == grid.state

    assert WaveField(grid).total_magnitude == 0


def test_wave_field_copies_data():
    """test that fields do not share data with their input"""
    grid = UniformGrid((4, 4), dx=0.5)
    data = np.ones(grid.shape, dtype=complex)
    field = WaveField(grid, data)
    data[0, 0] = 5
    assert field.data[0, 0] == 1

    field2 = field.copy(label="copy")
    field2.data[0, 0] = 2
    assert field.data[0, 0] == 1
    assert field2.label == "copy"
    assert field != field2
    assert field == field.copy()


def test_wave_field_pairs(rng):
    """test conversion from and to pairs of real numbers"""
    grid = UniformGrid((6, 4), dx=0.5)
    pairs = rng.normal(size=(6, 4, 2))
    field = WaveField.from_pairs(grid, pairs)
    np.testing.assert_allclose(field.real, pairs[..., 0])
    np.testing.assert_allclose(field.imag, pairs[..., 1])
    np.testing.assert_allclose(field.to_pairs(), pairs)

    with pytest.raises(ValueError):
        WaveField.from_pairs(grid, pairs[..., :1])


def test_wave_field_phase():
    """test the phase of the amplitudes"""
    grid = UniformGrid((4, 4), dx=0.5)
    field = WaveField(grid, np.exp(0.5j))
    np.testing.assert_allclose(field.phase, 0.5)
    assert WaveField(grid, -1).phase[0, 0] == pytest.approx(np.pi)


def test_wave_field_views():
    """test read-only views and snapshots"""
    grid = UniformGrid((4, 4), dx=0.5)
    buffer = np.zeros(grid.shape, dtype=complex)
    view = WaveField.from_buffer(grid, buffer)
    snapshot = view.snapshot()
    assert view.readonly and snapshot.readonly

    buffer[1, 1] = 1j
    assert view.data[1, 1] == 1j
    assert snapshot.data[1, 1] == 0
    with pytest.raises(ValueError):
        view.data[0, 0] = 1
    with pytest.raises(ValueError):
        snapshot.data[0, 0] = 1

    with pytest.raises(ValueError):
        WaveField.from_buffer(grid, np.zeros((4, 4)))
    with pytest.raises(ValueError):
        WaveField.from_buffer(grid, np.zeros((2, 2), dtype=complex))


def test_wave_field_not_finite():
    """test detection of diverging amplitudes"""
    grid = UniformGrid((4, 4), dx=0.5)
    data = np.zeros(grid.shape, dtype=complex)
    data[2, 3] = np.nan
    assert not WaveField(grid, data).is_finite


def test_field_errors():
    """test errors when creating fields"""
    grid = UniformGrid((4, 4), dx=0.5)
    with pytest.raises(TypeError):
        WaveField((4, 4))
    with pytest.raises(ValueError):
        WaveField(grid, np.zeros((3, 4)))

    field = WaveField(grid)
    field.assert_compatible(grid)
    field.assert_compatible(PotentialField(grid))
    with pytest.raises(ValueError):
        field.assert_compatible(UniformGrid((8, 8)))
