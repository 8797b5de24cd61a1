import pytest

from qwave import config
from qwave.tools.config import Config, Parameter, environment, get_package_versions


def test_environment():
    """test the environment function"""
    env = environment()
    assert isinstance(env, dict)
    assert "numba" in env["mandatory packages"]
    assert env["config"]["solvers.stability_check"] in {"off", "warn", "raise"}


def test_config():
    """test configuration system"""
    c = Config()

    assert c["numba.multithreading_threshold"] > 0
    assert c["solvers.stability_check"] == "warn"
    assert c["simulation.snapshot_frames"] is True

    assert "numba.multithreading_threshold" in c
    assert any("numba.multithreading_threshold" == k for k in c)
    assert any("numba.multithreading_threshold" == k and v > 0 for k, v in c.items())
    assert "numba.multithreading_threshold" in c.to_dict()
    assert isinstance(repr(c), str)


def test_config_modes():
    """test configuration system running in different modes"""
    c = Config(mode="insert")
    c["numba.multithreading_threshold"] = 0
    assert c["numba.multithreading_threshold"] == 0
    c["new_value"] = "value"
    assert c["new_value"] == "value"
    del c["new_value"]
    with pytest.raises(KeyError):
        c["new_value"]

    c = Config(mode="update")
    c["numba.multithreading_threshold"] = 0
    with pytest.raises(KeyError):
        c["new_value"] = "value"
    with pytest.raises(RuntimeError):
        del c["numba.multithreading_threshold"]

    c = Config(mode="locked")
    with pytest.raises(RuntimeError):
        c["numba.multithreading_threshold"] = 0
    with pytest.raises(RuntimeError):
        del c["numba.multithreading_threshold"]


def test_config_conversion():
    """test that values are converted and checked"""
    c = Config()
    c["numba.multithreading_threshold"] = "12"
    assert c["numba.multithreading_threshold"] == 12

    c["solvers.stability_check"] = "panic"
    with pytest.raises(ValueError):
        c["solvers.stability_check"]

    c["numba.multithreading_threshold"] = "many"
    with pytest.raises(ValueError):
        c["numba.multithreading_threshold"]


def test_config_contexts():
    """test context manager temporarily changing configuration"""
    c = Config()

    assert c["solvers.stability_check"] == "warn"
    with c({"solvers.stability_check": "raise"}):
        assert c["solvers.stability_check"] == "raise"
        with c(**{"simulation.snapshot_frames": False}):
            assert not c["simulation.snapshot_frames"]
        assert c["simulation.snapshot_frames"]
    assert c["solvers.stability_check"] == "warn"


def test_config_multithreading():
    """test the logic deciding on multithreading"""
    c = Config()
    c["numba.multithreading"] = "never"
    assert not c.use_multithreading()
    c["numba.multithreading"] = "always"
    assert c.use_multithreading()


def test_parameter():
    """test the representation of a single parameter"""
    p = Parameter("a", 1, int, "number", choices=(1, 2))
    assert p.convert() == 1
    assert p.convert("2") == 2
    with pytest.raises(ValueError):
        p.convert(3)
    assert "number" in repr(p)


def test_package_versions():
    """test that package versions can be read"""
    versions = get_package_versions(["numpy", "package-that-does-not-exist"])
    assert versions["numpy"] != "not available"
    assert versions["package-that-does-not-exist"] == "not available"


def test_global_config():
    """test that the package exposes a configuration"""
    assert isinstance(config, Config)
    assert config.mode == "update"
