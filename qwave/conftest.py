"""
This file is used to configure the test environment when running py.test
"""

import matplotlib

matplotlib.use("agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pytest  # noqa: E402


@pytest.fixture(scope="function", autouse=True)
def setup_and_teardown():
    """helper function adjusting environment before and after tests"""
    # raise all errors except underflow
    np.seterr(all="raise", under="ignore")

    # run the actual test
    yield

    # clean up open matplotlib figures after the test
    plt.close("all")


def pytest_configure(config):
    """add markers to the configuration"""
    config.addinivalue_line("markers", "slow: test runs slowly")


def pytest_addoption(parser):
    """pytest hook to add command line options parsed by pytest"""
    parser.addoption(
        "--runslow",
        action="store_true",
        default=False,
        help="also run tests marked by `slow`",
    )


def pytest_collection_modifyitems(config, items):
    """pytest hook to filter a collection of tests"""
    runslow = config.getoption("--runslow", default=False)
    skip_slow = pytest.mark.skip(reason="need --runslow option to run")

    for item in items:
        if "slow" in item.keywords and not runslow:
            item.add_marker(skip_slow)


@pytest.fixture
def rng():
    """random number generator with a fixed seed"""
    return np.random.default_rng(0)
