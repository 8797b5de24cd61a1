"""Handles configuration variables of the package.

.. autosummary::
   :nosignatures:

   Parameter
   Config
   get_package_versions
   is_hpc_environment
   environment
"""

from __future__ import annotations

import collections
import contextlib
import importlib.metadata
import logging
import os
import sys
from typing import Any

import numpy as np


class Parameter:
    """Class representing a single parameter."""

    def __init__(
        self,
        name: str,
        default_value=None,
        cls=object,
        description: str = "",
        choices: tuple | None = None,
    ):
        """Initialize a parameter.

        Args:
            name (str):
                The name of the parameter
            default_value:
                The default value
            cls:
                The type of the parameter, which is used for conversion
            description (str):
                A string describing the impact of this parameter. This
                description appears in the parameter help
            choices (tuple, optional):
                If given, converted values must be one of these choices
        """
        self.name = name
        self.default_value = default_value
        self.cls = cls
        self.description = description
        self.choices = choices

        if cls is not object:
            # check whether the default value is of the correct type
            converted_value = cls(default_value)
            if isinstance(converted_value, np.ndarray):
                valid_default = np.allclose(
                    converted_value, default_value, equal_nan=True
                )
            else:
                valid_default = (
                    converted_value is default_value or converted_value == default_value
                )

            if not valid_default:
                logging.getLogger(self.__class__.__module__).warning(
                    "Default value `%s` does not seem to be of type `%s`",
                    name,
                    cls.__name__,
                )

    def __repr__(self):
        return (
            f'{self.__class__.__name__}(name="{self.name}", default_value='
            f'"{self.default_value}", cls="{self.cls.__name__}", '
            f'description="{self.description}")'
        )

    __str__ = __repr__

    def convert(self, value=None):
        """Converts a `value` into the correct type for this parameter. If `value` is
        not given, the default value is converted.

        Args:
            value: The value to convert

        Returns:
            The converted value, which is of type `self.cls`
        """
        if value is None:
            value = self.default_value

        if self.cls is not object:
            try:
                value = self.cls(value)
            except ValueError as err:
                raise ValueError(
                    f"Could not convert {value!r} to {self.cls.__name__} for parameter "
                    f"'{self.name}'"
                ) from err

        if self.choices is not None and value not in self.choices:
            raise ValueError(
                f"Parameter '{self.name}' must be one of {self.choices}, not {value!r}"
            )
        return value


# define default parameter values
DEFAULT_CONFIG: list[Parameter] = [
    Parameter(
        "numba.debug",
        False,
        bool,
        "Determines whether numba uses the debug mode for compilation. If enabled, "
        "this emits extra information that might be useful for debugging.",
    ),
    Parameter(
        "numba.fastmath",
        True,
        bool,
        "Determines whether the fastmath flag is set during compilation. If enabled, "
        "some mathematical operations might be faster, but less precise. This flag "
        "does not affect infinity detection and NaN handling.",
    ),
    Parameter(
        "numba.multithreading",
        "only_local",
        str,
        "Determines whether multiple threads are used in numba-compiled code. Enabling "
        "this option accelerates the stencil evaluation on large grids. Possible "
        "options are 'never' (disable multithreading), 'only_local' (disable on HPC "
        "hardware), and 'always' (enable if number of grid points exceeds "
        "`numba.multithreading_threshold`)",
        choices=("never", "only_local", "always"),
    ),
    Parameter(
        "numba.multithreading_threshold",
        256**2,
        int,
        "Minimal number of support points of grids before multithreading is enabled in "
        "numba compilations. Has no effect when `numba.multithreading` is `never`.",
    ),
    Parameter(
        "solvers.stability_check",
        "warn",
        str,
        "Determines what happens when the time step exceeds the estimated stability "
        "limit of the explicit scheme. Possible options are 'off' (proceed silently), "
        "'warn' (log a warning and proceed), and 'raise' (refuse to create a stepper).",
        choices=("off", "warn", "raise"),
    ),
    Parameter(
        "simulation.snapshot_frames",
        True,
        bool,
        "Determines whether frames handed to trackers contain a read-only copy of the "
        "wave field. Disabling this hands out read-only views of the current buffer, "
        "which are only valid until the buffer is reused two ticks later.",
    ),
]


class Config(collections.UserDict):
    """Class handling the package configuration."""

    def __init__(self, items: dict[str, Any] | None = None, mode: str = "update"):
        """
        Args:
            items (dict, optional):
                Configuration values that should be added or overwritten to initialize
                the configuration.
            mode (str):
                Defines the mode in which the configuration is used. Possible values are

                * `insert`: any new configuration key can be inserted
                * `update`: only the values of pre-existing items can be updated
                * `locked`: no values can be changed

                Note that the items specified by `items` will always be inserted,
                independent of the `mode`.
        """
        self.mode = "insert"  # temporarily allow inserting items
        super().__init__({p.name: p for p in DEFAULT_CONFIG})
        if items:
            self.update(items)
        self.mode = mode

    def __getitem__(self, key: str):
        """Retrieve item `key`"""
        value = self.data[key]
        if isinstance(value, Parameter):
            return value.convert()
        parameter = next((p for p in DEFAULT_CONFIG if p.name == key), None)
        if parameter is not None:
            return parameter.convert(value)
        return value

    def __setitem__(self, key: str, value):
        """Update item `key` with `value`"""
        if self.mode == "insert":
            self.data[key] = value

        elif self.mode == "update":
            if key not in self.data:
                raise KeyError(f"{key} is not present and config is not insertable")
            self.data[key] = value

        elif self.mode == "locked":
            raise RuntimeError("Configuration is locked")

        else:
            raise ValueError(f"Unsupported configuration mode `{self.mode}`")

    def __delitem__(self, key: str):
        """Removes item `key`"""
        if self.mode == "insert":
            del self.data[key]
        else:
            raise RuntimeError("Configuration is not in `insert` mode")

    def to_dict(self) -> dict[str, Any]:
        """Convert the configuration to a simple dictionary.

        Returns:
            dict: A representation of the configuration in a normal :class:`dict`.
        """
        return dict(self.items())

    def __repr__(self) -> str:
        """Represent the configuration as a string."""
        return f"{self.__class__.__name__}({repr(self.to_dict())})"

    @contextlib.contextmanager
    def __call__(self, values: dict[str, Any] | None = None, **kwargs):
        """Context manager temporarily changing the configuration.

        Args:
            values (dict): New configuration parameters
            **kwargs: New configuration parameters
        """
        data_initial = self.data.copy()  # save old configuration
        # set new configuration
        if values is not None:
            self.data.update(values)
        self.data.update(kwargs)
        try:
            yield  # return to caller
        finally:
            # restore old configuration
            self.data = data_initial

    def use_multithreading(self) -> bool:
        """Determine whether multithreading should be used in numba-compiled code.

        Returns:
            bool: True if multithreading should be enabled, False otherwise.
        """
        setting = self["numba.multithreading"]
        if setting == "always":
            return True
        elif setting == "never":
            return False
        else:  # setting == "only_local"
            return not is_hpc_environment()


def get_package_versions(
    packages: list[str], *, na_str="not available"
) -> dict[str, str]:
    """Tries to load certain python packages and returns their version.

    Args:
        packages (list): The names of all packages
        na_str (str): Text to return if package is not available

    Returns:
        dict: Dictionary with version for each package name
    """
    versions: dict[str, str] = {}
    for name in sorted(packages):
        try:
            versions[name] = importlib.metadata.version(name)
        except importlib.metadata.PackageNotFoundError:
            versions[name] = na_str
    return versions


def is_hpc_environment() -> bool:
    """Check whether the code is running in a high-performance computing environment.

    Returns:
        bool: True if running in an HPC environment, False otherwise.
    """
    hpc_env_vars = ["SLURM_JOB_ID", "PBS_JOBID", "LSB_JOBID"]
    return any(var in os.environ for var in hpc_env_vars)


def environment() -> dict[str, Any]:
    """Obtain information about the compute environment.

    Returns:
        dict: information about the python installation and packages
    """
    from .. import __version__ as package_version
    from .. import config
    from .numba import numba_environment

    result: dict[str, Any] = {}
    result["package version"] = package_version
    result["python version"] = sys.version
    result["environment"] = {"platform": sys.platform, "is_hpc": is_hpc_environment()}
    result["config"] = config.to_dict()
    result["mandatory packages"] = get_package_versions(
        ["matplotlib", "numba", "numpy", "tqdm"]
    )
    result["numba environment"] = numba_environment()
    return result
