from setuptools import find_packages, setup

# most arguments for setup are defined in pyproject.toml
setup(packages=find_packages(include=["qwave", "qwave.*"]))
