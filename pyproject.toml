[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "noakit"
version = "0.1.0"
description = "Numerical tools for physics: quadrature, root finding, a bremsstrahlung cross-section, geometric Hamiltonian Monte Carlo and tetrahedral ray tracing"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "hamiltonian monte carlo",
    "mcmc",
    "quadrature",
    "root finding",
    "ray tracing",
    "tetrahedral mesh",
    "bremsstrahlung",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Physics",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["noakit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
