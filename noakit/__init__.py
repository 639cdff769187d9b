"""Numerical tools for physics: helpers, quadrature, root finding, geometric HMC and mesh ray tracing."""

__version__ = "0.1.0"
__all__ = ["common", "physics", "numerics", "hamiltonian", "dynamics", "trace"]