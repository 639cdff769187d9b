"""Numerical tools: finite-difference derivatives, Gauss-Legendre quadrature,
Ridders root finding and a Gaussian regression log-probability."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

import numpy as np

from noakit.common import TOLERANCE

Function = Callable[[list[np.ndarray]], float]

_X_GQ6 = (0.03376524, 0.16939531, 0.38069041, 0.61930959, 0.83060469, 0.96623476)
_W_GQ6 = (0.08566225, 0.18038079, 0.23395697, 0.23395697, 0.18038079, 0.08566225)

_X_GQ8 = (
    0.01985507, 0.10166676, 0.2372338, 0.40828268,
    0.59171732, 0.7627662, 0.89833324, 0.98014493,
)
_W_GQ8 = (
    0.05061427, 0.11119052, 0.15685332, 0.18134189,
    0.18134189, 0.15685332, 0.11119052, 0.05061427,
)

# These nodes and weights are given on [-1, 1] and are used as such.
_X_GQ9 = (
    0.0000000000000000, -0.8360311073266358, 0.8360311073266358,
    -0.9681602395076261, 0.9681602395076261, -0.3242534234038089,
    0.3242534234038089, -0.6133714327005904, 0.6133714327005904,
)
_W_GQ9 = (
    0.3302393550012598, 0.1806481606948574, 0.1806481606948574,
    0.0812743883615744, 0.0812743883615744, 0.3123470770400029,
    0.3123470770400029, 0.2606106964029354, 0.2606106964029354,
)


def _as_float_arrays(variables: Sequence[np.ndarray]) -> list[np.ndarray]:
    return [np.array(v, dtype=np.float64) for v in variables]


def _scalar(function: Function, variables: list[np.ndarray]) -> float:
    value = np.asarray(function(variables))
    if value.ndim > 0:
        raise ValueError("expecting a scalar value from the function")
    return float(value)


def _shifted(variables: list[np.ndarray], index: int, flat_shifts: dict[int, float]) -> list[np.ndarray]:
    result = list(variables)
    moved = variables[index].copy()
    flat = moved.reshape(-1)
    for position, shift in flat_shifts.items():
        flat[position] += shift
    result[index] = moved
    return result


def gradient(
    function: Function,
    variables: Sequence[np.ndarray],
    step: float = 1e-5,
) -> list[np.ndarray] | None:
    """Central-difference gradient of a scalar function with respect to each variable.

    Returns ``None`` if any gradient is not finite.
    """
    point = _as_float_arrays(variables)
    _scalar(function, point)
    grads = []
    for index, variable in enumerate(point):
        grad = np.empty(variable.size, dtype=np.float64)
        for j in range(variable.size):
            forward = _scalar(function, _shifted(point, index, {j: step}))
            backward = _scalar(function, _shifted(point, index, {j: -step}))
            grad[j] = (forward - backward) / (2.0 * step)
        if not np.all(np.isfinite(grad)):
            return None
        grads.append(grad.reshape(variable.shape))
    return grads


def hessian(
    function: Function,
    variables: Sequence[np.ndarray],
    step: float = 1e-4,
) -> list[np.ndarray] | None:
    """Per-variable Hessian blocks of a scalar function, each of shape (n, n).

    Raises ``ValueError`` if the function is not scalar-valued; returns ``None``
    if a block is not finite.
    """
    point = _as_float_arrays(variables)
    _scalar(function, point)
    blocks = []
    for index, variable in enumerate(point):
        n = variable.size
        block = np.zeros((n, n), dtype=np.float64)
        for j in range(n):
            for k in range(j, n):
                values = []
                for sj, sk in ((step, step), (step, -step), (-step, step), (-step, -step)):
                    shifts: dict[int, float] = {j: sj}
                    shifts[k] = shifts.get(k, 0.0) + sk
                    values.append(_scalar(function, _shifted(point, index, shifts)))
                pp, pm, mp, mm = values
                block[j, k] = (pp - pm - mp + mm) / (4.0 * step * step)
        if not np.all(np.isfinite(np.triu(block))):
            return None
        blocks.append(block + np.triu(block, 1).T)
    return blocks


def legendre_gaussian_quadrature(
    lower_bound: float,
    upper_bound: float,
    function: Callable[[float], float],
    min_points: int,
    abscissa: Sequence[float],
    weight: Sequence[float],
) -> float:
    """Composite Gauss-Legendre rule on unit-interval nodes over at least ``min_points`` points."""
    order = len(abscissa)
    if order != len(weight):
        raise ValueError("abscissa and weight must have the same length")
    n_itv = (min_points + order - 1) // order
    if n_itv == 0:
        return 0.0
    h = (upper_bound - lower_bound) / n_itv
    return sum(
        function(lower_bound + h * (interval + x)) * h * w
        for interval in range(n_itv)
        for x, w in zip(abscissa, weight)
    )


def quadrature6(
    lower_bound: float,
    upper_bound: float,
    function: Callable[[float], float],
    min_points: int = 1,
) -> float:
    """Six-point Gauss-Legendre quadrature."""
    return legendre_gaussian_quadrature(lower_bound, upper_bound, function, min_points, _X_GQ6, _W_GQ6)


def quadrature8(
    lower_bound: float,
    upper_bound: float,
    function: Callable[[float], float],
    min_points: int = 1,
) -> float:
    """Eight-point Gauss-Legendre quadrature."""
    return legendre_gaussian_quadrature(lower_bound, upper_bound, function, min_points, _X_GQ8, _W_GQ8)


def quadrature9(
    lower_bound: float,
    upper_bound: float,
    function: Callable[[float], float],
    min_points: int = 1,
) -> float:
    """Nine-point Gauss-Legendre rule with nodes and weights on [-1, 1]."""
    return legendre_gaussian_quadrature(lower_bound, upper_bound, function, min_points, _X_GQ9, _W_GQ9)


def ridders_root(
    xa: float,
    xb: float,
    function: Callable[[float], float],
    fa: float | None = None,
    fb: float | None = None,
    xtol: float = TOLERANCE,
    rtol: float = TOLERANCE,
    max_iter: int = 100,
) -> float | None:
    """Find a root of ``function`` in [xa, xb] by Ridders' method.

    Returns ``None`` if the interval does not bracket a root or the
    iteration limit is reached.
    """
    fa = function(xa) if fa is None else fa
    fb = function(xb) if fb is None else fb

    if fa * fb > 0:
        return None
    if fa == 0:
        return xa
    if fb == 0:
        return xb

    tol = xtol + rtol * min(abs(xa), abs(xb))

    for _ in range(max_iter):
        dm = 0.5 * (xb - xa)
        xm = xa + dm
        fm = function(xm)
        sgn = 1.0 if fb > fa else -1.0
        dn = sgn * dm * fm / math.sqrt(fm * fm - fa * fb)
        sgn = 1.0 if dn > 0.0 else -1.0
        dn = abs(dn)
        dm = abs(dm) - 0.5 * tol
        if dn < dm:
            dm = dn
        xn = xm - sgn * dm
        fn = function(xn)
        if fn * fm < 0.0:
            xa, fa, xb, fb = xn, fn, xm, fm
        elif fn * fa < 0.0:
            xb, fb = xn, fn
        else:
            xa, fa = xn, fn
        if fn == 0.0 or abs(xb - xa) < tol:
            return xn

    return None


def regression_log_probability(
    model: Callable[[list[np.ndarray], np.ndarray], np.ndarray],
    model_variance: float,
    params_mean: Sequence[np.ndarray],
    params_variance: float,
) -> Callable[[np.ndarray, np.ndarray], Callable[[Sequence[np.ndarray]], float]]:
    """Gaussian likelihood with a Gaussian prior on the model parameters.

    ``model(theta, x)`` gives predictions for inputs ``x``. The result takes
    training data and returns the log-probability of a parameter list ``theta``.
    """
    tau_out = 1.0 / model_variance
    tau_in = 1.0 / params_variance
    means = [np.asarray(m, dtype=np.float64) for m in params_mean]

    def with_data(x_train: np.ndarray, y_train: np.ndarray) -> Callable[[Sequence[np.ndarray]], float]:
        x = np.asarray(x_train)
        y = np.asarray(y_train, dtype=np.float64)

        def log_prob(theta: Sequence[np.ndarray]) -> float:
            params = [np.asarray(t, dtype=np.float64) for t in theta]
            if len(params) != len(means):
                raise ValueError("parameter count does not match the prior means")
            prior = sum(float(np.sum((p - m) ** 2)) for p, m in zip(params, means))
            output = np.asarray(model(params, x), dtype=np.float64)
            misfit = float(np.sum((y - output) ** 2))
            return -tau_out * misfit / 2.0 - tau_in * prior / 2.0

        return log_prob

    return with_data