import math

import numpy as np
import pytest

from noakit.numerics import (
    gradient,
    hessian,
    legendre_gaussian_quadrature,
    quadrature6,
    quadrature8,
    quadrature9,
    regression_log_probability,
    ridders_root,
)

MATRIX = np.array([[2.0, 0.5, 0.0], [0.5, 3.0, -1.0], [0.0, -1.0, 4.0]])


def quadratic(variables):
    x = variables[0]
    y = variables[1]
    return 0.5 * x @ MATRIX @ x + np.sum(y**2)


def test_gradient_of_quadratic():
    x = np.array([1.0, -2.0, 0.5])
    y = np.array([[1.0, 2.0], [3.0, 4.0]])
    grads = gradient(quadratic, [x, y])
    np.testing.assert_allclose(grads[0], MATRIX @ x, atol=1e-6)
    np.testing.assert_allclose(grads[1], 2 * y, atol=1e-6)
    assert grads[1].shape == y.shape


def test_hessian_of_quadratic_blocks():
    x = np.array([0.3, 0.1, -0.7])
    y = np.array([1.0, -1.0])
    blocks = hessian(quadratic, [x, y])
    assert len(blocks) == 2
    np.testing.assert_allclose(blocks[0], MATRIX, atol=1e-5)
    np.testing.assert_allclose(blocks[1], 2 * np.eye(2), atol=1e-5)


def test_hessian_is_symmetric():
    def f(v):
        a = v[0]
        return math.sin(a[0]) * a[1] ** 2 + a[0] * a[1] * a[2]

    block = hessian(f, [np.array([0.4, 1.2, -0.3])])[0]
    np.testing.assert_allclose(block, block.T)


def test_hessian_requires_scalar():
    with pytest.raises(ValueError):
        hessian(lambda v: v[0] * 2, [np.array([1.0, 2.0])])


def test_hessian_non_finite_is_none():
    assert hessian(lambda v: float("nan") * np.sum(v[0]), [np.array([1.0])]) is None


def test_gradient_non_finite_is_none():
    assert gradient(lambda v: float("inf") * np.sum(v[0]), [np.array([1.0])]) is None


def test_quadrature6_matches_sine_integral():
    result = quadrature6(0.0, math.pi / 2, math.cos)
    assert result == pytest.approx(math.sin(math.pi / 2) - math.sin(0.0), abs=1e-6)


def test_quadrature8_matches_exponential_integral():
    result = quadrature8(0.0, 1.0, math.exp, 16)
    assert result == pytest.approx(math.e - 1.0, abs=1e-6)


def test_quadrature_more_points_is_consistent():
    coarse = quadrature6(1.0, 3.0, math.log)
    fine = quadrature6(1.0, 3.0, math.log, 60)
    exact = 3 * math.log(3.0) - 3.0 + 1.0
    assert fine == pytest.approx(exact, abs=1e-6)
    assert coarse == pytest.approx(fine, abs=1e-4)


def test_quadrature9_is_linear():
    f = math.sin
    g = math.exp
    combined = quadrature9(0.0, 2.0, lambda x: f(x) + 3 * g(x), 20)
    separate = quadrature9(0.0, 2.0, f, 20) + 3 * quadrature9(0.0, 2.0, g, 20)
    assert combined == pytest.approx(separate)


def test_legendre_zero_points_is_zero():
    assert legendre_gaussian_quadrature(0.0, 1.0, math.exp, 0, [0.5], [1.0]) == 0.0


def test_legendre_mismatched_rule_raises():
    with pytest.raises(ValueError):
        legendre_gaussian_quadrature(0.0, 1.0, math.exp, 1, [0.5], [0.5, 0.5])


def test_ridders_finds_square_root():
    root = ridders_root(0.0, 2.0, lambda x: x * x - 2.0)
    assert root == pytest.approx(math.sqrt(2.0), abs=1e-5)


def test_ridders_not_bracketed():
    assert ridders_root(2.0, 3.0, lambda x: x * x - 2.0) is None


def test_ridders_endpoint_root():
    assert ridders_root(1.0, 5.0, lambda x: x - 1.0) == 1.0
    assert ridders_root(-3.0, 5.0, lambda x: x - 5.0) == 5.0


def test_ridders_uses_given_values():
    calls = []

    def f(x):
        calls.append(x)
        return math.cos(x)

    root = ridders_root(0.0, 3.0, f, fa=1.0, fb=math.cos(3.0))
    assert root == pytest.approx(math.pi / 2, abs=1e-5)
    assert 0.0 not in calls and 3.0 not in calls


def _linear_model(theta, x):
    return theta[0] * x + theta[1]


def test_regression_log_probability_maximum_at_prior_and_fit():
    x = np.array([0.0, 1.0, 2.0])
    slope, intercept = np.array(2.0), np.array(1.0)
    y = _linear_model([slope, intercept], x)
    log_prob = regression_log_probability(_linear_model, 0.5, [slope, intercept], 2.0)(x, y)
    best = log_prob([slope, intercept])
    assert best == 0.0
    assert log_prob([slope + 0.1, intercept]) < best
    assert log_prob([slope, intercept - 0.3]) < best


def test_regression_log_probability_parameter_count():
    x = np.array([1.0])
    log_prob = regression_log_probability(_linear_model, 1.0, [np.array(0.0)], 1.0)(x, x)
    with pytest.raises(ValueError):
        log_prob([np.array(1.0), np.array(0.0)])