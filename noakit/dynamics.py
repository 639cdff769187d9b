"""Hamiltonian flows (Euclidean and Riemannian) and the GHMC sampler."""

from __future__ import annotations

import math
import sys
from collections.abc import Callable, Sequence

import numpy as np

from noakit.hamiltonian import (
    Configuration,
    HamiltonianFlow,
    LocalMetric,
    LogProbabilityDensity,
    MetricDecomposition,
    Parameters,
    hamiltonian_gradient,
    log_probability,
    log_probability_gradient,
    riemannian_hamiltonian,
)

StopFlowCriterion = Callable[[HamiltonianFlow], bool]
HamiltonianDynamics = Callable[..., HamiltonianFlow]
TrajectorySampling = Callable[[HamiltonianFlow], list[Parameters]]


def _report(message: str, conf: Configuration) -> None:
    if conf.verbose:
        print(f"GHMC: {message}", file=sys.stderr)


def _evolve_failure(step: int, conf: Configuration) -> None:
    _report(f"failed to evolve flow at step {step + 1}/{conf.max_flow_steps}", conf)


def _rejection(step: int, conf: Configuration) -> None:
    if conf.verbose:
        print(f"GHMC: rejecting sample at iteration {step + 1}/{conf.max_flow_steps}")


def _as_arrays(values: Sequence[np.ndarray]) -> list[np.ndarray]:
    return [np.array(v, dtype=np.float64) for v in values]


def _kinetic(momentum: Sequence[np.ndarray], mass: Sequence[np.ndarray]) -> float:
    return sum(float(p.ravel() @ (m @ p.ravel())) / 2 for p, m in zip(momentum, mass))


def _kick(values: list[np.ndarray], grads: Sequence[np.ndarray], scale: float) -> list[np.ndarray]:
    return [v + g * scale for v, g in zip(values, grads)]


def euclidean_dynamics(
    log_prob_density: LogProbabilityDensity,
    constant_metric: MetricDecomposition,
    stop_flow_criterion: StopFlowCriterion,
    conf: Configuration,
) -> HamiltonianDynamics:
    """Leapfrog flow under a constant metric.

    The returned callable takes ``(parameters, momentum=None, rng=None)`` and
    gives a :class:`HamiltonianFlow`, empty if the start point is invalid.
    """
    spectrum = [np.asarray(s, dtype=np.float64) for s in constant_metric[0]]
    rotation = [np.asarray(r, dtype=np.float64) for r in constant_metric[1]]
    mass = [r @ np.diag(1 / s) @ r.T for s, r in zip(spectrum, rotation)]

    log_prob_func = log_probability(log_prob_density, conf)
    log_prob_grad = log_probability_gradient(log_prob_density, conf)

    def dynamics(
        parameters: Sequence[np.ndarray],
        momentum: Sequence[np.ndarray] | None = None,
        rng: np.random.Generator | None = None,
    ) -> HamiltonianFlow:
        generator = conf.rng if rng is None else rng
        flow = HamiltonianFlow()
        params = _as_arrays(parameters)
        if len(params) != len(mass):
            raise ValueError("parameter count does not match the metric")

        log_prob = log_prob_func(params)
        if log_prob is None:
            _report("failed to initialise Hamiltonian flow.", conf)
            return flow

        moments = []
        for i, param in enumerate(params):
            if momentum is None:
                lift = rotation[i] @ (
                    np.sqrt(spectrum[i]) * generator.standard_normal(spectrum[i].shape)
                )
            else:
                lift = momentum[i]
            moments.append(np.array(lift, dtype=np.float64).reshape(param.shape))

        flow.append(params, moments, -log_prob + _kinetic(moments, mass))

        if conf.max_flow_steps <= 0:
            return flow

        delta = conf.step_size / 2
        grads = log_prob_grad(params)
        if grads is None:
            _evolve_failure(0, conf)
            return flow
        moments = _kick(moments, grads, delta)

        for step in range(conf.max_flow_steps):
            params = [
                x + (m @ p.ravel()).reshape(x.shape) * conf.step_size
                for x, m, p in zip(params, mass, moments)
            ]
            grads = log_prob_grad(params)
            log_prob = None if grads is None else log_prob_func(params)
            if grads is None or log_prob is None:
                _evolve_failure(step, conf)
                return flow
            moments = _kick(moments, grads, delta)

            flow.append(params, moments, -log_prob + _kinetic(moments, mass))

            if step < conf.max_flow_steps - 1:
                if stop_flow_criterion(flow):
                    moments = _kick(moments, grads, delta)
                else:
                    _rejection(step, conf)
                    break

        return flow

    return dynamics


def _bind(
    q: np.ndarray, qc: np.ndarray, p: np.ndarray, pc: np.ndarray, c: float, s: float
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Rotate the two phase-space copies into each other (binding step)."""
    q = (q + qc + c * (q - qc) + s * (p - pc)) / 2
    p = (p + pc - s * (q - qc) + c * (p - pc)) / 2
    qc = (q + qc - c * (q - qc) - s * (p - pc)) / 2
    pc = (p + pc + s * (q - qc) - c * (p - pc)) / 2
    return q, qc, p, pc


def riemannian_dynamics(
    log_prob_density: LogProbabilityDensity,
    local_metric: LocalMetric,
    stop_flow_criterion: StopFlowCriterion,
    conf: Configuration,
) -> HamiltonianDynamics:
    """Explicit symplectic flow for the Riemannian Hamiltonian on an extended phase space.

    The returned callable takes ``(parameters, momentum=None, rng=None)`` and
    gives a :class:`HamiltonianFlow`, empty if the start point is invalid.
    """
    ham = riemannian_hamiltonian(log_prob_density, local_metric, conf)
    ham_grad = hamiltonian_gradient(ham, conf)
    theta = 2 * conf.binding_const * conf.step_size
    c, s = math.cos(theta), math.sin(theta)

    def dynamics(
        parameters: Sequence[np.ndarray],
        momentum: Sequence[np.ndarray] | None = None,
        rng: np.random.Generator | None = None,
    ) -> HamiltonianFlow:
        flow = HamiltonianFlow()
        foliation = ham(parameters, momentum, rng=rng)
        if foliation is None:
            _report("failed to initialise Hamiltonian flow.", conf)
            return flow

        initial_params, initial_momentum, initial_energy = foliation
        params = [p.copy() for p in initial_params]
        momentum_copy = [p.copy() for p in initial_momentum]
        flow.append(params, momentum_copy, initial_energy)

        if conf.max_flow_steps <= 0:
            return flow

        grads = ham_grad(foliation)
        if grads is None:
            _evolve_failure(0, conf)
            return flow

        delta = conf.step_size / 2
        dq, dp = grads
        params_copy = _kick(list(params), dp, delta)
        moments = _kick(list(momentum_copy), dq, -delta)

        for step in range(conf.max_flow_steps):
            grads = ham_grad(ham(params_copy, moments))
            if grads is None:
                _evolve_failure(step, conf)
                break
            dq, dp = grads
            params = _kick(params, dp, delta)
            momentum_copy = _kick(momentum_copy, dq, -delta)
            bound = [
                _bind(q, qc, p, pc, c, s)
                for q, qc, p, pc in zip(params, params_copy, moments, momentum_copy)
            ]
            params = [b[0] for b in bound]
            params_copy = [b[1] for b in bound]
            moments = [b[2] for b in bound]
            momentum_copy = [b[3] for b in bound]

            grads = ham_grad(ham(params_copy, moments))
            if grads is None:
                _evolve_failure(step, conf)
                break
            dq, dp = grads
            params = _kick(params, dp, delta)
            momentum_copy = _kick(momentum_copy, dq, -delta)

            grads = ham_grad(ham(params, momentum_copy))
            if grads is None:
                _evolve_failure(step, conf)
                break
            dq, dp = grads
            params_copy = _kick(params_copy, dp, delta)
            moments = _kick(moments, dq, -delta)

            foliation = ham(params, moments)
            if foliation is None:
                _evolve_failure(step, conf)
                break

            flow.append(params, moments, foliation[2])

            if step < conf.max_flow_steps - 1:
                if stop_flow_criterion(flow):
                    params_copy = _kick(params_copy, dp, delta)
                    moments = _kick(moments, dq, -delta)
                else:
                    _rejection(step, conf)
                    break

        return flow

    return dynamics


def full_trajectory(flow: HamiltonianFlow) -> list[Parameters]:
    """Every parameter point of the flow."""
    return flow.params_flow


def end_of_trajectory(flow: HamiltonianFlow) -> list[Parameters]:
    """The first and last parameter points of the flow (or the flow itself if shorter)."""
    trajectory = flow.params_flow
    return [trajectory[0], trajectory[-1]] if len(trajectory) > 1 else list(trajectory)


def sampler(
    hamiltonian_dynamics: HamiltonianDynamics,
    trajectory_sampling: TrajectorySampling,
    conf: Configuration,
) -> Callable[[Sequence[np.ndarray], int], list[Parameters]]:
    """Build an MCMC chain generator from a flow and a trajectory sampling rule.

    The returned callable takes ``(initial_parameters, num_iterations)`` and
    gives the list of samples, starting with a copy of the initial point.
    """

    def run(initial_parameters: Sequence[np.ndarray], num_iterations: int) -> list[Parameters]:
        if num_iterations < 0:
            raise ValueError("number of iterations must not be negative")
        if conf.verbose:
            print(
                "GHMC: Riemannian HMC simulation\n"
                "GHMC: generating MCMC chain of maximum length "
                f"{conf.max_flow_steps * num_iterations} ..."
            )

        samples: list[Parameters] = [_as_arrays(initial_parameters)]
        for _ in range(num_iterations):
            flow = hamiltonian_dynamics(samples[-1])
            trajectory = trajectory_sampling(flow)
            samples.extend(list(point) for point in trajectory[1:])

        if conf.verbose:
            print(f"GHMC: generated {len(samples)} samples.")
        return samples

    return run