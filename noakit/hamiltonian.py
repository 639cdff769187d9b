"""Hamiltonian building blocks for geometric Hamiltonian Monte Carlo.

Log-probability densities are plain callables taking a list of parameter
arrays and returning a scalar. Derivatives are taken by finite differences.
"""

from __future__ import annotations

import math
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import numpy as np

from noakit.numerics import gradient, hessian

Parameters = list[np.ndarray]
Momentum = list[np.ndarray]
MetricDecomposition = tuple[list[np.ndarray], list[np.ndarray]]
PhaseSpaceFoliation = tuple[Parameters, Momentum, float]
LogProbabilityDensity = Callable[[Parameters], float]
LocalMetric = Callable[..., "MetricDecomposition | None"]


@dataclass
class Configuration:
    """Settings shared by the GHMC components."""

    max_flow_steps: int = 3
    step_size: float = 0.1
    binding_const: float = 100.0
    cutoff: float = 1e-6
    jitter: float = 1e-6
    softabs_const: float = 1e6
    verbose: bool = False
    rng: np.random.Generator = field(
        default_factory=np.random.default_rng, repr=False, compare=False
    )


@dataclass
class HamiltonianFlow:
    """Trajectory in phase space: parameters, momenta and energies per step."""

    params_flow: list[Parameters] = field(default_factory=list)
    momentum_flow: list[Momentum] = field(default_factory=list)
    energy_level: list[float] = field(default_factory=list)

    def append(self, params: Parameters, momentum: Momentum, energy: float) -> None:
        """Record one point of the trajectory."""
        self.params_flow.append(list(params))
        self.momentum_flow.append(list(momentum))
        self.energy_level.append(float(energy))

    def __len__(self) -> int:
        return len(self.energy_level)


def _report(message: str, conf: Configuration | None = None) -> None:
    if conf is None or conf.verbose:
        print(f"GHMC: {message}", file=sys.stderr)


def _as_arrays(values: Sequence[np.ndarray]) -> Parameters:
    return [np.array(v, dtype=np.float64) for v in values]


def softabs_metric(conf: Configuration) -> LocalMetric:
    """Local metric from the SoftAbs map of the negative log-probability Hessian.

    The returned callable takes ``(log_prob_density, parameters, rng=None)`` and
    gives ``(spectrum, rotation)`` per parameter block, or ``None`` on failure.
    """

    def metric(
        log_prob_density: LogProbabilityDensity,
        parameters: Sequence[np.ndarray],
        rng: np.random.Generator | None = None,
    ) -> MetricDecomposition | None:
        generator = conf.rng if rng is None else rng
        try:
            blocks = hessian(log_prob_density, parameters)
        except ValueError:
            blocks = None
        if blocks is None:
            _report("failed to compute hessian for log probability", conf)
            return None

        spectrum: list[np.ndarray] = []
        rotation: list[np.ndarray] = []
        for hess in blocks:
            n = hess.shape[0]
            perturbed = -hess + conf.jitter * np.diag(generator.random(n))
            try:
                eigs, q = np.linalg.eigh(perturbed, UPLO="L")
            except np.linalg.LinAlgError:
                _report("failed to compute local rotation matrix for log probability")
                return None
            if not np.isfinite(np.sum(q)):
                _report("failed to compute local rotation matrix for log probability")
                return None

            reg_eigs = np.where(np.abs(eigs) >= conf.cutoff, eigs, conf.cutoff)
            with np.errstate(all="ignore"):
                softabs = np.abs(reg_eigs / np.tanh(conf.softabs_const * reg_eigs))
            if not np.isfinite(np.sum(softabs)):
                _report("failed to compute SoftAbs map for log probability")
                return None

            spectrum.append(softabs)
            rotation.append(q)
        return spectrum, rotation

    return metric


def identity_metric_like(initial_parameters: Sequence[np.ndarray]) -> MetricDecomposition:
    """Unit spectrum and identity rotation for each parameter block."""
    spectrum = []
    rotation = []
    for param in initial_parameters:
        n = np.asarray(param).size
        spectrum.append(np.ones(n))
        rotation.append(np.eye(n))
    return spectrum, rotation


def max_steps_flow(flow: HamiltonianFlow) -> bool:
    """Stop criterion that never continues a flow that already holds a point."""
    return len(flow) == 0


def metropolis_criterion(flow: HamiltonianFlow) -> bool:
    """Metropolis acceptance test between the first and last energy of the flow."""
    rho = -max(flow.energy_level[-1] - flow.energy_level[0], 0.0)
    with np.errstate(divide="ignore"):
        threshold = np.log(np.random.default_rng().random())
    return bool(rho >= threshold)


def log_probability(
    log_prob_density: LogProbabilityDensity, conf: Configuration
) -> Callable[[Sequence[np.ndarray]], float | None]:
    """Wrap a density so that non-finite log-probabilities give ``None``."""

    def evaluate(parameters: Sequence[np.ndarray]) -> float | None:
        value = float(np.asarray(log_prob_density(_as_arrays(parameters))))
        if not math.isfinite(value):
            _report("failed to compute log probability.", conf)
            return None
        return value

    return evaluate


def log_probability_gradient(
    log_prob_density: LogProbabilityDensity, conf: Configuration
) -> Callable[[Sequence[np.ndarray]], list[np.ndarray] | None]:
    """Gradient of the log-probability per parameter block, ``None`` on failure."""
    log_prob_func = log_probability(log_prob_density, conf)

    def evaluate(parameters: Sequence[np.ndarray]) -> list[np.ndarray] | None:
        params = _as_arrays(parameters)
        if log_prob_func(params) is None:
            _report("no log probability provided.", conf)
            return None
        grads = gradient(lambda theta: float(np.asarray(log_prob_density(theta))), params)
        if grads is None:
            _report("failed to compute parameters gradient for log probability", conf)
            return None
        return grads

    return evaluate


def riemannian_hamiltonian(
    log_prob_density: LogProbabilityDensity,
    local_metric: LocalMetric,
    conf: Configuration,
) -> Callable[..., PhaseSpaceFoliation | None]:
    """Riemannian Hamiltonian with a position-dependent metric.

    The returned callable takes ``(parameters, momentum=None, rng=None)``. When
    no momentum is given it is drawn from the local metric. It returns
    ``(parameters, momentum, energy)`` or ``None`` on failure.
    """
    log_prob_func = log_probability(log_prob_density, conf)

    def hamiltonian(
        parameters: Sequence[np.ndarray],
        momentum: Sequence[np.ndarray] | None = None,
        rng: np.random.Generator | None = None,
    ) -> PhaseSpaceFoliation | None:
        generator = conf.rng if rng is None else rng
        params = _as_arrays(parameters)

        log_prob = log_prob_func(params)
        if log_prob is None:
            return None

        metric = local_metric(log_prob_density, params, generator)
        if metric is None:
            _report(f"failed to compute local metric for log probability\n{log_prob}", conf)
            return None
        spectrum, rotation = metric

        energy = -log_prob
        moments: Momentum = []
        with np.errstate(all="ignore"):
            for i, param in enumerate(params):
                spectrum_i = np.asarray(spectrum[i], dtype=np.float64)
                rotation_i = np.asarray(rotation[i], dtype=np.float64)
                if momentum is None:
                    lift = rotation_i @ (
                        np.sqrt(spectrum_i) * generator.standard_normal(spectrum_i.shape)
                    )
                else:
                    lift = np.asarray(momentum[i], dtype=np.float64)
                momentum_i = np.array(lift, dtype=np.float64).reshape(param.shape)

                first_order = np.sum(np.log(spectrum_i)) / 2
                mass = rotation_i @ np.diag(1 / spectrum_i) @ rotation_i.T
                vec = momentum_i.ravel()
                second_order = vec @ (mass @ vec) / 2

                energy += float(first_order + second_order)
                moments.append(momentum_i)

        if not math.isfinite(energy):
            _report(f"failed to compute Hamiltonian for log probability\n{log_prob}", conf)
            return None
        return params, moments, float(energy)

    return hamiltonian


def hamiltonian_gradient(
    hamiltonian: Callable[..., PhaseSpaceFoliation | None], conf: Configuration
) -> Callable[[PhaseSpaceFoliation | None], tuple[list[np.ndarray], list[np.ndarray]] | None]:
    """Gradients of the Hamiltonian energy with respect to parameters and momentum.

    Randomness inside the Hamiltonian is frozen for the duration of one
    gradient evaluation so that differences are consistent.
    """

    def evaluate(
        foliation: PhaseSpaceFoliation | None,
    ) -> tuple[list[np.ndarray], list[np.ndarray]] | None:
        if foliation is None:
            _report("no phase space foliation provided.", conf)
            return None
        params, momentum, energy = foliation
        nparam = len(params)
        seed = int(conf.rng.integers(2**63 - 1))

        def energy_of(variables: list[np.ndarray]) -> float:
            result = hamiltonian(
                variables[:nparam], variables[nparam:], rng=np.random.default_rng(seed)
            )
            return math.nan if result is None else result[2]

        grads = gradient(energy_of, [*params, *momentum])
        if grads is None:
            _report(f"failed to compute gradient for Hamiltonian\n{energy}", conf)
            return None
        return grads[:nparam], grads[nparam:]

    return evaluate