# noakit

Numerical building blocks for physics work, written on top of NumPy.

## Modules

- **`noakit.common`**: helpers for arrays and text data.
  - `check_path_exists(path)` returns whether a path exists and reports a missing one on stderr.
  - `load_tensor(path)` loads a single array saved with `numpy.save`. It returns `None` if the
    file is missing or unreadable.
  - `find_line(stream, pattern)` returns the first line that matches a regular expression.
  - `get_numerics(line, size)` pulls exactly `size` numbers out of a line, or gives `None`.
  - `vmap(values, function)` applies a function element by element and keeps the shape and dtype.
  - `relative_error` and `mean_error` compare computed arrays with expected ones.
  - `flatten_tensors`, `unflatten_like` and `stack` flatten, split and stack groups of arrays.
- **`noakit.physics`**: physical constants such as `MUON_MASS`, `TAU_MASS` and
  `AVOGADRO_NUMBER`, the frozen `AtomicElement(A, I, Z)` record, the `STANDARD_ROCK` element and
  `bremsstrahlung(kinetic_energy, recoil_energy, element, mass)`. That last function gives the
  bremsstrahlung differential cross-section, clamped at zero.
- **`noakit.numerics`**:
  - Central-difference `gradient` and `hessian` of a scalar function of a list of arrays. Both
    return `None` when a result is not finite, and `hessian` returns one block per array.
  - Composite Gauss–Legendre quadrature: `legendre_gaussian_quadrature`, `quadrature6` and
    `quadrature8`. These use nodes on the unit interval. `quadrature9` applies its nodes and
    weights, which are given on [-1, 1], without rescaling.
  - `ridders_root`, Ridders' method. It returns `None` if the interval does not bracket a root
    or if it reaches `max_iter`.
  - `regression_log_probability(model, model_variance, params_mean, params_variance)`, a
    Gaussian likelihood with a Gaussian prior. `model(theta, x)` gives the predictions.
- **`noakit.hamiltonian`**: the parts of geometric Hamiltonian Monte Carlo.
  - `Configuration` holds the step count, step size, binding constant, cutoff, jitter, SoftAbs
    constant, verbosity and a NumPy random generator.
  - `HamiltonianFlow` records parameters, momenta and energies along a trajectory.
  - Metrics: `softabs_metric` and `identity_metric_like`.
  - Stop criteria: `metropolis_criterion`, and `max_steps_flow`, which ends a flow after its
    first step.
  - `log_probability`, `log_probability_gradient`, `riemannian_hamiltonian` and
    `hamiltonian_gradient`.
  - All derivatives are taken by finite differences.
- **`noakit.dynamics`**:
  - `euclidean_dynamics` is a leapfrog flow under a constant metric.
  - `riemannian_dynamics` is an explicit symplectic flow on an extended phase space.
  - `full_trajectory` and `end_of_trajectory` choose which points of a flow become samples.
  - `sampler(...)(initial_parameters, num_iterations)` builds the Markov chain.
- **`noakit.trace`**: ray tracing through a `TetrahedronMesh(points, cells)`.
  - The mesh answers adjacency queries: `cell_points`, `cell_faces`, `face_points`,
    `face_cells` and `point_cells`.
  - `current_tetrahedron` finds the cell that holds a point.
  - `first_border_in_tetrahedron` returns an `Intersection` for the first face a ray crosses.
  - `next_tetrahedron` finds the cell on the far side of that face, or gives `None` if the ray
    leaves the mesh.
  - The geometric tests behind these are also available: `ray_plane_intersection`,
    `points_on_one_side` and `point_in_tetrahedron`.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Examples

Integrate a function and find a root:

```python
import math
from noakit.numerics import quadrature8, ridders_root

area = quadrature8(0.0, math.pi, math.sin)          # close to 2.0
root = ridders_root(1.0, 2.0, lambda x: x * x - 2)  # close to 1.41421
```

A bremsstrahlung cross-section in standard rock:

```python
from noakit.physics import bremsstrahlung, STANDARD_ROCK, MUON_MASS

dcs = bremsstrahlung(10.0, 1.0, STANDARD_ROCK, MUON_MASS)
```

Sample a Gaussian with Hamiltonian Monte Carlo:

```python
import numpy as np
from noakit.hamiltonian import Configuration, identity_metric_like, metropolis_criterion
from noakit.dynamics import euclidean_dynamics, sampler, full_trajectory

def log_density(params):
    (x,) = params
    return -0.5 * float(np.sum(x ** 2))

conf = Configuration(max_flow_steps=5, step_size=0.1, rng=np.random.default_rng(0))
initial = [np.zeros(2)]
dynamics = euclidean_dynamics(
    log_density, identity_metric_like(initial), metropolis_criterion, conf
)
samples = sampler(dynamics, full_trajectory, conf)(initial, 100)
```

Trace a ray through a tetrahedral mesh:

```python
import numpy as np
from noakit.trace import TetrahedronMesh, current_tetrahedron, first_border_in_tetrahedron

mesh = TetrahedronMesh(
    points=[[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]],
    cells=[[0, 1, 2, 3]],
)
origin = np.array([0.1, 0.1, 0.1])
cell = current_tetrahedron(mesh, origin)
hit = first_border_in_tetrahedron(mesh, cell, origin, np.array([1.0, 0.0, 0.0]), 1e-6)
print(hit.nearest_face, hit.distance)
```

## What it does not do

noakit is a library and has no command-line program. It has no particle transport engine, so
the only physics it offers is the constants and the bremsstrahlung cross-section. It has no
automatic differentiation and no neural-network models.

Meshes are built from point and cell arrays in memory; no mesh file format is read. The only
file it loads is a single `.npy` array, through `load_tensor`, and it does not save files.