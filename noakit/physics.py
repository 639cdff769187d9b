"""Physical constants and the bremsstrahlung differential cross-section."""

from __future__ import annotations

import math
from dataclasses import dataclass

AVOGADRO_NUMBER = 6.02214076e23
ATOMIC_MASS_ENERGY = 0.931494  # atomic mass to MeV

ELECTRON_MASS = 0.510998910e-03  # GeV/c^2
MUON_MASS = 0.10565839  # GeV/c^2
TAU_MASS = 1.77682  # GeV/c^2

MUON_CTAU = 658.654  # m
TAU_CTAU = 87.03e-06  # m

LARMOR_FACTOR = 0.299792458  # m^-1 GeV/c T^-1


@dataclass(frozen=True)
class AtomicElement:
    """Atomic element: mass A (g/mol), mean excitation I (GeV), number Z."""

    A: float
    I: float  # noqa: E741
    Z: int


STANDARD_ROCK = AtomicElement(A=22.0, I=0.1364e-6, Z=11)

# Default relative switch between continuous and discrete energy loss
X_FRACTION = 5e-02
KIN_CUTOFF = 1e-9  # GeV, cutoff used in relativistic kinematics
EHS_PATH_MAX = 1e9  # kg/m^2, max inverse path length for hard scattering
EHS_OVER_MSC = 1e-4  # hard scattering to multiple scattering path ratio
MAX_SOFT_ANGLE = 1.0  # degrees, max deflection angle for a soft scattering event
MAX_MU0 = 0.5 * (1.0 - math.cos(MAX_SOFT_ANGLE * math.pi / 180.0))

NPR = 4  # number of discrete energy loss processes
NSF = 9  # screening factors and pole reduction for Coulomb scattering
NLAR = 8  # expansion order for the magnetic deflection

DCS_MODEL_ORDER_P = 6
DCS_MODEL_ORDER_Q = 2
DCS_SAMPLING_N = 11
NDM = DCS_MODEL_ORDER_P + DCS_MODEL_ORDER_Q + DCS_SAMPLING_N + 1


def bremsstrahlung(
    kinetic_energy: float,
    recoil_energy: float,
    element: AtomicElement,
    mass: float,
) -> float:
    """Bremsstrahlung differential cross-section, in m^2/kg, never negative."""
    Z = element.Z
    A = element.A
    me = ELECTRON_MASS
    sqrte = 1.648721271
    phie_factor = mass / (me * me * sqrte)
    rem = 5.63588e-13 * me / mass

    BZ_n = 202.4 if Z == 1 else 182.7 * Z ** (-1.0 / 3.0)
    BZ_e = 446.0 if Z == 1 else 1429.0 * Z ** (-2.0 / 3.0)
    D_n = 1.54 * A ** 0.27
    E = kinetic_energy + mass
    dcs_factor = 7.297182e-07 * rem * rem * Z

    delta_factor = 0.5 * mass * mass / E
    qe_max = E / (1.0 + 0.5 * mass * mass / (me * E))

    nu = recoil_energy / E
    delta = delta_factor * nu / (1.0 - nu)

    phi_n = math.log(
        BZ_n * (mass + delta * (D_n * sqrte - 2.0)) / (D_n * (me + delta * sqrte * BZ_n))
    )
    phi_n = max(phi_n, 0.0)
    if recoil_energy < qe_max:
        phi_e = math.log(
            BZ_e * mass / ((1.0 + delta * phie_factor) * (me + delta * sqrte * BZ_e))
        )
        phi_e = max(phi_e, 0.0)
    else:
        phi_e = 0.0

    dcs = dcs_factor * (Z * phi_n + phi_e) * (4.0 / 3.0 * (1.0 / nu - 1.0) + nu)
    return 0.0 if dcs < 0.0 else dcs * 1e03 * AVOGADRO_NUMBER / A