import math

import pytest

from noakit.physics import (
    MUON_MASS,
    STANDARD_ROCK,
    TAU_MASS,
    AtomicElement,
    bremsstrahlung,
)


def test_standard_rock_fields():
    assert STANDARD_ROCK == AtomicElement(A=22.0, I=0.1364e-6, Z=11)


def test_bremsstrahlung_positive_and_finite():
    value = bremsstrahlung(1.0, 0.1, STANDARD_ROCK, MUON_MASS)
    assert value > 0.0
    assert math.isfinite(value)


def test_bremsstrahlung_decreases_with_recoil():
    values = [bremsstrahlung(10.0, q, STANDARD_ROCK, MUON_MASS) for q in (0.01, 0.1, 1.0, 5.0)]
    assert all(a > b for a, b in zip(values, values[1:]))


def test_bremsstrahlung_hydrogen_branch():
    hydrogen = AtomicElement(A=1.008, I=19.2e-9, Z=1)
    value = bremsstrahlung(1.0, 0.1, hydrogen, MUON_MASS)
    assert value > 0.0
    assert math.isfinite(value)


def test_bremsstrahlung_grows_with_atomic_number():
    light = AtomicElement(A=22.0, I=0.1364e-6, Z=11)
    heavy = AtomicElement(A=22.0, I=0.1364e-6, Z=26)
    assert bremsstrahlung(1.0, 0.1, heavy, MUON_MASS) > bremsstrahlung(1.0, 0.1, light, MUON_MASS)


def test_bremsstrahlung_heavier_particle_smaller():
    muon = bremsstrahlung(100.0, 1.0, STANDARD_ROCK, MUON_MASS)
    tau = bremsstrahlung(100.0, 1.0, STANDARD_ROCK, TAU_MASS)
    assert tau < muon


def test_bremsstrahlung_never_negative():
    for q in (1e-4, 1e-2, 0.5, 0.99):
        assert bremsstrahlung(1.0, q, STANDARD_ROCK, MUON_MASS) >= 0.0


def test_bremsstrahlung_full_transfer_diverges():
    energy = 1.0 + MUON_MASS
    with pytest.raises(ZeroDivisionError):
        bremsstrahlung(1.0, energy, STANDARD_ROCK, MUON_MASS)