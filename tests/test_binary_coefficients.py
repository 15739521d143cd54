import numpy as np
import pytest

from velaw import ComputationError, ValidationError, fuller_method, harmonic_mean


def test_harmonic_mean():
    assert harmonic_mean(2.0, 2.0) == 2.0
    assert harmonic_mean(1.0, 3.0) == pytest.approx(1.5)
    assert harmonic_mean(0.0, 0.0) == 0.0


def test_fuller_method_co2_nitrogen():
    molar_masses = (44.01, 28.013)
    diffusion_volumes = (26.9, 18.5)

    coefficient = fuller_method(molar_masses, diffusion_volumes, 298.15, 1e5)

    effective_molar_mass = 2 * 44.01 * 28.013 / (44.01 + 28.013)
    expected = (
        1e-4
        * 143.0
        * 298.15**1.75
        / (1e5 * np.sqrt(effective_molar_mass) * (26.9 ** (1 / 3) + 18.5 ** (1 / 3)) ** 2)
    )
    assert coefficient == pytest.approx(expected)
    assert 1.5e-5 < coefficient < 1.8e-5


def test_fuller_method_scales_with_state():
    base = fuller_method((44.01, 28.013), (26.9, 18.5), 300.0, 1e5)
    assert fuller_method((44.01, 28.013), (26.9, 18.5), 300.0, 2e5) == pytest.approx(
        base / 2.0
    )
    temperatures = np.array([300.0, 400.0])
    coefficients = fuller_method((44.01, 28.013), (26.9, 18.5), temperatures, 1e5)
    assert coefficients.shape == (2,)
    assert coefficients[1] > coefficients[0]


def test_fuller_method_needs_a_pair():
    with pytest.raises(ValidationError):
        fuller_method((44.01, 28.013, 32.0), (26.9, 18.5, 16.3), 300.0, 1e5)


@pytest.mark.parametrize("temperature, pressure", [(300.0, 0.0), (-300.0, 1e5)])
def test_fuller_method_rejects_non_finite_results(temperature, pressure):
    with pytest.raises(ComputationError):
        fuller_method((44.01, 28.013), (26.9, 18.5), temperature, pressure)
