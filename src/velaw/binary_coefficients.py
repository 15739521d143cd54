"""Binary coefficients of gas mixtures."""

import typing

import numpy as np

from velaw.errors import ComputationError, ValidationError
from velaw.types import FloatOrArray


__all__ = ["harmonic_mean", "fuller_method"]


def harmonic_mean(value1: float, value2: float) -> float:
    """
    Computes the harmonic mean of two values.

    :param value1: First value
    :param value2: Second value
    :return: 2*a*b/(a + b), or 0 if a + b == 0
    """
    summation = value1 + value2
    if summation == 0:
        return 0.0
    return (2 * value1 * value2) / summation


def fuller_method(
    molar_masses: typing.Sequence[float],
    diffusion_volumes: typing.Sequence[float],
    temperature: FloatOrArray,
    pressure: FloatOrArray,
) -> FloatOrArray:
    """
    Estimates the binary diffusion coefficient (m²/s) of a gas pair by Fuller's method.

    Only valid at "low" pressures.

    See: R. Reid, et al.: The Properties of Gases and Liquids, 4th edition,
    McGraw-Hill, 1987, pp. 587-588

    :param molar_masses: Molar masses of both components (g/mol).
    :param diffusion_volumes: Atomic diffusion volumes of both components.
    :param temperature: Temperature (K) - scalar or array.
    :param pressure: Phase pressure (Pa) - scalar or array.
    :return: Binary diffusion coefficient (m²/s).
    """
    if len(molar_masses) != 2 or len(diffusion_volumes) != 2:
        raise ValidationError(
            "Fuller's method needs exactly two molar masses and two diffusion volumes, "
            f"got {len(molar_masses)} and {len(diffusion_volumes)}"
        )
    # "effective" molar mass
    effective_molar_mass = harmonic_mean(molar_masses[0], molar_masses[1])

    volume_term = np.cbrt(diffusion_volumes[0]) + np.cbrt(diffusion_volumes[1])
    with np.errstate(divide="ignore", invalid="ignore"):
        coefficient = (
            1e-4
            * (143.0 * np.power(temperature, 1.75))
            / (pressure * np.sqrt(effective_molar_mass) * volume_term * volume_term)
        )
    if not np.all(np.isfinite(coefficient)):
        raise ComputationError(
            "Fuller's method produced a non-finite diffusion coefficient. "
            "Check that temperature, pressure and molar masses are positive."
        )
    return coefficient
