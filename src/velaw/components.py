"""
Property correlations of pure components.

Every `SimpleCO2` property returns a `PropertyResult`. Properties that are not modelled
for a phase return `Unsupported` instead of an approximation.
"""

import typing

import attrs
import numba
import numpy as np

from velaw.constants import c
from velaw.types import FloatOrArray, PropertyResult, Supported, Unsupported


__all__ = [
    "IdealGas",
    "SimpleCO2",
    "compute_ideal_gas_density",
    "compute_ideal_gas_pressure",
    "compute_ideal_gas_molar_density",
    "compute_chung_gas_viscosity",
]


@numba.njit(cache=True)
def compute_ideal_gas_density(
    molar_mass: float,
    temperature: FloatOrArray,
    pressure: FloatOrArray,
    gas_constant: float,
) -> FloatOrArray:
    """
    Ideal gas mass density, ρ = p * M / (R * T).

    :param molar_mass: Molar mass (kg/mol).
    :param temperature: Temperature (K).
    :param pressure: Pressure (Pa).
    :param gas_constant: Universal gas constant (J/(mol·K)).
    :return: Density (kg/m³).
    """
    return pressure * molar_mass / (gas_constant * temperature)


@numba.njit(cache=True)
def compute_ideal_gas_pressure(
    temperature: FloatOrArray, molar_density: FloatOrArray, gas_constant: float
) -> FloatOrArray:
    """p = n * R * T, with n the molar density (mol/m³)."""
    return molar_density * gas_constant * temperature


@numba.njit(cache=True)
def compute_ideal_gas_molar_density(
    temperature: FloatOrArray, pressure: FloatOrArray, gas_constant: float
) -> FloatOrArray:
    """n = p / (R * T) (mol/m³)"""
    return pressure / (gas_constant * temperature)


@numba.njit(cache=True)
def compute_chung_gas_viscosity(
    temperature: FloatOrArray,
    critical_temperature: float,
    critical_volume: float,
    acentric_factor: float,
    molar_mass: float,
    dipole_moment: float,
) -> FloatOrArray:
    """
    Low-pressure gas viscosity by the method of Chung et al.

    See: R. Reid, et al.: The Properties of Gases and Liquids, 4th edition,
    McGraw-Hill, 1987, pp 396-397, 667

    :param temperature: Temperature (K).
    :param critical_temperature: Critical temperature (K).
    :param critical_volume: Critical molar volume (cm³/mol).
    :param acentric_factor: Acentric factor, ω.
    :param molar_mass: Molar mass (g/mol).
    :param dipole_moment: Dipole moment (debye).
    :return: Viscosity in micropoise.
    """
    reduced_dipole = 131.3 * dipole_moment / np.sqrt(critical_volume * critical_temperature)
    reduced_dipole_4 = reduced_dipole**4

    Fc = 1.0 - 0.2756 * acentric_factor + 0.059035 * reduced_dipole_4
    T_star = 1.2593 * temperature / critical_temperature
    omega_v = (
        1.16145 * T_star ** (-0.14874)
        + 0.52487 * np.exp(-0.77320 * T_star)
        + 2.16178 * np.exp(-2.43787 * T_star)
    )
    return (
        40.785
        * Fc
        * np.sqrt(molar_mass * temperature)
        / (critical_volume ** (2.0 / 3.0) * omega_v)
    )


def _gas_constant() -> float:
    return c.IDEAL_GAS_CONSTANT


@attrs.frozen
class IdealGas:
    """Ideal gas law relations."""

    gas_constant: float = attrs.field(factory=_gas_constant)
    """Universal gas constant, R (J/(mol·K))."""

    def density(
        self, molar_mass: float, temperature: FloatOrArray, pressure: FloatOrArray
    ) -> FloatOrArray:
        """Mass density (kg/m³) of an ideal gas with molar mass in kg/mol."""
        return compute_ideal_gas_density(
            molar_mass, temperature, pressure, self.gas_constant
        )

    def pressure(
        self, temperature: FloatOrArray, molar_density: FloatOrArray
    ) -> FloatOrArray:
        """Pressure (Pa) of an ideal gas at a molar density in mol/m³."""
        return compute_ideal_gas_pressure(temperature, molar_density, self.gas_constant)

    def molar_density(
        self, temperature: FloatOrArray, pressure: FloatOrArray
    ) -> FloatOrArray:
        """Molar density (mol/m³) of an ideal gas."""
        return compute_ideal_gas_molar_density(
            temperature, pressure, self.gas_constant
        )


@attrs.frozen
class SimpleCO2:
    """
    Simplified CO2 model: ideal gas with linear enthalpy correlations.

    The liquid phase is only modelled through its enthalpy. Temperatures in K,
    pressures in Pa.
    """

    ideal_gas: IdealGas = attrs.field(factory=IdealGas)

    name: typing.ClassVar[str] = "CO2"
    molar_mass: typing.ClassVar[float] = 44e-3
    """Molar mass (kg/mol)."""
    critical_temperature: typing.ClassVar[float] = 273.15 + 30.95
    """Critical temperature (K)."""
    critical_pressure: typing.ClassVar[float] = 73.8e5
    """Critical pressure (Pa)."""
    triple_temperature: typing.ClassVar[float] = 273.15 - 56.35
    """Temperature at the triple point (K)."""
    triple_pressure: typing.ClassVar[float] = 5.11e5
    """Pressure at the triple point (Pa)."""
    critical_volume: typing.ClassVar[float] = 93.9
    """Critical molar volume (cm³/mol)."""
    acentric_factor: typing.ClassVar[float] = 0.239
    dipole_moment: typing.ClassVar[float] = 0.0
    """Dipole moment (debye)."""

    def vapor_pressure(self, temperature: FloatOrArray) -> PropertyResult[FloatOrArray]:
        return Unsupported("vaporPressure of simple CO2")

    def gas_enthalpy(
        self, temperature: FloatOrArray, pressure: FloatOrArray
    ) -> PropertyResult[FloatOrArray]:
        """Specific enthalpy of gaseous CO2 (J/kg)."""
        return Supported(
            571.3e3
            + (temperature - c.CO2_ENTHALPY_REFERENCE_TEMPERATURE) * 0.85e3
        )

    def liquid_enthalpy(
        self, temperature: FloatOrArray, pressure: FloatOrArray
    ) -> PropertyResult[FloatOrArray]:
        """Specific enthalpy of liquid CO2 (J/kg)."""
        return Supported((temperature - c.CO2_ENTHALPY_REFERENCE_TEMPERATURE) * 5e3)

    def gas_internal_energy(
        self, temperature: FloatOrArray, pressure: FloatOrArray
    ) -> PropertyResult[FloatOrArray]:
        """
        Specific internal energy of gaseous CO2 (J/kg).

        u = h - R*T, the ideal gas value of p times the specific volume.
        """
        enthalpy = self.gas_enthalpy(temperature, pressure).unwrap()
        return Supported(enthalpy - self.ideal_gas.gas_constant * temperature)

    def liquid_internal_energy(
        self, temperature: FloatOrArray, pressure: FloatOrArray
    ) -> PropertyResult[FloatOrArray]:
        return Unsupported("liquidInternalEnergy of simple CO2")

    def gas_density(
        self, temperature: FloatOrArray, pressure: FloatOrArray
    ) -> PropertyResult[FloatOrArray]:
        """Density of gaseous CO2 (kg/m³), assuming an ideal gas."""
        return Supported(self.ideal_gas.density(self.molar_mass, temperature, pressure))

    def gas_pressure(
        self, temperature: FloatOrArray, density: FloatOrArray
    ) -> PropertyResult[FloatOrArray]:
        """Pressure of gaseous CO2 (Pa) at a mass density in kg/m³, assuming an ideal gas."""
        return Supported(
            self.ideal_gas.pressure(temperature, density / self.molar_mass)
        )

    def liquid_density(
        self, temperature: FloatOrArray, pressure: FloatOrArray
    ) -> PropertyResult[FloatOrArray]:
        return Unsupported("liquidDensity of simple CO2")

    def liquid_pressure(
        self, temperature: FloatOrArray, density: FloatOrArray
    ) -> PropertyResult[FloatOrArray]:
        return Unsupported("liquidPressure of simple CO2")

    def gas_viscosity(
        self, temperature: FloatOrArray, pressure: FloatOrArray
    ) -> PropertyResult[FloatOrArray]:
        """Dynamic viscosity of gaseous CO2 (Pa·s)."""
        viscosity = compute_chung_gas_viscosity(
            temperature,
            self.critical_temperature,
            self.critical_volume,
            self.acentric_factor,
            self.molar_mass * 1e3,
            self.dipole_moment,
        )
        return Supported(viscosity * c.MICROPOISE_TO_PASCAL_SECONDS)

    def liquid_viscosity(
        self, temperature: FloatOrArray, pressure: FloatOrArray
    ) -> PropertyResult[FloatOrArray]:
        return Unsupported("liquidViscosity of simple CO2")
