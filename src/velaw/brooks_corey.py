"""
Regularized Brooks-Corey capillary pressure / relative permeability law for two-phase systems.

The raw curves are power laws in the effective wetting saturation:

    pc  = pe * Se^(-1/λ)
    krw = Se^(2/λ + 3)
    krn = (1 - Se)^2 * (1 - Se^(2/λ + 1))

Near the saturation end points these curves are singular or very steep, which Newton
solvers do not like. The regularized law therefore follows the tangent line of the
capillary pressure curve below a low threshold saturation and above full saturation,
and clamps the relative permeabilities outside of [0, 1].
"""

import typing

import attrs
import numba

from velaw.config import Config
from velaw.params import BrooksCoreyParams, resolve_params
from velaw.types import (
    CapillaryPressures,
    FloatOrArray,
    FluidState,
    LawTraits,
    Phase,
    PhaseValues,
    RelativePermeabilities,
    Saturations,
)
from velaw.utils import as_float_or_array, check_phase_count, unwrap_scalar


__all__ = [
    "BROOKS_COREY_LAW_TRAITS",
    "to_effective_saturation",
    "to_absolute_saturation",
    "compute_brooks_corey_capillary_pressure",
    "compute_brooks_corey_capillary_pressure_derivative",
    "compute_regularized_capillary_pressure",
    "compute_regularized_capillary_pressure_derivative",
    "compute_regularized_wetting_saturation",
    "compute_regularized_wetting_relative_permeability",
    "compute_regularized_non_wetting_relative_permeability",
    "two_phase_sat_pcnw",
    "two_phase_sat_dpcnw_dsw",
    "two_phase_sat_sw",
    "two_phase_sat_krw",
    "two_phase_sat_krn",
    "regularized_capillary_pressures",
    "regularized_saturations",
    "regularized_relative_permeabilities",
    "RegularizedBrooksCoreyModel",
]

BROOKS_COREY_LAW_TRAITS = LawTraits()
"""Static properties of the regularized Brooks-Corey law."""


@numba.njit(cache=True)
def to_effective_saturation(
    saturation: FloatOrArray,
    residual_wetting_saturation: float,
    residual_non_wetting_saturation: float,
) -> FloatOrArray:
    """
    Converts an absolute wetting phase saturation into an effective one.

    Se = (Sw - Srw) / (1 - Srw - Srn)
    """
    return (saturation - residual_wetting_saturation) / (
        1.0 - residual_wetting_saturation - residual_non_wetting_saturation
    )


@numba.njit(cache=True)
def to_absolute_saturation(
    effective_saturation: FloatOrArray,
    residual_wetting_saturation: float,
    residual_non_wetting_saturation: float,
) -> FloatOrArray:
    """
    Converts an effective wetting phase saturation into an absolute one.

    Sw = Se * (1 - Srw - Srn) + Srw
    """
    return (
        effective_saturation
        * (1.0 - residual_wetting_saturation - residual_non_wetting_saturation)
        + residual_wetting_saturation
    )


@numba.njit(cache=True)
def compute_brooks_corey_capillary_pressure(
    effective_saturation: FloatOrArray,
    entry_pressure: float,
    pore_size_distribution_index: float,
) -> FloatOrArray:
    """
    Raw (unregularized) Brooks-Corey capillary pressure, pc = pe * Se^(-1/λ).

    Singular at Se = 0.
    """
    return entry_pressure * effective_saturation ** (-1.0 / pore_size_distribution_index)


@numba.njit(cache=True)
def compute_brooks_corey_capillary_pressure_derivative(
    effective_saturation: FloatOrArray,
    entry_pressure: float,
    pore_size_distribution_index: float,
) -> FloatOrArray:
    """dpc/dSe = -pe/λ * Se^(-1/λ - 1)"""
    exponent = -1.0 / pore_size_distribution_index
    return exponent * entry_pressure * effective_saturation ** (exponent - 1.0)


@numba.vectorize(cache=True)
def compute_regularized_capillary_pressure(
    effective_saturation,
    entry_pressure,
    pore_size_distribution_index,
    low_saturation_threshold,
    low_capillary_pressure,
    low_capillary_pressure_slope,
    high_capillary_pressure,
    high_capillary_pressure_slope,
):
    """
    Regularized Brooks-Corey capillary pressure (Pa) at an effective wetting saturation.

    - Se <= threshold: tangent line at the threshold
    - Se >= 1: tangent line at Se = 1
    - otherwise: pe * Se^(-1/λ)
    """
    if effective_saturation <= low_saturation_threshold:
        return low_capillary_pressure + low_capillary_pressure_slope * (
            effective_saturation - low_saturation_threshold
        )
    if effective_saturation >= 1.0:
        return high_capillary_pressure + high_capillary_pressure_slope * (
            effective_saturation - 1.0
        )
    return entry_pressure * effective_saturation ** (-1.0 / pore_size_distribution_index)


@numba.vectorize(cache=True)
def compute_regularized_capillary_pressure_derivative(
    effective_saturation,
    entry_pressure,
    pore_size_distribution_index,
    low_saturation_threshold,
    low_capillary_pressure,
    low_capillary_pressure_slope,
    high_capillary_pressure,
    high_capillary_pressure_slope,
):
    """dpc/dSe of `compute_regularized_capillary_pressure` (Pa)."""
    if effective_saturation <= low_saturation_threshold:
        return low_capillary_pressure_slope
    if effective_saturation >= 1.0:
        return high_capillary_pressure_slope
    exponent = -1.0 / pore_size_distribution_index
    return exponent * entry_pressure * effective_saturation ** (exponent - 1.0)


@numba.vectorize(cache=True)
def compute_regularized_wetting_saturation(
    capillary_pressure,
    entry_pressure,
    pore_size_distribution_index,
    low_saturation_threshold,
    low_capillary_pressure,
    low_capillary_pressure_slope,
    high_capillary_pressure,
    high_capillary_pressure_slope,
):
    """
    Inverse of `compute_regularized_capillary_pressure`: effective wetting saturation
    at a given capillary pressure (Pa).
    """
    if capillary_pressure >= low_capillary_pressure:
        return (
            capillary_pressure - low_capillary_pressure
        ) / low_capillary_pressure_slope + low_saturation_threshold
    if capillary_pressure <= high_capillary_pressure:
        return 1.0 + (
            capillary_pressure - high_capillary_pressure
        ) / high_capillary_pressure_slope
    return (capillary_pressure / entry_pressure) ** (-pore_size_distribution_index)


@numba.vectorize(cache=True)
def compute_regularized_wetting_relative_permeability(
    effective_saturation, pore_size_distribution_index
):
    """Brooks-Corey wetting phase relative permeability, clamped to [0, 1]."""
    if effective_saturation <= 0.0:
        return 0.0
    if effective_saturation >= 1.0:
        return 1.0
    return effective_saturation ** (2.0 / pore_size_distribution_index + 3.0)


@numba.vectorize(cache=True)
def compute_regularized_non_wetting_relative_permeability(
    effective_saturation, pore_size_distribution_index
):
    """Brooks-Corey non-wetting phase relative permeability, clamped to [0, 1]."""
    if effective_saturation <= 0.0:
        return 1.0
    if effective_saturation >= 1.0:
        return 0.0
    complement = 1.0 - effective_saturation
    return (complement * complement) * (
        1.0 - effective_saturation ** (2.0 / pore_size_distribution_index + 1.0)
    )


def _regularization(params: BrooksCoreyParams) -> typing.Tuple[float, ...]:
    return (
        params.entry_pressure,
        params.pore_size_distribution_index,
        params.low_saturation_threshold,
        params.low_capillary_pressure,
        params.low_capillary_pressure_slope,
        params.high_capillary_pressure,
        params.high_capillary_pressure_slope,
    )


########################
# TWO-PHASE SAT API #
########################


def two_phase_sat_pcnw(
    params: typing.Any, effective_saturation: FloatOrArray
) -> FloatOrArray:
    """
    Capillary pressure pn - pw (Pa) at an effective wetting saturation.

    :param params: Finalized `BrooksCoreyParams` (or a finalized builder).
    :param effective_saturation: Effective wetting phase saturation - scalar or array.
    """
    params = resolve_params(params, BrooksCoreyParams)
    return unwrap_scalar(
        compute_regularized_capillary_pressure(
            as_float_or_array(effective_saturation), *_regularization(params)
        )
    )


def two_phase_sat_dpcnw_dsw(
    params: typing.Any, effective_saturation: FloatOrArray
) -> FloatOrArray:
    """
    Derivative of the regularized capillary pressure with respect to the effective
    wetting saturation (Pa).
    """
    params = resolve_params(params, BrooksCoreyParams)
    return unwrap_scalar(
        compute_regularized_capillary_pressure_derivative(
            as_float_or_array(effective_saturation), *_regularization(params)
        )
    )


def two_phase_sat_sw(
    params: typing.Any, capillary_pressure: FloatOrArray
) -> FloatOrArray:
    """
    Effective wetting saturation at a capillary pressure pn - pw (Pa).

    :param params: Finalized `BrooksCoreyParams` (or a finalized builder).
    :param capillary_pressure: Capillary pressure - scalar or array.
    """
    params = resolve_params(params, BrooksCoreyParams)
    return unwrap_scalar(
        compute_regularized_wetting_saturation(
            as_float_or_array(capillary_pressure), *_regularization(params)
        )
    )


def two_phase_sat_krw(
    params: typing.Any, effective_saturation: FloatOrArray
) -> FloatOrArray:
    params = resolve_params(params, BrooksCoreyParams)
    return unwrap_scalar(
        compute_regularized_wetting_relative_permeability(
            as_float_or_array(effective_saturation),
            params.pore_size_distribution_index,
        )
    )


def two_phase_sat_krn(
    params: typing.Any, effective_saturation: FloatOrArray
) -> FloatOrArray:
    params = resolve_params(params, BrooksCoreyParams)
    return unwrap_scalar(
        compute_regularized_non_wetting_relative_permeability(
            as_float_or_array(effective_saturation),
            params.pore_size_distribution_index,
        )
    )


def _effective_wetting_saturation(
    params: BrooksCoreyParams, fluid_state: FluidState
) -> FloatOrArray:
    return to_effective_saturation(
        as_float_or_array(fluid_state.saturation(Phase.WETTING)),
        params.residual_wetting_saturation,
        params.residual_non_wetting_saturation,
    )


##################
# FLUID STATE API #
##################


def regularized_capillary_pressures(
    values: PhaseValues, params: typing.Any, fluid_state: FluidState
) -> PhaseValues:
    """
    Computes the phase capillary pressures from the fluid state's wetting saturation.

    The wetting phase is the reference phase: values[WETTING] = 0 and
    values[NON_WETTING] = pc(Se).

    :param values: Output container indexed by `Phase`.
    :param params: Finalized `BrooksCoreyParams` (or a finalized builder).
    :param fluid_state: Fluid state to evaluate.
    :return: `values`
    """
    check_phase_count(values)
    params = resolve_params(params, BrooksCoreyParams)
    effective_saturation = _effective_wetting_saturation(params, fluid_state)
    values[Phase.WETTING] = 0.0
    values[Phase.NON_WETTING] = two_phase_sat_pcnw(params, effective_saturation)
    return values


def regularized_saturations(
    values: PhaseValues, params: typing.Any, fluid_state: FluidState
) -> PhaseValues:
    """
    Computes the phase saturations from the pressure difference pn - pw of the fluid state.

    :param values: Output container indexed by `Phase`.
    :param params: Finalized `BrooksCoreyParams` (or a finalized builder).
    :param fluid_state: Fluid state to evaluate.
    :return: `values` holding absolute saturations.
    """
    check_phase_count(values)
    params = resolve_params(params, BrooksCoreyParams)
    capillary_pressure = as_float_or_array(fluid_state.pressure(Phase.NON_WETTING)) - (
        as_float_or_array(fluid_state.pressure(Phase.WETTING))
    )
    wetting_saturation = to_absolute_saturation(
        as_float_or_array(two_phase_sat_sw(params, capillary_pressure)),
        params.residual_wetting_saturation,
        params.residual_non_wetting_saturation,
    )
    values[Phase.WETTING] = wetting_saturation
    values[Phase.NON_WETTING] = 1.0 - wetting_saturation
    return values


def regularized_relative_permeabilities(
    values: PhaseValues, params: typing.Any, fluid_state: FluidState
) -> PhaseValues:
    """
    Computes the phase relative permeabilities from the fluid state's wetting saturation.

    :param values: Output container indexed by `Phase`.
    :param params: Finalized `BrooksCoreyParams` (or a finalized builder).
    :param fluid_state: Fluid state to evaluate.
    :return: `values`
    """
    check_phase_count(values)
    params = resolve_params(params, BrooksCoreyParams)
    effective_saturation = _effective_wetting_saturation(params, fluid_state)
    values[Phase.WETTING] = two_phase_sat_krw(params, effective_saturation)
    values[Phase.NON_WETTING] = two_phase_sat_krn(params, effective_saturation)
    return values


@attrs.frozen
class RegularizedBrooksCoreyModel:
    """
    Regularized Brooks-Corey law bound to a finalized parameter set.

    Example:
    ```python
    model = RegularizedBrooksCoreyModel(params=builder.finalize())
    pcs = model.get_capillary_pressures(fluid_state)
    ```
    """

    params: BrooksCoreyParams = attrs.field(
        converter=lambda value: resolve_params(value, BrooksCoreyParams)
    )
    """Finalized law coefficients."""
    config: Config = attrs.field(factory=Config)
    """Evaluation options."""

    traits: typing.ClassVar[LawTraits] = BROOKS_COREY_LAW_TRAITS

    def get_capillary_pressures(self, fluid_state: FluidState) -> CapillaryPressures:
        values: typing.List[FloatOrArray] = [0.0, 0.0]
        with self.config.constants():
            regularized_capillary_pressures(values, self.params, fluid_state)
        return CapillaryPressures(wetting=values[0], non_wetting=values[1])

    def get_saturations(self, fluid_state: FluidState) -> Saturations:
        values: typing.List[FloatOrArray] = [0.0, 0.0]
        with self.config.constants():
            regularized_saturations(values, self.params, fluid_state)
        return Saturations(wetting=values[0], non_wetting=values[1])

    def get_relative_permeabilities(
        self, fluid_state: FluidState
    ) -> RelativePermeabilities:
        values: typing.List[FloatOrArray] = [0.0, 0.0]
        with self.config.constants():
            regularized_relative_permeabilities(values, self.params, fluid_state)
        return RelativePermeabilities(wetting=values[0], non_wetting=values[1])

    def __call__(
        self, *, fluid_state: FluidState, **kwargs: typing.Any
    ) -> typing.Dict[str, typing.Any]:
        """
        Evaluate capillary pressures and relative permeabilities for a fluid state.

        :param fluid_state: Fluid state to evaluate.
        :return: Dictionary with `capillary_pressures` and `relative_permeabilities`.
        """
        return {
            "capillary_pressures": self.get_capillary_pressures(fluid_state),
            "relative_permeabilities": self.get_relative_permeabilities(fluid_state),
        }
