"""
Vertical-equilibrium (VE) upscaling of the regularized Brooks-Corey law.

Within a coarse column of height H the two phases are assumed to be segregated and in
hydrostatic equilibrium. The coarse non-wetting saturation S and its historical maximum
Smax then define two interface heights:

    h    = H * (S*(1 - Srw) - Smax*Srn) / ((1 - Srw)*(1 - Srw - Srn))
    hmax = H * Smax / (1 - Srw)

`h` is the current extent of the mobile non-wetting plume, `hmax` the extent reached at
the historical maximum. Between the two lies a band with trapped residual non-wetting
phase. The upscaled flow functions follow from the heights:

    krn  = krn_end_point * h / H
    krw  = (H - hmax)/H + μw * krw_end_point * (hmax - h)/H
    pc_n = (ρw - ρn) * g * h,  pc_w = 0

The law keeps no state of its own; path dependence enters only through the Smax supplied
by the fluid state.
"""

import logging
import typing
import warnings

import attrs
import numba

from velaw.brooks_corey import (
    regularized_capillary_pressures,
    regularized_saturations,
)
from velaw.config import Config
from velaw.constants import c
from velaw.fluid_state import TwoPhaseFluidState
from velaw.params import VerticalEquilibriumParams, resolve_params
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
from velaw.utils import as_float_or_array, check_phase_count, clip, unwrap_scalar


logger = logging.getLogger(__name__)

__all__ = [
    "VE_LAW_TRAITS",
    "compute_interface_height",
    "compute_max_interface_height",
    "compute_non_wetting_relative_permeability",
    "compute_wetting_relative_permeability",
    "compute_hydrostatic_capillary_pressure",
    "interface_heights",
    "capillary_pressures",
    "saturations",
    "relative_permeabilities",
    "VerticalEquilibriumBrooksCoreyModel",
]

VE_LAW_TRAITS = LawTraits()
"""Static properties of the vertical-equilibrium Brooks-Corey law."""


@numba.njit(cache=True)
def compute_interface_height(
    saturation: FloatOrArray,
    max_saturation: FloatOrArray,
    column_height: float,
    residual_wetting_saturation: float,
    residual_non_wetting_saturation: float,
) -> FloatOrArray:
    """
    Computes the current height of the non-wetting plume in a VE column.

    h = H * (S*(1 - Srw) - Smax*Srn) / ((1 - Srw)*(1 - Srw - Srn))

    :param saturation: Coarse non-wetting saturation, S - scalar or array.
    :param max_saturation: Historical maximum non-wetting saturation, Smax - scalar or array.
    :param column_height: Column height, H (m).
    :param residual_wetting_saturation: Srw (fraction).
    :param residual_non_wetting_saturation: Srn (fraction).
    :return: Interface height (m), not clamped.
    """
    mobile_wetting = 1.0 - residual_wetting_saturation
    return (
        column_height
        * (
            saturation * mobile_wetting
            - max_saturation * residual_non_wetting_saturation
        )
        / (mobile_wetting * (mobile_wetting - residual_non_wetting_saturation))
    )


@numba.njit(cache=True)
def compute_max_interface_height(
    saturation: FloatOrArray,
    max_saturation: FloatOrArray,
    column_height: float,
    residual_wetting_saturation: float,
) -> FloatOrArray:
    """
    Computes the plume height reached at the historical maximum saturation.

    hmax = H * Smax / (1 - Srw)

    `saturation` does not enter the expression; it is accepted so that both height
    functions share their state arguments.
    """
    return column_height * max_saturation / (1.0 - residual_wetting_saturation)


@numba.njit(cache=True)
def compute_non_wetting_relative_permeability(
    interface_height: FloatOrArray, column_height: float, krn_end_point: float
) -> FloatOrArray:
    """krn = krn_end_point * h / H"""
    return krn_end_point * (interface_height / column_height)


@numba.njit(cache=True)
def compute_wetting_relative_permeability(
    interface_height: FloatOrArray,
    max_interface_height: FloatOrArray,
    column_height: float,
    wetting_viscosity: FloatOrArray,
    krw_end_point: float,
) -> FloatOrArray:
    """
    krw = (H - hmax)/H + μw * krw_end_point * (hmax - h)/H

    The first term is the fully wetting-saturated part of the column, the second the
    viscosity-weighted contribution of the band with trapped non-wetting phase.
    """
    return (column_height - max_interface_height) / column_height + (
        wetting_viscosity
        * krw_end_point
        * (max_interface_height - interface_height)
        / column_height
    )


@numba.njit(cache=True)
def compute_hydrostatic_capillary_pressure(
    wetting_density: FloatOrArray,
    non_wetting_density: FloatOrArray,
    interface_height: FloatOrArray,
    gravitational_acceleration: float,
) -> FloatOrArray:
    """pc_n = (ρw - ρn) * g * h (Pa)"""
    return (
        (wetting_density - non_wetting_density)
        * gravitational_acceleration
        * interface_height
    )


def interface_heights(
    params: typing.Any,
    saturation: FloatOrArray,
    max_saturation: FloatOrArray,
    clamp: bool = True,
) -> typing.Tuple[FloatOrArray, FloatOrArray]:
    """
    Computes the interface heights `(h, hmax)` of a VE column.

    With `clamp`, `hmax` is clipped to [0, H] and `h` to [0, hmax], so that
    `0 <= h <= hmax <= H` holds for any saturation state. For admissible states
    (`Smax*Srn/(1 - Srw) <= S <= Smax <= 1 - Srw`) clamping leaves the values unchanged.

    :param params: Finalized `VerticalEquilibriumParams` (or a finalized builder).
    :param saturation: Coarse non-wetting saturation - scalar or array.
    :param max_saturation: Historical maximum non-wetting saturation - scalar or array.
    :param clamp: Whether to clamp the heights to their admissible range.
    :return: Tuple of (h, hmax) in m.
    """
    params = resolve_params(params, VerticalEquilibriumParams)
    saturation = as_float_or_array(saturation)
    max_saturation = as_float_or_array(max_saturation)
    height = params.column_height

    h = compute_interface_height(
        saturation,
        max_saturation,
        height,
        params.residual_wetting_saturation,
        params.residual_non_wetting_saturation,
    )
    hmax = compute_max_interface_height(
        saturation, max_saturation, height, params.residual_wetting_saturation
    )
    if clamp:
        hmax = unwrap_scalar(clip(hmax, 0.0, height))
        h = unwrap_scalar(clip(h, 0.0, hmax))
    return h, hmax


def _state_heights(
    params: VerticalEquilibriumParams, fluid_state: FluidState, clamp: bool
) -> typing.Tuple[FloatOrArray, FloatOrArray]:
    return interface_heights(
        params,
        fluid_state.saturation(Phase.NON_WETTING),
        fluid_state.max_saturation(),
        clamp=clamp,
    )


def capillary_pressures(
    values: PhaseValues,
    params: typing.Any,
    fluid_state: FluidState,
    clamp: bool = True,
) -> PhaseValues:
    """
    Computes the upscaled phase capillary pressures of a VE column.

    The plain-law capillary pressures are evaluated first and then overwritten with the
    hydrostatic values, which treats the fine-scale capillary pressure as zero. The
    wetting phase is the reference phase.

    :param values: Output container indexed by `Phase`.
    :param params: Finalized `VerticalEquilibriumParams` (or a finalized builder).
    :param fluid_state: Fluid state providing saturations, densities and Smax.
    :param clamp: Whether to clamp the interface heights (see `interface_heights`).
    :return: `values`
    :raises PhaseCountError: If `values` does not hold exactly two phases.
    :raises NotFinalizedError: If `params` is an unfinalized builder.
    """
    check_phase_count(values)
    params = resolve_params(params, VerticalEquilibriumParams)
    # TODO: add the fine-scale capillary correction to the baseline instead of dropping it.
    regularized_capillary_pressures(values, params.base, fluid_state)

    h, _ = _state_heights(params, fluid_state, clamp)
    values[Phase.WETTING] = 0.0
    values[Phase.NON_WETTING] = compute_hydrostatic_capillary_pressure(
        as_float_or_array(fluid_state.density(Phase.WETTING)),
        as_float_or_array(fluid_state.density(Phase.NON_WETTING)),
        h,
        float(c.GRAVITATIONAL_ACCELERATION),
    )
    return values


def saturations(
    values: PhaseValues,
    params: typing.Any,
    fluid_state: FluidState,
    warn: bool = True,
) -> PhaseValues:
    """
    Computes the phase saturations from the phase pressure difference.

    This delegates to the plain regularized law and does not account for the interface
    heights or the saturation history of the column.

    :param values: Output container indexed by `Phase`.
    :param params: Finalized `VerticalEquilibriumParams` (or a finalized builder).
    :param fluid_state: Fluid state providing the phase pressures.
    :param warn: Whether to warn that the VE height model is ignored.
    :return: `values`
    """
    check_phase_count(values)
    params = resolve_params(params, VerticalEquilibriumParams)
    if warn:
        warnings.warn(
            "Saturation inversion of the vertical-equilibrium law uses the plain "
            "Brooks-Corey curve and ignores the column height model.",
            UserWarning,
            stacklevel=2,
        )
    return regularized_saturations(values, params.base, fluid_state)


def relative_permeabilities(
    values: PhaseValues,
    params: typing.Any,
    fluid_state: FluidState,
    clamp: bool = True,
) -> PhaseValues:
    """
    Computes the upscaled phase relative permeabilities of a VE column.

    :param values: Output container indexed by `Phase`.
    :param params: Finalized `VerticalEquilibriumParams` (or a finalized builder).
    :param fluid_state: Fluid state providing saturation, wetting viscosity and Smax.
    :param clamp: Whether to clamp the interface heights (see `interface_heights`).
    :return: `values`
    :raises PhaseCountError: If `values` does not hold exactly two phases.
    :raises NotFinalizedError: If `params` is an unfinalized builder.
    """
    check_phase_count(values)
    params = resolve_params(params, VerticalEquilibriumParams)
    h, hmax = _state_heights(params, fluid_state, clamp)
    height = params.column_height

    values[Phase.WETTING] = compute_wetting_relative_permeability(
        h,
        hmax,
        height,
        as_float_or_array(fluid_state.viscosity(Phase.WETTING)),
        params.krw_end_point,
    )
    values[Phase.NON_WETTING] = compute_non_wetting_relative_permeability(
        h, height, params.krn_end_point
    )
    return values


@attrs.frozen
class VerticalEquilibriumBrooksCoreyModel:
    """
    Vertical-equilibrium Brooks-Corey law bound to a finalized parameter set.

    Example:
    ```python
    params = (
        VerticalEquilibriumParamsBuilder.with_coefficients(1e4, 2.0)
        .set_residual_wetting_saturation(0.1)
        .set_residual_non_wetting_saturation(0.05)
        .set_column_height(10.0)
        .finalize()
    )
    model = VerticalEquilibriumBrooksCoreyModel(params=params)
    krs = model.get_relative_permeabilities(fluid_state)
    ```
    """

    params: VerticalEquilibriumParams = attrs.field(
        converter=lambda value: resolve_params(value, VerticalEquilibriumParams)
    )
    """Finalized law coefficients."""
    config: Config = attrs.field(factory=Config)
    """Evaluation options."""

    traits: typing.ClassVar[LawTraits] = VE_LAW_TRAITS

    def get_interface_heights(
        self, fluid_state: FluidState
    ) -> typing.Tuple[FloatOrArray, FloatOrArray]:
        """
        :return: Tuple of (h, hmax) in m for the fluid state.
        """
        return _state_heights(
            self.params, fluid_state, self.config.clamp_interface_heights
        )

    def get_capillary_pressures(self, fluid_state: FluidState) -> CapillaryPressures:
        values: typing.List[FloatOrArray] = [0.0, 0.0]
        with self.config.constants():
            capillary_pressures(
                values,
                self.params,
                fluid_state,
                clamp=self.config.clamp_interface_heights,
            )
        return CapillaryPressures(wetting=values[0], non_wetting=values[1])

    def get_saturations(self, fluid_state: FluidState) -> Saturations:
        values: typing.List[FloatOrArray] = [0.0, 0.0]
        with self.config.constants():
            saturations(
                values,
                self.params,
                fluid_state,
                warn=self.config.warn_on_saturation_inversion,
            )
        return Saturations(wetting=values[0], non_wetting=values[1])

    def get_relative_permeabilities(
        self, fluid_state: FluidState
    ) -> RelativePermeabilities:
        values: typing.List[FloatOrArray] = [0.0, 0.0]
        with self.config.constants():
            relative_permeabilities(
                values,
                self.params,
                fluid_state,
                clamp=self.config.clamp_interface_heights,
            )
        return RelativePermeabilities(wetting=values[0], non_wetting=values[1])

    def update_max_saturation(self, fluid_state: TwoPhaseFluidState) -> FloatOrArray:
        """
        Move the historical maximum saturation of the fluid state after an accepted step.

        Uses `config.history_tolerance`.

        :return: The updated historical maximum.
        """
        return fluid_state.update_max_saturation(
            tolerance=self.config.history_tolerance
        )

    def __call__(
        self, *, fluid_state: FluidState, **kwargs: typing.Any
    ) -> typing.Dict[str, typing.Any]:
        """
        Evaluate the upscaled capillary pressures and relative permeabilities.

        :param fluid_state: Fluid state to evaluate.
        :return: Dictionary with `capillary_pressures` and `relative_permeabilities`.
        """
        return {
            "capillary_pressures": self.get_capillary_pressures(fluid_state),
            "relative_permeabilities": self.get_relative_permeabilities(fluid_state),
        }
