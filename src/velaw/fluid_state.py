"""Two-phase fluid state container consumed by the material laws."""

import typing

import attrs
from typing_extensions import Self

from velaw.errors import PhaseCountError
from velaw.history import update_max_saturation
from velaw.types import NUM_PHASES, FloatOrArray, Phase
from velaw.utils import as_float_or_array


__all__ = ["TwoPhaseFluidState"]


def _per_phase(values: typing.Iterable[typing.Any]) -> typing.Tuple[FloatOrArray, ...]:
    converted = tuple(as_float_or_array(value) for value in values)
    if len(converted) != NUM_PHASES:
        raise PhaseCountError(
            f"Expected one value per phase ({NUM_PHASES}), got {len(converted)}"
        )
    return converted


def _replace(
    values: typing.Tuple[FloatOrArray, ...], phase: Phase, value: typing.Any
) -> typing.Tuple[FloatOrArray, ...]:
    updated = list(values)
    updated[phase] = as_float_or_array(value)
    return tuple(updated)


@attrs.define
class TwoPhaseFluidState:
    """
    Per-phase state of a two-phase system at one or many cells.

    Every per-phase field is a pair indexed by `Phase`, holding scalars or arrays of the
    same shape. The historical maximum saturation refers to the non-wetting phase and is
    owned by the caller; it only moves when `update_max_saturation` is called.
    """

    saturations: typing.Tuple[FloatOrArray, ...] = attrs.field(converter=_per_phase)
    """Phase saturations (fraction)."""
    densities: typing.Tuple[FloatOrArray, ...] = attrs.field(
        default=(0.0, 0.0), converter=_per_phase
    )
    """Phase mass densities (kg/m³)."""
    viscosities: typing.Tuple[FloatOrArray, ...] = attrs.field(
        default=(0.0, 0.0), converter=_per_phase
    )
    """Phase dynamic viscosities (Pa·s)."""
    pressures: typing.Tuple[FloatOrArray, ...] = attrs.field(
        default=(0.0, 0.0), converter=_per_phase
    )
    """Phase pressures (Pa)."""
    max_non_wetting_saturation: FloatOrArray = attrs.field(
        default=None, converter=attrs.converters.optional(as_float_or_array)
    )
    """Historical maximum non-wetting saturation, Smax (fraction)."""

    def __attrs_post_init__(self) -> None:
        if self.max_non_wetting_saturation is None:
            self.max_non_wetting_saturation = self.saturations[Phase.NON_WETTING]

    @classmethod
    def from_non_wetting_saturation(
        cls,
        saturation: FloatOrArray,
        max_saturation: typing.Optional[FloatOrArray] = None,
        densities: typing.Sequence[FloatOrArray] = (0.0, 0.0),
        viscosities: typing.Sequence[FloatOrArray] = (0.0, 0.0),
        pressures: typing.Sequence[FloatOrArray] = (0.0, 0.0),
    ) -> Self:
        """
        Build a fluid state from the non-wetting saturation; the wetting phase fills the rest.

        :param saturation: Non-wetting saturation (fraction) - scalar or array.
        :param max_saturation: Historical maximum non-wetting saturation. Defaults to `saturation`.
        :param densities: Phase densities (kg/m³), indexed by `Phase`.
        :param viscosities: Phase viscosities (Pa·s), indexed by `Phase`.
        :param pressures: Phase pressures (Pa), indexed by `Phase`.
        """
        saturation = as_float_or_array(saturation)
        return cls(
            saturations=(1.0 - saturation, saturation),
            densities=densities,
            viscosities=viscosities,
            pressures=pressures,
            max_non_wetting_saturation=max_saturation,
        )

    def saturation(self, phase: Phase) -> FloatOrArray:
        return self.saturations[phase]

    def density(self, phase: Phase) -> FloatOrArray:
        return self.densities[phase]

    def viscosity(self, phase: Phase) -> FloatOrArray:
        return self.viscosities[phase]

    def pressure(self, phase: Phase) -> FloatOrArray:
        return self.pressures[phase]

    def max_saturation(self) -> FloatOrArray:
        return self.max_non_wetting_saturation

    def set_saturation(self, phase: Phase, value: FloatOrArray) -> None:
        self.saturations = _replace(self.saturations, phase, value)

    def set_density(self, phase: Phase, value: FloatOrArray) -> None:
        self.densities = _replace(self.densities, phase, value)

    def set_viscosity(self, phase: Phase, value: FloatOrArray) -> None:
        self.viscosities = _replace(self.viscosities, phase, value)

    def set_pressure(self, phase: Phase, value: FloatOrArray) -> None:
        self.pressures = _replace(self.pressures, phase, value)

    def update_max_saturation(self, tolerance: float = 0.0) -> FloatOrArray:
        """
        Raise the historical maximum to the current non-wetting saturation where it was exceeded.

        :param tolerance: Required increase before the maximum moves.
        :return: The updated historical maximum.
        """
        self.max_non_wetting_saturation = update_max_saturation(
            self.saturations[Phase.NON_WETTING],
            self.max_non_wetting_saturation,
            tolerance,
        )
        return self.max_non_wetting_saturation
