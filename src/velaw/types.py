import enum
import typing

import attrs
import numpy as np
from typing_extensions import TypeAlias, TypedDict

from velaw.errors import PhaseCountError, UnsupportedOperationError


__all__ = [
    "Phase",
    "NUM_PHASES",
    "FloatOrArray",
    "PhaseValues",
    "CapillaryPressures",
    "RelativePermeabilities",
    "Saturations",
    "FluidState",
    "Supported",
    "Unsupported",
    "PropertyResult",
    "LawTraits",
]

T = typing.TypeVar("T")

Numeric = typing.Union[int, float, np.floating, np.integer]
FloatOrArray = typing.Union[float, np.typing.NDArray[np.floating]]
PhaseValues: TypeAlias = typing.MutableSequence[typing.Any]
"""
Caller-provided output container indexed by `Phase`.

Either a two-element list or a numpy array whose leading axis has length two.
"""


class Phase(enum.IntEnum):
    """Index of a fluid phase in two-phase containers."""

    WETTING = 0
    NON_WETTING = 1


NUM_PHASES: int = len(Phase)
"""Number of fluid phases supported by the material laws."""


class CapillaryPressures(TypedDict):
    """Phase capillary pressures relative to the wetting (reference) phase (Pa)."""

    wetting: FloatOrArray
    non_wetting: FloatOrArray


class RelativePermeabilities(TypedDict):
    wetting: FloatOrArray
    non_wetting: FloatOrArray


class Saturations(TypedDict):
    wetting: FloatOrArray
    non_wetting: FloatOrArray


@typing.runtime_checkable
class FluidState(typing.Protocol):
    """
    Read-only view of the thermodynamic state of a two-phase system.

    The historical maximum saturation refers to the non-wetting phase.
    """

    def saturation(self, phase: Phase, /) -> FloatOrArray:
        """Returns the saturation of the given phase (fraction)."""
        ...

    def density(self, phase: Phase, /) -> FloatOrArray:
        """Returns the mass density of the given phase (kg/m³)."""
        ...

    def viscosity(self, phase: Phase, /) -> FloatOrArray:
        """Returns the dynamic viscosity of the given phase (Pa·s)."""
        ...

    def pressure(self, phase: Phase, /) -> FloatOrArray:
        """Returns the pressure of the given phase (Pa)."""
        ...

    def max_saturation(self) -> FloatOrArray:
        """Returns the highest non-wetting saturation ever observed (fraction)."""
        ...


@attrs.frozen(slots=True)
class Supported(typing.Generic[T]):
    """Result of a property correlation that is modelled for the requested phase."""

    value: T

    @property
    def is_supported(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@attrs.frozen(slots=True)
class Unsupported:
    """Result of a property correlation that is not modelled for the requested phase."""

    operation: str
    """Name of the requested operation, e.g. 'liquidDensity'."""
    reason: str = "not implemented"

    @property
    def is_supported(self) -> bool:
        return False

    def unwrap(self) -> typing.NoReturn:
        """
        :raises UnsupportedOperationError: Always.
        """
        raise UnsupportedOperationError(f"{self.operation}: {self.reason}")


PropertyResult = typing.Union[Supported[T], Unsupported]
"""Either a `Supported` value or an explicit `Unsupported` marker."""


def _validate_phase_count(instance: typing.Any, attribute: typing.Any, value: int) -> None:
    if value != NUM_PHASES:
        raise PhaseCountError(
            f"Material laws in velaw apply to exactly {NUM_PHASES} fluid phases, got {value}."
        )


@attrs.frozen(slots=True)
class LawTraits:
    """Static properties of a material law."""

    num_phases: int = attrs.field(default=NUM_PHASES, validator=_validate_phase_count)
    implements_two_phase_api: bool = True
    """Whether the law implements the two-phase convenience API."""
    implements_two_phase_sat_api: bool = True
    """Whether the two-phase convenience API only depends on the phase saturations."""
    is_saturation_dependent: bool = True
    is_pressure_dependent: bool = False
    is_temperature_dependent: bool = False
    is_composition_dependent: bool = False
