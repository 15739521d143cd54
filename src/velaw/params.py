"""
Parameter objects of the regularized Brooks-Corey laws.

Coefficients are collected in mutable builders and turned into immutable, validated
values by `finalize()`. Evaluation functions only consume the finalized values.
"""

import logging
import threading
import typing

import attrs
from typing_extensions import Self

from velaw.constants import c
from velaw.errors import FrozenParametersError, NotFinalizedError, ValidationError


logger = logging.getLogger(__name__)

__all__ = [
    "BrooksCoreyParams",
    "BrooksCoreyParamsBuilder",
    "VerticalEquilibriumParams",
    "VerticalEquilibriumParamsBuilder",
    "resolve_params",
]


def _is_finite_number(value: typing.Any) -> bool:
    try:
        value = float(value)
    except (TypeError, ValueError):
        return False
    return value == value and abs(value) != float("inf")


def _check_brooks_corey_coefficients(
    entry_pressure: typing.Any,
    pore_size_distribution_index: typing.Any,
    residual_wetting_saturation: typing.Any,
    residual_non_wetting_saturation: typing.Any,
) -> typing.List[str]:
    problems = []
    if entry_pressure is None:
        problems.append("entry pressure is not set")
    elif not _is_finite_number(entry_pressure) or float(entry_pressure) <= 0.0:
        problems.append(f"entry pressure must be positive, got {entry_pressure!r}")

    if pore_size_distribution_index is None:
        problems.append("pore size distribution index is not set")
    elif (
        not _is_finite_number(pore_size_distribution_index)
        or float(pore_size_distribution_index) <= 0.0
    ):
        problems.append(
            f"pore size distribution index must be positive, got {pore_size_distribution_index!r}"
        )

    residuals_valid = True
    for name, value in (
        ("residual wetting saturation", residual_wetting_saturation),
        ("residual non-wetting saturation", residual_non_wetting_saturation),
    ):
        if not _is_finite_number(value) or not (0.0 <= float(value) <= 1.0):
            problems.append(f"{name} must be in [0, 1], got {value!r}")
            residuals_valid = False

    if residuals_valid and (
        float(residual_wetting_saturation) + float(residual_non_wetting_saturation)
        >= 1.0
    ):
        problems.append(
            "sum of residual saturations must be less than 1, got "
            f"{float(residual_wetting_saturation) + float(residual_non_wetting_saturation)}"
        )
    return problems


def _check_vertical_equilibrium_coefficients(
    krw_end_point: typing.Any, krn_end_point: typing.Any, column_height: typing.Any
) -> typing.List[str]:
    problems = []
    for name, value in (
        ("wetting relative permeability end point", krw_end_point),
        ("non-wetting relative permeability end point", krn_end_point),
    ):
        if not _is_finite_number(value) or not (0.0 < float(value) <= 1.0):
            problems.append(f"{name} must be in (0, 1], got {value!r}")

    if column_height is None:
        problems.append("column height is not set")
    elif not _is_finite_number(column_height) or float(column_height) <= 0.0:
        problems.append(f"column height must be positive, got {column_height!r}")
    return problems


def _raise_if_invalid(kind: str, problems: typing.List[str]) -> None:
    if problems:
        raise ValidationError(f"Invalid {kind} parameters: " + "; ".join(problems))


@attrs.frozen(slots=True)
class BrooksCoreyParams:
    """
    Validated coefficients of the regularized Brooks-Corey law.

    The regularization coefficients are derived on construction: below the low threshold
    saturation and above full saturation the capillary pressure curve is replaced by its
    tangent lines at those points.
    """

    entry_pressure: float = attrs.field(converter=float)
    """Entry (displacement) pressure, pe (Pa)."""
    pore_size_distribution_index: float = attrs.field(converter=float)
    """Pore size distribution index, λ."""
    residual_wetting_saturation: float = attrs.field(default=0.0, converter=float)
    """Residual wetting phase saturation, Srw (fraction)."""
    residual_non_wetting_saturation: float = attrs.field(default=0.0, converter=float)
    """Residual non-wetting phase saturation, Srn (fraction)."""

    low_saturation_threshold: float = attrs.field(init=False)
    """Effective wetting saturation below which the capillary pressure is linearized."""
    low_capillary_pressure: float = attrs.field(init=False)
    """Capillary pressure at the low threshold saturation (Pa)."""
    low_capillary_pressure_slope: float = attrs.field(init=False)
    """dpc/dSw at the low threshold saturation (Pa)."""
    high_capillary_pressure: float = attrs.field(init=False)
    """Capillary pressure at full effective wetting saturation (Pa)."""
    high_capillary_pressure_slope: float = attrs.field(init=False)
    """dpc/dSw at full effective wetting saturation (Pa)."""

    def __attrs_post_init__(self) -> None:
        _raise_if_invalid(
            "Brooks-Corey",
            _check_brooks_corey_coefficients(
                self.entry_pressure,
                self.pore_size_distribution_index,
                self.residual_wetting_saturation,
                self.residual_non_wetting_saturation,
            ),
        )
        pe = self.entry_pressure
        exponent = -1.0 / self.pore_size_distribution_index
        threshold = float(c.CAPILLARY_REGULARIZATION_LOW_SATURATION)

        object.__setattr__(self, "low_saturation_threshold", threshold)
        object.__setattr__(self, "low_capillary_pressure", pe * threshold**exponent)
        object.__setattr__(
            self,
            "low_capillary_pressure_slope",
            exponent * pe * threshold ** (exponent - 1.0),
        )
        object.__setattr__(self, "high_capillary_pressure", pe)
        object.__setattr__(self, "high_capillary_pressure_slope", exponent * pe)

    @property
    def mobile_saturation_range(self) -> float:
        """1 - Srw - Srn"""
        return (
            1.0 - self.residual_wetting_saturation - self.residual_non_wetting_saturation
        )


@attrs.frozen(slots=True)
class VerticalEquilibriumParams:
    """
    Validated coefficients of the vertical-equilibrium upscaled Brooks-Corey law.

    The plain law's coefficients are embedded by value in `base`.
    """

    base: BrooksCoreyParams
    """Coefficients of the underlying plain regularized law."""
    krw_end_point: float = attrs.field(converter=float)
    """Wetting phase relative permeability at the residual saturation end point."""
    krn_end_point: float = attrs.field(converter=float)
    """Non-wetting phase relative permeability at the residual saturation end point."""
    column_height: float = attrs.field(converter=float)
    """Total height of the vertical column, H (m)."""

    def __attrs_post_init__(self) -> None:
        _raise_if_invalid(
            "vertical equilibrium",
            _check_vertical_equilibrium_coefficients(
                self.krw_end_point, self.krn_end_point, self.column_height
            ),
        )

    @property
    def entry_pressure(self) -> float:
        return self.base.entry_pressure

    @property
    def pore_size_distribution_index(self) -> float:
        return self.base.pore_size_distribution_index

    @property
    def residual_wetting_saturation(self) -> float:
        return self.base.residual_wetting_saturation

    @property
    def residual_non_wetting_saturation(self) -> float:
        return self.base.residual_non_wetting_saturation


class _FinalizeOnce:
    """Shared finalize-then-freeze behaviour of the parameter builders."""

    _finalized: typing.Any
    _lock: threading.Lock

    @property
    def is_finalized(self) -> bool:
        return self._finalized is not None

    def _ensure_finalized(self) -> typing.Any:
        finalized = self._finalized
        if finalized is None:
            raise NotFinalizedError(
                f"{type(self).__name__} must be finalized before its parameters are read"
            )
        return finalized

    def _ensure_mutable(self) -> None:
        if self._finalized is not None:
            raise FrozenParametersError(
                f"{type(self).__name__} was finalized and can no longer be modified"
            )

    def _build(self) -> typing.Any:
        raise NotImplementedError

    def finalize(self) -> typing.Any:
        """
        Validate the collected coefficients and freeze them.

        Calling this again returns the same finalized value.

        :raises ValidationError: If any coefficient is invalid.
        """
        with self._lock:
            if self._finalized is not None:
                logger.debug("%s already finalized", type(self).__name__)
                return self._finalized
            finalized = self._build()
            self._finalized = finalized
        logger.debug("Finalized %r", finalized)
        return finalized


@attrs.define(eq=False)
class BrooksCoreyParamsBuilder(_FinalizeOnce):
    """
    Collects the coefficients of the regularized Brooks-Corey law.

    Setters accept any value; validation is deferred to `finalize()`. Getters can only be
    read once the builder is finalized, setters only until then.

    Example:
    ```python
    params = (
        BrooksCoreyParamsBuilder(entry_pressure=1e4, pore_size_distribution_index=2.0)
        .set_residual_wetting_saturation(0.1)
        .finalize()
    )
    ```
    """

    _entry_pressure: typing.Any = None
    _pore_size_distribution_index: typing.Any = None
    _residual_wetting_saturation: typing.Any = 0.0
    _residual_non_wetting_saturation: typing.Any = 0.0
    _finalized: typing.Optional[BrooksCoreyParams] = attrs.field(
        default=None, init=False, repr=False
    )
    _lock: threading.Lock = attrs.field(factory=threading.Lock, init=False, repr=False)

    def set_entry_pressure(self, value: typing.Any) -> Self:
        self._ensure_mutable()
        self._entry_pressure = value
        return self

    def set_pore_size_distribution_index(self, value: typing.Any) -> Self:
        self._ensure_mutable()
        self._pore_size_distribution_index = value
        return self

    def set_residual_wetting_saturation(self, value: typing.Any) -> Self:
        self._ensure_mutable()
        self._residual_wetting_saturation = value
        return self

    def set_residual_non_wetting_saturation(self, value: typing.Any) -> Self:
        self._ensure_mutable()
        self._residual_non_wetting_saturation = value
        return self

    @property
    def entry_pressure(self) -> float:
        return self._ensure_finalized().entry_pressure

    @property
    def pore_size_distribution_index(self) -> float:
        return self._ensure_finalized().pore_size_distribution_index

    @property
    def residual_wetting_saturation(self) -> float:
        return self._ensure_finalized().residual_wetting_saturation

    @property
    def residual_non_wetting_saturation(self) -> float:
        return self._ensure_finalized().residual_non_wetting_saturation

    def _build(self) -> BrooksCoreyParams:
        _raise_if_invalid(
            "Brooks-Corey",
            _check_brooks_corey_coefficients(
                self._entry_pressure,
                self._pore_size_distribution_index,
                self._residual_wetting_saturation,
                self._residual_non_wetting_saturation,
            ),
        )
        return BrooksCoreyParams(
            entry_pressure=self._entry_pressure,
            pore_size_distribution_index=self._pore_size_distribution_index,
            residual_wetting_saturation=self._residual_wetting_saturation,
            residual_non_wetting_saturation=self._residual_non_wetting_saturation,
        )

    def finalize(self) -> BrooksCoreyParams:
        return super().finalize()


def _default_end_point() -> float:
    return c.DEFAULT_RELATIVE_PERMEABILITY_END_POINT


@attrs.define(eq=False)
class VerticalEquilibriumParamsBuilder(_FinalizeOnce):
    """
    Collects the coefficients of the vertical-equilibrium Brooks-Corey law.

    The plain law's coefficients live in an embedded `BrooksCoreyParamsBuilder`; the
    setters below delegate to it.
    """

    _base: BrooksCoreyParamsBuilder = attrs.field(factory=BrooksCoreyParamsBuilder)
    _krw_end_point: typing.Any = attrs.field(factory=_default_end_point)
    _krn_end_point: typing.Any = attrs.field(factory=_default_end_point)
    _column_height: typing.Any = None
    _finalized: typing.Optional[VerticalEquilibriumParams] = attrs.field(
        default=None, init=False, repr=False
    )
    _lock: threading.Lock = attrs.field(factory=threading.Lock, init=False, repr=False)

    @classmethod
    def with_coefficients(
        cls, entry_pressure: typing.Any, pore_size_distribution_index: typing.Any
    ) -> Self:
        """
        Create a builder from the entry pressure and the pore size distribution index.

        :param entry_pressure: Entry pressure (Pa).
        :param pore_size_distribution_index: Pore size distribution index, λ.
        """
        return cls(
            base=BrooksCoreyParamsBuilder(
                entry_pressure=entry_pressure,
                pore_size_distribution_index=pore_size_distribution_index,
            )
        )

    def set_entry_pressure(self, value: typing.Any) -> Self:
        self._ensure_mutable()
        self._base.set_entry_pressure(value)
        return self

    def set_pore_size_distribution_index(self, value: typing.Any) -> Self:
        self._ensure_mutable()
        self._base.set_pore_size_distribution_index(value)
        return self

    def set_residual_wetting_saturation(self, value: typing.Any) -> Self:
        self._ensure_mutable()
        self._base.set_residual_wetting_saturation(value)
        return self

    def set_residual_non_wetting_saturation(self, value: typing.Any) -> Self:
        self._ensure_mutable()
        self._base.set_residual_non_wetting_saturation(value)
        return self

    def set_krw_end_point(self, value: typing.Any) -> Self:
        self._ensure_mutable()
        self._krw_end_point = value
        return self

    def set_krn_end_point(self, value: typing.Any) -> Self:
        self._ensure_mutable()
        self._krn_end_point = value
        return self

    def set_column_height(self, value: typing.Any) -> Self:
        self._ensure_mutable()
        self._column_height = value
        return self

    @property
    def base(self) -> BrooksCoreyParams:
        return self._ensure_finalized().base

    @property
    def entry_pressure(self) -> float:
        return self._ensure_finalized().entry_pressure

    @property
    def pore_size_distribution_index(self) -> float:
        return self._ensure_finalized().pore_size_distribution_index

    @property
    def residual_wetting_saturation(self) -> float:
        return self._ensure_finalized().residual_wetting_saturation

    @property
    def residual_non_wetting_saturation(self) -> float:
        return self._ensure_finalized().residual_non_wetting_saturation

    @property
    def krw_end_point(self) -> float:
        return self._ensure_finalized().krw_end_point

    @property
    def krn_end_point(self) -> float:
        return self._ensure_finalized().krn_end_point

    @property
    def column_height(self) -> float:
        return self._ensure_finalized().column_height

    def finalize_plain(self) -> BrooksCoreyParams:
        """Finalize only the embedded plain-law coefficients."""
        return self._base.finalize()

    def _build(self) -> VerticalEquilibriumParams:
        problems = _check_vertical_equilibrium_coefficients(
            self._krw_end_point, self._krn_end_point, self._column_height
        )
        if not self._base.is_finalized:
            problems = (
                _check_brooks_corey_coefficients(
                    self._base._entry_pressure,
                    self._base._pore_size_distribution_index,
                    self._base._residual_wetting_saturation,
                    self._base._residual_non_wetting_saturation,
                )
                + problems
            )
        _raise_if_invalid("vertical equilibrium", problems)
        return VerticalEquilibriumParams(
            base=self._base.finalize(),
            krw_end_point=self._krw_end_point,
            krn_end_point=self._krn_end_point,
            column_height=self._column_height,
        )

    def finalize(self) -> VerticalEquilibriumParams:
        return super().finalize()


ParamsT = typing.TypeVar("ParamsT", BrooksCoreyParams, VerticalEquilibriumParams)


def resolve_params(
    params: typing.Any, expected: typing.Type[ParamsT]
) -> ParamsT:
    """
    Return the finalized parameter value behind `params`.

    Finalized builders are unwrapped; unfinalized builders are a contract violation.
    Vertical-equilibrium parameters resolve to their embedded plain parameters when the
    plain law is expected.

    :param params: A finalized parameter value or a parameter builder.
    :param expected: The parameter value type required by the caller.
    :raises NotFinalizedError: If `params` is a builder that has not been finalized.
    :raises TypeError: If `params` cannot provide the expected parameter type.
    """
    if isinstance(params, _FinalizeOnce):
        params = params._ensure_finalized()
    if isinstance(params, expected):
        return params
    if expected is BrooksCoreyParams and isinstance(params, VerticalEquilibriumParams):
        return params.base  # type: ignore[return-value]
    raise TypeError(
        f"Expected {expected.__name__} or a finalized builder of it, got {type(params).__name__}"
    )
