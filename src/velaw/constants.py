"""
Physical constants and model defaults.

Library code reads constants through the context-aware proxy `c`. A `Constants`
instance becomes the active one for the duration of a `with constants():` block, which is
how model objects apply their `Config.constants`.
"""

from contextvars import ContextVar
import typing

import attrs


__all__ = ["Constant", "Constants", "c", "ConstantsContext", "get_constant"]


@attrs.frozen(slots=True)
class Constant:
    """Value of a named constant with its unit."""

    value: typing.Any
    description: typing.Optional[str] = None
    unit: typing.Optional[str] = None

    def __str__(self) -> str:
        if self.unit is None:
            return str(self.value)
        return f"{self.value} {self.unit}"


DEFAULT_CONSTANTS: typing.Dict[str, Constant] = {
    "GRAVITATIONAL_ACCELERATION": Constant(
        value=9.80665, description="Standard gravitational acceleration", unit="m/s²"
    ),
    "IDEAL_GAS_CONSTANT": Constant(
        value=8.314472, description="Universal gas constant", unit="J/(mol·K)"
    ),
    "MICROPOISE_TO_PASCAL_SECONDS": Constant(
        value=1e-7, description="Conversion factor from micropoise to Pa·s"
    ),
    "CO2_ENTHALPY_REFERENCE_TEMPERATURE": Constant(
        value=298.15,
        description="Reference temperature of the linear CO2 enthalpy correlations",
        unit="K",
    ),
    "CAPILLARY_REGULARIZATION_LOW_SATURATION": Constant(
        value=0.01,
        description=(
            "Effective wetting saturation below which the Brooks-Corey capillary "
            "pressure is replaced by its tangent line"
        ),
        unit="fraction",
    ),
    "DEFAULT_RELATIVE_PERMEABILITY_END_POINT": Constant(
        value=0.01,
        description="Default relative permeability at the residual saturation end points",
        unit="fraction",
    ),
}


class Constants:
    """
    Mutable set of named constants, seeded with `DEFAULT_CONSTANTS`.

    `constants.NAME` reads the plain value, `constants["NAME"]` the `Constant` record.
    Assigning a bare value through either form wraps it in a `Constant`.

    Example:
    ```python
    constants = Constants()
    constants.GRAVITATIONAL_ACCELERATION = 9.81
    with constants():
        assert c.GRAVITATIONAL_ACCELERATION == 9.81
    ```
    """

    __slots__ = ("_store",)

    def __init__(self) -> None:
        object.__setattr__(self, "_store", dict(DEFAULT_CONSTANTS))

    def __getattr__(self, name: str) -> typing.Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._store[name].value
        except KeyError:
            raise AttributeError(f"Unknown constant {name!r}") from None

    def __setattr__(self, name: str, value: typing.Any) -> None:
        self[name] = value

    def __getitem__(self, name: str) -> Constant:
        return self._store[name]

    def __setitem__(self, name: str, value: typing.Any) -> None:
        if not isinstance(value, Constant):
            value = Constant(value)
        self._store[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self._store

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({sorted(self._store)!r})"

    def get_constant(
        self, name: str, default: typing.Optional[Constant] = None
    ) -> typing.Optional[Constant]:
        """
        :param name: Name of the constant.
        :param default: Returned when no constant of that name exists.
        """
        return self._store.get(name, default)

    def __call__(self) -> "ConstantsContext":
        """Returns a context manager that activates this instance behind `c`."""
        return ConstantsContext(self)


_active_constants: ContextVar[Constants] = ContextVar(
    "active_constants", default=Constants()
)


class ConstantsContext:
    """Makes a `Constants` instance the active one and restores the previous on exit."""

    def __init__(self, constants: Constants) -> None:
        self._constants = constants
        self._token = None

    def __enter__(self) -> Constants:
        self._token = _active_constants.set(self._constants)
        return self._constants

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        if self._token is not None:
            _active_constants.reset(self._token)
            self._token = None


class _ConstantsProxy:
    @property
    def _constants(self) -> Constants:
        return _active_constants.get()

    def __getattr__(self, name: str) -> typing.Any:
        return getattr(self._constants, name)

    def __getitem__(self, name: str) -> Constant:
        return self._constants[name]


c = _ConstantsProxy()
"""Constants of the current context."""


def get_constant(name: str) -> typing.Optional[Constant]:
    """Returns the `Constant` record of `name` in the current context, or None."""
    return c._constants.get_constant(name)
