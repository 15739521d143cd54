import typing

import numba
import numpy as np

from velaw._precision import get_dtype
from velaw.errors import PhaseCountError
from velaw.types import NUM_PHASES, FloatOrArray, PhaseValues


__all__ = [
    "clip",
    "as_float_or_array",
    "unwrap_scalar",
    "check_phase_count",
    "new_phase_values",
]


@numba.vectorize(cache=True)
def clip(val, min_, max_):
    return np.maximum(np.minimum(val, max_), min_)


def as_float_or_array(value: typing.Any) -> FloatOrArray:
    """
    Normalize a scalar or array-like input for the numba kernels.

    Scalars become Python floats, everything else becomes an array of the current precision.
    """
    if np.isscalar(value) or np.ndim(value) == 0:
        return float(value)
    return np.asarray(value, dtype=get_dtype())


def unwrap_scalar(value: typing.Any) -> FloatOrArray:
    """Return numpy scalars and 0-d arrays produced by ufuncs as Python floats."""
    if np.ndim(value) == 0:
        return float(value)
    return value


def check_phase_count(values: PhaseValues) -> None:
    """
    Check that an output container holds exactly one entry per phase.

    :param values: List or array indexed by `Phase` along its leading axis.
    :raises PhaseCountError: If the container does not have exactly two entries.
    """
    try:
        count = len(values)
    except TypeError:
        raise PhaseCountError(
            f"Phase container of type {type(values).__name__!r} has no length"
        ) from None
    if count != NUM_PHASES:
        raise PhaseCountError(
            f"Expected a container with {NUM_PHASES} phase entries, got {count}."
        )


def new_phase_values(shape: typing.Tuple[int, ...] = ()) -> np.typing.NDArray:
    """
    Allocate an output container for per-phase values.

    :param shape: Shape of the per-phase values, `()` for scalars.
    :return: Zero array of shape `(2, *shape)` in the current precision.
    """
    return np.zeros((NUM_PHASES, *shape), dtype=get_dtype())
