"""Floating point precision of array outputs."""

from contextlib import contextmanager
from contextvars import ContextVar

import numpy as np


__all__ = [
    "get_dtype",
    "set_dtype",
    "with_precision",
    "use_64bit_precision",
    "use_32bit_precision",
    "get_floating_point_info",
]

_array_dtype: ContextVar[np.typing.DTypeLike] = ContextVar(
    "_array_dtype", default=np.float64
)


def get_dtype() -> np.typing.DTypeLike:
    """
    Returns the dtype that array inputs are converted to before the law kernels run.

    Scalar evaluations always use Python floats.
    """
    return _array_dtype.get()


def set_dtype(dtype: np.typing.DTypeLike) -> None:
    """
    Set the array dtype for the current context.

    :param dtype: `np.float32` or `np.float64`.
    """
    _array_dtype.set(dtype)


@contextmanager
def with_precision(dtype: np.typing.DTypeLike):
    """
    Evaluate the material laws with array inputs of `dtype` inside the block.

    Example:
    ```python
    with with_precision(np.float32):
        values = new_phase_values((nx, ny))
        relative_permeabilities(values, params, fluid_state)
    ```
    """
    token = _array_dtype.set(dtype)
    try:
        yield
    finally:
        _array_dtype.reset(token)


def use_64bit_precision() -> None:
    set_dtype(np.float64)


def use_32bit_precision() -> None:
    set_dtype(np.float32)


def get_floating_point_info() -> np.finfo:
    """Machine limits of the current array dtype."""
    return np.finfo(get_dtype())  # type: ignore
