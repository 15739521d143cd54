"""Tracking of the historical maximum non-wetting saturation per cell."""

import logging
import typing

import attrs
import numba
import numpy as np
from typing_extensions import Self

from velaw._precision import get_dtype
from velaw.errors import ValidationError
from velaw.types import FloatOrArray


logger = logging.getLogger(__name__)

__all__ = ["SaturationHistory", "update_max_saturation"]


@numba.njit(cache=True)
def _update_max_saturation(
    saturation: np.ndarray,
    max_saturation: np.ndarray,
    imbibition_flags: np.ndarray,
    tolerance: float,
) -> typing.Tuple[np.ndarray, np.ndarray, int]:
    flat_saturation = saturation.ravel()
    new_max_saturation = max_saturation.ravel().copy()
    new_imbibition_flags = imbibition_flags.ravel().copy()
    raised = 0
    for idx in range(flat_saturation.size):
        S = flat_saturation[idx]
        S_max = new_max_saturation[idx]
        if S > S_max + tolerance:
            # Drainage: non-wetting phase advances, maximum moves up
            new_max_saturation[idx] = S
            new_imbibition_flags[idx] = False
            raised += 1
        elif S < S_max - tolerance:
            # Imbibition: wetting phase re-enters, non-wetting phase gets trapped
            new_imbibition_flags[idx] = True
    return (
        new_max_saturation.reshape(max_saturation.shape),
        new_imbibition_flags.reshape(imbibition_flags.shape),
        raised,
    )


def update_max_saturation(
    saturation: FloatOrArray,
    max_saturation: FloatOrArray,
    tolerance: float = 0.0,
) -> FloatOrArray:
    """
    Returns the historical maximum non-wetting saturation after observing `saturation`.

    The maximum only moves when the saturation exceeds it by more than `tolerance`.

    :param saturation: Current non-wetting saturation - scalar or array.
    :param max_saturation: Historical maximum so far - scalar or array.
    :param tolerance: Required increase before the maximum moves.
    :return: Updated maximum, matching the input type.
    """
    saturation = np.asarray(saturation, dtype=get_dtype())
    max_saturation = np.broadcast_to(
        np.asarray(max_saturation, dtype=get_dtype()), saturation.shape
    )
    updated = np.where(saturation > max_saturation + tolerance, saturation, max_saturation)
    if updated.ndim == 0:
        return float(updated)
    return updated


@attrs.frozen(slots=True)
class SaturationHistory:
    """
    Historical maximum non-wetting saturation and displacement regime of each cell.

    The flow solver owns one history per run and replaces it after every accepted time step.
    """

    max_saturation_grid: np.ndarray
    """Maximum non-wetting saturation reached (historical)"""
    imbibition_flag_grid: np.ndarray
    """Flag grid indicating if the cell is currently imbibing (True) or draining (False)"""

    def __attrs_post_init__(self) -> None:
        if self.max_saturation_grid.shape != self.imbibition_flag_grid.shape:
            raise ValidationError(
                "Saturation history grids must have the same shape. "
                f"Got {self.max_saturation_grid.shape} vs {self.imbibition_flag_grid.shape}"
            )

    @classmethod
    def from_initial_saturation(cls, saturation_grid: FloatOrArray) -> Self:
        """
        Create a `SaturationHistory` from the initial non-wetting saturation.

        :param saturation_grid: Initial non-wetting saturation per cell (fraction).
        :return: History with the initial saturation as maximum and all cells draining.
        """
        max_saturation_grid = np.array(saturation_grid, dtype=get_dtype(), ndmin=1)
        return cls(
            max_saturation_grid=max_saturation_grid,
            imbibition_flag_grid=np.zeros_like(max_saturation_grid, dtype=bool),
        )

    def update(self, saturation_grid: FloatOrArray, tolerance: float = 0.0) -> Self:
        """
        Observe a new non-wetting saturation and return the updated history.

        :param saturation_grid: Current non-wetting saturation per cell (fraction).
        :param tolerance: Saturation change below which the cell keeps its regime.
        :return: New `SaturationHistory`.
        """
        if tolerance < 0.0:
            raise ValidationError(f"Tolerance must be non-negative, got {tolerance}")

        saturation_grid = np.array(
            saturation_grid, dtype=self.max_saturation_grid.dtype, ndmin=1
        )
        if saturation_grid.shape != self.max_saturation_grid.shape:
            raise ValidationError(
                f"Saturation grid shape {saturation_grid.shape} does not match "
                f"history shape {self.max_saturation_grid.shape}"
            )
        max_saturation_grid, imbibition_flag_grid, raised = _update_max_saturation(
            saturation_grid,
            self.max_saturation_grid,
            self.imbibition_flag_grid,
            tolerance,
        )
        logger.debug(
            "Historical maximum saturation raised in %d of %d cells",
            raised,
            saturation_grid.size,
        )
        return type(self)(
            max_saturation_grid=max_saturation_grid,
            imbibition_flag_grid=imbibition_flag_grid,
        )
