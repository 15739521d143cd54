import attrs

from velaw.constants import Constants


__all__ = ["Config"]


@attrs.frozen
class Config:
    """Evaluation options of a material law model."""

    constants: Constants = attrs.field(factory=Constants)
    """Physical constants and model defaults active while the model evaluates."""
    clamp_interface_heights: bool = True
    """
    Whether to clamp the vertical-equilibrium interface heights so that `0 <= h <= hmax <= H`.

    The raw height formulas leave this range when the current saturation falls below the
    trapped residual of the historical maximum, or when the historical maximum exceeds the
    mobile saturation range. Inside the admissible range clamping has no effect.
    """
    warn_on_saturation_inversion: bool = True
    """
    Whether to warn when saturations are inverted from capillary pressure with the
    vertical-equilibrium law, which ignores the height model for that operation.
    """
    history_tolerance: float = attrs.field(
        default=0.0, validator=attrs.validators.ge(0.0)
    )
    """Saturation increase required before the historical maximum saturation moves."""
