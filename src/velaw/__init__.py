"""
*VELAW*

Regularized Brooks-Corey capillary pressure / relative permeability laws with
vertical-equilibrium upscaling for two-phase flow in porous media.
"""

from ._precision import *  # noqa
from .errors import *  # noqa
from .constants import *  # noqa
from .types import *  # noqa
from .config import *  # noqa
from .params import *  # noqa
from .brooks_corey import *  # noqa
from .vertical_equilibrium import *  # noqa
from .history import *  # noqa
from .fluid_state import *  # noqa
from .components import *  # noqa
from .binary_coefficients import *  # noqa
from .utils import *  # noqa
