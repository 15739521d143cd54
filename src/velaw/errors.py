class VelawError(Exception):
    """Base class for all velaw-related errors."""

    pass


class ValidationError(VelawError, ValueError):
    """Raised when input data fails validation checks."""

    pass


class ContractViolationError(VelawError, AssertionError):
    """
    Raised when a caller breaks the usage contract of a material law.

    This signals a programming error and is never recovered from inside the library.
    """

    pass


class NotFinalizedError(ContractViolationError):
    """Raised when a parameter is read before its parameter object was finalized."""

    pass


class FrozenParametersError(ContractViolationError):
    """Raised when a parameter object is modified after it was finalized."""

    pass


class PhaseCountError(ContractViolationError):
    """Raised when a container or fluid state does not hold exactly two phases."""

    pass


class UnsupportedOperationError(VelawError, NotImplementedError):
    """Raised when a property that is not modelled for a phase is requested."""

    pass


class ComputationError(VelawError):
    """Raised when there is an error during numerical computations."""

    pass
