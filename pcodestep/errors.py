class PcodeStepperError(Exception):
    """Base class for errors surfaced to callers of the stepper."""


class TypeResolutionError(PcodeStepperError):
    """Raised when a data type cannot be resolved against the type catalog."""
