"""
Error kinds raised by the red-eye pipeline
"""

from enum import Enum


class ErrorKind(Enum):
    INVALID_PARAMETER = "invalid_parameter"
    DEGENERATE_COMPUTATION = "degenerate_computation"
    INTERNAL_FAILURE = "internal_failure"


class RedEyeError(Exception):
    """Base class for every failure reported by the pipeline"""

    kind = ErrorKind.INTERNAL_FAILURE

    def __init__(self, message, stage=None):
        super().__init__(message)
        self.stage = stage

    def __str__(self):
        message = super().__str__()
        if self.stage:
            return f"[{self.stage}] {message}"
        return message


class InvalidParameterError(RedEyeError, ValueError):
    """Kernel larger than the image, malformed raster, out-of-range settings"""

    kind = ErrorKind.INVALID_PARAMETER


class DegenerateComputationError(RedEyeError):
    """Zero denominators or non-finite values produced by a conversion"""

    kind = ErrorKind.DEGENERATE_COMPUTATION


class InternalFailureError(RedEyeError):
    """Unexpected state inside the pipeline"""

    kind = ErrorKind.INTERNAL_FAILURE
