"""
redeye: Automatic red-eye detection and correction
"""

__version__ = "1.0.0"
__author__ = "PhotoRefine Team"

from .config import RedEyeConfig, load_config
from .core.red_eye_tool import RedEyeTool
from .errors import (
    DegenerateComputationError,
    ErrorKind,
    InternalFailureError,
    InvalidParameterError,
    RedEyeError,
)

__all__ = [
    'RedEyeTool', 'RedEyeConfig', 'load_config', 'ErrorKind', 'RedEyeError',
    'InvalidParameterError', 'DegenerateComputationError', 'InternalFailureError',
]
