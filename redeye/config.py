"""
Pipeline settings and JSON config loading
"""

import json
import math
from dataclasses import asdict, dataclass, fields, replace
from numbers import Integral, Real
from pathlib import Path

from .errors import InvalidParameterError


@dataclass(frozen=True)
class RedEyeConfig:
    """
    Constants used by the red-eye pipeline

    The reference color is the 'typical' red-eye color recorded in CIE Lab.
    Only its a*/b* components take part in the chromaticity distance; L* is
    kept for reference.
    """
    reference_l: float = 42.0       # informational only, L* does not enter the distance
    reference_a: float = 62.0
    reference_b: float = 30.0
    mask_threshold: int = 175       # redness mask -> binary
    denoise_threshold: int = 1      # blurred binary mask -> binary
    blur_size: int = 3
    blur_amount: int = 15

    def validate(self):
        """Raise InvalidParameterError when a setting has the wrong type or is out of range"""
        for name in ('blur_size', 'mask_threshold', 'denoise_threshold'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Integral):
                raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
        for name in ('blur_amount', 'reference_l', 'reference_a', 'reference_b'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
                raise InvalidParameterError(f"{name} must be a finite number, got {value!r}")

        if self.blur_size < 1 or self.blur_size % 2 == 0:
            raise InvalidParameterError(f"blur_size must be odd and >= 1, got {self.blur_size}")
        if self.blur_amount <= 0:
            raise InvalidParameterError(f"blur_amount must be positive, got {self.blur_amount}")
        for name in ('mask_threshold', 'denoise_threshold'):
            value = getattr(self, name)
            if not 0 <= value <= 254:
                raise InvalidParameterError(f"{name} must be in [0, 254], got {value}")
        return self

    def to_dict(self):
        return asdict(self)


def _unknown_keys(data):
    known = {f.name for f in fields(RedEyeConfig)}
    return sorted(key for key in data if key not in known)


def load_config(path=None, overrides=None):
    """
    Build a validated RedEyeConfig

    Args:
        path: Optional JSON file holding an object of settings
        overrides: Optional dict applied after the file

    Returns:
        RedEyeConfig
    """
    values = {}

    if path is not None:
        path = Path(path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidParameterError(f"Cannot read config {path}: {e}") from e
        if not isinstance(data, dict):
            raise InvalidParameterError(f"Config {path} must contain a JSON object")
        values.update(data)

    if overrides:
        values.update(overrides)

    unknown = _unknown_keys(values)
    if unknown:
        raise InvalidParameterError(f"Unknown config keys: {', '.join(unknown)}")

    return replace(RedEyeConfig(), **values).validate()
