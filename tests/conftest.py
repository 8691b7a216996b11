import logging

import numpy as np
import pytest

from redeye.core.color_space import lab_to_rgb

# 'typical' red-eye color in CIE Lab
RED_EYE_LAB = (42.0, 62.0, 30.0)


def red_eye_rgb():
    r, g, b = lab_to_rgb(*RED_EYE_LAB)
    return tuple(int(round(min(1.0, max(0.0, c)) * 255)) for c in (r, g, b))


@pytest.fixture
def black_image():
    # opaque 20x20 black image
    image = np.zeros((20, 20, 4), dtype=np.uint8)
    image[..., 3] = 255
    return image


@pytest.fixture
def red_patch_image():
    """25x25 green image with a 5x5 red-eye patch at (10..14, 10..14)"""
    image = np.zeros((25, 25, 4), dtype=np.uint8)
    image[..., :3] = (30, 160, 40)
    image[..., 3] = 255
    image[10:15, 10:15, :3] = red_eye_rgb()
    return image


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
