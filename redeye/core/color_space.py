"""
Color space conversions: RGB <-> HSL, sRGB <-> CIE XYZ <-> CIE L*a*b*,
and chromaticity distance in the a*b* plane.

RGB channel values are floats in 0..1, hue is in degrees (0..360), XYZ is
scaled so that the D65 reference white has Y = 100.
"""

import logging
from typing import NamedTuple

import numpy as np

logger = logging.getLogger(__name__)

# CIE illuminant D65, 2 degree observer
REF_X = 95.047
REF_Y = 100.000
REF_Z = 108.883

RGB_TO_XYZ = np.array([
    [0.4124, 0.3576, 0.1805],
    [0.2126, 0.7152, 0.0722],
    [0.0193, 0.1192, 0.9505],
])

XYZ_TO_RGB = np.array([
    [3.2406, -1.5372, -0.4986],
    [-0.9689, 1.8758, 0.0415],
    [0.0557, -0.2040, 1.0570],
])

_LAB_EPSILON = 0.008856
_LAB_KAPPA = 7.787
_LAB_OFFSET = 16.0 / 116.0


class HSL(NamedTuple):
    h: float
    s: float
    l: float
    defined: bool = True


class RGB(NamedTuple):
    r: float
    g: float
    b: float
    defined: bool = True


class LabPixel(NamedTuple):
    L: float
    a: float
    b: float


def _unwrap(value):
    """Return plain floats for scalar input, arrays otherwise"""
    if np.ndim(value) == 0:
        return float(value)
    return value


def rgb_to_hsl(r, g, b):
    """
    RGB to HSL conversion (Graphics Gems I, p. 448)

    Args:
        r, g, b: Channel values in 0..1

    Returns:
        HSL tuple. ``defined`` is False when the input is out of range,
        black, or achromatic; hue and saturation are then 0.
    """
    if not (0.0 <= r <= 1.0 and 0.0 <= g <= 1.0 and 0.0 <= b <= 1.0):
        logger.warning(f"rgb_to_hsl: input out of range ({r}, {g}, {b})")
        return HSL(0.0, 0.0, 0.0, False)

    v = max(r, g, b)
    m = min(r, g, b)

    l = (m + v) / 2.0
    if l <= 0.0:
        return HSL(0.0, 0.0, 0.0, False)

    vm = v - m
    if vm <= 0.0:
        # gray, hue is meaningless
        return HSL(0.0, 0.0, l, False)

    s = vm / ((v + m) if l <= 0.5 else (2.0 - v - m))

    r2 = (v - r) / vm
    g2 = (v - g) / vm
    b2 = (v - b) / vm

    if r == v:
        h = 5.0 + b2 if g == m else 1.0 - g2
    elif g == v:
        h = 1.0 + r2 if b == m else 3.0 - b2
    else:
        h = 3.0 + g2 if r == m else 5.0 - r2

    return HSL(h / 6.0 * 360.0, s, l)


def hsl_to_rgb(h, s, l):
    """
    HSL to RGB conversion using the sextant method (Graphics Gems I, p. 448)

    Args:
        h: Hue in degrees, 0..360
        s: Saturation, 0..1
        l: Lightness, 0..1

    Returns:
        RGB tuple, ``defined`` False on out-of-range input or black
    """
    if not (0.0 <= h <= 360.0 and 0.0 <= s <= 1.0 and 0.0 <= l <= 1.0):
        logger.warning(f"hsl_to_rgb: input out of range ({h}, {s}, {l})")
        return RGB(0.0, 0.0, 0.0, False)

    v = l * (1.0 + s) if l <= 0.5 else l + s - l * s
    if v <= 0.0:
        return RGB(0.0, 0.0, 0.0, False)

    m = l + l - v
    sv = (v - m) / v
    hue = h / 360.0 * 6.0
    sextant = int(hue)
    fract = hue - sextant
    vsf = v * sv * fract
    mid1 = m + vsf
    mid2 = v - vsf

    if sextant == 0 or sextant == 6:
        # sextant 6 only happens for a hue of exactly 360
        return RGB(v, mid1, m)
    elif sextant == 1:
        return RGB(mid2, v, m)
    elif sextant == 2:
        return RGB(m, v, mid1)
    elif sextant == 3:
        return RGB(m, mid2, v)
    elif sextant == 4:
        return RGB(mid1, m, v)
    return RGB(v, m, mid2)


def _srgb_decode(c):
    c = np.asarray(c, dtype=np.float64)
    return np.where(c > 0.04045, np.power((np.maximum(c, 0.04045) + 0.055) / 1.055, 2.4), c / 12.92)


def _srgb_encode(c):
    return np.where(c > 0.0031308, 1.055 * np.power(np.maximum(c, 0.0031308), 1.0 / 2.4) - 0.055, 12.92 * c)


def rgb_to_cie_xyz(r, g, b):
    """
    Convert sRGB (0..1) to CIE XYZ (D65, 2 degree observer)

    Accepts scalars or numpy arrays of matching shape.
    """
    var_r = _srgb_decode(r) * 100.0
    var_g = _srgb_decode(g) * 100.0
    var_b = _srgb_decode(b) * 100.0

    x = var_r * RGB_TO_XYZ[0, 0] + var_g * RGB_TO_XYZ[0, 1] + var_b * RGB_TO_XYZ[0, 2]
    y = var_r * RGB_TO_XYZ[1, 0] + var_g * RGB_TO_XYZ[1, 1] + var_b * RGB_TO_XYZ[1, 2]
    z = var_r * RGB_TO_XYZ[2, 0] + var_g * RGB_TO_XYZ[2, 1] + var_b * RGB_TO_XYZ[2, 2]

    return _unwrap(x), _unwrap(y), _unwrap(z)


def cie_xyz_to_rgb(x, y, z):
    """
    Convert CIE XYZ to sRGB. The result is not clamped, callers quantizing
    to 8 bits clamp to 0..1 themselves.
    """
    var_x = np.asarray(x, dtype=np.float64) / 100.0
    var_y = np.asarray(y, dtype=np.float64) / 100.0
    var_z = np.asarray(z, dtype=np.float64) / 100.0

    r = var_x * XYZ_TO_RGB[0, 0] + var_y * XYZ_TO_RGB[0, 1] + var_z * XYZ_TO_RGB[0, 2]
    g = var_x * XYZ_TO_RGB[1, 0] + var_y * XYZ_TO_RGB[1, 1] + var_z * XYZ_TO_RGB[1, 2]
    b = var_x * XYZ_TO_RGB[2, 0] + var_y * XYZ_TO_RGB[2, 1] + var_z * XYZ_TO_RGB[2, 2]

    return _unwrap(_srgb_encode(r)), _unwrap(_srgb_encode(g)), _unwrap(_srgb_encode(b))


def _lab_forward(t):
    return np.where(t > _LAB_EPSILON, np.cbrt(t), _LAB_KAPPA * t + _LAB_OFFSET)


def _lab_inverse(t):
    cubed = t ** 3
    return np.where(cubed > _LAB_EPSILON, cubed, (t - _LAB_OFFSET) / _LAB_KAPPA)


def cie_xyz_to_lab(x, y, z):
    """Convert CIE XYZ to CIE L*a*b* relative to the D65 white point"""
    var_x = _lab_forward(np.asarray(x, dtype=np.float64) / REF_X)
    var_y = _lab_forward(np.asarray(y, dtype=np.float64) / REF_Y)
    var_z = _lab_forward(np.asarray(z, dtype=np.float64) / REF_Z)

    L = 116.0 * var_y - 16.0
    a = 500.0 * (var_x - var_y)
    b = 200.0 * (var_y - var_z)

    return _unwrap(L), _unwrap(a), _unwrap(b)


def lab_to_cie_xyz(L, a, b):
    """Convert CIE L*a*b* to CIE XYZ relative to the D65 white point"""
    var_y = (np.asarray(L, dtype=np.float64) + 16.0) / 116.0
    var_x = np.asarray(a, dtype=np.float64) / 500.0 + var_y
    var_z = var_y - np.asarray(b, dtype=np.float64) / 200.0

    x = REF_X * _lab_inverse(var_x)
    y = REF_Y * _lab_inverse(var_y)
    z = REF_Z * _lab_inverse(var_z)

    return _unwrap(x), _unwrap(y), _unwrap(z)


def chromaticity_distance(a1, b1, a2, b2):
    """Euclidean distance between two colors in the a*b* plane, ignoring L*"""
    a1 = np.asarray(a1, dtype=np.float64)
    b1 = np.asarray(b1, dtype=np.float64)
    return _unwrap(np.sqrt((a2 - a1) ** 2 + (b2 - b1) ** 2))


def rgb_to_lab(r, g, b):
    """Shortcut for sRGB (0..1) -> XYZ -> L*a*b*, returned as a LabPixel"""
    return LabPixel(*cie_xyz_to_lab(*rgb_to_cie_xyz(r, g, b)))


def lab_to_rgb(L, a, b):
    """Shortcut for L*a*b* -> XYZ -> sRGB (0..1, unclamped)"""
    return cie_xyz_to_rgb(*lab_to_cie_xyz(L, a, b))


def image_to_lab(image):
    """
    Convert an 8-bit RGB(A) image to a CIE Lab map. Alpha is ignored.

    Returns:
        (lab, min_l, max_l) where lab is a float64 array of shape (H, W, 3)
    """
    rgb = image[..., :3].astype(np.float64) / 255.0
    L, a, b = rgb_to_lab(rgb[..., 0], rgb[..., 1], rgb[..., 2])
    lab = np.stack([L, a, b], axis=-1)

    return lab, float(L.min()), float(L.max())


def lab_to_image(lab, alpha=None):
    """
    Convert a CIE Lab map back to an 8-bit image. Channels are rounded to
    the nearest level, not truncated.

    Args:
        lab: float array of shape (H, W, 3)
        alpha: Optional (H, W) alpha channel copied into an RGBA result

    Returns:
        uint8 RGB image, or RGBA when alpha is given
    """
    r, g, b = lab_to_rgb(lab[..., 0], lab[..., 1], lab[..., 2])
    rgb = np.stack([r, g, b], axis=-1)
    rgb = np.clip(np.rint(rgb * 255.0), 0, 255).astype(np.uint8)

    if alpha is None:
        return rgb
    return np.dstack([rgb, alpha.astype(np.uint8)])
