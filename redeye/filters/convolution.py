"""
Convolution kernels and filters: Gaussian blur, sharpen, unsharp,
generic NxN convolution and a separable integer-weighted blur
"""

import logging
import math
from typing import NamedTuple

import numpy as np

logger = logging.getLogger(__name__)

MAX_BLUR_RADIUS = 16
MAX_UNSHARP_DEPTH = 4

# Widest filter vector separable_blur will build
MAX_FILTER_DIM = MAX_BLUR_RADIUS * 5 + 1

_UNSHARP_DENOMINATOR = 10000


class FilterVector(NamedTuple):
    """Integer weights of a 1-D Gaussian and the sum of those weights"""
    weights: np.ndarray
    denominator: int

    @property
    def half_width(self):
        return len(self.weights) // 2


class ConvolutionEngine:
    """
    Kernel generators and convolution algorithms

    Kernel functions never raise on bad parameters: they log a warning and
    return None so callers can decide whether that is fatal.
    """

    @staticmethod
    def gaussian_kernel(size, amount):
        """
        Create a size x size Gaussian blur kernel

        Args:
            size: Kernel diameter, must be odd (3, 5, 7, ...)
            amount: Controls the standard deviation (sd = amount / 20).
                    Useful range is 1..100, size 3 with amount 15 is a good default

        Returns:
            float32 kernel whose weights sum to 1, or None
        """
        if size < 1 or size % 2 == 0:
            logger.warning(f"gaussian_kernel: size must be odd and positive, got {size}")
            return None
        if amount <= 0:
            logger.warning(f"gaussian_kernel: amount must be positive, got {amount}")
            return None

        standard_deviation = amount / 20.0
        nominator = 2.0 * standard_deviation * standard_deviation
        center = (size - 1) // 2

        # One octant is computed, everything else is a mirror of it
        quadrant = np.zeros((center + 1, center + 1), dtype=np.float64)
        for y in range(center + 1):
            for x in range(y, center + 1):
                xx = center - x
                yy = center - y
                value = math.exp(-(xx * xx + yy * yy) / nominator)
                quadrant[y, x] = value
                quadrant[x, y] = value

        top = np.hstack([quadrant, quadrant[:, -2::-1]])
        kernel = np.vstack([top, top[-2::-1, :]])

        total = kernel.sum()
        if total <= 0:
            logger.warning("gaussian_kernel: weights underflowed to zero")
            return None

        return (kernel / total).astype(np.float32)

    @staticmethod
    def sharpen_kernel(amount):
        """3x3 sharpening kernel, amount in 1..100"""
        corner = 0.0
        side = amount / -50.0
        center = (side * -4.0) + (corner * -4.0) + 1.0

        return np.array([
            [corner, side, corner],
            [side, center, side],
            [corner, side, corner],
        ], dtype=np.float32)

    @staticmethod
    def unsharp_kernel(size, amount):
        """Center biased, inverse blur kernel built from a Gaussian"""
        kernel = ConvolutionEngine.gaussian_kernel(size, amount)
        if kernel is None:
            return None

        center = (size - 1) // 2
        kernel[center, center] = 0.0
        total = kernel.sum()
        kernel = -kernel
        kernel[center, center] = total + 1.0

        return kernel

    @staticmethod
    def convolve2d(source, kernel, size=None):
        """
        Full (non separable) convolution of every channel

        Pixels closer than (size - 1) / 2 to a border are not computed and
        are left at 0 in the result. Interior values are rounded to the
        nearest integer rather than truncated, so results can be 1 higher
        than a truncating implementation.

        Args:
            source: uint8 raster, (H, W) or (H, W, C)
            kernel: size x size weights (a flat sequence is reshaped)
            size: Kernel diameter, taken from the kernel when omitted

        Returns:
            uint8 raster of the same shape, or None when the image is smaller
            than the kernel or the kernel weights sum to zero
        """
        kernel = np.asarray(kernel, dtype=np.float64)
        if size is None:
            size = kernel.shape[0]
        if size < 1 or size % 2 == 0 or kernel.size != size * size:
            logger.warning(f"convolve2d: invalid kernel of size {size} with {kernel.size} weights")
            return None
        kernel = kernel.reshape(size, size)

        h, w = source.shape[:2]
        if w < size or h < size:
            logger.warning(f"convolve2d: image {w}x{h} is smaller than the {size}x{size} kernel")
            return None

        ksum = kernel.sum()
        if ksum == 0:
            logger.warning("convolve2d: kernel weights sum to zero")
            return None

        hw = (size - 1) // 2
        src = source.astype(np.float64)
        acc = np.zeros((h - 2 * hw, w - 2 * hw) + source.shape[2:], dtype=np.float64)

        for j in range(size):
            for i in range(size):
                k = kernel[j, i]
                if k == 0:
                    continue
                # kernel[j, i] weighs the pixel at offset (hw - i, hw - j)
                yp = hw - j
                xp = hw - i
                acc += k * src[hw + yp:h - hw + yp, hw + xp:w - hw + xp]

        destination = np.zeros_like(source, dtype=np.uint8)
        destination[hw:h - hw, hw:w - hw] = np.clip(np.rint(acc / ksum), 0, 255)

        return destination

    @staticmethod
    def compute_filter_vector(radius):
        """
        Build the integer filter vector used by separable_blur

        The effective diameter is 5 * radius + 1 pixels (forced odd); weights
        outside it are taken as zero.

        Returns:
            FilterVector, or None for a negative or too large radius
        """
        if not math.isfinite(radius) or radius < 0:
            logger.warning(f"compute_filter_vector: invalid radius {radius}")
            return None

        d = int(5.0 * radius + 1.0)
        if d > MAX_FILTER_DIM:
            logger.warning(f"compute_filter_vector: radius {radius} too large")
            return None
        d |= 1

        if d <= 1:
            # radius 0, no convolution
            return FilterVector(np.ones(1, dtype=np.int64), 1)

        half = d // 2
        num = 2.0 * radius * radius
        f = math.exp(half * half / num)

        weights = np.zeros(d, dtype=np.int64)
        denominator = int(f)
        weights[half] = denominator

        for i in range(1, half + 1):
            v = int(f * math.exp(-(i * i) / num))
            weights[half - i] = v
            weights[half + i] = v
            denominator += 2 * v

        return FilterVector(weights, denominator)

    @staticmethod
    def convolve_dimension(source, filter_vector, axis):
        """
        Convolve every line of source along one axis with filter_vector

        Interior pixels see the whole vector and so divide by its
        denominator. Near the ends of a line only the in-bounds weights are
        used and the divisor is their sum.
        """
        if len(filter_vector.weights) <= 1:
            return source.copy()

        n = source.shape[axis]
        half = min(filter_vector.half_width, n // 2)
        start = filter_vector.half_width - half
        weights = filter_vector.weights[start:start + 2 * half + 1]

        if half == 0:
            return source.copy()

        src = np.moveaxis(source, axis, 0).astype(np.int64)
        acc = np.zeros_like(src)
        denom = np.zeros(n, dtype=np.int64)

        for k in range(-half, half + 1):
            weight = weights[k + half]
            lo = max(0, -k)
            hi = min(n, n - k)
            acc[lo:hi] += weight * src[lo + k:hi + k]
            denom[lo:hi] += weight

        denom = np.maximum(denom, 1).reshape((n,) + (1,) * (src.ndim - 1))
        result = (acc // denom).astype(np.uint8)

        return np.moveaxis(result, 0, axis)

    @staticmethod
    def separable_blur(source, radius):
        """
        Gaussian blur as a horizontal pass followed by a vertical pass

        Args:
            source: uint8 raster, (H, W) or (H, W, C)
            radius: Blur radius, clamped to 0..MAX_BLUR_RADIUS

        Returns:
            Blurred uint8 raster, or None for a negative radius
        """
        if not math.isfinite(radius) or radius < 0:
            logger.warning(f"separable_blur: invalid radius {radius}")
            return None

        filter_vector = ConvolutionEngine.compute_filter_vector(min(radius, MAX_BLUR_RADIUS))
        if filter_vector is None:
            return None

        horizontal = ConvolutionEngine.convolve_dimension(source, filter_vector, axis=1)
        return ConvolutionEngine.convolve_dimension(horizontal, filter_vector, axis=0)

    @staticmethod
    def unsharp_mask(source, radius, depth):
        """
        Sharpen by subtracting a blurred copy from the original

        Args:
            source: uint8 raster, (H, W) or (H, W, C)
            radius: Blur radius, 0..MAX_BLUR_RADIUS
            depth: Strength, 0..MAX_UNSHARP_DEPTH

        Returns:
            Sharpened uint8 raster (alpha untouched), or None
        """
        if not 0 <= depth <= MAX_UNSHARP_DEPTH:
            logger.warning(f"unsharp_mask: depth must be in [0, {MAX_UNSHARP_DEPTH}], got {depth}")
            return None

        blurred = ConvolutionEngine.separable_blur(source, radius)
        if blurred is None:
            return None

        dpt = int(_UNSHARP_DENOMINATOR * depth)
        dptplus = dpt + _UNSHARP_DENOMINATOR

        result = source.copy()
        if source.ndim == 3 and source.shape[2] == 4:
            color = slice(0, 3)
        else:
            color = slice(None)

        v = dptplus * source[..., color].astype(np.int64) - dpt * blurred[..., color].astype(np.int64)
        result[..., color] = np.clip(v // _UNSHARP_DENOMINATOR, 0, 255)

        return result

    @staticmethod
    def sharpen(source, amount):
        """Convolve with sharpen_kernel(amount)"""
        return ConvolutionEngine.convolve2d(source, ConvolutionEngine.sharpen_kernel(amount), 3)
