"""
Raster helpers: validation, alpha handling, thresholding and image I/O.
"""

import logging

import cv2
import numpy as np

from ..errors import InvalidParameterError

logger = logging.getLogger(__name__)


class ImageProcessor:
    """Basic raster operations shared by the pipeline stages"""

    @staticmethod
    def validate_image(image, allow_gray=False):
        """Check that image is a non-empty 8-bit RGB/RGBA (or gray) raster"""
        if not isinstance(image, np.ndarray):
            raise InvalidParameterError(f"Expected a numpy array, got {type(image).__name__}")
        if image.dtype != np.uint8:
            raise InvalidParameterError(f"Expected uint8 pixels, got {image.dtype}")

        if image.ndim == 2:
            if not allow_gray:
                raise InvalidParameterError("Expected a color image, got a single channel raster")
        elif image.ndim != 3 or image.shape[2] not in (3, 4):
            raise InvalidParameterError(f"Unsupported image shape {image.shape}")

        if image.shape[0] == 0 or image.shape[1] == 0:
            raise InvalidParameterError(f"Image has no pixels: {image.shape}")

        return image

    @staticmethod
    def split_alpha(image):
        """Return (rgb, alpha) where alpha is None for 3 channel images"""
        if image.ndim == 3 and image.shape[2] == 4:
            return image[..., :3], image[..., 3]
        return image, None

    @staticmethod
    def threshold_binary(image, thresh, max_val=255):
        """Simple binary thresholding: values above thresh become max_val"""
        result = np.zeros_like(image)
        result[image > thresh] = max_val
        return result

    @staticmethod
    def load_image(image_path):
        """Load an image as RGB or RGBA using OpenCV"""
        img = cv2.imread(str(image_path), cv2.IMREAD_UNCHANGED)

        if img is None:
            raise InvalidParameterError(f"Failed to load image from {image_path}")

        if img.dtype != np.uint8:
            # 16 bit PNG/TIFF
            img = (img / 257).astype(np.uint8)

        if img.ndim == 2:
            return cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
        if img.shape[2] == 4:
            return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
        return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)

    @staticmethod
    def save_image(image_path, image):
        """Save an RGB/RGBA (or gray) image using OpenCV"""
        if image.ndim == 2:
            out = image
        elif image.shape[2] == 4:
            out = cv2.cvtColor(image, cv2.COLOR_RGBA2BGRA)
        else:
            out = cv2.cvtColor(image, cv2.COLOR_RGB2BGR)

        if not cv2.imwrite(str(image_path), out):
            raise InvalidParameterError(f"Failed to save image to {image_path}")

        logger.debug(f"Saved {image.shape} image to {image_path}")
