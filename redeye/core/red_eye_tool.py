"""
Red-eye removal pipeline

Locates the pixels whose CIE Lab chromaticity is close to a typical red-eye
color, cleans the resulting mask with blob analysis and recolors the masked
pixels toward a neutral gray that keeps the image's lightness.
"""

import logging

import numpy as np

from ..config import RedEyeConfig
from ..errors import DegenerateComputationError, InternalFailureError, InvalidParameterError
from ..filters.blob_map import BlobMap, fill_holes
from ..filters.convolution import ConvolutionEngine
from .color_space import chromaticity_distance, image_to_lab, lab_to_image
from .image_processor import ImageProcessor

logger = logging.getLogger(__name__)


class RedEyeTool:
    """
    Removes red eye from an image

    The tool holds only its (immutable) configuration; every intermediate
    raster belongs to a single process_image call.
    """

    def __init__(self, config=None):
        self.config = (config or RedEyeConfig()).validate()

    def process_image(self, image, debug_images=None):
        """
        Create a new image with the candidate red eye removed

        Args:
            image: uint8 RGB or RGBA image (H, W, 3|4)
            debug_images: Optional dict that receives the intermediate rasters

        Returns:
            Corrected image with the same shape as the input

        Raises:
            InvalidParameterError: bad input, or image smaller than the blur kernel
            DegenerateComputationError: a conversion produced non-finite values
            InternalFailureError: blob analysis ended in an impossible state
        """
        ImageProcessor.validate_image(image)
        height, width = image.shape[:2]
        logger.debug(f"Processing {width}x{height} image")

        lab, min_l, max_l = self.get_lab_image(image)

        redness_mask = self.get_mask_image(lab)

        threshold = self.threshold(redness_mask)

        blob_map = BlobMap(threshold)
        # diagnostic only
        false_color = blob_map.color_islands(threshold) if debug_images is not None else None

        no_small_islands = threshold.copy()
        try:
            blob_map.remove_small_islands(no_small_islands)
        except ValueError as e:
            raise InternalFailureError(str(e), stage="blob cleanup") from e
        if len(blob_map) > 1:
            raise InternalFailureError(
                f"{len(blob_map)} islands left after pruning", stage="blob cleanup"
            )
        logger.debug(f"Kept island: {blob_map.islands[0] if blob_map.islands else None}")

        no_holes = fill_holes(no_small_islands)

        alpha_mask = self._blur(no_holes, stage="soft edges")

        _, alpha = ImageProcessor.split_alpha(image)
        result = self.get_new_image(lab, min_l, max_l, alpha_mask, alpha)

        if debug_images is not None:
            debug_images.update({
                'lab_l': np.clip(np.rint(lab[..., 0] * 2.55), 0, 255).astype(np.uint8),
                'redness_mask': redness_mask,
                'threshold': threshold,
                'false_color': false_color,
                'no_small_islands': no_small_islands,
                'no_holes': no_holes,
                'alpha_mask': alpha_mask,
            })

        return result

    def get_lab_image(self, image):
        """Return the CIE Lab map of the image and its min/max L*"""
        lab, min_l, max_l = image_to_lab(image)

        if not np.all(np.isfinite(lab)):
            raise DegenerateComputationError("Lab conversion produced non-finite values", stage="lab map")

        logger.debug(f"Lab map: L* in [{min_l:.2f}, {max_l:.2f}]")
        return lab, min_l, max_l

    def get_chromaticity_distance_map(self, lab):
        """
        Chromaticity distance of every pixel from the reference red-eye color

        Returns:
            (distances, min_distance, max_distance)
        """
        distances = chromaticity_distance(
            lab[..., 1], lab[..., 2], self.config.reference_a, self.config.reference_b
        )
        return distances, float(distances.min()), float(distances.max())

    def get_mask_image(self, lab):
        """
        Gray level mask of 'redness'. Pixels farthest from red are black,
        pixels closest are white:

            mask = round(255 * (maxCD - cd) / (maxCD - minCD))
        """
        distances, min_cd, max_cd = self.get_chromaticity_distance_map(lab)
        logger.debug(f"Chromaticity distance in [{min_cd:.2f}, {max_cd:.2f}]")

        if max_cd <= min_cd:
            # every pixel has the same chromaticity, nothing stands out
            return np.zeros(distances.shape, dtype=np.uint8)

        temp = (max_cd - distances) / (max_cd - min_cd)
        return np.clip(np.rint(255.0 * temp), 0, 255).astype(np.uint8)

    def threshold(self, mask):
        """
        Binary version of the redness mask. After the hard threshold a small
        blur and a second threshold at the bottom of the range grow the mask
        by a pixel so isolated specks join their neighbors.
        """
        binary = ImageProcessor.threshold_binary(mask, self.config.mask_threshold)
        blurred = self._blur(binary, stage="threshold")
        return ImageProcessor.threshold_binary(blurred, self.config.denoise_threshold)

    def get_new_image(self, lab, min_l, max_l, mask, alpha=None):
        """
        Blend every pixel toward a gray target using the mask as weight

        target L* = maxL / (maxL - minL) * (L* - minL), a* = b* = 0
        pixel     = target * m + original * (1 - m), m = mask / 255
        """
        if max_l > min_l:
            target_l = (max_l / (max_l - min_l)) * (lab[..., 0] - min_l)
        else:
            # flat lightness, nothing to stretch
            target_l = lab[..., 0]

        m = mask.astype(np.float64) / 255.0
        blended = np.empty_like(lab)
        blended[..., 0] = target_l * m + lab[..., 0] * (1.0 - m)
        blended[..., 1] = lab[..., 1] * (1.0 - m)
        blended[..., 2] = lab[..., 2] * (1.0 - m)

        if not np.all(np.isfinite(blended)):
            raise DegenerateComputationError("Blended Lab map has non-finite values", stage="recolor")

        return lab_to_image(blended, alpha)

    def _blur(self, mask, stage):
        kernel = ConvolutionEngine.gaussian_kernel(self.config.blur_size, self.config.blur_amount)
        if kernel is None:
            raise DegenerateComputationError(
                f"Cannot build a {self.config.blur_size}x{self.config.blur_size} Gaussian kernel",
                stage=stage,
            )

        blurred = ConvolutionEngine.convolve2d(mask, kernel, self.config.blur_size)
        if blurred is None:
            height, width = mask.shape[:2]
            raise InvalidParameterError(
                f"Image {width}x{height} is smaller than the "
                f"{self.config.blur_size}x{self.config.blur_size} blur kernel",
                stage=stage,
            )
        return blurred
