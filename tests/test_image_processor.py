"""
Image Processor Tests
"""

import cv2
import numpy as np
import pytest

from redeye.core.image_processor import ImageProcessor
from redeye.errors import InvalidParameterError


class TestValidation:

    def test_accepts_rgb_and_rgba(self):
        for channels in (3, 4):
            image = np.zeros((4, 4, channels), dtype=np.uint8)
            assert ImageProcessor.validate_image(image) is image

    def test_gray_only_when_allowed(self):
        gray = np.zeros((4, 4), dtype=np.uint8)
        assert ImageProcessor.validate_image(gray, allow_gray=True) is gray
        with pytest.raises(InvalidParameterError):
            ImageProcessor.validate_image(gray)

    @pytest.mark.parametrize("image", [
        np.zeros((4, 4, 3), dtype=np.uint16),
        np.zeros((0, 4, 3), dtype=np.uint8),
        np.zeros((4, 4, 5), dtype=np.uint8),
        np.zeros((4, 4, 3, 1), dtype=np.uint8),
        "image.png",
    ])
    def test_rejects(self, image):
        with pytest.raises(InvalidParameterError):
            ImageProcessor.validate_image(image)


class TestRasterHelpers:

    def test_split_alpha(self, red_patch_image):
        rgb, alpha = ImageProcessor.split_alpha(red_patch_image)
        assert rgb.shape == (25, 25, 3)
        assert np.all(alpha == 255)

    def test_split_alpha_without_alpha(self):
        image = np.zeros((3, 3, 3), dtype=np.uint8)
        rgb, alpha = ImageProcessor.split_alpha(image)
        assert rgb is image
        assert alpha is None

    def test_threshold_binary(self):
        image = np.array([[0, 175, 176, 255]], dtype=np.uint8)
        result = ImageProcessor.threshold_binary(image, 175)
        np.testing.assert_array_equal(result, [[0, 0, 255, 255]])
        assert result.dtype == np.uint8

    def test_threshold_binary_max_val(self):
        image = np.array([[0, 1, 2]], dtype=np.uint8)
        np.testing.assert_array_equal(ImageProcessor.threshold_binary(image, 0, 1), [[0, 1, 1]])

    def test_threshold_matches_opencv(self, rng):
        image = rng.integers(0, 256, size=(16, 16), dtype=np.uint8)
        _, expected = cv2.threshold(image, 100, 255, cv2.THRESH_BINARY)
        np.testing.assert_array_equal(ImageProcessor.threshold_binary(image, 100), expected)


class TestImageIO:

    def test_png_round_trip_keeps_channel_order(self, tmp_path, red_patch_image):
        path = tmp_path / "patch.png"
        image = red_patch_image.copy()
        image[0, 0, 3] = 10

        ImageProcessor.save_image(path, image)
        loaded = ImageProcessor.load_image(path)

        np.testing.assert_array_equal(loaded, image)

    def test_rgb_round_trip(self, tmp_path):
        image = np.zeros((5, 6, 3), dtype=np.uint8)
        image[..., 0] = 200
        path = tmp_path / "red.png"

        ImageProcessor.save_image(str(path), image)
        loaded = ImageProcessor.load_image(str(path))

        assert loaded.shape == (5, 6, 3)
        assert tuple(loaded[0, 0]) == (200, 0, 0)

    def test_gray_file_loads_as_rgb(self, tmp_path):
        path = tmp_path / "gray.png"
        cv2.imwrite(str(path), np.full((4, 4), 90, dtype=np.uint8))

        loaded = ImageProcessor.load_image(path)

        assert loaded.shape == (4, 4, 3)
        assert np.all(loaded == 90)

    def test_sixteen_bit_file(self, tmp_path):
        path = tmp_path / "deep.png"
        cv2.imwrite(str(path), np.full((4, 4, 3), 65535, dtype=np.uint16))

        loaded = ImageProcessor.load_image(path)

        assert loaded.dtype == np.uint8
        assert np.all(loaded == 255)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidParameterError):
            ImageProcessor.load_image(tmp_path / "nope.png")

    def test_save_gray(self, tmp_path):
        path = tmp_path / "mask.png"
        mask = np.zeros((4, 4), dtype=np.uint8)
        mask[1, 1] = 255

        ImageProcessor.save_image(path, mask)

        np.testing.assert_array_equal(cv2.imread(str(path), cv2.IMREAD_GRAYSCALE), mask)
