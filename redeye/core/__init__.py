"""
Core modules: color space conversions, raster helpers and the red-eye pipeline
"""

from .image_processor import ImageProcessor
from .red_eye_tool import RedEyeTool

__all__ = ['ImageProcessor', 'RedEyeTool']
