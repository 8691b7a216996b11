"""
Convolution filters and blob analysis used to build and clean masks
"""

from .blob_map import BlobIsland, BlobMap, fill_holes, invert_binary
from .convolution import ConvolutionEngine, FilterVector

__all__ = ['BlobIsland', 'BlobMap', 'fill_holes', 'invert_binary', 'ConvolutionEngine', 'FilterVector']
