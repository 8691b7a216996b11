"""
Connected component ("blob") analysis of binary masks

A BlobMap groups the 4-connected set pixels of a binary mask into islands
and marks every pixel of the label raster with the index of the island it
belongs to (-1 for background). Islands record their pixel count, the
pixel that seeded them and whether they touch the image border.
"""

import logging
from dataclasses import dataclass

import numpy as np
from numba import jit

logger = logging.getLogger(__name__)

# Palette used by color_islands, cycled when there are more islands
ISLAND_COLORS = [
    (255, 0, 0),        # red
    (0, 128, 0),        # green
    (0, 0, 255),        # blue
    (0, 255, 255),      # cyan
    (255, 255, 0),      # yellow
    (255, 0, 255),      # magenta
    (255, 165, 0),      # orange
    (230, 230, 250),    # lavender
    (50, 205, 50),      # lime green
    (255, 105, 180),    # hot pink
    (135, 206, 235),    # sky blue
]


@dataclass
class BlobIsland:
    """An individual island"""
    index: int
    pixel_count: int
    seed_location: tuple    # (x, y) of the first pixel discovered
    edge_connected: bool


@jit(nopython=True)
def _label_islands(binary, labels, stack):
    """
    Raster scan flood fill. Pixels are labeled when pushed, so the stack
    never holds more than height * width entries.
    """
    height, width = binary.shape
    counts = np.zeros(height * width, dtype=np.int64)
    seeds_x = np.zeros(height * width, dtype=np.int64)
    seeds_y = np.zeros(height * width, dtype=np.int64)
    edges = np.zeros(height * width, dtype=np.bool_)
    n_islands = 0

    for y in range(height):
        for x in range(width):
            if not binary[y, x] or labels[y, x] != -1:
                continue

            index = n_islands
            labels[y, x] = index
            stack[0] = y * width + x
            top = 1
            count = 0
            edge = False

            while top > 0:
                top -= 1
                p = stack[top]
                py = p // width
                px = p - py * width

                count += 1
                if px == 0 or py == 0 or px == width - 1 or py == height - 1:
                    edge = True

                if py > 0 and binary[py - 1, px] and labels[py - 1, px] == -1:
                    labels[py - 1, px] = index
                    stack[top] = p - width
                    top += 1
                if px > 0 and binary[py, px - 1] and labels[py, px - 1] == -1:
                    labels[py, px - 1] = index
                    stack[top] = p - 1
                    top += 1
                if px < width - 1 and binary[py, px + 1] and labels[py, px + 1] == -1:
                    labels[py, px + 1] = index
                    stack[top] = p + 1
                    top += 1
                if py < height - 1 and binary[py + 1, px] and labels[py + 1, px] == -1:
                    labels[py + 1, px] = index
                    stack[top] = p + width
                    top += 1

            counts[index] = count
            seeds_x[index] = x
            seeds_y[index] = y
            edges[index] = edge
            n_islands += 1

    return n_islands, counts, seeds_x, seeds_y, edges


def invert_binary(raster):
    """Return a copy of a binary raster with background and foreground swapped"""
    inverted = np.zeros_like(raster)
    inverted[raster == 0] = 255
    return inverted


class BlobMap:
    """
    Islands of a binary mask. Any non-zero pixel counts as set.

    Attributes:
        labels: int32 array, island index per pixel or -1
        islands: BlobIsland list, largest first (discovery order on ties)
    """

    def __init__(self, binary_mask):
        if binary_mask.ndim == 3:
            binary = np.any(binary_mask[..., :3] > 0, axis=2)
        else:
            binary = binary_mask > 0

        self.height, self.width = binary.shape
        self.labels = np.full((self.height, self.width), -1, dtype=np.int32)

        # worklist for this map only
        stack = np.empty(max(self.height * self.width, 1), dtype=np.int64)
        n_islands, counts, seeds_x, seeds_y, edges = _label_islands(
            np.ascontiguousarray(binary), self.labels, stack
        )

        islands = [
            BlobIsland(
                index=i,
                pixel_count=int(counts[i]),
                seed_location=(int(seeds_x[i]), int(seeds_y[i])),
                edge_connected=bool(edges[i]),
            )
            for i in range(n_islands)
        ]
        # sorted() is stable, ties keep discovery order
        self.islands = sorted(islands, key=lambda island: -island.pixel_count)

        logger.debug(f"BlobMap {self.width}x{self.height}: {len(self.islands)} islands")

    def __len__(self):
        return len(self.islands)

    def island_mask(self, island):
        """Boolean mask of the pixels labeled with island.index"""
        return self.labels == island.index

    def _erase_pixels(self, pixels, raster, value=0):
        raster[pixels] = value
        self.labels[pixels] = -1

    def _check_raster(self, raster):
        if raster.shape[:2] != self.labels.shape:
            raise ValueError(
                f"Raster shape {raster.shape[:2]} does not match blob map {self.labels.shape}"
            )

    def remove_small_islands(self, raster):
        """
        Remove every island except the largest one. Pixels of removed
        islands are set to 0 in raster. Will always try to leave one island.
        """
        self._check_raster(raster)
        if len(self.islands) <= 1:
            return

        largest = self.islands[0]
        removed = (self.labels >= 0) & (self.labels != largest.index)
        self._erase_pixels(removed, raster)
        self.islands = [largest]

    def fill_holes(self, raster):
        """
        Meant for a map built from an inverted mask: sets every island that
        does not touch the border to 0 in raster.
        """
        self._check_raster(raster)

        inner = [island.index for island in self.islands if not island.edge_connected]
        if inner:
            self._erase_pixels(np.isin(self.labels, inner), raster)
        self.islands = [island for island in self.islands if island.edge_connected]

    def color_islands(self, raster):
        """
        Useful for debugging. Returns an RGBA copy of raster with each island
        painted in a color from ISLAND_COLORS.
        """
        self._check_raster(raster)

        if raster.ndim == 2:
            colored = np.dstack([raster, raster, raster, np.full_like(raster, 255)])
        elif raster.shape[2] == 3:
            colored = np.dstack([raster, np.full(raster.shape[:2], 255, dtype=raster.dtype)])
        else:
            colored = raster.copy()

        if not self.islands:
            return colored

        # island index -> color of its rank in the size order
        palette = np.array(ISLAND_COLORS, dtype=colored.dtype)
        lookup = np.zeros((max(island.index for island in self.islands) + 1, 3), dtype=colored.dtype)
        indices = np.array([island.index for island in self.islands])
        lookup[indices] = palette[np.arange(len(indices)) % len(palette)]

        labeled = self.labels >= 0
        colored[labeled, :3] = lookup[self.labels[labeled]]

        return colored


def fill_holes(raster):
    """
    Fill background regions completely enclosed by foreground

    The raster is inverted so that holes become islands, every island not
    touching the border is cleared, and the result is inverted back.

    Returns:
        New binary raster (0 / 255)
    """
    inverted = invert_binary(raster)
    BlobMap(inverted).fill_holes(inverted)
    return invert_binary(inverted)
