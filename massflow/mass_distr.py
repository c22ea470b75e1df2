"""
mass_distr.py - Initial Mass Distribution
==========================================
Loads the starting density from an image.

The image is converted to luma, scaled to [0, 1] and centered inside the
target grid; everything outside the image is zero mass. An image larger
than the grid in either direction is rejected rather than cropped.
"""

import logging

import numpy as np
from PIL import Image

from .errors import AssetError

logger = logging.getLogger(__name__)


def load_mass_distribution(path, width: int, height: int) -> np.ndarray:
    """
    Read ``path`` into a (height, width) float32 density grid.

    Padding is floor((target - size) / 2) on the left/top, the remainder
    goes to the right/bottom.

    Raises:
        AssetError if the image cannot be decoded or is larger than the grid
    """
    try:
        with Image.open(path) as image:
            luma = np.asarray(image.convert("L"), dtype=np.float32) / 255.0
    except OSError as err:
        raise AssetError(f"Cannot read mass distribution image '{path}': {err}") from err

    res_y, res_x = luma.shape
    if res_x > width or res_y > height:
        raise AssetError(
            f"Mass distribution image '{path}' is {res_x}x{res_y}, "
            f"larger than the target resolution {width}x{height}"
        )

    padding_x = (width - res_x) // 2
    padding_y = (height - res_y) // 2

    mass = np.zeros((height, width), dtype=np.float32)
    mass[padding_y:padding_y + res_y, padding_x:padding_x + res_x] = luma

    logger.info("Loaded %dx%d mass distribution from %s (offset %d, %d)",
                res_x, res_y, path, padding_x, padding_y)
    return mass
