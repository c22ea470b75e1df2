"""
render.py - Frame Renderer
===========================
Maps the density field to an 8-bit grayscale frame and writes it as PNG.

Tone curve (logistic / sigmoid):

    raw = D * 255
    I   = round(255 / (1 + exp(-slope * (raw - midpoint))))

  - midpoint : raw value that lands at mid-gray (default 170)
  - slope    : contrast. Small = flat and washed out, large = almost binary.

The logistic curve is bounded to (0, 255) for any input, so extreme or
negative densities saturate instead of wrapping around.
"""

import logging
from pathlib import Path

import numpy as np
from PIL import Image

from .errors import FrameWriteError

logger = logging.getLogger(__name__)

DEFAULT_MIDPOINT = 170.0
DEFAULT_SLOPE = 0.03


def tone_map(density: np.ndarray, midpoint: float = DEFAULT_MIDPOINT,
             slope: float = DEFAULT_SLOPE) -> np.ndarray:
    """
    Apply the logistic tone curve.

    Returns:
        uint8 array with the same shape as ``density``
    """
    raw = np.asarray(density, dtype=np.float64) * 255.0

    # exp() overflows to inf for very dark/bright cells; 255 / inf == 0 is
    # exactly the saturation we want, so the warning is just noise.
    with np.errstate(over="ignore"):
        curve = 255.0 / (1.0 + np.exp(-slope * (raw - midpoint)))

    # Round half away from zero (all values here are >= 0)
    return np.floor(curve + 0.5).astype(np.uint8)


def save_frame(path, density: np.ndarray, width: int, height: int,
               midpoint: float = DEFAULT_MIDPOINT, slope: float = DEFAULT_SLOPE):
    """
    Tone-map ``density`` and write it as a single-channel (L) PNG.

    Args:
        path          : Destination file
        density       : (height, width) grid or flat row-major sequence
        width, height : Frame dimensions
        midpoint      : Tone curve center
        slope         : Tone curve steepness

    Raises:
        FrameWriteError if the file cannot be created or encoded
    """
    frame = tone_map(np.asarray(density).reshape(height, width), midpoint, slope)

    try:
        Image.fromarray(frame).save(Path(path), format="PNG")
    except OSError as err:
        raise FrameWriteError(f"Cannot write frame '{path}': {err}") from err

    logger.debug("Wrote frame %s", path)
