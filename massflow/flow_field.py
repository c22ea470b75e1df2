"""
flow_field.py - Noise-Derived Flow Field
=========================================
Turns the scalar noise grid into the vector field that pushes mass around.

For every interior cell:
    F.x =  N[y+1, x] - N[y-1, x]
    F.y = -(N[y, x+1] - N[y, x-1])

That is the central-difference gradient of the noise, rotated by 90°.
A rotated gradient runs *along* the noise contour lines instead of across
them, so the field has (almost) zero divergence: mass swirls around instead
of piling up in sinks. No pressure solve needed.

Afterwards the whole field is divided by the largest vector length found
anywhere, so the fastest cell moves at exactly 1 cell per unit time and
every other vector keeps its relative magnitude.

Boundary rows/columns are never written here: they keep whatever the buffer
held before (zero for a fresh buffer).
"""

import logging

import numpy as np

from .noise import SimplexNoise, sample_noise
from .vector import Vec2D

logger = logging.getLogger(__name__)


def flow_magnitude(flow_field: np.ndarray) -> np.ndarray:
    """Per-cell vector length, shape (H, W)."""
    return np.hypot(flow_field[..., 0], flow_field[..., 1])


def vector_at(flow_field: np.ndarray, x: int, y: int) -> Vec2D:
    return Vec2D(float(flow_field[y, x, 0]), float(flow_field[y, x, 1]))


def normalize_flow_field(flow_field: np.ndarray) -> float:
    """
    Rescale the field in place so its longest vector has length 1.

    A single global factor is used (not per-vector normalization), so
    relative speeds are preserved.

    If the field is all zero (degenerate interior or flat noise) the maximum
    is 0 and there is nothing meaningful to divide by. In that case the field
    is left untouched and a warning is logged instead of filling it with NaN.

    Returns:
        The maximum length found before rescaling
    """
    if flow_field.size == 0:
        max_magnitude = 0.0
    else:
        max_magnitude = float(flow_magnitude(flow_field).max())

    if not np.isfinite(max_magnitude) or max_magnitude <= 0.0:
        logger.warning(
            "Flow field has no usable magnitude (max=%s); skipping normalization", max_magnitude
        )
        return max_magnitude

    flow_field /= np.float32(max_magnitude)
    return max_magnitude


def derive_flow_field(flow_field: np.ndarray, noise_buffer: np.ndarray) -> float:
    """
    Fill the interior of ``flow_field`` from ``noise_buffer`` and normalize.

    Args:
        flow_field   : (H, W, 2) float32 buffer, modified in place
        noise_buffer : (H, W) float32 noise samples

    Returns:
        The pre-normalization maximum vector length
    """
    n = noise_buffer

    # Interior only, via slicing. Both sides are (H-2, W-2); for H or W <= 2
    # they are empty and nothing is written.
    flow_field[1:-1, 1:-1, 0] = n[2:, 1:-1] - n[:-2, 1:-1]
    flow_field[1:-1, 1:-1, 1] = -(n[1:-1, 2:] - n[1:-1, :-2])

    return normalize_flow_field(flow_field)


def generate_flow_field(flow_field: np.ndarray, noise_buffer: np.ndarray,
                        width: int, height: int, scale: float,
                        offset_x: float = 0.0, offset_y: float = 0.0, offset_z: float = 0.0,
                        noise: SimplexNoise = None) -> float:
    """
    Sample noise into ``noise_buffer`` and derive a normalized flow field.

    Both buffers are filled in place and never replaced, so callers can hold
    on to them across calls.

    Returns:
        The pre-normalization maximum vector length
    """
    sample_noise(width, height, scale, offset_x, offset_y, offset_z,
                 noise=noise, out=noise_buffer)
    return derive_flow_field(flow_field, noise_buffer)
