"""
noise.py - Coherent Noise Sampler
==================================
The flow field is not simulated, it is *drawn* from a smooth scalar noise
function and then differentiated (see flow_field.py). This module provides
that scalar function and samples it over the whole grid in one go.

Noise function: 3D simplex noise (Perlin 2001, after Gustavson's reference
implementation). Three inputs:
  - x, y : cell position divided by the scale
  - z    : a time/offset axis. Moving along z animates the field smoothly.

Output is roughly in [-1, 1], continuous, and fully deterministic for a given
permutation seed, so two samples with identical inputs are bit-identical.

Each cell is independent of every other cell, so the whole grid is evaluated
as one vectorized numpy expression. No Python loops over cells.
"""

from dataclasses import dataclass

import numpy as np


# ── Simplex skew / unskew factors for 3D ─────────────────────────────────────
F3 = 1.0 / 3.0
G3 = 1.0 / 6.0

# Edge midpoints of a cube: the 12 gradient directions used by 3D simplex
_GRAD3 = np.array([
    [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
    [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
    [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
], dtype=np.float64)

# Brings the summed corner contributions to approximately [-1, 1]
_OUTPUT_SCALE = 32.0


@dataclass
class SimplexNoise:
    """
    Seeded, vectorized 3D simplex noise.

    Instances are callable, so they behave like a plain ``noise3(x, y, z)``
    function over arrays of any (broadcastable) shape.

    Usage:
        noise = SimplexNoise(seed=0)
        values = noise(xs, ys, zs)
    """

    seed: int = 0

    def __post_init__(self) -> None:
        rng = np.random.default_rng(self.seed)
        permutation = rng.permutation(256).astype(np.int64)
        # Doubled so corner hashes can index past 255 without wrapping
        self.permutation = np.tile(permutation, 2)
        self.gradient_index = self.permutation % 12

    def _corner(self, gi: np.ndarray, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
        """Contribution of one simplex corner with radial falloff 0.6 - r²."""
        t = 0.6 - x * x - y * y - z * z
        g = _GRAD3[gi]
        dot = g[..., 0] * x + g[..., 1] * y + g[..., 2] * z
        t = np.maximum(t, 0.0)
        return t * t * t * t * dot

    def __call__(self, x, y, z) -> np.ndarray:
        x, y, z = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64),
            np.asarray(y, dtype=np.float64),
            np.asarray(z, dtype=np.float64),
        )

        # Skew input space to find the containing simplex cell
        s = (x + y + z) * F3
        i = np.floor(x + s)
        j = np.floor(y + s)
        k = np.floor(z + s)

        # Unskew back: distances from the cell origin
        t = (i + j + k) * G3
        x0 = x - (i - t)
        y0 = y - (j - t)
        z0 = z - (k - t)

        # Which of the six tetrahedra are we in? Decided by coordinate rank.
        x_ge_y = x0 >= y0
        y_ge_z = y0 >= z0
        x_ge_z = x0 >= z0

        i1 = x_ge_y & x_ge_z
        j1 = ~x_ge_y & y_ge_z
        k1 = ~i1 & ~j1

        i2 = x_ge_y | x_ge_z
        j2 = ~x_ge_y | y_ge_z
        k2 = ~(y_ge_z & x_ge_z)

        x1 = x0 - i1 + G3
        y1 = y0 - j1 + G3
        z1 = z0 - k1 + G3
        x2 = x0 - i2 + 2.0 * G3
        y2 = y0 - j2 + 2.0 * G3
        z2 = z0 - k2 + 2.0 * G3
        x3 = x0 - 1.0 + 3.0 * G3
        y3 = y0 - 1.0 + 3.0 * G3
        z3 = z0 - 1.0 + 3.0 * G3

        # Hash the four corners into gradient indices
        ii = i.astype(np.int64) & 255
        jj = j.astype(np.int64) & 255
        kk = k.astype(np.int64) & 255
        p = self.permutation
        gi = self.gradient_index

        gi0 = gi[ii + p[jj + p[kk]]]
        gi1 = gi[ii + i1 + p[jj + j1 + p[kk + k1]]]
        gi2 = gi[ii + i2 + p[jj + j2 + p[kk + k2]]]
        gi3 = gi[ii + 1 + p[jj + 1 + p[kk + 1]]]

        n = (
            self._corner(gi0, x0, y0, z0) +
            self._corner(gi1, x1, y1, z1) +
            self._corner(gi2, x2, y2, z2) +
            self._corner(gi3, x3, y3, z3)
        )
        return _OUTPUT_SCALE * n


DEFAULT_NOISE = SimplexNoise(seed=0)


def sample_noise(width: int, height: int, scale: float,
                 offset_x: float = 0.0, offset_y: float = 0.0, offset_z: float = 0.0,
                 noise: SimplexNoise = None, out: np.ndarray = None) -> np.ndarray:
    """
    Sample the noise function over a (height, width) grid.

        N[y, x] = noise((x - offset_x) / scale, (y - offset_y) / scale, offset_z / scale)

    Args:
        width, height : Grid dimensions in cells
        scale         : Spatial divisor (> 0). Bigger = smoother, larger swirls.
        offset_*      : Shift of the sampled window; offset_z is the time axis
        noise         : Noise function to sample (defaults to seed 0)
        out           : Optional float32 (height, width) buffer to fill in place

    Returns:
        The filled buffer (``out`` itself when given)
    """
    if noise is None:
        noise = DEFAULT_NOISE

    xs = (np.arange(width, dtype=np.float64) - offset_x) / scale
    ys = (np.arange(height, dtype=np.float64) - offset_y) / scale
    grid_x, grid_y = np.meshgrid(xs, ys)    # both (height, width)

    values = noise(grid_x, grid_y, offset_z / scale)

    if out is None:
        return values.astype(np.float32)
    out[...] = values
    return out
