"""
grid.py - Simulation Buffers
=============================
The single owner of every grid a run needs. All of them share one
(height, width) shape and are allocated exactly once:

  - density          (H, W)     float32 : current mass distribution
  - density_scratch  (H, W)     float32 : write target of the next step
  - flow_field       (H, W, 2)  float32 : advection vectors (x, y)
  - noise            (H, W)     float32 : scratch for noise samples

Indexing is row-major: density.ravel()[y * width + x] == density[y, x].

Density is double-buffered. An advection step reads `density` and writes
`density_scratch`, then the two are swapped. Nothing is ever reallocated,
and no pass writes a buffer it is also reading from.

The advection step only writes interior cells, so whatever sits on the
boundary of the scratch buffer shows up after the swap. That is why every
way of putting mass into the grid writes BOTH buffers.
"""

import numpy as np


class SimulationGrid:
    """
    Owns the density pair, the flow field and the noise scratch buffer.
    This is the state passed between the noise, flow and advection steps.
    """

    def __init__(self, width: int, height: int):
        """
        Args:
            width, height : Grid dimensions in cells (both >= 1)
        """
        if width < 1 or height < 1:
            raise ValueError(f"Grid must be at least 1x1, got {width}x{height}")

        self.width = width
        self.height = height

        # ── Scalar fields ──────────────────────────────────────────────────
        self.density = np.zeros((height, width), dtype=np.float32)
        self.density_scratch = np.zeros((height, width), dtype=np.float32)
        self.noise = np.zeros((height, width), dtype=np.float32)

        # ── Vector field (last axis: x, y) ─────────────────────────────────
        self.flow_field = np.zeros((height, width, 2), dtype=np.float32)

    @property
    def shape(self) -> tuple[int, int]:
        return self.height, self.width

    def seed_density(self, values: np.ndarray):
        """
        Copy an initial mass distribution into both density buffers.

        Accepts either a (height, width) grid or a flat row-major sequence
        of width * height values.
        """
        values = np.asarray(values, dtype=np.float32)
        if values.ndim == 1 and values.size == self.width * self.height:
            values = values.reshape(self.height, self.width)
        if values.shape != self.shape:
            raise ValueError(
                f"Density of shape {values.shape} does not fit a {self.width}x{self.height} grid"
            )
        np.copyto(self.density, values)
        np.copyto(self.density_scratch, values)

    def add_mass(self, x: int, y: int, amount: float, radius: int = 2):
        """
        Inject mass into a square around cell (x, y).
        Uses a small radius so the injection looks smooth, not a single pixel.

        Args:
            x, y   : Cell indices (0 to width-1 / height-1)
            amount : How much density to add per cell
            radius : Half-size of the square in cells
        """
        x0, x1 = max(0, x - radius), min(self.width, x + radius + 1)
        y0, y1 = max(0, y - radius), min(self.height, y + radius + 1)
        self.density[y0:y1, x0:x1] += amount
        self.density_scratch[y0:y1, x0:x1] += amount

    def swap_density(self):
        """Make the freshly written scratch buffer the current density."""
        self.density, self.density_scratch = self.density_scratch, self.density

    def total_mass(self) -> float:
        return float(self.density.sum(dtype=np.float64))

    def __repr__(self):
        max_flow = float(np.hypot(self.flow_field[..., 0], self.flow_field[..., 1]).max())
        return (
            f"SimulationGrid({self.width}x{self.height})\n"
            f"  density : max={self.density.max():.4f}, sum={self.total_mass():.2f}\n"
            f"  flow    : max_magnitude={max_flow:.4f}"
        )
