"""
advect.py - Upwind Density Advection
=====================================
Moves the density field one step along the flow field.

The update per interior cell is an explicit Euler step of the advection
equation  dD/dt + F·∇D = 0 :

    D'[y, x] = D[y, x] - 0.5 * (F.x * dD/dx + F.y * dD/dy)

The gradient is *upwind*: on each axis it is taken from the side the flow
comes FROM.
  - F.x < 0 (flow moves left)  → forward difference   D[y, x+1] - D[y, x]
  - F.x >= 0 (flow moves right) → backward difference  D[y, x] - D[y, x-1]
  - same rule on y with rows y+1 / y-1

Sampling downwind instead would make this explicit scheme blow up.
The 0.5 time coefficient is fixed; it stays stable because the flow field
is normalized to a peak speed of 1 cell per unit time.

Boundary cells are never written. Reads come from `density`, writes go to a
separate scratch buffer, then the two are swapped.
"""

import numpy as np

from .grid import SimulationGrid


ADVECTION_COEFFICIENT = 0.5


def advect_density(flow_field: np.ndarray, density: np.ndarray, scratch: np.ndarray) -> np.ndarray:
    """
    Write one upwind advection step of ``density`` into ``scratch``.

    Fully vectorized: every interior cell is computed from read-only input
    in a single pass, so the order of evaluation does not matter.

    Args:
        flow_field : (H, W, 2) flow vectors
        density    : (H, W) current density, read only
        scratch    : (H, W) write target; its boundary is left as is

    Returns:
        ``scratch``
    """
    fx = flow_field[1:-1, 1:-1, 0]
    fy = flow_field[1:-1, 1:-1, 1]
    center = density[1:-1, 1:-1]

    grad_x = np.where(fx < 0,
                      density[1:-1, 2:] - center,     # forward: right neighbour
                      center - density[1:-1, :-2])    # backward: left neighbour
    grad_y = np.where(fy < 0,
                      density[2:, 1:-1] - center,     # forward: row below
                      center - density[:-2, 1:-1])    # backward: row above

    diff = fx * grad_x + fy * grad_y
    scratch[1:-1, 1:-1] = center - ADVECTION_COEFFICIENT * diff
    return scratch


def advect(grid: SimulationGrid):
    """
    Advance the grid's density by one step using its current flow field.

    Modifies: grid.density_scratch, then swaps it into grid.density
    """
    advect_density(grid.flow_field, grid.density, grid.density_scratch)
    grid.swap_density()
