"""
policy.py - Flow Field Policies
================================
Decides *when* the flow field is regenerated and *where* in noise space it
is sampled. The simulation loop is the same for every mode; only the policy
differs:

  - StaticFlow  : sample once, reuse the same field for the whole run
  - DynamicFlow : resample before every sub-step, sliding along the noise
                  time axis by `step_scale` per sub-step

Both carry spatial offsets (ox, oy, oz). Zero by default; randomized runs
draw them once, uniformly from [-5, 5), and keep them for the whole run.
"""

from dataclasses import dataclass
from typing import ClassVar, Tuple

import numpy as np

from .config import DEFAULT_TIME_STEP_SCALE, Configuration

RANDOM_OFFSET_RANGE = (-5.0, 5.0)

Offsets = Tuple[float, float, float]


@dataclass(frozen=True)
class FlowPolicy:
    offsets: Offsets = (0.0, 0.0, 0.0)

    # Whether the flow field is resampled before every sub-step
    regenerates: ClassVar[bool] = False

    def offsets_at(self, tick: int) -> Offsets:
        """
        Noise offsets for global sub-step number ``tick``
        (tick = frame * simulation_factor + step).
        """
        return self.offsets

    def describe(self) -> dict:
        return {"policy": type(self).__name__, "offsets": list(self.offsets)}


@dataclass(frozen=True)
class StaticFlow(FlowPolicy):
    pass


@dataclass(frozen=True)
class DynamicFlow(FlowPolicy):
    step_scale: float = DEFAULT_TIME_STEP_SCALE

    regenerates: ClassVar[bool] = True

    def offsets_at(self, tick: int) -> Offsets:
        ox, oy, oz = self.offsets
        return ox, oy, oz + tick * self.step_scale

    def describe(self) -> dict:
        description = super().describe()
        description["step_scale"] = self.step_scale
        return description


def draw_offsets(rng: np.random.Generator) -> Offsets:
    low, high = RANDOM_OFFSET_RANGE
    ox, oy, oz = rng.uniform(low, high, size=3)
    return float(ox), float(oy), float(oz)


def policy_from_configuration(config: Configuration, rng: np.random.Generator = None) -> FlowPolicy:
    """
    Pick the policy for a run.

    Args:
        config : Validated configuration
        rng    : Source for random offsets; defaults to one seeded by config.seed
    """
    offsets = (0.0, 0.0, 0.0)
    if config.randomize_flow_field:
        if rng is None:
            rng = np.random.default_rng(config.seed)
        offsets = draw_offsets(rng)

    if config.dynamize_flow_field:
        return DynamicFlow(offsets=offsets, step_scale=config.time_step_scale)
    return StaticFlow(offsets=offsets)
