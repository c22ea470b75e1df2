"""
simulation.py - Frame Loop
===========================
Ties noise, flow field and advection together. One call to `step_frame()`
produces the density for one output frame.

Pipeline per frame (simulation_factor sub-steps):
  1. Sample noise        (only when the policy asks for a new flow field)
  2. Derive flow field   (same condition)
  3. Advect density      (every sub-step)
  4. Hand the density to the frame sink (optional, outside the kernels)
  5. Report progress     (optional callback, once per frame)

Static and dynamic flow, with or without random offsets, all go through the
same loop; the FlowPolicy decides when step 1-2 happen and with which
offsets.
"""

import logging
import time
from typing import Callable, Optional

import numpy as np

from .advect import advect
from .flow_field import derive_flow_field
from .grid import SimulationGrid
from .noise import SimplexNoise, sample_noise
from .policy import FlowPolicy, StaticFlow

logger = logging.getLogger(__name__)

FrameSink = Callable[[int, np.ndarray], None]
FrameCallback = Callable[[dict], None]


class MassFlowSimulation:
    """
    Mass transport driven by a noise flow field.

    Usage:
        sim = MassFlowSimulation(640, 460, flow_field_scale=120.0,
                                 policy=DynamicFlow(), simulation_factor=4)
        sim.seed_density(initial)
        for frame in range(100):
            sim.step_frame()
            density = sim.grid.density     # Hand to the renderer
    """

    def __init__(self, width: int, height: int, flow_field_scale: float,
                 policy: FlowPolicy = None, simulation_factor: int = 1,
                 noise: SimplexNoise = None):
        """
        Args:
            width, height     : Grid resolution in cells
            flow_field_scale  : Noise scale divisor (>= 1). Bigger = wider swirls.
            policy            : When/where to sample the flow field (default: static, no offset)
            simulation_factor : Advection sub-steps per output frame
            noise             : Noise function (default: seed 0)
        """
        self.grid = SimulationGrid(width, height)
        self.flow_field_scale = flow_field_scale
        self.policy = policy if policy is not None else StaticFlow()
        self.simulation_factor = simulation_factor
        self.noise = noise if noise is not None else SimplexNoise(seed=0)
        self.frame = 0
        self.flow_generations = 0
        self.perf_log = []   # stores timing data per frame
        self._flow_ready = False

    def seed_density(self, values: np.ndarray):
        self.grid.seed_density(values)

    def _generate_flow(self, tick: int) -> tuple[float, float]:
        """Resample noise and rebuild the flow field. Returns (noise_ms, flow_ms)."""
        g = self.grid
        offset_x, offset_y, offset_z = self.policy.offsets_at(tick)

        t0 = time.perf_counter()
        sample_noise(g.width, g.height, self.flow_field_scale,
                     offset_x, offset_y, offset_z, noise=self.noise, out=g.noise)
        t_noise = (time.perf_counter() - t0) * 1000

        t0 = time.perf_counter()
        derive_flow_field(g.flow_field, g.noise)
        t_flow = (time.perf_counter() - t0) * 1000

        self.flow_generations += 1
        self._flow_ready = True
        return t_noise, t_flow

    def prepare_flow(self):
        """Make sure a flow field exists for the current frame (used for previews)."""
        if not self._flow_ready:
            self._generate_flow(self.frame * self.simulation_factor)

    def step_frame(self) -> dict:
        """
        Run all sub-steps of the next frame.

        Returns performance metrics dict for benchmarking.
        """
        t_total_start = time.perf_counter()
        t_noise = t_flow = t_advect = 0.0

        for step in range(self.simulation_factor):
            tick = self.frame * self.simulation_factor + step

            # ── Flow field: once for static runs, every sub-step for dynamic ──
            if self.policy.regenerates or not self._flow_ready:
                dt_noise, dt_flow = self._generate_flow(tick)
                t_noise += dt_noise
                t_flow += dt_flow

            # ── Advect density ───────────────────────────────────────────────
            t0 = time.perf_counter()
            advect(self.grid)
            t_advect += (time.perf_counter() - t0) * 1000

        t_total = (time.perf_counter() - t_total_start) * 1000

        metrics = {
            "frame"         : self.frame,
            "noise_ms"      : t_noise,
            "flow_ms"       : t_flow,
            "advect_ms"     : t_advect,
            "render_ms"     : 0.0,
            "total_ms"      : t_total,
            "density_total" : self.grid.total_mass(),
            "density_max"   : float(self.grid.density.max()),
        }
        self.frame += 1
        return metrics

    def run(self, frames: int, frame_sink: Optional[FrameSink] = None,
            on_frame: Optional[FrameCallback] = None) -> list:
        """
        Produce ``frames`` frames in order.

        Frame i is fully simulated and handed to ``frame_sink`` before frame
        i+1 starts. Any exception from the sink aborts the run.

        Args:
            frames     : Number of frames to produce
            frame_sink : Called as frame_sink(frame_index, density) per frame
            on_frame   : Called with the metrics dict after each frame

        Returns:
            List of per-frame metrics dicts
        """
        logs = []
        for _ in range(frames):
            metrics = self.step_frame()

            if frame_sink is not None:
                t0 = time.perf_counter()
                frame_sink(metrics["frame"], self.grid.density)
                metrics["render_ms"] = (time.perf_counter() - t0) * 1000
                metrics["total_ms"] += metrics["render_ms"]

            logger.debug(
                "Frame %04d | %.1fms (noise %.1f, flow %.1f, advect %.1f, render %.1f) | mass=%.2f",
                metrics["frame"], metrics["total_ms"], metrics["noise_ms"], metrics["flow_ms"],
                metrics["advect_ms"], metrics["render_ms"], metrics["density_total"],
            )
            self.perf_log.append(metrics)
            logs.append(metrics)

            if on_frame is not None:
                on_frame(metrics)
        return logs

    def print_status(self):
        """Pretty-print current simulation state."""
        print(f"\n{'='*50}")
        print(f"  Frame: {self.frame}  |  Policy: {type(self.policy).__name__}")
        print(f"  {self.grid!r}")
        print(f"  Flow generated {self.flow_generations}x")
        if self.perf_log:
            last = self.perf_log[-1]
            print(f"  Perf      : {last['total_ms']:.1f}ms/frame")
        print(f"{'='*50}")
