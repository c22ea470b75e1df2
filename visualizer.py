"""
visualizer.py - Flow Field Preview
===================================
Diagnostic view of a simulation: the tone-mapped density with the flow
field drawn on top as a sparse quiver.

Two outputs, both written to files (no live window):
  - save_snapshot() : one PNG of the current state
  - save_gif()      : an animated GIF, stepping the simulation per frame

Uses matplotlib FuncAnimation + PillowWriter for the GIF.
"""

import matplotlib

matplotlib.use("Agg")

import matplotlib.animation as animation
import matplotlib.pyplot as plt

from massflow.render import DEFAULT_MIDPOINT, DEFAULT_SLOPE, tone_map

# Roughly this many arrows along the longer grid side
QUIVER_ARROWS = 40


class FlowVisualizer:
    """
    Density + flow field viewer for a MassFlowSimulation.

    Usage (standalone):
        from massflow import MassFlowSimulation
        from visualizer import FlowVisualizer

        sim = MassFlowSimulation(640, 460, flow_field_scale=120.0)
        sim.grid.add_mass(320, 230, 1.0, radius=40)
        viz = FlowVisualizer(sim)
        viz.save_snapshot("preview.png")
    """

    def __init__(self, simulation, midpoint: float = DEFAULT_MIDPOINT,
                 slope: float = DEFAULT_SLOPE, quiver_step: int = None):
        """
        Args:
            simulation  : MassFlowSimulation instance
            midpoint    : Tone curve center (same as the PNG frames)
            slope       : Tone curve steepness
            quiver_step : Cells between arrows. None = pick from grid size.
        """
        self.sim = simulation
        self.grid = simulation.grid
        self.midpoint = midpoint
        self.slope = slope
        self.step = quiver_step or max(1, max(self.grid.width, self.grid.height) // QUIVER_ARROWS)

        self.sim.prepare_flow()
        self._setup_figure()

    def _quiver_components(self):
        s = self.step
        sub = self.grid.flow_field[::s, ::s]
        return sub[..., 0], sub[..., 1]

    def _setup_figure(self):
        """Initialize the matplotlib figure: density image + quiver overlay."""
        w, h = self.grid.width, self.grid.height
        self.fig, self.ax = plt.subplots(figsize=(10, 10 * h / w))
        self.fig.patch.set_facecolor('#0a0a0a')
        self.ax.set_facecolor('#0a0a0a')
        self.ax.set_xticks([])
        self.ax.set_yticks([])

        self.img = self.ax.imshow(
            tone_map(self.grid.density, self.midpoint, self.slope),
            cmap='gray', vmin=0, vmax=255,
            interpolation='bilinear',
            origin='upper',
        )

        # Row index grows downward, so arrows are placed in data coordinates
        u, v = self._quiver_components()
        ys, xs = [range(0, n, self.step) for n in (h, w)]
        self.quiver = self.ax.quiver(
            list(xs), list(ys), u, v,
            color='#ff6a00', angles='xy', scale_units='xy', scale=1.0 / self.step,
            width=0.002,
        )

        self.title_text = self.ax.set_title(
            self._title(), color='#cccccc', fontsize=10, fontfamily='monospace'
        )
        plt.tight_layout()

    def _title(self) -> str:
        return (f"Frame {self.sim.frame} | {type(self.sim.policy).__name__} | "
                f"mass={self.grid.total_mass():.1f}")

    def _init_animation(self):
        return [self.img, self.quiver, self.title_text]

    def update(self, frame_num):
        """Called by FuncAnimation each frame. Steps sim and updates plots."""
        self.sim.step_frame()

        self.img.set_data(tone_map(self.grid.density, self.midpoint, self.slope))
        u, v = self._quiver_components()
        self.quiver.set_UVC(u, v)
        self.title_text.set_text(self._title())

        return [self.img, self.quiver, self.title_text]

    def save_snapshot(self, path: str, dpi: int = 100):
        """Write the current state as a single image."""
        self.fig.savefig(path, dpi=dpi, facecolor=self.fig.get_facecolor())
        print(f"Saved: {path}")

    def save_gif(self, path: str = "massflow.gif", fps: int = 10, frames: int = 100):
        """Step the simulation ``frames`` times and save the result as a GIF."""
        print(f"Rendering {frames} frames to {path}...")
        self.anim = animation.FuncAnimation(
            self.fig, self.update, frames=frames, init_func=self._init_animation,
            interval=1000 // fps, blit=True
        )
        writer = animation.PillowWriter(fps=fps)
        self.anim.save(path, writer=writer)
        print(f"Saved: {path}")

    def close(self):
        plt.close(self.fig)
