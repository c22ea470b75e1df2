"""
main.py - Command Line Entry Point
===================================
Runs a mass-flow animation described by a JSON configuration file.

Usage:
    python main.py config.json                          # Render PNG frames (default)
    python main.py config.json --mode preview           # Snapshot of density + flow field
    python main.py config.json --mode preview --gif out.gif
    python main.py --mode benchmark --resolution 720    # Time the pipeline, no files
"""

import argparse
import logging
import sys

import numpy as np
from tqdm import tqdm


def run_render(config_path: str):
    """Render every frame of the configured run to PNG."""
    from massflow import load_configuration, run_from_configuration

    config = load_configuration(config_path)

    print("Starting simulation with the following parameters:")
    print(config.summary())
    print(f"{'─'*60}")

    with tqdm(total=config.frames_number, unit="frame", ncols=100) as bar:
        metadata = run_from_configuration(config, on_frame=lambda metrics: bar.update(1))

    timings = metadata["mean_timings_ms"]
    print(f"{'─'*60}")
    print(f"  Frames written : {metadata['frames_written']} → {config.output_directory_path}")
    print(f"  Average        : {timings['total_ms']:.1f}ms/frame")
    print("Simulation finished!")


def run_preview(config_path: str, snapshot: str, gif: str = None, frames: int = None):
    """Save a density + flow field preview instead of PNG frames."""
    from massflow import load_configuration
    from massflow.pipeline import build_simulation
    from visualizer import FlowVisualizer

    config = load_configuration(config_path)
    sim = build_simulation(config)
    viz = FlowVisualizer(sim, midpoint=config.midpoint, slope=config.slope)
    try:
        viz.save_snapshot(snapshot)
        if gif:
            viz.save_gif(gif, frames=frames or config.frames_number)
    finally:
        viz.close()


def run_benchmark(resolution: int = 480, frames: int = 20, simulation_factor: int = 4,
                  dynamic: bool = True, flow_field_scale: float = 120.0):
    """
    Per-stage performance breakdown on a synthetic mass blob.
    Frames are tone-mapped but not written to disk.
    """
    from massflow import DynamicFlow, MassFlowSimulation, StaticFlow, resolution_for, tone_map

    width, height = resolution_for(resolution)
    policy = DynamicFlow() if dynamic else StaticFlow()

    print(f"\n{'='*60}")
    print(f"  PIPELINE BENCHMARK | {width}x{height} | {frames} frames × {simulation_factor} steps")
    print(f"  Flow: {type(policy).__name__}")
    print(f"{'='*60}")

    sim = MassFlowSimulation(width, height, flow_field_scale=flow_field_scale,
                             policy=policy, simulation_factor=simulation_factor)
    sim.grid.add_mass(width // 2, height // 2, 1.0, radius=min(width, height) // 6)

    logs = sim.run(frames, frame_sink=lambda frame, density: tone_map(density))

    keys = ["noise_ms", "flow_ms", "advect_ms", "render_ms", "total_ms"]

    print(f"\n{'Step':<20} {'Mean':>8} {'Min':>8} {'Max':>8}")
    print(f"{'─'*50}")
    for k in keys:
        vals = [m[k] for m in logs]
        print(f"  {k:<18} {np.mean(vals):>7.1f}ms {np.min(vals):>7.1f}ms {np.max(vals):>7.1f}ms")

    total_vals = [m["total_ms"] for m in logs]
    print(f"\n{'─'*50}")
    print(f"  Frames per second: {1000/np.mean(total_vals):.1f}")
    sim.print_status()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Noise-driven mass flow animation")
    parser.add_argument("config", nargs="?", help="Path to the JSON configuration file")
    parser.add_argument(
        "--mode", choices=["render", "preview", "benchmark"],
        default="render",
        help="Run mode (default: render)"
    )
    parser.add_argument("--snapshot", default="preview.png", help="Preview image path (preview mode)")
    parser.add_argument("--gif", default=None, help="Also render the run as a GIF (preview mode)")
    parser.add_argument("--frames", type=int, default=None, help="Number of frames (preview/benchmark)")
    parser.add_argument("--resolution", type=int, default=480, help="Benchmark resolution (default: 480)")
    parser.add_argument("--steps", type=int, default=4, help="Benchmark sub-steps per frame")
    parser.add_argument("--static", action="store_true", help="Benchmark with a static flow field")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log per-frame details")
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    return parser


def main(argv=None) -> int:
    from massflow import MassFlowError
    from massflow.logging_config import setup_logging

    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)

    if args.mode != "benchmark" and not args.config:
        parser.print_usage(sys.stderr)
        print("Provide the path to a configuration file...", file=sys.stderr)
        return 2

    try:
        if args.mode == "render":
            run_render(args.config)
        elif args.mode == "preview":
            run_preview(args.config, args.snapshot, gif=args.gif, frames=args.frames)
        elif args.mode == "benchmark":
            run_benchmark(resolution=args.resolution, frames=args.frames or 20,
                          simulation_factor=args.steps, dynamic=not args.static)
    except MassFlowError as err:
        print(f"\033[1;31m{err}\033[0m", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
