"""
massflow/ - Noise-Driven Mass Transport
========================================
Exports the interfaces the CLI, the visualizer and the tests use.
"""

from .advect import advect, advect_density
from .config import RESOLUTIONS, Configuration, load_configuration, resolution_for
from .errors import (
    AssetError,
    ConfigurationError,
    ConfigurationFileError,
    FrameWriteError,
    MassFlowError,
)
from .flow_field import derive_flow_field, generate_flow_field, normalize_flow_field
from .grid import SimulationGrid
from .mass_distr import load_mass_distribution
from .noise import SimplexNoise, sample_noise
from .pipeline import run_from_configuration, run_from_file
from .policy import DynamicFlow, FlowPolicy, StaticFlow, policy_from_configuration
from .render import save_frame, tone_map
from .simulation import MassFlowSimulation
from .vector import Vec2D

__all__ = [
    "advect", "advect_density",
    "RESOLUTIONS", "Configuration", "load_configuration", "resolution_for",
    "AssetError", "ConfigurationError", "ConfigurationFileError", "FrameWriteError", "MassFlowError",
    "derive_flow_field", "generate_flow_field", "normalize_flow_field",
    "SimulationGrid",
    "load_mass_distribution",
    "SimplexNoise", "sample_noise",
    "run_from_configuration", "run_from_file",
    "DynamicFlow", "FlowPolicy", "StaticFlow", "policy_from_configuration",
    "save_frame", "tone_map",
    "MassFlowSimulation",
    "Vec2D",
]
