"""
config.py - Run Configuration
==============================
A run is described by a small JSON file:

    {
        "mass_distr_file_path":  "assets/logo.png",
        "output_directory_path": "frames",
        "frames_number":         300,
        "simulation_factor":     4,
        "target_resolution":     1080,
        "flow_field_scale":      250.0,
        "dynamize_flow_field":   true,
        "randomize_flow_field":  false
    }

Optional keys: midpoint, slope, time_step_scale, seed, noise_seed.

Everything is validated up front by Configuration.check(), before any grid
is allocated or any frame is written.
"""

import json
import logging
import math
from dataclasses import MISSING, asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError, ConfigurationFileError
from .render import DEFAULT_MIDPOINT, DEFAULT_SLOPE

logger = logging.getLogger(__name__)


# ── Supported output resolutions → grid size (width, height) ─────────────────
RESOLUTIONS = {
    480:  (640, 460),
    720:  (1280, 720),
    1080: (1920, 1080),
    1440: (2560, 1440),
    2160: (3840, 2160),
}

DEFAULT_TIME_STEP_SCALE = 0.3


def resolution_for(target_resolution: int) -> tuple[int, int]:
    """Map a nominal resolution (e.g. 1080) to the grid's (width, height)."""
    try:
        return RESOLUTIONS[target_resolution]
    except (KeyError, TypeError):
        supported = ", ".join(str(r) for r in RESOLUTIONS)
        raise ConfigurationError(
            f"Parameter 'target_resolution' should take a value from the set {{{supported}}}, "
            f"got {target_resolution!r}"
        ) from None


@dataclass
class Configuration:
    mass_distr_file_path: str
    output_directory_path: str
    frames_number: int
    simulation_factor: int
    target_resolution: int
    flow_field_scale: float
    dynamize_flow_field: bool
    randomize_flow_field: bool
    midpoint: float = DEFAULT_MIDPOINT
    slope: float = DEFAULT_SLOPE
    time_step_scale: float = DEFAULT_TIME_STEP_SCALE
    seed: Optional[int] = None
    noise_seed: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "Configuration":
        """
        Build a configuration from parsed JSON, checking keys and value types.
        Domain checks (ranges, paths) are left to check().
        """
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a JSON object")

        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(data) - set(known))
        if unknown:
            raise ConfigurationError(f"Unknown configuration parameter(s): {', '.join(unknown)}")

        required = [name for name, f in known.items() if f.default is MISSING]
        missing = [name for name in required if name not in data]
        if missing:
            raise ConfigurationError(f"Missing configuration parameter(s): {', '.join(missing)}")

        for name, value in data.items():
            _check_type(name, value)

        values = dict(data)
        for name in ("flow_field_scale", "midpoint", "slope", "time_step_scale"):
            if name in values:
                try:
                    values[name] = float(values[name])
                except OverflowError:
                    raise ConfigurationError(
                        f"Value of the parameter '{name}' is too large for a float"
                    ) from None
        return cls(**values)

    @property
    def resolution(self) -> tuple[int, int]:
        return resolution_for(self.target_resolution)

    def check(self):
        """
        Validate every parameter against its domain.

        Raises:
            ConfigurationError on the first violation found
        """
        if self.mass_distr_file_path == "":
            raise ConfigurationError(
                "Value of the parameter 'mass_distr_file_path' cannot be an empty literal"
            )
        if not Path(self.mass_distr_file_path).is_file():
            raise ConfigurationError(f"File '{self.mass_distr_file_path}' does not exist")
        if self.output_directory_path == "":
            raise ConfigurationError(
                "Value of the parameter 'output_directory_path' cannot be an empty literal"
            )
        if not Path(self.output_directory_path).is_dir():
            raise ConfigurationError(f"Directory '{self.output_directory_path}' does not exist")
        if self.frames_number < 1:
            raise ConfigurationError("Value of the parameter 'frames_number' must be at least 1")
        if self.simulation_factor < 1:
            raise ConfigurationError("Value of the parameter 'simulation_factor' can not be equal to 0")
        if not self.flow_field_scale >= 1.0:
            raise ConfigurationError(
                "Value of the parameter 'flow_field_scale' can not be less than 1.0"
            )
        resolution_for(self.target_resolution)
        for name in ("midpoint", "slope", "time_step_scale"):
            if not math.isfinite(getattr(self, name)):
                raise ConfigurationError(f"Value of the parameter '{name}' must be a finite number")
        # numpy seeds must be non-negative
        if self.noise_seed < 0:
            raise ConfigurationError("Value of the parameter 'noise_seed' can not be negative")
        if self.seed is not None and self.seed < 0:
            raise ConfigurationError("Value of the parameter 'seed' can not be negative")

    def summary(self) -> str:
        """Multi-line parameter listing for the console."""
        rows = [
            ("mass_distr_file_path",  f"'{self.mass_distr_file_path}'"),
            ("output_directory_path", f"'{self.output_directory_path}'"),
            ("frames_number",         self.frames_number),
            ("simulation_factor",     f"{self.simulation_factor}x"),
            ("target_resolution",     f"{self.target_resolution}p"),
            ("flow_field_scale",      self.flow_field_scale),
            ("dynamize_flow_field",   self.dynamize_flow_field),
            ("randomize_flow_field",  self.randomize_flow_field),
        ]
        return "\n".join(f"  - {name + ':':<24}{value}" for name, value in rows)

    def to_dict(self) -> dict:
        return asdict(self)


_INT_FIELDS = {"frames_number", "simulation_factor", "target_resolution", "noise_seed"}
_FLOAT_FIELDS = {"flow_field_scale", "midpoint", "slope", "time_step_scale"}
_BOOL_FIELDS = {"dynamize_flow_field", "randomize_flow_field"}
_STR_FIELDS = {"mass_distr_file_path", "output_directory_path"}


def _check_type(name: str, value):
    # bool is a subclass of int in Python, so it is excluded explicitly
    if name in _INT_FIELDS:
        ok = isinstance(value, int) and not isinstance(value, bool)
        expected = "an integer"
    elif name in _FLOAT_FIELDS:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        expected = "a number"
    elif name in _BOOL_FIELDS:
        ok = isinstance(value, bool)
        expected = "a boolean"
    elif name in _STR_FIELDS:
        ok = isinstance(value, str)
        expected = "a string"
    elif name == "seed":
        ok = value is None or (isinstance(value, int) and not isinstance(value, bool))
        expected = "an integer or null"
    else:
        return
    if not ok:
        raise ConfigurationError(f"Parameter '{name}' must be {expected}, got {value!r}")


def load_configuration(path) -> Configuration:
    """
    Read, parse and validate a JSON configuration file.

    Raises:
        ConfigurationFileError if the file cannot be opened or parsed
        ConfigurationError if its contents are invalid
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as err:
        raise ConfigurationFileError(f"Cannot open configuration file '{path}': {err}") from err
    except (json.JSONDecodeError, UnicodeDecodeError) as err:
        raise ConfigurationFileError(f"Cannot parse configuration file '{path}': {err}") from err

    config = Configuration.from_dict(data)
    config.check()
    logger.info("Loaded configuration from %s", path)
    return config
