"""
errors.py - Exception Hierarchy
================================
Everything the driver can fail on derives from MassFlowError, so the CLI
can report any run failure with a single except clause. The numerical
kernels (noise, flow field, advection, tone mapping) never raise.
"""


class MassFlowError(Exception):
    """Base class for all run-aborting errors."""


class ConfigurationError(MassFlowError, ValueError):
    """A configuration value is missing, of the wrong kind or out of range."""


class ConfigurationFileError(MassFlowError):
    """The configuration file could not be opened or parsed."""


class AssetError(MassFlowError, ValueError):
    """The initial mass distribution image is unusable for the target grid."""


class FrameWriteError(MassFlowError):
    """A frame (or the run metadata) could not be written to disk."""
