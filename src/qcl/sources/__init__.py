"""Configuration sources: environment variables and command-line flags."""

from qcl.sources.env import DEFAULT_ENV_TAG, EnvOptions, EnvSource
from qcl.sources.flags import DEFAULT_FLAG_TAG, FlagOptions, FlagSource

__all__ = [
    "DEFAULT_ENV_TAG",
    "DEFAULT_FLAG_TAG",
    "EnvOptions",
    "EnvSource",
    "FlagOptions",
    "FlagSource",
]
