"""
qcl — populate dataclass configs from environment variables and command-line flags

File: src/qcl/__init__.py
Last updated: 2026-10-18

Purpose
- Package root. Re-exports the public loading API, shape aliases and error types.

Example
    @dataclass
    class Config:
        host: str = "localhost"
        port: int = 8080
        timeout: Duration = timedelta(seconds=5)

    config = load(Config(), EnvSource(prefix="APP"), FlagSource())

Functional requirements
- Must not have side effects at import time (no environment reads, no logging init).
"""

from qcl.coerce import (
    DEFAULT_SEPARATOR,
    assemble_mapping,
    assemble_sequence,
    coerce,
    coerce_scalar,
    format_value,
)
from qcl.durations import DurationParseError, format_duration, parse_duration
from qcl.errors import (
    ConfigLoadError,
    ConfigTypeError,
    FlagParseError,
    InvalidMapEntryError,
    TypeConversionError,
    UnsupportedTypeError,
)
from qcl.loader import Source, default_sources, dump_effective_config, effective_config, load
from qcl.shapes import (
    Duration,
    Float32,
    Float64,
    Int8,
    Int16,
    Int32,
    Int64,
    Kind,
    Shape,
    Uint,
    Uint8,
    Uint16,
    Uint32,
    Uint64,
    Width,
    describe,
    embedded,
    shape_of,
)
from qcl.sources import EnvOptions, EnvSource, FlagOptions, FlagSource
from qcl.walker import FieldRef, Naming, field_names, walk
from qcl.words import split_identifier, split_on_word_boundaries

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_SEPARATOR",
    "ConfigLoadError",
    "ConfigTypeError",
    "Duration",
    "DurationParseError",
    "EnvOptions",
    "EnvSource",
    "FieldRef",
    "FlagOptions",
    "FlagParseError",
    "FlagSource",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "InvalidMapEntryError",
    "Kind",
    "Naming",
    "Shape",
    "Source",
    "TypeConversionError",
    "Uint",
    "Uint8",
    "Uint16",
    "Uint32",
    "Uint64",
    "UnsupportedTypeError",
    "Width",
    "__version__",
    "assemble_mapping",
    "assemble_sequence",
    "coerce",
    "coerce_scalar",
    "default_sources",
    "describe",
    "dump_effective_config",
    "effective_config",
    "embedded",
    "field_names",
    "format_duration",
    "format_value",
    "load",
    "parse_duration",
    "shape_of",
    "split_identifier",
    "split_on_word_boundaries",
    "walk",
]
