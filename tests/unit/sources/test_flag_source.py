"""
qcl — unit tests for the command-line flag source

File: tests/unit/sources/test_flag_source.py
Last updated: 2026-10-18

Purpose
- Validate flag naming, per-shape parsing, repetition and parser failure handling.

What this test file should cover
- Dotted lowercase flag names, tag overrides and nested/optional structures.
- Bare boolean flags, repeated scalars and accumulating collections.
- Unknown flags, missing values and duplicate names surface as ``FlagParseError``.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import timedelta

import pytest

from qcl.errors import (
    ConfigTypeError,
    FlagParseError,
    TypeConversionError,
    UnsupportedTypeError,
)
from qcl.shapes import Duration, Uint8
from qcl.sources.flags import FlagSource


@dataclass(slots=True)
class RecordingLogger:
    events: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def info(self, event: str, **kwargs: object) -> None:
        self.events.append((event, dict(kwargs)))

    def debug(self, event: str, **kwargs: object) -> None:
        self.events.append((event, dict(kwargs)))


@dataclass
class Database:
    host: str = "localhost"
    port: int = 5432


@dataclass
class Config:
    host: str = ""
    port: int = 0
    offset: int = 0
    debug: bool = False
    verbose: bool = True
    level: Uint8 = 0
    ratio: float = 0.0
    timeout: Duration = timedelta(seconds=5)
    hosts: list[str] = field(default_factory=list)
    ports: dict[str, int] = field(default_factory=dict)
    db: Database = field(default_factory=Database)
    cache: Database | None = None
    max_idle: int = field(default=0, metadata={"flag": "maxIdleConns", "help": "pool size"})


@dataclass
class Clashing:
    first: str = field(default="", metadata={"flag": "name"})
    second: str = field(default="", metadata={"flag": "name"})


@dataclass
class Unsupported:
    value: complex = 0j


@pytest.mark.unit
def test_scalar_flags() -> None:
    config = Config()
    FlagSource(["--host", "example.test", "--port=8080", "--offset", "-5"]).load(config)

    assert config.host == "example.test"
    assert config.port == 8080
    assert config.offset == -5


@pytest.mark.unit
def test_values_starting_with_a_dash() -> None:
    config = Config()
    argv = ["--timeout", "-2m", "--host", "-x", "--ratio", "-1e3", "--hosts", "-a,-b", "--debug"]
    FlagSource(argv).load(config)

    assert config.timeout == timedelta(minutes=-2)
    assert config.host == "-x"
    assert config.ratio == -1000.0
    assert config.hosts == ["-a", "-b"]
    assert config.debug is True


@pytest.mark.unit
def test_trailing_flag_without_value_fails() -> None:
    with pytest.raises(FlagParseError):
        FlagSource(["--debug", "--port"]).load(Config())


@pytest.mark.unit
@pytest.mark.parametrize(
    ("argv", "debug", "verbose"),
    [
        (["--debug"], True, True),
        (["--debug", "false"], False, True),
        (["--debug=yes", "--verbose=off"], True, False),
        (["--verbose", "0", "--debug"], True, False),
    ],
)
def test_boolean_flags(argv: list[str], debug: bool, verbose: bool) -> None:
    config = Config()
    FlagSource(argv).load(config)

    assert config.debug is debug
    assert config.verbose is verbose


@pytest.mark.unit
def test_nested_flags_use_dotted_names() -> None:
    config = Config()
    FlagSource(["--db.host", "db.internal", "--cache.port", "6379"]).load(config)

    assert config.db == Database(host="db.internal", port=5432)
    assert config.cache == Database(host="localhost", port=6379)


@pytest.mark.unit
def test_tag_override_and_duration() -> None:
    config = Config()
    FlagSource(["--max.idle.conns", "16", "--timeout", "250ms"]).load(config)

    assert config.max_idle == 16
    assert config.timeout == timedelta(milliseconds=250)


@pytest.mark.unit
def test_repeated_scalar_keeps_last_value() -> None:
    config = Config()
    FlagSource(["--port", "1", "--port", "2"]).load(config)

    assert config.port == 2


@pytest.mark.unit
def test_repeated_collections_accumulate() -> None:
    config = Config(hosts=["default"])
    argv = ["--hosts", "a,b", "--hosts", "c", "--ports", "x=1,y=2", "--ports", "y=3"]
    FlagSource(argv).load(config)

    assert config.hosts == ["default", "a", "b", "c"]
    assert config.ports == {"x": 1, "y": 3}


@pytest.mark.unit
def test_custom_separator() -> None:
    config = Config()
    FlagSource(["--hosts", "a,b|c"], separator="|").load(config)

    assert config.hosts == ["a,b", "c"]


@pytest.mark.unit
def test_empty_argv_is_a_no_op() -> None:
    logger = RecordingLogger()
    config = Config()
    FlagSource([], logger=logger).load(config)

    assert config == Config()
    assert logger.events == []


@pytest.mark.unit
def test_reads_process_arguments_by_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "argv", ["prog", "--host", "from-argv"])
    config = Config()
    FlagSource().load(config)

    assert config.host == "from-argv"


@pytest.mark.unit
@pytest.mark.parametrize(
    "argv",
    [
        ["--unknown", "x"],
        ["--port"],
        ["--db", "x"],
        ["--hos", "abbreviated"],
        ["positional"],
    ],
)
def test_parse_failures_raise_flag_parse_error(argv: list[str]) -> None:
    with pytest.raises(FlagParseError):
        FlagSource(argv).load(Config())


@pytest.mark.unit
def test_ignore_unknown_skips_foreign_arguments() -> None:
    logger = RecordingLogger()
    config = Config()
    FlagSource(["--unknown", "x", "--port", "9"], ignore_unknown=True, logger=logger).load(config)

    assert config.port == 9
    assert logger.events[-1] == (
        "config_source_applied",
        {"source": "flag", "fields_set": 1, "ignored_arguments": 2},
    )


@pytest.mark.unit
def test_invalid_value_raises_conversion_error() -> None:
    config = Config()
    with pytest.raises(TypeConversionError) as excinfo:
        FlagSource(["--host", "kept", "--level", "300", "--port", "1"]).load(config)

    assert excinfo.value.name == "level"
    assert config.host == "kept"
    assert config.port == 0


@pytest.mark.unit
def test_duplicate_flag_names_fail_at_registration() -> None:
    with pytest.raises(FlagParseError):
        FlagSource(["--name", "x"]).load(Clashing())


@pytest.mark.unit
def test_unsupported_field_fails_at_registration() -> None:
    with pytest.raises(UnsupportedTypeError):
        FlagSource(["--other", "x"]).load(Unsupported())


@pytest.mark.unit
@pytest.mark.parametrize("target", [Config, None, {"host": "x"}])
def test_rejects_non_instances(target: object) -> None:
    with pytest.raises(ConfigTypeError):
        FlagSource(["--host", "x"]).load(target)


@pytest.mark.unit
def test_parser_help_lists_leaf_flags() -> None:
    help_text = FlagSource().build_parser(Config()).format_help()

    assert "--db.host" in help_text
    assert "--max.idle.conns" in help_text
    assert "pool size" in help_text
    assert "--db " not in help_text


@pytest.mark.unit
def test_each_load_uses_a_fresh_parser() -> None:
    first, second = Config(), Config()
    source = FlagSource(["--port", "1"])
    source.load(first)
    source.load(second)

    assert first.port == second.port == 1


@pytest.mark.unit
def test_logs_each_assignment() -> None:
    logger = RecordingLogger()
    FlagSource(["--db.host", "h", "--port", "2"], logger=logger).load(Config())

    assigned = [data["key"] for event, data in logger.events if event == "config_field_set"]
    assert assigned == ["db.host", "port"]
