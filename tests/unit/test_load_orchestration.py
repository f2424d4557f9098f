"""
qcl — unit tests for load orchestration

File: tests/unit/test_load_orchestration.py
Last updated: 2026-10-18

Purpose
- Validate source ordering, precedence, failure propagation and effective-config dumps.

What this test file should cover
- Non-instance targets fail before any source runs.
- Flags override env scalars; lists and dicts accumulate across sources.
- Explicit ordering and unknown source names.
- Structured lifecycle logs and redacted dumps.

Non-functional requirements
- Deterministic output across repeated dumps.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import timedelta

import pytest

from qcl.errors import ConfigLoadError, ConfigTypeError, TypeConversionError
from qcl.loader import default_sources, dump_effective_config, effective_config, load
from qcl.shapes import Duration
from qcl.sources.env import EnvSource
from qcl.sources.flags import FlagSource


@dataclass(slots=True)
class RecordingLogger:
    events: list[tuple[str, dict[str, object]]] = field(default_factory=list)

    def info(self, event: str, **kwargs: object) -> None:
        self.events.append((event, dict(kwargs)))

    def debug(self, event: str, **kwargs: object) -> None:
        self.events.append((event, dict(kwargs)))


@dataclass
class RecordingSource:
    name: str
    calls: list[str]
    fail: bool = False

    def load(self, config: object) -> None:
        self.calls.append(self.name)
        if self.fail:
            raise TypeConversionError("x", "int", name=self.name)


@dataclass
class Database:
    host: str = "localhost"
    password: str = ""


@dataclass
class Config:
    port: int = 8080
    hosts: list[str] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)
    timeout: Duration = timedelta(seconds=30)
    db: Database = field(default_factory=Database)
    api_token: str = ""
    _cache: object = None


@pytest.mark.unit
@pytest.mark.parametrize("target", [Config, None, {"port": 1}, "Config"])
def test_non_instance_target_fails_before_sources(target: object) -> None:
    calls: list[str] = []
    with pytest.raises(ConfigTypeError):
        load(target, RecordingSource("env", calls))

    assert calls == []


@pytest.mark.unit
def test_config_type_error_is_a_type_error() -> None:
    with pytest.raises(TypeError):
        load(42)


@pytest.mark.unit
def test_flags_override_env_scalars_and_collections_accumulate() -> None:
    environ = {
        "APP_PORT": "9000",
        "APP_HOSTS": "a,b",
        "APP_LABELS": "tier=web,zone=1",
        "APP_DB_HOST": "env-db",
    }
    argv = ["--port", "9001", "--hosts", "c", "--labels", "zone=2"]
    config = load(
        Config(),
        EnvSource(prefix="APP", environ=environ),
        FlagSource(argv),
    )

    assert config.port == 9001
    assert config.hosts == ["a", "b", "c"]
    assert config.labels == {"tier": "web", "zone": "2"}
    assert config.db.host == "env-db"


@pytest.mark.unit
def test_load_returns_the_same_object() -> None:
    config = Config()

    assert load(config, EnvSource(environ={})) is config


@pytest.mark.unit
def test_explicit_order_selects_and_reorders_sources() -> None:
    calls: list[str] = []
    env, flag = RecordingSource("env", calls), RecordingSource("flag", calls)

    load(Config(), env, flag, order=["flag", "env"])
    assert calls == ["flag", "env"]

    calls.clear()
    load(Config(), env, flag, order=["flag"])
    assert calls == ["flag"]


@pytest.mark.unit
def test_unknown_order_name_is_rejected() -> None:
    calls: list[str] = []
    with pytest.raises(ConfigLoadError, match="yaml"):
        load(Config(), RecordingSource("env", calls), order=["env", "yaml"])

    assert calls == []


@pytest.mark.unit
def test_duplicate_source_names_are_rejected() -> None:
    config = Config()
    with pytest.raises(ConfigLoadError, match="duplicate config source name: env"):
        load(
            config,
            EnvSource(prefix="A", environ={"A_PORT": "1"}),
            EnvSource(prefix="B", environ={"B_PORT": "2"}),
        )

    assert config.port == 8080


@pytest.mark.unit
def test_first_failure_stops_later_sources() -> None:
    calls: list[str] = []
    logger = RecordingLogger()

    with pytest.raises(TypeConversionError):
        load(
            Config(),
            RecordingSource("env", calls, fail=True),
            RecordingSource("flag", calls),
            logger=logger,
        )

    assert calls == ["env"]
    event, data = logger.events[-1]
    assert event == "config_load_failed"
    assert data["source"] == "env"
    assert data["error_type"] == "TypeConversionError"


@pytest.mark.unit
def test_lifecycle_events() -> None:
    calls: list[str] = []
    logger = RecordingLogger()
    load(Config(), RecordingSource("env", calls), RecordingSource("flag", calls), logger=logger)

    assert logger.events == [
        ("config_load_started", {"target": "Config", "sources": ["env", "flag"]}),
        ("config_load_finished", {"target": "Config"}),
    ]


@pytest.mark.unit
def test_default_sources_are_env_then_flags() -> None:
    sources = default_sources()

    assert [source.name for source in sources] == ["env", "flag"]
    assert isinstance(sources[0], EnvSource)
    assert isinstance(sources[1], FlagSource)


@pytest.mark.unit
def test_default_sources_used_when_none_given(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("HOSTS", "LABELS", "TIMEOUT", "DB_HOST", "DB_PASSWORD", "API_TOKEN"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PORT", "7000")
    monkeypatch.setattr("sys.argv", ["prog", "--hosts", "x"])

    config = load(Config())

    assert config.port == 7000
    assert config.hosts == ["x"]


@pytest.mark.unit
def test_effective_config_is_plain_and_redacted() -> None:
    config = Config(hosts=["a"], db=Database(password="hunter2"), api_token="t0k3n")

    view = effective_config(config)

    assert view == {
        "port": 8080,
        "hosts": ["a"],
        "labels": {},
        "timeout": "30s",
        "db": {"host": "localhost", "password": "***REDACTED***"},
        "api_token": "***REDACTED***",
    }


@pytest.mark.unit
def test_dump_is_deterministic_json() -> None:
    config = Config(labels={"b": "2", "a": "1"})

    first = dump_effective_config(config)
    second = dump_effective_config(config)

    assert first == second
    assert json.loads(first)["labels"] == {"a": "1", "b": "2"}
    assert first.index('"a"') < first.index('"b"')
    assert " " not in first


@pytest.mark.unit
def test_effective_config_rejects_non_instances() -> None:
    with pytest.raises(ConfigTypeError):
        effective_config(Config)
