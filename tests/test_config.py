"""Tests for YAML configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from tagmarshal import AssocDriver, ConfigError, Driver, JsonDriver, MsgpackDriver, get_namespace
from tagmarshal.config import apply_config, extract_drivers, load_config, resolve_driver


class WireDriver(Driver):
    name = "wire"


def _write(tmp_path: Path, text: str) -> str:
    path = tmp_path / "views.yaml"
    path.write_text(text)
    return str(path)


def test_load_config_reads_mapping(tmp_path: Path) -> None:
    path = _write(tmp_path, "strict: true\ndrivers:\n  full: json\n")

    assert load_config(path) == {"strict": True, "drivers": {"full": "json"}}


def test_load_config_of_empty_file_is_empty(tmp_path: Path) -> None:
    assert load_config(_write(tmp_path, "")) == {}


@pytest.mark.parametrize("text", ["- a\n- b\n", "key: [unclosed\n"])
def test_load_config_rejects_malformed_files(tmp_path: Path, text: str) -> None:
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, text))


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


@pytest.mark.parametrize(
    "ref, expected",
    [
        ("base", Driver),
        ("assoc", AssocDriver),
        ("json", JsonDriver),
        ("msgpack", MsgpackDriver),
        ("tagmarshal.drivers:JsonDriver", JsonDriver),
        (f"{__name__}:WireDriver", WireDriver),
    ],
)
def test_resolve_driver(ref: str, expected: type[Driver]) -> None:
    assert resolve_driver(ref) is expected


@pytest.mark.parametrize(
    "ref",
    [
        "yaml",
        "no_such_module_xyz:Driver",
        "tagmarshal.drivers:Missing",
        "tagmarshal.errors:ConfigError",
    ],
)
def test_resolve_driver_rejects_bad_references(ref: str) -> None:
    with pytest.raises(ConfigError):
        resolve_driver(ref)


def test_extract_drivers_groups_by_namespace() -> None:
    config = {
        "drivers": {"full": "json"},
        "namespaces": {"billing": {"full": "assoc", "wire": "msgpack"}},
    }

    assert extract_drivers(config) == {
        "global": {"full": JsonDriver},
        "billing": {"full": AssocDriver, "wire": MsgpackDriver},
    }


@pytest.mark.parametrize(
    "config",
    [{"drivers": ["json"]}, {"namespaces": ["billing"]}, {"namespaces": {"billing": "json"}}],
)
def test_extract_drivers_rejects_malformed_sections(config: dict) -> None:
    with pytest.raises(ConfigError):
        extract_drivers(config)


def test_apply_config_registers_drivers() -> None:
    apply_config({"namespaces": {"test_config.applied": {"full": "msgpack", "raw": "base"}}})

    namespace = get_namespace("test_config.applied")
    assert namespace.lookup("full") is MsgpackDriver
    assert namespace.lookup("raw") is Driver
