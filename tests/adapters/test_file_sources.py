"""Structured file loaders and the file-backed source."""

from __future__ import annotations

from pathlib import Path

import pytest

from lib_config_aggregator.adapters.file_loaders.structured import (
    FileSource,
    JSONFileLoader,
    TOMLFileLoader,
    YAMLFileLoader,
    loader_for,
)
from lib_config_aggregator.domain.errors import InvalidFormat, InvalidParameter, NotFound
from tests.support import FakeClock


def _write(tmp_path: Path, name: str, body: str) -> Path:
    path = tmp_path / name
    path.write_text(body, encoding="utf-8")
    return path


def test_toml_loader(tmp_path: Path) -> None:
    path = _write(tmp_path, "config.toml", "[db]\nport = 5432\n")
    assert TOMLFileLoader().load(str(path)) == {"db": {"port": 5432}}


def test_json_loader(tmp_path: Path) -> None:
    path = _write(tmp_path, "config.json", '{"feature": {"enabled": true}}')
    assert JSONFileLoader().load(str(path)) == {"feature": {"enabled": True}}


def test_yaml_loader_and_empty_document(tmp_path: Path) -> None:
    path = _write(tmp_path, "config.yaml", "service:\n  timeout: 10\n")
    assert YAMLFileLoader().load(str(path)) == {"service": {"timeout": 10}}
    empty = _write(tmp_path, "empty.yml", "")
    assert YAMLFileLoader().load(str(empty)) == {}


@pytest.mark.parametrize(
    ("name", "body"),
    [("bad.toml", "not = [valid"), ("bad.json", "{"), ("bad.yaml", "a: [1"), ("list.json", "[1, 2]")],
)
def test_invalid_documents_raise(tmp_path: Path, name: str, body: str) -> None:
    path = _write(tmp_path, name, body)
    with pytest.raises(InvalidFormat):
        loader_for(path).load(str(path))


def test_missing_file_raises_not_found(tmp_path: Path) -> None:
    with pytest.raises(NotFound):
        TOMLFileLoader().load(str(tmp_path / "absent.toml"))


def test_loader_for_rejects_unknown_suffix() -> None:
    with pytest.raises(InvalidParameter):
        loader_for("settings.ini")


def test_file_source_exposes_top_level_keys(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.toml", 'name = "demo"\n[service]\ntimeout = 5\n')
    source = FileSource(path)
    assert source.path == str(path)
    assert source.list_sync() == ["name", "service"]
    assert source.read_sync("service") == {"timeout": 5}
    assert source.read_all_sync() == {"name": "demo", "service": {"timeout": 5}}


def test_file_source_rereads_on_every_call(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.json", '{"a": 1}')
    source = FileSource(path)
    assert source.read_sync("a") == 1
    path.write_text('{"a": 2}', encoding="utf-8")
    assert source.read_sync("a") == 2


class _CountingLoader(JSONFileLoader):
    def __init__(self) -> None:
        self.loads = 0

    def load(self, path: str):
        self.loads += 1
        return super().load(path)


def test_zero_cache_length_parses_file_once(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.json", '{"a": 1, "b": 2}')
    loader = _CountingLoader()
    source = FileSource(path, loader=loader, cache_length=0)
    assert source.list_sync() == ["a", "b"]
    assert source.read_sync("a") == 1
    assert source.read_all_sync() == {"a": 1, "b": 2}
    path.write_text('{"a": 9}', encoding="utf-8")
    assert source.read_sync("a") == 1
    assert loader.loads == 1
    source.invalidate()
    assert source.read_sync("a") == 9
    assert loader.loads == 2


def test_cache_window_expires_on_clock(tmp_path: Path) -> None:
    path = _write(tmp_path, "app.json", '{"a": 1}')
    clock = FakeClock()
    loader = _CountingLoader()
    source = FileSource(path, loader=loader, cache_length=100, clock=clock)
    assert source.read_sync("a") == 1
    path.write_text('{"a": 2}', encoding="utf-8")
    clock.advance(99)
    assert source.read_sync("a") == 1
    clock.advance(1)
    assert source.read_sync("a") == 2
    assert loader.loads == 2


def test_missing_file_behaves_like_empty_source(tmp_path: Path) -> None:
    source = FileSource(tmp_path / "absent.yaml")
    assert source.list_sync() == []
    assert source.read_sync("anything") is None


def test_malformed_file_raises_from_source(tmp_path: Path) -> None:
    source = FileSource(_write(tmp_path, "app.json", "{"))
    with pytest.raises(InvalidFormat):
        source.read_sync("a")
