from __future__ import annotations

import json

import pytest

from lib_config_aggregator.domain.config import EMPTY_SNAPSHOT, ConfigSnapshot, SourceInfo, describe_source


def make_snapshot() -> ConfigSnapshot:
    data = {"db.host": "localhost", "port": 5432, "blob": b"raw"}
    meta = {
        "db.host": SourceInfo(key="db.host", priority=1, source="EnvSource(prefix='APP')"),
        "port": SourceInfo(key="port", priority=0, source="FileSource(app.toml)"),
        "blob": SourceInfo(key="blob", priority=0, source="ManualSource"),
    }
    return ConfigSnapshot(data, meta)


def test_mapping_interface() -> None:
    snapshot = make_snapshot()
    assert snapshot["port"] == 5432
    assert "db.host" in snapshot
    assert len(snapshot) == 3
    assert snapshot.get("missing") is None


def test_snapshot_is_read_only() -> None:
    snapshot = make_snapshot()
    with pytest.raises(TypeError):
        snapshot._data["port"] = 1  # type: ignore[index]


def test_as_dict_returns_copy() -> None:
    snapshot = make_snapshot()
    dictionary = snapshot.as_dict()
    dictionary["port"] = 1
    assert snapshot["port"] == 5432


def test_origin_metadata() -> None:
    snapshot = make_snapshot()
    origin = snapshot.origin("db.host")
    assert origin is not None and origin["priority"] == 1
    assert snapshot.origin("missing") is None


def test_to_json_renders_bytes_as_text() -> None:
    payload = json.loads(make_snapshot().to_json())
    assert payload == {"db.host": "localhost", "port": 5432, "blob": "raw"}


def test_to_json_with_provenance() -> None:
    payload = json.loads(make_snapshot().to_json(indent=2, provenance=True))
    assert payload["config"]["port"] == 5432
    assert payload["provenance"]["port"]["source"] == "FileSource(app.toml)"


def test_empty_snapshot() -> None:
    assert len(EMPTY_SNAPSHOT) == 0
    assert EMPTY_SNAPSHOT.to_json() == "{}"


def test_describe_source_prefers_label() -> None:
    class Labelled:
        label = "custom"

    class Unlabelled:
        pass

    assert describe_source(Labelled()) == "custom"
    assert describe_source(Unlabelled()) == "Unlabelled"
