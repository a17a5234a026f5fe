from __future__ import annotations

"""
Unit tests for configuration persistence and validation.
"""

import json

import pytest

from gotestexplorer.domain.config import (
    get_default_config,
    load_config,
    save_config,
    validate_config,
)


def test_defaults_follow_go_conventions():
    cfg = get_default_config()
    assert cfg["manifest_name"] == "go.mod"
    assert cfg["test_file_suffix"] == "_test.go"
    assert cfg["source_extensions"] == [".go"]
    assert cfg["workspace_folders"] == []


def test_load_missing_file_returns_defaults(tmp_path):
    cfg = load_config(str(tmp_path / "absent.json"))
    assert cfg == get_default_config()


def test_load_corrupted_file_returns_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_config(str(path)) == get_default_config()


def test_load_non_dict_payload_returns_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert load_config(str(path)) == get_default_config()


def test_partial_file_is_merged_over_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"workspace_folders": ["/src/proj"]}), encoding="utf-8")

    cfg = load_config(str(path))
    assert cfg["workspace_folders"] == ["/src/proj"]
    assert cfg["manifest_name"] == "go.mod"


def test_save_then_load(tmp_path):
    path = tmp_path / "nested" / "config.json"
    cfg = get_default_config()
    cfg["log_level"] = "DEBUG"

    save_config(cfg, str(path))

    assert path.exists()
    assert load_config(str(path))["log_level"] == "DEBUG"


def test_validate_coerces_and_warns():
    cfg, warnings = validate_config({
        "workspace_folders": "/a, /b",
        "source_extensions": ["go", ""],
        "manifest_name": 42,
        "log_level": "verbose",
    })

    assert cfg["workspace_folders"] == ["/a", "/b"]
    assert cfg["source_extensions"] == [".go"]
    assert cfg["manifest_name"] == "go.mod"
    assert cfg["log_level"] == "INFO"
    assert len(warnings) == 4


def test_validate_non_dict_returns_defaults():
    cfg, warnings = validate_config(None)
    assert cfg == get_default_config()
    assert warnings


def test_validate_strict_raises():
    with pytest.raises(TypeError):
        validate_config({"manifest_name": 1}, strict=True)
    with pytest.raises(ValueError):
        validate_config({"log_level": "loud"}, strict=True)
