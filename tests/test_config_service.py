from __future__ import annotations

import json
from pathlib import Path

import pytest

from folder_tidy.config_service import DEFAULT_CONFIG, ConfigService, validate_config


def test_missing_config_returns_defaults(tmp_path: Path) -> None:
    cfg = ConfigService(app_dir=tmp_path)
    assert cfg.load_config(cli_portable=True) == DEFAULT_CONFIG


def test_round_trip_merges_over_defaults(tmp_path: Path) -> None:
    cfg = ConfigService(app_dir=tmp_path)
    payload = {"workers": 4, "extra_extensions": {".psd": "Images"}}
    cfg.save_config(payload, cli_portable=True)
    path = cfg.get_config_path(cli_portable=True)
    assert path == tmp_path / "config.json"
    assert json.loads(path.read_text(encoding="utf-8")) == payload

    loaded = cfg.load_config(cli_portable=True)
    assert loaded["workers"] == 4
    assert loaded["extra_extensions"] == {".psd": "Images"}
    assert loaded["hash_algorithm"] == "sha256"


def test_invalid_payload_on_save_raises(tmp_path: Path) -> None:
    cfg = ConfigService(app_dir=tmp_path)
    with pytest.raises(ValueError, match="Invalid configuration"):
        cfg.save_config({"workers": 0}, cli_portable=True)
    with pytest.raises(ValueError):
        cfg.save_config({"extra_extensions": {".foo": "Duplicates"}}, cli_portable=True)


def test_invalid_file_on_load_falls_back(tmp_path: Path, capsys) -> None:
    (tmp_path / "config.json").write_text(json.dumps({"hash_algorithm": "crc32"}), encoding="utf-8")
    cfg = ConfigService(app_dir=tmp_path)
    assert cfg.load_config(cli_portable=True) == DEFAULT_CONFIG
    assert "Falling back to defaults" in capsys.readouterr().out


def test_unparseable_file_on_load_falls_back(tmp_path: Path) -> None:
    (tmp_path / "config.json").write_text("{not json", encoding="utf-8")
    cfg = ConfigService(app_dir=tmp_path)
    assert cfg.load_config(cli_portable=True) == DEFAULT_CONFIG


def test_portable_flag_selects_app_dir(tmp_path: Path) -> None:
    (tmp_path / "portable.flag").write_text("", encoding="utf-8")
    cfg = ConfigService(app_dir=tmp_path)
    assert cfg.detect_mode() is True
    assert cfg.get_config_dir() == tmp_path


def test_appdata_mode_uses_xdg(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr("platform.system", lambda: "Linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    cfg = ConfigService(app_dir=tmp_path / "app")
    assert cfg.get_config_dir() == tmp_path / "xdg" / "FolderTidy"


def test_validate_config_merges_over_defaults() -> None:
    merged = validate_config({"workers": 8})
    assert merged["workers"] == 8
    assert merged["hash_algorithm"] == DEFAULT_CONFIG["hash_algorithm"]
    assert validate_config(None) == DEFAULT_CONFIG


def test_validate_config_rejects_unknown_algorithm() -> None:
    with pytest.raises(ValueError, match="Invalid configuration"):
        validate_config({"hash_algorithm": "sha512"})
