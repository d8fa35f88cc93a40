"""Tests for settings persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mosaic_editor import settings as settings_mod
from mosaic_editor.config import RADIUS_DEFAULT
from mosaic_editor.settings import Settings, load_settings, save_settings, validate_settings


@pytest.fixture(autouse=True)
def config_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setattr(settings_mod, "config_dir", lambda: tmp_path)
    return tmp_path


def _write(path: Path, payload) -> None:
    (path / "settings.json").write_text(json.dumps(payload), encoding="utf-8")


class TestValidate:
    def test_valid(self) -> None:
        assert validate_settings({"radius": 3, "last_open_dir": "/tmp", "last_save_dir": None}) == []

    def test_unknown_keys_ignored(self) -> None:
        assert validate_settings({"theme": "dark"}) == []

    @pytest.mark.parametrize("radius", [0, 21, True, "5", 2.0])
    def test_bad_radius(self, radius) -> None:
        assert len(validate_settings({"radius": radius})) == 1

    def test_bad_dir(self) -> None:
        assert len(validate_settings({"last_open_dir": "  "})) == 1
        assert len(validate_settings({"last_save_dir": 5})) == 1

    def test_not_a_dict(self) -> None:
        assert validate_settings(["radius"]) != []


class TestLoadSave:
    def test_defaults_when_missing(self) -> None:
        assert load_settings() == Settings()
        assert load_settings().radius == RADIUS_DEFAULT

    def test_round_trip(self, config_home: Path) -> None:
        saved = Settings(radius=7, last_open_dir="/pics", last_save_dir="/out")
        save_settings(saved)
        raw = json.loads((config_home / "settings.json").read_text(encoding="utf-8"))
        assert raw["version"] == 1
        assert raw["settings"]["radius"] == 7
        assert load_settings() == saved

    def test_corrupt_file(self, config_home: Path) -> None:
        (config_home / "settings.json").write_text("{not json", encoding="utf-8")
        assert load_settings() == Settings()

    def test_wrong_version(self, config_home: Path) -> None:
        _write(config_home, {"version": 99, "settings": {"radius": 7}})
        assert load_settings() == Settings()

    def test_missing_settings_block(self, config_home: Path) -> None:
        _write(config_home, {"version": 1})
        assert load_settings() == Settings()

    def test_invalid_value_falls_back_individually(self, config_home: Path) -> None:
        _write(config_home, {"version": 1, "settings": {"radius": 500, "last_open_dir": "/pics"}})
        loaded = load_settings()
        assert loaded.radius == RADIUS_DEFAULT
        assert loaded.last_open_dir == "/pics"

    def test_save_rejects_invalid(self, config_home: Path) -> None:
        with pytest.raises(ValueError):
            save_settings(Settings(radius=0))
        assert not (config_home / "settings.json").exists()

    def test_save_write_failure_is_logged(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture,
    ) -> None:
        monkeypatch.setattr(settings_mod, "config_dir", lambda: tmp_path / "gone")
        save_settings(Settings())
        assert "Could not write settings" in caplog.text
