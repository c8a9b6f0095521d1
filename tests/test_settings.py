"""Tests for settings loading and saving."""
import json
from pathlib import Path

import pytest

from hoardhelper.settings import (
    DEFAULT_CHECK_INTERVAL,
    DEFAULT_MAX_UPLOAD_ATTEMPTS,
    MAX_CHECK_INTERVAL,
    MIN_CHECK_INTERVAL,
    Settings,
    SettingsManager,
    clamp_check_interval,
)


def test_missing_file_loads_defaults(tmp_path: Path) -> None:
    settings = SettingsManager(tmp_path / "settings.json").load(use_env=False)
    assert settings == Settings()
    assert settings.max_upload_attempts == DEFAULT_MAX_UPLOAD_ATTEMPTS


def test_corrupt_file_loads_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert SettingsManager(path).load(use_env=False) == Settings()


def test_non_object_file_loads_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert SettingsManager(path).load(use_env=False) == Settings()


def test_save_and_load_round_trip_without_password(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "settings.json"
    mgr = SettingsManager(path)
    original = Settings(
        url="https://cloud.example.com/dav",
        username="me",
        password="secret",
        target_folder_tv="/TV",
        target_folder_movie="/Movies",
    )
    assert mgr.save(original)

    stored = json.loads(path.read_text(encoding="utf-8"))
    assert "password" not in stored
    assert stored["target_folder_tv"] == "/TV"

    loaded = mgr.load(use_env=False)
    assert loaded.password == ""
    assert loaded.target_folder_movie == "/Movies"


def test_save_with_password(tmp_path: Path) -> None:
    mgr = SettingsManager(tmp_path / "settings.json")
    mgr.save(Settings(password="secret"), include_password=True)
    assert mgr.load(use_env=False).password == "secret"


def test_unknown_keys_are_ignored(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"url": "https://x", "theme": "dark"}), encoding="utf-8")
    assert SettingsManager(path).load(use_env=False).url == "https://x"


def test_environment_overrides_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"target_folder_tv": "/FromFile"}), encoding="utf-8")
    monkeypatch.setenv("HOARDHELPER_TV_FOLDER", "/FromEnv")
    monkeypatch.setenv("HOARDHELPER_PASSWORD", "token")
    settings = SettingsManager(path).load()
    assert settings.target_folder_tv == "/FromEnv"
    assert settings.password == "token"


def test_dotenv_file_is_read(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("HOARDHELPER_MOVIE_FOLDER=/FromDotenv\n", encoding="utf-8")
    settings = SettingsManager(tmp_path / "settings.json").load()
    assert settings.target_folder_movie == "/FromDotenv"


@pytest.mark.parametrize("value, expected", [
    (60, 60),
    (5, MIN_CHECK_INTERVAL),
    (10_000, MAX_CHECK_INTERVAL),
    (float("nan"), DEFAULT_CHECK_INTERVAL),
    (float("inf"), DEFAULT_CHECK_INTERVAL),
    ("abc", DEFAULT_CHECK_INTERVAL),
    (None, DEFAULT_CHECK_INTERVAL),
    ("120", 120),
])
def test_clamp_check_interval(value, expected: int) -> None:
    assert clamp_check_interval(value) == expected


def test_from_dict_normalises_numbers() -> None:
    settings = Settings.from_dict({"connection_check_interval": 1, "max_upload_attempts": 0})
    assert settings.connection_check_interval == MIN_CHECK_INTERVAL
    assert settings.max_upload_attempts == 1


def test_has_credentials() -> None:
    assert not Settings(url="https://x", username="me").has_credentials
    assert Settings(url="https://x", username="me", password="pw").has_credentials


def test_base_overrides() -> None:
    assert Settings(target_folder_tv="/TV").base_overrides() == {"tv": "/TV", "movie": ""}
    assert Settings(target_folder="/All").base_overrides() == {"tv": "/All", "movie": "/All"}
