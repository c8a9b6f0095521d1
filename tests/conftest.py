"""Shared fixtures for the hoardhelper test suite."""
from pathlib import Path

import pytest

from hoardhelper.models import TorrentFile
from hoardhelper.settings import ENV_OVERRIDES

GB = 1024 * 1024 * 1024
MB = 1024 * 1024


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Keep tests away from the real home directory and HOARDHELPER_* vars."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    for name in ENV_OVERRIDES:
        # setenv first so that teardown also removes values set by dotenv
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def make_file():
    """Factory for TorrentFile instances (1 GB by default)."""
    def _make(file_id: int, path: str, size: int = GB) -> TorrentFile:
        return TorrentFile(id=file_id, path=path, bytes=size, selected=1)
    return _make
