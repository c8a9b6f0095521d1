"""Settings management for HoardHelper."""
from __future__ import annotations

import json
import logging
import math
import os
import sys
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Platform-appropriate settings directory
# ---------------------------------------------------------------------------

def app_data_dir() -> Path:
    """Return the platform settings directory, creating it if needed."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home()))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    d = base / "HoardHelper"
    d.mkdir(parents=True, exist_ok=True)
    return d


SETTINGS_FILENAME = "settings.json"

# Connection check interval constraints (in seconds)
MIN_CHECK_INTERVAL = 30
MAX_CHECK_INTERVAL = 300
DEFAULT_CHECK_INTERVAL = 60

# One initial attempt plus one retry.
DEFAULT_MAX_UPLOAD_ATTEMPTS = 2

# Environment variable -> Settings field
ENV_OVERRIDES = {
    "HOARDHELPER_URL": "url",
    "HOARDHELPER_USERNAME": "username",
    "HOARDHELPER_PASSWORD": "password",
    "HOARDHELPER_TV_FOLDER": "target_folder_tv",
    "HOARDHELPER_MOVIE_FOLDER": "target_folder_movie",
}


def clamp_check_interval(value: Any) -> int:
    """Clamp a connection check interval to [MIN, MAX]; junk -> default."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_CHECK_INTERVAL
    if math.isnan(number) or math.isinf(number):
        return DEFAULT_CHECK_INTERVAL
    return int(max(MIN_CHECK_INTERVAL, min(MAX_CHECK_INTERVAL, number)))


@dataclass
class Settings:
    """Connection and library settings."""
    url: str = ""
    username: str = ""
    password: str = ""
    target_folder_tv: str = ""
    target_folder_movie: str = ""
    target_folder: str = ""  # Deprecated single root, kept for migration
    connection_check_interval: int = DEFAULT_CHECK_INTERVAL
    max_upload_attempts: int = DEFAULT_MAX_UPLOAD_ATTEMPTS

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Settings:
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        settings = cls(**values)
        settings.connection_check_interval = clamp_check_interval(
            settings.connection_check_interval
        )
        try:
            settings.max_upload_attempts = max(1, int(settings.max_upload_attempts))
        except (TypeError, ValueError):
            settings.max_upload_attempts = DEFAULT_MAX_UPLOAD_ATTEMPTS
        return settings

    def to_dict(self, include_password: bool = False) -> dict[str, Any]:
        data = asdict(self)
        if not include_password:
            data.pop("password")
        return data

    @property
    def has_credentials(self) -> bool:
        return bool(self.url and self.username and self.password)

    def base_overrides(self) -> dict[str, str]:
        """Root folders per media type, falling back to the legacy folder."""
        return {
            "tv": self.target_folder_tv or self.target_folder,
            "movie": self.target_folder_movie or self.target_folder,
        }


def load_env_files() -> None:
    """Load .env from the current directory, then the home directory."""
    for env_path in (Path.cwd() / ".env", Path.home() / ".env"):
        if env_path.exists():
            load_dotenv(env_path)


# ---------------------------------------------------------------------------
# SettingsManager -- reads / writes the settings file
# ---------------------------------------------------------------------------

class SettingsManager:
    """Settings store backed by a JSON file.

    Usage:
        mgr = SettingsManager()
        settings = mgr.load()
        settings.target_folder_tv = "/Media/TV"
        mgr.save(settings)
    """

    def __init__(self, path: Path | None = None):
        self.path = path or app_data_dir() / SETTINGS_FILENAME

    def load(self, use_env: bool = True) -> Settings:
        """Load settings; environment variables win over the file."""
        data = self._read()
        if use_env:
            load_env_files()
            for env_name, key in ENV_OVERRIDES.items():
                value = os.environ.get(env_name)
                if value:
                    data[key] = value
        return Settings.from_dict(data)

    def save(self, settings: Settings, include_password: bool = False) -> bool:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(
                    settings.to_dict(include_password=include_password),
                    f, indent=2, ensure_ascii=False,
                )
            return True
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self.path, e)
            return False

    def _read(self) -> dict[str, Any]:
        if self.path.exists():
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    return data
                log.warning("Ignoring malformed settings file %s", self.path)
            except (json.JSONDecodeError, OSError) as e:
                log.warning("Could not read settings from %s: %s", self.path, e)
        return {}
