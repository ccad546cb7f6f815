from __future__ import annotations

import os
import sys
from pathlib import Path

APP_NAME = "feishu-md"


def _default_app_data_dir() -> Path:
    if sys.platform == "win32":
        base = os.getenv("APPDATA")
        if not base:
            base = Path.home() / "AppData" / "Roaming"
        return Path(base) / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME
    base = os.getenv("XDG_CONFIG_HOME")
    if not base:
        base = Path.home() / ".config"
    return Path(base) / APP_NAME


def data_dir() -> Path:
    env_dir = os.getenv("FEISHU_MD_DATA_DIR")
    if env_dir:
        return Path(env_dir).expanduser().resolve()
    return _default_app_data_dir()


def default_config_path() -> Path:
    return data_dir() / "config.json"


def logs_dir() -> Path:
    return data_dir() / "logs"


__all__ = ["APP_NAME", "data_dir", "default_config_path", "logs_dir"]
