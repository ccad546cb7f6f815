from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, ClassVar, Optional

from pydantic import BaseModel

from feishu_md.core.paths import default_config_path

DEFAULT_ENDPOINT = "https://open.feishu.cn"
DEFAULT_OUTPUT_DIR = "./output"


class AppConfig(BaseModel):
    app_id: str = ""
    app_secret: str = ""
    endpoint: str = DEFAULT_ENDPOINT
    output_dir: str = DEFAULT_OUTPUT_DIR
    download_media: bool = True
    request_delay: float = 0.35
    show_unsupported: bool = False


# 环境变量 -> 配置字段
_ENV_FIELDS = {
    "app_id": "FEISHU_APP_ID",
    "app_secret": "FEISHU_APP_SECRET",
    "endpoint": "FEISHU_ENDPOINT",
    "output_dir": "OUTPUT_DIR",
}


class ConfigManager:
    _instance: ClassVar[Optional["ConfigManager"]] = None

    def __init__(self, config_path: Optional[Path] = None) -> None:
        env_path = os.getenv("FEISHU_MD_CONFIG")
        if config_path is None and env_path:
            config_path = Path(env_path)
        self._config_path = (config_path or default_config_path()).expanduser()
        self._config = self._load_config()

    @property
    def config(self) -> AppConfig:
        return self._config

    def reload(self) -> AppConfig:
        self._config = self._load_config()
        return self._config

    def resolve(self, **overrides: Any) -> AppConfig:
        """在文件与环境变量之上叠加命令行参数，值为 None 的参数忽略。"""
        updates = {key: value for key, value in overrides.items() if value is not None}
        return self._config.model_copy(update=updates)

    def _load_config(self) -> AppConfig:
        data: dict[str, object] = {}
        if self._config_path.exists():
            data = json.loads(self._config_path.read_text(encoding="utf-8"))

        for key, env_name in _ENV_FIELDS.items():
            env_value = os.getenv(env_name)
            if env_value:
                data[key] = env_value

        return AppConfig.model_validate(data)

    @classmethod
    def get(cls) -> "ConfigManager":
        if cls._instance is None:
            cls._instance = ConfigManager()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


def validate_config(config: AppConfig) -> list[str]:
    errors: list[str] = []
    if not config.app_id.strip():
        errors.append("缺少 App ID，请通过 --app-id 参数或 FEISHU_APP_ID 环境变量提供")
    if not config.app_secret.strip():
        errors.append("缺少 App Secret，请通过 --app-secret 参数或 FEISHU_APP_SECRET 环境变量提供")
    return errors


__all__ = [
    "AppConfig",
    "ConfigManager",
    "DEFAULT_ENDPOINT",
    "DEFAULT_OUTPUT_DIR",
    "validate_config",
]
