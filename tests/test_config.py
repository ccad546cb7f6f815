from pathlib import Path

import pytest

from feishu_md.core.config import DEFAULT_ENDPOINT, AppConfig, ConfigManager, validate_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in ("FEISHU_APP_ID", "FEISHU_APP_SECRET", "FEISHU_ENDPOINT", "OUTPUT_DIR", "FEISHU_MD_CONFIG"):
        monkeypatch.delenv(name, raising=False)
    ConfigManager.reset()
    yield
    ConfigManager.reset()


def test_config_manager_env_override(tmp_path: Path, monkeypatch) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text('{"app_id":"file-id","output_dir":"docs"}', encoding="utf-8")

    monkeypatch.setenv("FEISHU_MD_CONFIG", str(config_path))
    monkeypatch.setenv("FEISHU_APP_ID", "env-id")

    manager = ConfigManager.get()

    assert manager.config.app_id == "env-id"
    assert manager.config.output_dir == "docs"
    assert manager.config.endpoint == DEFAULT_ENDPOINT
    assert ConfigManager.get() is manager


def test_resolve_ignores_none_overrides(tmp_path: Path) -> None:
    manager = ConfigManager(config_path=tmp_path / "missing.json")

    config = manager.resolve(app_secret="secret", endpoint=None, download_media=False)

    assert config.app_secret == "secret"
    assert config.endpoint == DEFAULT_ENDPOINT
    assert config.download_media is False
    assert manager.config.app_secret == ""


def test_validate_config_reports_missing_credentials() -> None:
    assert len(validate_config(AppConfig())) == 2
    assert validate_config(AppConfig(app_id="a", app_secret="b")) == []
