from feishu_md.core import version as version_module


def test_get_version_prefers_env(monkeypatch) -> None:
    monkeypatch.setenv("FEISHU_MD_VERSION", "v1.2.3")

    assert version_module.get_version() == "v1.2.3"


def test_get_version_falls_back_when_not_installed(monkeypatch) -> None:
    monkeypatch.delenv("FEISHU_MD_VERSION", raising=False)
    monkeypatch.setattr(version_module, "DISTRIBUTION_NAME", "feishu-md-not-installed")

    assert version_module.get_version() == "0.0.0"
