from __future__ import annotations

from pathlib import Path

import pytest

from hwmodctl.core.errors import SettingsError
from hwmodctl.core.settings import load_settings


def _write_settings(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for name in ("HWMODCTL_RESOURCE_URL", "HWMODCTL_MODULE_ROOT", "HWMODCTL_ENCRYPTION_URL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults_without_settings_file(tmp_path: Path) -> None:
    settings = load_settings()
    assert settings.resource_url is None
    assert settings.module_root == tmp_path / "data" / "hwmodctl"
    assert settings.layout.modules == tmp_path / "data" / "hwmodctl" / "modules"
    assert settings.layout.block_modules == tmp_path / "data" / "hwmodctl" / "block_modules"
    assert settings.block_keys == ("block",)
    assert settings.timeout_s == 30.0


def test_settings_file_is_loaded(tmp_path: Path) -> None:
    _write_settings(
        tmp_path / "cfg" / "hwmodctl" / "config.yaml",
        f"""
resource_url: "https://hub.example/modules/"
module_root: "{tmp_path / 'root'}"
encryption_url: "http://127.0.0.1:23518/encrypt"
timeout_s: 12.5
block_keys: ["block"]
""",
    )

    settings = load_settings()
    assert settings.resource_url == "https://hub.example/modules"
    assert settings.module_root == tmp_path / "root"
    assert settings.encryption_url == "http://127.0.0.1:23518/encrypt"
    assert settings.timeout_s == 12.5


def test_env_overrides_settings_file(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _write_settings(
        tmp_path / "cfg" / "hwmodctl" / "config.yaml",
        'resource_url: "https://hub.example/modules"\n',
    )
    monkeypatch.setenv("HWMODCTL_RESOURCE_URL", "http://mirror.example/modules")
    monkeypatch.setenv("HWMODCTL_MODULE_ROOT", str(tmp_path / "env-root"))

    settings = load_settings()
    assert settings.resource_url == "http://mirror.example/modules"
    assert settings.module_root == tmp_path / "env-root"


def test_unknown_key_rejected(tmp_path: Path) -> None:
    _write_settings(tmp_path / "cfg" / "hwmodctl" / "config.yaml", "retries: 3\n")

    with pytest.raises(SettingsError):
        load_settings()


def test_bad_url_rejected(tmp_path: Path) -> None:
    _write_settings(tmp_path / "cfg" / "hwmodctl" / "config.yaml", 'resource_url: "ftp://hub"\n')

    with pytest.raises(SettingsError) as exc:
        load_settings()
    assert "resource_url" in str(exc.value)


def test_duplicate_yaml_keys_rejected(tmp_path: Path) -> None:
    _write_settings(
        tmp_path / "cfg" / "hwmodctl" / "config.yaml",
        'resource_url: "http://a"\nresource_url: "http://b"\n',
    )

    with pytest.raises(SettingsError):
        load_settings()


def test_non_mapping_root_rejected(tmp_path: Path) -> None:
    _write_settings(tmp_path / "cfg" / "hwmodctl" / "config.yaml", "- one\n- two\n")

    with pytest.raises(SettingsError):
        load_settings()


def test_explicit_path_argument(tmp_path: Path) -> None:
    custom = tmp_path / "elsewhere.yaml"
    _write_settings(custom, 'resource_url: "http://custom/modules"\n')

    assert load_settings(custom).resource_url == "http://custom/modules"
