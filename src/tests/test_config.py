import json

import pytest

from depswap.config import CONFIG_PATH_ENV, ConfigError, ConfigManager, InstallConfig


def test_creates_default_config(tmp_path):
    path = tmp_path / "cfg" / "config.json"
    manager = ConfigManager(config_path=path)

    assert path.exists()
    stored = json.loads(path.read_text())
    assert stored["npm_client"] == "npm"
    assert stored["stdio"] == "pipe"
    assert manager.get("lock_dir") == str(tmp_path / "cfg" / ".locks")


def test_env_var_points_at_config(tmp_path, monkeypatch):
    path = tmp_path / "elsewhere.json"
    monkeypatch.setenv(CONFIG_PATH_ENV, str(path))
    assert ConfigManager().config_path == path


def test_set_coerces_and_persists(tmp_path):
    path = tmp_path / "config.json"
    manager = ConfigManager(config_path=path)

    manager.set("npm_global_style", "yes")
    manager.set("npm_client_args", "--no-audit --prefer-offline")
    manager.set("registry", "https://registry.test/")
    manager.set("lock_timeout", "12.5")

    reloaded = ConfigManager(config_path=path)
    assert reloaded.get("npm_global_style") is True
    assert reloaded.get("npm_client_args") == ["--no-audit", "--prefer-offline"]
    assert reloaded.get("registry") == "https://registry.test/"
    assert reloaded.get("lock_timeout") == 12.5


@pytest.mark.parametrize("key, value", [("nope", "1"), ("npm_global_style", "maybe"), ("lock_timeout", "soon")])
def test_set_rejects_bad_values(tmp_path, key, value):
    manager = ConfigManager(config_path=tmp_path / "config.json")
    with pytest.raises(ConfigError):
        manager.set(key, value)


def test_older_config_gets_new_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"npm_client": "yarn"}))

    manager = ConfigManager(config_path=path)

    assert manager.get("npm_client") == "yarn"
    assert manager.get("serialize_installs") is True


def test_invalid_json_is_reported(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError, match="not valid JSON"):
        ConfigManager(config_path=path)


def test_to_install_config_applies_overrides(tmp_path):
    manager = ConfigManager(config_path=tmp_path / "config.json")
    manager.set("mutex", "network:42424")

    config = manager.to_install_config(npm_client="yarn", registry=None, stdio="inherit")

    assert config == InstallConfig(
        npm_client="yarn", mutex="network:42424", stdio="inherit", sub_command="install"
    )


def test_install_config_validation():
    with pytest.raises(ConfigError):
        InstallConfig(stdio="tty")
    with pytest.raises(ConfigError):
        InstallConfig(sub_command="")
    assert InstallConfig(npm_client_args="--a --b").npm_client_args == ["--a", "--b"]
