from __future__ import annotations

import tomllib

import pytest

from eventplanner import config


@pytest.fixture()
def isolated_env(monkeypatch, tmp_path):
    for key in (
        "EVENTPLANNER_CONFIG",
        "EVENTPLANNER_DATA_DIR",
        "EVENTPLANNER_DB",
        "EVENTPLANNER_API_BASE_URL",
        "EVENTPLANNER_REQUEST_TIMEOUT_SECONDS",
        "EVENTPLANNER_APP_HOST",
        "EVENTPLANNER_APP_PORT",
        "EVENTPLANNER_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("EVENTPLANNER_BASE_DIR", str(tmp_path))
    return tmp_path


def test_defaults_when_no_config_file(isolated_env):
    settings = config.load_settings()

    assert settings.api_base_url == "http://localhost:8080/api"
    assert settings.request_timeout_seconds == 10.0
    assert settings.app_port == 4200
    assert settings.token_key == "auth_token"
    assert settings.user_key == "auth_user"
    assert settings.database_path == isolated_env / "data" / "client_state.db"
    assert settings.data_dir.is_dir()


def test_toml_values_are_cast_and_env_wins(isolated_env, monkeypatch):
    (isolated_env / "eventplanner.toml").write_text(
        'api_base_url = "http://backend:9000/api"\n'
        'app_port = "5000"\n'
        'log_level = "debug"\n'
        'data_dir = "state"\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("EVENTPLANNER_REQUEST_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("EVENTPLANNER_API_BASE_URL", "http://override/api")

    settings = config.load_settings()

    assert settings.api_base_url == "http://override/api"
    assert settings.app_port == 5000
    assert settings.log_level == "DEBUG"
    assert settings.request_timeout_seconds == 2.5
    assert settings.data_dir == isolated_env / "state"


def test_update_config_file_merges_known_keys(isolated_env, monkeypatch):
    path = isolated_env / "custom.toml"
    path.write_text('app_host = "0.0.0.0"\n', encoding="utf-8")
    monkeypatch.setattr(config, "settings", config.load_settings(path))

    updated = config.update_config_file(
        {"app_port": 8000, "unknown": "ignored"}, path=path
    )

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    assert data == {"app_host": "0.0.0.0", "app_port": 8000}
    assert updated.app_port == 8000
    assert config.settings is updated
    assert config.settings_as_dict(updated)["app_host"] == "0.0.0.0"
