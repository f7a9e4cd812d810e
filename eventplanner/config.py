"""Global configuration for the Event Planner client."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

DEFAULTS: dict[str, Any] = {
    "api_base_url": "http://localhost:8080/api",
    "request_timeout_seconds": 10.0,
    "app_host": "127.0.0.1",
    "app_port": 4200,
    "log_level": "INFO",
}

TYPE_CASTERS: dict[str, Callable[[Any], Any]] = {
    "api_base_url": str,
    "request_timeout_seconds": float,
    "app_host": str,
    "app_port": int,
    "log_level": lambda value: str(value).strip().upper(),
}


@dataclass(frozen=True)
class Settings:
    base_dir: Path
    data_dir: Path
    database_path: Path
    api_base_url: str
    request_timeout_seconds: float
    app_host: str
    app_port: int
    log_level: str
    token_key: str
    user_key: str
    config_path: Path


def _cast_value(key: str, value: Any) -> Any:
    if key not in TYPE_CASTERS:
        return value
    return TYPE_CASTERS[key](value)


def _load_toml_config(config_path: Path) -> dict[str, Any]:
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        return tomllib.load(handle)


def _config_layered_value(key: str, *, toml_config: dict[str, Any]) -> Any:
    env_key = f"EVENTPLANNER_{key.upper()}"
    if env_key in os.environ:
        return _cast_value(key, os.environ[env_key])
    if key in toml_config:
        return _cast_value(key, toml_config[key])
    return DEFAULTS[key]


def _resolve_paths(
    *,
    base_dir: Path,
    data_dir: str | Path | None,
    database_path: str | Path | None,
):
    resolved_base = Path(base_dir)
    resolved_data = Path(data_dir) if data_dir else resolved_base / "data"
    if not resolved_data.is_absolute():
        resolved_data = resolved_base / resolved_data
    resolved_db = (
        Path(database_path) if database_path else resolved_data / "client_state.db"
    )
    if not resolved_db.is_absolute():
        resolved_db = resolved_base / resolved_db
    return resolved_base, resolved_data, resolved_db


def load_settings(config_override: Path | None = None) -> Settings:
    base_dir = Path(os.getenv("EVENTPLANNER_BASE_DIR", Path.cwd()))
    env_config = os.getenv("EVENTPLANNER_CONFIG")
    config_path = Path(config_override or env_config or base_dir / "eventplanner.toml")
    toml_config = _load_toml_config(config_path)

    base_dir_value, data_dir_value, database_path_value = _resolve_paths(
        base_dir=base_dir,
        data_dir=os.getenv("EVENTPLANNER_DATA_DIR", toml_config.get("data_dir")),
        database_path=os.getenv("EVENTPLANNER_DB", toml_config.get("database_path")),
    )

    settings = Settings(
        base_dir=base_dir_value,
        data_dir=data_dir_value,
        database_path=database_path_value,
        api_base_url=_config_layered_value("api_base_url", toml_config=toml_config),
        request_timeout_seconds=_config_layered_value(
            "request_timeout_seconds", toml_config=toml_config
        ),
        app_host=_config_layered_value("app_host", toml_config=toml_config),
        app_port=_config_layered_value("app_port", toml_config=toml_config),
        log_level=_config_layered_value("log_level", toml_config=toml_config),
        token_key="auth_token",
        user_key="auth_user",
        config_path=config_path,
    )
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    return settings


def settings_as_dict(settings: Settings) -> dict[str, Any]:
    return {
        "base_dir": str(settings.base_dir),
        "data_dir": str(settings.data_dir),
        "database_path": str(settings.database_path),
        "api_base_url": settings.api_base_url,
        "request_timeout_seconds": settings.request_timeout_seconds,
        "app_host": settings.app_host,
        "app_port": settings.app_port,
        "log_level": settings.log_level,
    }


def _toml_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def write_config_file(config: dict[str, Any], *, path: Path) -> None:
    lines = ["# Event Planner client configuration\n"]
    for key in sorted(config.keys()):
        lines.append(f"{key} = {_toml_literal(config[key])}\n")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("".join(lines), encoding="utf-8")


def update_config_file(updates: dict[str, Any], *, path: Path | None = None) -> Settings:
    current_settings = settings if "settings" in globals() else load_settings()
    target_path = path or current_settings.config_path
    existing = _load_toml_config(target_path)
    merged = {**existing}
    for key, value in updates.items():
        if key not in DEFAULTS:
            continue
        merged[key] = _cast_value(key, value)
    write_config_file(merged, path=target_path)
    new_settings = load_settings(target_path)
    globals()["settings"] = new_settings
    return new_settings


settings = load_settings()
