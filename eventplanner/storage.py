"""Durable key/value storage for the client session."""

from __future__ import annotations

import shutil
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from .config import settings
from .database import engine, get_session
from .models import StoredValue
from .utils import utcnow


def init_db() -> None:
    upgrade_database(make_backup=False)


def _alembic_config() -> Config:
    package_dir = Path(__file__).resolve().parent
    script_location = package_dir / "alembic"
    ini_path = script_location.parent / "alembic.ini"

    config = Config(str(ini_path)) if ini_path.exists() else Config()
    config.set_main_option("script_location", str(script_location))
    config.set_main_option("sqlalchemy.url", str(engine.url))
    return config


def upgrade_database(*, make_backup: bool = True) -> list[str]:
    """Bring the state database schema up to date.

    Returns a list of applied actions; empty if already up-to-date.
    """
    actions: list[str] = []
    db_path = Path(settings.database_path)

    if make_backup and db_path.exists():
        backup_path = db_path.with_suffix(db_path.suffix + ".bak")
        shutil.copy(db_path, backup_path)
        actions.append(f"Backup created at {backup_path}")

    inspector = inspect(engine)
    has_alembic = inspector.has_table("alembic_version")
    has_state = inspector.has_table(StoredValue.__tablename__)
    config = _alembic_config()

    if not has_alembic and not has_state:
        command.upgrade(config, "head")
        actions.append("Created client state tables")
    elif not has_alembic:
        # Tables created outside Alembic (e.g. create_all): baseline them.
        command.stamp(config, "head")
        actions.append("Stamped existing state database to Alembic head")
    else:
        command.upgrade(config, "head")
        actions.append("Applied Alembic migrations to head")

    return actions


class StateStore:
    """Persisted string values under fixed keys, like browser local storage."""

    def get(self, key: str) -> str | None:
        with get_session() as session:
            stored = session.get(StoredValue, key)
            return stored.value if stored else None

    def set(self, key: str, value: str) -> None:
        with get_session() as session:
            session.merge(StoredValue(key=key, value=value, updated_at=utcnow()))

    def delete(self, key: str) -> None:
        with get_session() as session:
            stored = session.get(StoredValue, key)
            if stored is not None:
                session.delete(stored)
