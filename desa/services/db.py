from __future__ import annotations

import sqlite3
from typing import Any, Dict, Mapping

from flask import current_app
from sqlalchemy import event, inspect, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError

from desa.extensions import db

CORE_TABLES = {
    'desa_settings', 'news', 'galleries', 'events', 'organisasi',
    'layanan', 'pengajuan_layanan', 'dokumen', 'admins',
}


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection.
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def engine_options(config: Mapping[str, Any]) -> Dict[str, Any]:
    """Build SQLALCHEMY_ENGINE_OPTIONS for the configured database.

    Server databases get a bounded pool: at most DB_POOL_SIZE (+ overflow)
    connections, with callers waiting up to DB_POOL_TIMEOUT seconds to
    acquire one. SQLite keeps SQLAlchemy's defaults.
    """
    options: Dict[str, Any] = dict(config.get('SQLALCHEMY_ENGINE_OPTIONS') or {})
    url = make_url(config['SQLALCHEMY_DATABASE_URI'])
    if url.get_backend_name() == 'sqlite':
        return options

    options.setdefault('pool_size', config.get('DB_POOL_SIZE', 10))
    options.setdefault('max_overflow', config.get('DB_MAX_OVERFLOW', 0))
    options.setdefault('pool_timeout', config.get('DB_POOL_TIMEOUT', 60))
    options.setdefault('pool_pre_ping', True)
    return options


def check_connection() -> bool:
    """Return True when a pooled connection can run a trivial query."""
    try:
        with db.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as exc:
        current_app.logger.error(f"Database connection failed: {exc}")
        return False


def ensure_core_tables() -> bool:
    """Create the schema if any core table is missing.

    Mirrors CREATE TABLE IF NOT EXISTS: existing tables are left untouched.
    Returns True when tables had to be created.
    """
    import desa.models  # noqa: F401

    inspector = inspect(db.engine)
    existing = set(inspector.get_table_names())
    if CORE_TABLES.issubset(existing):
        return False

    db.create_all()
    current_app.logger.info(
        f"Created missing tables: {', '.join(sorted(CORE_TABLES - existing))}"
    )
    return True


def close_db(_: Exception | None = None) -> None:
    db.session.remove()


__all__ = ["engine_options", "check_connection", "ensure_core_tables", "close_db", "CORE_TABLES"]
