"""Database session and base configuration."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Iterator

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from . import config

logger = logging.getLogger(__name__)

_url = make_url(config.DATABASE_URL)
if _url.get_backend_name() == "sqlite" and _url.database not in (None, "", ":memory:"):
    Path(_url.database).parent.mkdir(parents=True, exist_ok=True)

engine = create_engine(
    config.DATABASE_URL,
    connect_args={"check_same_thread": False},
    pool_pre_ping=True,
)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
Base = declarative_base()


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, _record) -> None:
    if type(dbapi_connection).__module__.startswith("sqlite3"):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Columns introduced after the first schema; older files get them via ALTER TABLE.
_LINK_COLUMN_UPGRADES = {
    "icon_path": "ALTER TABLE links ADD COLUMN icon_path VARCHAR(500)",
    "command": "ALTER TABLE links ADD COLUMN command VARCHAR(2000)",
    "terminal_type": "ALTER TABLE links ADD COLUMN terminal_type VARCHAR(100)",
}


def _upgrade_links(bind: Engine, inspector) -> None:
    existing_columns = {column["name"] for column in inspector.get_columns("links")}
    statements = [
        statement
        for column, statement in _LINK_COLUMN_UPGRADES.items()
        if column not in existing_columns
    ]
    if not statements:
        return
    with bind.begin() as connection:
        for statement in statements:
            connection.execute(text(statement))
    logger.info("Upgraded links table with %d new column(s)", len(statements))


def _upgrade_tags(bind: Engine, inspector) -> None:
    from .models import tag_name_key

    existing_columns = {column["name"] for column in inspector.get_columns("tags")}
    if "name_key" in existing_columns:
        return
    with bind.begin() as connection:
        connection.execute(text("ALTER TABLE tags ADD COLUMN name_key VARCHAR(100)"))
        rows = connection.execute(text("SELECT id, name FROM tags")).all()
        for tag_id, name in rows:
            connection.execute(
                text("UPDATE tags SET name_key = :key WHERE id = :id"),
                {"key": tag_name_key(name), "id": tag_id},
            )
        connection.execute(text("DROP INDEX IF EXISTS ix_tags_name_lower"))
        connection.execute(
            text("CREATE UNIQUE INDEX IF NOT EXISTS ix_tags_name_key ON tags (name_key)")
        )
    logger.info("Backfilled name_key for %d tag(s)", len(rows))


def ensure_schema(bind: Engine | None = None) -> None:
    bind = bind or engine
    inspector = inspect(bind)
    tables = inspector.get_table_names()
    if "links" in tables:
        _upgrade_links(bind, inspector)
    if "tags" in tables:
        _upgrade_tags(bind, inspector)


def init_db(bind: Engine | None = None) -> None:
    """Create missing tables and upgrade older link and tag tables in place."""
    from . import models  # noqa: F401  registers the mapped tables

    bind = bind or engine
    ensure_schema(bind)
    Base.metadata.create_all(bind=bind)


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a database session."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
