from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import sessionmaker

from winwork.database import init_db
from winwork.repositories.settings import SettingsRepository
from winwork.repositories.tags import TagRepository
from winwork.seed import DEFAULT_TAGS, seed_defaults
from winwork.services.settings import DEFAULTS

LEGACY_SCHEMA = (
    """
    CREATE TABLE links (
        id INTEGER PRIMARY KEY,
        name VARCHAR(255) NOT NULL,
        url VARCHAR(2048),
        type INTEGER NOT NULL,
        description VARCHAR(1000),
        notes TEXT,
        parent_id INTEGER REFERENCES links (id),
        sort_order INTEGER NOT NULL DEFAULT 0,
        access_count INTEGER NOT NULL DEFAULT 0,
        last_accessed_at DATETIME,
        created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE tags (
        id INTEGER PRIMARY KEY,
        name VARCHAR(100) NOT NULL UNIQUE,
        color VARCHAR(7) NOT NULL,
        description VARCHAR(500),
        created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "INSERT INTO links (name, url, type) VALUES ('Old', 'https://example.com', 1)",
    "INSERT INTO tags (name, color) VALUES ('Übung', '#808080')",
)


def test_seeding_is_idempotent(session):
    first = seed_defaults(session)
    assert first == len(DEFAULT_TAGS) + len(DEFAULTS)

    SettingsRepository(session).set_value("Theme", "Light")
    assert seed_defaults(session) == 0

    assert SettingsRepository(session).get_value("Theme") == "Light"
    assert len(TagRepository(session).get_all()) == len(DEFAULT_TAGS)


def test_init_db_upgrades_legacy_tables(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'legacy.sqlite3'}")
    try:
        with engine.begin() as connection:
            for statement in LEGACY_SCHEMA:
                connection.execute(text(statement))

        init_db(engine)
        init_db(engine)

        inspector = inspect(engine)
        link_columns = {column["name"] for column in inspector.get_columns("links")}
        assert {"command", "terminal_type", "icon_path"} <= link_columns
        assert "app_settings" in inspector.get_table_names()

        session = sessionmaker(bind=engine)()
        try:
            tag = TagRepository(session).get_by_name("ÜBUNG")
            assert tag is not None and tag.name_key == "übung"
            old = session.execute(text("SELECT name, command FROM links")).one()
            assert tuple(old) == ("Old", None)
        finally:
            session.close()
    finally:
        engine.dispose()
