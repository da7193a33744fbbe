import os
import tempfile

_TEST_DIR = tempfile.mkdtemp(prefix="winwork-tests-")
os.environ.setdefault(
    "WINWORK_DATABASE_URL", f"sqlite:///{os.path.join(_TEST_DIR, 'winwork.sqlite3')}"
)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from winwork import models, schemas
from winwork.database import Base, get_session
from winwork.main import app
from winwork.repositories.links import LinkRepository
from winwork.repositories.settings import SettingsRepository
from winwork.repositories.tags import TagRepository


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def links(session):
    return LinkRepository(session)


@pytest.fixture()
def tags(session):
    return TagRepository(session)


@pytest.fixture()
def settings_repo(session):
    return SettingsRepository(session)


@pytest.fixture()
def make_link(links):
    def _make(name, *, type=models.LinkType.WEB_URL, parent=None, url=None, **extra):
        if url is None and type not in (models.LinkType.FOLDER, models.LinkType.NOTES):
            url = f"https://example.com/{name.lower().replace(' ', '-')}"
        payload = schemas.LinkCreate(
            name=name,
            type=type,
            url=url,
            parent_id=parent.id if parent is not None else None,
            **extra,
        )
        return links.create(payload)

    return _make


@pytest.fixture()
def client(session_factory):
    def _override_session():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_session] = _override_session
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
