"""FastAPI dependencies wiring services to a request-scoped session."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from .database import get_session
from .repositories.links import LinkRepository
from .repositories.settings import SettingsRepository
from .repositories.tags import TagRepository
from .services.links import LinkService
from .services.settings import SettingsService
from .services.tags import TagService


def get_link_service(session: Session = Depends(get_session)) -> LinkService:
    return LinkService(LinkRepository(session))


def get_tag_service(session: Session = Depends(get_session)) -> TagService:
    return TagService(TagRepository(session), LinkRepository(session))


def get_settings_service(session: Session = Depends(get_session)) -> SettingsService:
    return SettingsService(SettingsRepository(session))
