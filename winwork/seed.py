"""Default rows written on first start."""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from . import schemas
from .repositories.settings import SettingsRepository
from .repositories.tags import TagRepository
from .services.settings import DEFAULTS

logger = logging.getLogger(__name__)

DEFAULT_TAGS = (
    ("Work", "#0078D4", "Work-related links"),
    ("Personal", "#107C10", "Personal links"),
    ("Development", "#E74C3C", "Development tools and resources"),
    ("Frequently Used", "#F39C12", "Most frequently accessed links"),
    ("Learning", "#9B59B6", "Educational resources"),
)


def seed_defaults(session: Session) -> int:
    """Insert missing default tags and settings; existing rows are left alone."""
    tags = TagRepository(session)
    settings = SettingsRepository(session)
    created = 0
    for name, color, description in DEFAULT_TAGS:
        if tags.get_by_name(name) is None:
            tags.create(schemas.TagCreate(name=name, color=color, description=description))
            created += 1
    for key, (value, description) in DEFAULTS.items():
        if settings.get_by_key(key) is None:
            settings.set_value(key, value, description)
            created += 1
    if created:
        logger.info("Seeded %d default rows", created)
    return created
