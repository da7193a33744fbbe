"""Persistence of tags and link/tag associations."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from .. import models, schemas

logger = logging.getLogger(__name__)


class TagRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_all(self) -> List[models.Tag]:
        statement = select(models.Tag).order_by(models.Tag.name)
        return list(self.session.scalars(statement))

    def get_by_id(self, tag_id: int) -> Optional[models.Tag]:
        return self.session.get(models.Tag, tag_id)

    def get_by_name(self, name: str) -> Optional[models.Tag]:
        statement = (
            select(models.Tag)
            .where(models.Tag.name_key == models.tag_name_key(name))
            .limit(1)
        )
        return self.session.scalars(statement).first()

    def search(self, term: str) -> List[models.Tag]:
        if not term or not term.strip():
            return []
        term = term.strip()
        statement = (
            select(models.Tag)
            .where(
                or_(
                    models.Tag.name.icontains(term, autoescape=True),
                    models.Tag.description.icontains(term, autoescape=True),
                )
            )
            .order_by(models.Tag.name)
        )
        return list(self.session.scalars(statement))

    def create(self, payload: schemas.TagCreate) -> models.Tag:
        tag = models.Tag(**payload.model_dump())
        now = datetime.now(timezone.utc)
        tag.created_at = now
        tag.updated_at = now
        self.session.add(tag)
        self.session.commit()
        self.session.refresh(tag)
        return tag

    def update(self, tag: models.Tag, payload: schemas.TagUpdate) -> models.Tag:
        for field, value in payload.model_dump(exclude_unset=True).items():
            if field in ("name", "color") and value is None:
                continue
            setattr(tag, field, value)
        tag.updated_at = datetime.now(timezone.utc)
        self.session.add(tag)
        self.session.commit()
        self.session.refresh(tag)
        return tag

    def delete(self, tag_id: int) -> bool:
        tag = self.get_by_id(tag_id)
        if tag is None:
            return False
        self.session.execute(delete(models.LinkTag).where(models.LinkTag.tag_id == tag_id))
        self.session.delete(tag)
        self.session.commit()
        return True

    def get_tags_for_link(self, link_id: int) -> List[models.Tag]:
        statement = (
            select(models.Tag)
            .join(models.LinkTag, models.LinkTag.tag_id == models.Tag.id)
            .where(models.LinkTag.link_id == link_id)
            .order_by(models.Tag.name)
        )
        return list(self.session.scalars(statement))

    def get_link_count(self, tag_id: int) -> int:
        statement = select(func.count()).select_from(models.LinkTag).where(
            models.LinkTag.tag_id == tag_id
        )
        return self.session.scalar(statement) or 0

    def _association(self, link_id: int, tag_id: int) -> Optional[models.LinkTag]:
        return self.session.get(models.LinkTag, (link_id, tag_id))

    def add_tag_to_link(self, link_id: int, tag_id: int) -> bool:
        """Attach a tag; False when the pair already exists."""
        if self._association(link_id, tag_id) is not None:
            return False
        self.session.add(
            models.LinkTag(
                link_id=link_id,
                tag_id=tag_id,
                created_at=datetime.now(timezone.utc),
            )
        )
        self.session.commit()
        logger.debug("Tagged link %s with tag %s", link_id, tag_id)
        return True

    def remove_tag_from_link(self, link_id: int, tag_id: int) -> bool:
        """Detach a tag; False when the pair was not there."""
        association = self._association(link_id, tag_id)
        if association is None:
            return False
        self.session.delete(association)
        self.session.commit()
        return True
