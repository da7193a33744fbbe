"""Persistence of the link tree."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..errors import LinkMoveError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parent_clause(parent_id: Optional[int]):
    if parent_id is None:
        return models.Link.parent_id.is_(None)
    return models.Link.parent_id == parent_id


class LinkRepository:
    """CRUD, tree queries and reparenting for :class:`models.Link` rows."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_all(self) -> List[models.Link]:
        statement = select(models.Link).order_by(
            models.Link.parent_id, models.Link.sort_order, models.Link.id
        )
        return list(self.session.scalars(statement))

    def get_by_id(self, link_id: int) -> Optional[models.Link]:
        return self.session.get(models.Link, link_id)

    def get_roots(self) -> List[models.Link]:
        return self._siblings(None)

    def get_children(self, parent_id: int) -> List[models.Link]:
        return self._siblings(parent_id)

    def _siblings(self, parent_id: Optional[int], *, exclude: Optional[int] = None) -> List[models.Link]:
        statement = select(models.Link).where(_parent_clause(parent_id))
        if exclude is not None:
            statement = statement.where(models.Link.id != exclude)
        statement = statement.order_by(models.Link.sort_order, models.Link.id)
        return list(self.session.scalars(statement))

    def search(self, term: str) -> List[models.Link]:
        if not term or not term.strip():
            return []
        term = term.strip()
        tagged = (
            select(models.LinkTag.link_id)
            .join(models.Tag, models.Tag.id == models.LinkTag.tag_id)
            .where(models.Tag.name.icontains(term, autoescape=True))
        )
        statement = (
            select(models.Link)
            .where(
                or_(
                    models.Link.name.icontains(term, autoescape=True),
                    models.Link.description.icontains(term, autoescape=True),
                    models.Link.url.icontains(term, autoescape=True),
                    models.Link.notes.icontains(term, autoescape=True),
                    models.Link.id.in_(tagged),
                )
            )
            .order_by(
                models.Link.access_count.desc(),
                models.Link.last_accessed_at.desc(),
                models.Link.id,
            )
        )
        return list(self.session.scalars(statement))

    def get_by_tag(self, tag_id: int) -> List[models.Link]:
        statement = (
            select(models.Link)
            .join(models.LinkTag, models.LinkTag.link_id == models.Link.id)
            .where(models.LinkTag.tag_id == tag_id)
            .order_by(models.Link.access_count.desc(), models.Link.id)
        )
        return list(self.session.scalars(statement))

    def get_most_accessed(self, count: int = 10) -> List[models.Link]:
        statement = (
            select(models.Link)
            .where(models.Link.type != int(models.LinkType.FOLDER))
            .order_by(
                models.Link.access_count.desc(),
                models.Link.last_accessed_at.desc(),
                models.Link.id,
            )
            .limit(count)
        )
        return list(self.session.scalars(statement))

    def get_recently_accessed(self, count: int = 10) -> List[models.Link]:
        statement = (
            select(models.Link)
            .where(
                models.Link.type != int(models.LinkType.FOLDER),
                models.Link.last_accessed_at.is_not(None),
            )
            .order_by(models.Link.last_accessed_at.desc(), models.Link.id)
            .limit(count)
        )
        return list(self.session.scalars(statement))

    def next_sort_order(self, parent_id: Optional[int]) -> int:
        statement = select(func.max(models.Link.sort_order)).where(_parent_clause(parent_id))
        current = self.session.scalar(statement)
        return (current or 0) + 1

    def create(self, payload: schemas.LinkCreate) -> models.Link:
        data = payload.model_dump()
        data["type"] = int(payload.type)
        link = models.Link(**data)
        now = _utcnow()
        link.created_at = now
        link.updated_at = now
        if not link.sort_order:
            link.sort_order = self.next_sort_order(link.parent_id)
        self.session.add(link)
        self.session.commit()
        self.session.refresh(link)
        logger.debug("Created link %s (%r) under %s", link.id, link.name, link.parent_id)
        return link

    def update(self, link: models.Link, payload: schemas.LinkUpdate) -> models.Link:
        for field, value in payload.model_dump(exclude_unset=True).items():
            if field == "type":
                if value is None:
                    continue
                value = int(value)
            setattr(link, field, value)
        link.updated_at = _utcnow()
        self.session.add(link)
        self.session.commit()
        self.session.refresh(link)
        return link

    def delete(self, link_id: int) -> bool:
        if self.get_by_id(link_id) is None:
            return False
        self.delete_many([link_id])
        return True

    def delete_many(self, link_ids: Sequence[int]) -> int:
        """Delete the given links in order, together with their tag rows.

        Children must come before their parents; the whole batch is one
        transaction.
        """
        try:
            for link_id in link_ids:
                self.session.execute(
                    delete(models.LinkTag).where(models.LinkTag.link_id == link_id)
                )
                self.session.execute(delete(models.Link).where(models.Link.id == link_id))
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        return len(link_ids)

    def record_access(self, link_id: int) -> None:
        link = self.get_by_id(link_id)
        if link is None:
            return
        now = _utcnow()
        link.access_count = (link.access_count or 0) + 1
        link.last_accessed_at = now
        link.updated_at = now
        self.session.add(link)
        self.session.commit()

    def _child_map(self) -> Dict[Optional[int], List[int]]:
        statement = select(models.Link.id, models.Link.parent_id).order_by(
            models.Link.sort_order, models.Link.id
        )
        children: Dict[Optional[int], List[int]] = defaultdict(list)
        for link_id, parent_id in self.session.execute(statement):
            children[parent_id].append(link_id)
        return children

    def get_descendant_ids(self, link_id: int) -> List[int]:
        """Ids below ``link_id``, every child listed before its parent."""
        children = self._child_map()
        ordered: List[int] = []
        seen = {link_id}
        stack = [(link_id, iter(children.get(link_id, ())))]
        while stack:
            _, pending = stack[-1]
            child_id = next(pending, None)
            if child_id is None:
                node_id, _ = stack.pop()
                if node_id != link_id:
                    ordered.append(node_id)
                continue
            if child_id in seen:
                continue
            seen.add(child_id)
            stack.append((child_id, iter(children.get(child_id, ()))))
        return ordered

    def is_descendant(self, candidate_id: int, ancestor_id: int) -> bool:
        """True when ``ancestor_id`` appears on the parent chain of ``candidate_id``."""
        parents = dict(self.session.execute(select(models.Link.id, models.Link.parent_id)).all())
        seen = set()
        current = parents.get(candidate_id)
        while current is not None and current not in seen:
            if current == ancestor_id:
                return True
            seen.add(current)
            current = parents.get(current)
        return False

    def _check_new_parent(self, link: models.Link, parent_id: int) -> None:
        parent = self.get_by_id(parent_id)
        if parent is None:
            raise LinkMoveError(f"Parent link with ID {parent_id} not found")
        if not parent.is_folder:
            raise LinkMoveError(f"Link {parent_id} is not a folder")
        if parent.id == link.id or self.is_descendant(parent.id, link.id):
            raise LinkMoveError("Cannot move a link into itself or one of its descendants")

    def move(self, link_id: int, new_parent_id: Optional[int], new_sort_order: int) -> bool:
        """Reparent ``link_id`` and insert it at ``new_sort_order`` among its new siblings.

        Sort orders are 1-based. Siblings are renumbered around the insertion
        slot and everything is committed together. Returns False when the link
        does not exist.
        """
        link = self.get_by_id(link_id)
        if link is None:
            return False
        if new_parent_id is not None:
            self._check_new_parent(link, new_parent_id)
        if new_parent_id == link.parent_id and new_sort_order == link.sort_order:
            return True

        siblings = self._siblings(new_parent_id, exclude=link_id)
        slot = min(max(new_sort_order, 1), len(siblings) + 1)
        now = _utcnow()
        for index, sibling in enumerate(siblings):
            adjusted = index + 1 if index + 1 < slot else index + 2
            if sibling.sort_order != adjusted:
                sibling.sort_order = adjusted
                sibling.updated_at = now
        link.parent_id = new_parent_id
        link.sort_order = slot
        link.updated_at = now
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
        logger.info("Moved link %s to parent %s at position %d", link_id, new_parent_id, slot)
        return True
