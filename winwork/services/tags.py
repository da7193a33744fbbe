"""Tag rules: colour normalisation, unique names, in-use protection."""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from .. import models, schemas
from ..errors import LinkNotFoundError, TagConflictError, TagNotFoundError
from ..repositories.links import LinkRepository
from ..repositories.tags import TagRepository

logger = logging.getLogger(__name__)

DEFAULT_COLOR = "#808080"
_HEX_COLOR_RE = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")


def is_hex_color(value: Optional[str]) -> bool:
    return bool(value) and bool(_HEX_COLOR_RE.match(value.strip()))


def normalize_color(color: Optional[str]) -> str:
    """Return ``#RRGGBB`` in upper case, or the default grey for unusable input."""
    if not color or not color.strip():
        return DEFAULT_COLOR
    color = color.strip()
    if not color.startswith("#"):
        color = "#" + color
    if not _HEX_COLOR_RE.match(color):
        return DEFAULT_COLOR
    if len(color) == 4:
        color = "#" + "".join(ch * 2 for ch in color[1:])
    return color.upper()


class TagService:
    def __init__(self, tags: TagRepository, links: LinkRepository) -> None:
        self.tags = tags
        self.links = links

    def get_all(self) -> List[models.Tag]:
        return self.tags.get_all()

    def get_tag(self, tag_id: int) -> Optional[models.Tag]:
        return self.tags.get_by_id(tag_id)

    def get_by_name(self, name: str) -> Optional[models.Tag]:
        if not name or not name.strip():
            return None
        return self.tags.get_by_name(name)

    def search(self, term: str) -> List[models.Tag]:
        return self.tags.search(term)

    def get_tags_for_link(self, link_id: int) -> List[models.Tag]:
        return self.tags.get_tags_for_link(link_id)

    def get_links_for_tag(self, tag_id: int) -> List[models.Link]:
        return self.links.get_by_tag(tag_id)

    def create_tag(self, payload: schemas.TagCreate) -> models.Tag:
        if self.tags.get_by_name(payload.name) is not None:
            raise TagConflictError(f"Tag with name '{payload.name}' already exists")
        payload = payload.model_copy(update={"color": normalize_color(payload.color)})
        tag = self.tags.create(payload)
        logger.info("Created tag %r (id=%s)", tag.name, tag.id)
        return tag

    def update_tag(self, tag_id: int, payload: schemas.TagUpdate) -> models.Tag:
        tag = self.tags.get_by_id(tag_id)
        if tag is None:
            raise TagNotFoundError(tag_id)
        if payload.name is not None:
            duplicate = self.tags.get_by_name(payload.name)
            if duplicate is not None and duplicate.id != tag_id:
                raise TagConflictError(f"Another tag with name '{payload.name}' already exists")
        if "color" in payload.model_fields_set:
            payload = payload.model_copy(update={"color": normalize_color(payload.color)})
        return self.tags.update(tag, payload)

    def delete_tag(self, tag_id: int) -> bool:
        if self.tags.get_by_id(tag_id) is None:
            return False
        if self.tags.get_link_count(tag_id):
            raise TagConflictError(
                "Cannot delete tag that is assigned to links. Remove tag from links first."
            )
        return self.tags.delete(tag_id)

    def add_tag_to_link(self, link_id: int, tag_id: int) -> bool:
        if self.tags.get_by_id(tag_id) is None or self.links.get_by_id(link_id) is None:
            return False
        return self.tags.add_tag_to_link(link_id, tag_id)

    def tag_link(self, link_id: int, tag_id: int) -> bool:
        """Like :meth:`add_tag_to_link`, but unknown ids raise instead of returning False."""
        if self.tags.get_by_id(tag_id) is None:
            raise TagNotFoundError(tag_id)
        if self.links.get_by_id(link_id) is None:
            raise LinkNotFoundError(link_id)
        return self.tags.add_tag_to_link(link_id, tag_id)

    def remove_tag_from_link(self, link_id: int, tag_id: int) -> bool:
        return self.tags.remove_tag_from_link(link_id, tag_id)
