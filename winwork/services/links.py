"""Link validation and tree maintenance on top of :class:`LinkRepository`."""

from __future__ import annotations

import logging
from pathlib import PureWindowsPath
from typing import Callable, Dict, List, Optional, Protocol, Tuple
from urllib.parse import urlparse

from .. import models, schemas
from ..errors import LinkMoveError, LinkNotFoundError, LinkValidationError
from ..repositories.links import LinkRepository

logger = logging.getLogger(__name__)

RemovedItem = Tuple[str, models.LinkType]

EXECUTABLE_EXTENSIONS = (".exe", ".bat", ".cmd", ".com", ".msi")
SYSTEM_LOCATION_PREFIXES = ("shell:", "ms-settings:", "ms-", "control.exe", "rundll32.exe")


class LinkOpener(Protocol):
    """Performs the OS-level action behind a link (browser, shell, explorer...)."""

    def open(self, link: models.Link) -> bool:
        ...


def is_web_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def executable_path(value: str) -> str:
    """Split the program off an application command line.

    A quoted program is taken as-is; otherwise the shortest run of words
    that ends in an executable extension wins, falling back to the first
    word.
    """
    value = value.strip()
    if value.startswith('"'):
        end = value.find('"', 1)
        if end > 0:
            return value[1:end]
    words = value.split(" ")
    for count in range(1, len(words) + 1):
        candidate = " ".join(words[:count])
        if PureWindowsPath(candidate).suffix.lower() in EXECUTABLE_EXTENSIONS:
            return candidate
    return words[0]


def is_application_path(value: str) -> bool:
    program = executable_path(value)
    return bool(program) and PureWindowsPath(program).suffix.lower() in EXECUTABLE_EXTENSIONS


def is_store_app_uri(value: str) -> bool:
    return "://" in value or value.startswith("ms-")


def is_system_location(value: str) -> bool:
    return value.lower().startswith(SYSTEM_LOCATION_PREFIXES)


_TARGET_CHECKS: Dict[models.LinkType, Tuple[Callable[[str], bool], str]] = {
    models.LinkType.WEB_URL: (is_web_url, "Not a web address"),
    models.LinkType.APPLICATION: (is_application_path, "Not an executable"),
    models.LinkType.WINDOWS_STORE_APP: (is_store_app_uri, "Not a store app URI"),
    models.LinkType.SYSTEM_LOCATION: (is_system_location, "Not a system location"),
}


class LinkService:
    def __init__(self, links: LinkRepository, opener: Optional[LinkOpener] = None) -> None:
        self.links = links
        self.opener = opener

    def get_all(self) -> List[models.Link]:
        return self.links.get_all()

    def get_link(self, link_id: int) -> Optional[models.Link]:
        return self.links.get_by_id(link_id)

    def get_roots(self) -> List[models.Link]:
        return self.links.get_roots()

    def get_children(self, parent_id: int) -> List[models.Link]:
        return self.links.get_children(parent_id)

    def search(self, term: str) -> List[models.Link]:
        if not term or not term.strip():
            return []
        return self.links.search(term.strip())

    def get_by_tag(self, tag_id: int) -> List[models.Link]:
        return self.links.get_by_tag(tag_id)

    def get_most_accessed(self, count: int = 10) -> List[models.Link]:
        return self.links.get_most_accessed(count)

    def get_recent(self, count: int = 10) -> List[models.Link]:
        return self.links.get_recently_accessed(count)

    def validate(
        self,
        *,
        name: Optional[str],
        link_type: models.LinkType,
        url: Optional[str],
        command: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> None:
        """Raise :class:`LinkValidationError` if the values cannot form a link."""
        if not name or not name.strip():
            raise LinkValidationError("Link name is required")

        link_type = models.LinkType(link_type)
        if link_type.needs_target:
            target = url
            if link_type is models.LinkType.TERMINAL:
                target = command or url
            if not target or not target.strip():
                raise LinkValidationError(
                    "A target is required for every link type except folders and notes"
                )
            if link_type in _TARGET_CHECKS:
                check, problem = _TARGET_CHECKS[link_type]
                if not check(target.strip()):
                    raise LinkValidationError(f"{problem}: {target!r}")

        if parent_id is not None:
            parent = self.links.get_by_id(parent_id)
            if parent is None:
                raise LinkValidationError(f"Parent link with ID {parent_id} not found")
            if not parent.is_folder:
                raise LinkValidationError(f"Link {parent_id} is not a folder")

    def create_link(self, payload: schemas.LinkCreate) -> models.Link:
        self.validate(
            name=payload.name,
            link_type=payload.type,
            url=payload.url,
            command=payload.command,
            parent_id=payload.parent_id,
        )
        link = self.links.create(payload)
        logger.info("Created %s link %r (id=%s)", link.link_type.name, link.name, link.id)
        return link

    def update_link(self, link_id: int, payload: schemas.LinkUpdate) -> models.Link:
        link = self.links.get_by_id(link_id)
        if link is None:
            raise LinkNotFoundError(link_id)
        changes = payload.model_dump(exclude_unset=True)
        new_type = changes.get("type")
        if new_type is None:
            new_type = link.type
        if link.is_folder and new_type != models.LinkType.FOLDER:
            if self.links.get_children(link_id):
                raise LinkValidationError("A folder with children cannot change its type")
        self.validate(
            name=changes.get("name", link.name),
            link_type=new_type,
            url=changes.get("url", link.url),
            command=changes.get("command", link.command),
        )
        return self.links.update(link, payload)

    def delete_link(self, link_id: int) -> bool:
        link = self.links.get_by_id(link_id)
        if link is None:
            return False
        if link.is_folder and self.links.get_children(link_id):
            raise LinkValidationError(
                "Cannot delete folder with children. Move or delete children first."
            )
        return self.links.delete(link_id)

    def delete_link_recursive(self, link_id: int) -> List[RemovedItem]:
        """Delete a link and its whole subtree.

        Returns the ``(name, type)`` of every removed link, descendants first
        and ``link_id`` itself last.
        """
        link = self.links.get_by_id(link_id)
        if link is None:
            return []
        doomed = self.links.get_descendant_ids(link_id) + [link_id]
        removed: List[RemovedItem] = []
        for doomed_id in doomed:
            item = self.links.get_by_id(doomed_id)
            removed.append((item.name, item.link_type))
        self.links.delete_many(doomed)
        logger.info("Deleted %r and %d descendant(s)", removed[-1][0], len(doomed) - 1)
        return removed

    def move_link(self, link_id: int, new_parent_id: Optional[int], new_sort_order: int) -> bool:
        try:
            return self.links.move(link_id, new_parent_id, new_sort_order)
        except LinkMoveError as exc:
            logger.warning("Rejected move of link %s to %s: %s", link_id, new_parent_id, exc)
            raise

    def record_access(self, link_id: int) -> None:
        self.links.record_access(link_id)

    def open_link(self, link_id: int) -> bool:
        link = self.links.get_by_id(link_id)
        if link is None:
            raise LinkNotFoundError(link_id)
        if link.is_folder:
            raise LinkValidationError("Cannot open a folder link")
        if self.opener is None:
            raise RuntimeError("No link opener configured")
        opened = self.opener.open(link)
        if opened:
            self.links.record_access(link_id)
        else:
            logger.warning("Opener could not open link %s (%r)", link_id, link.name)
        return opened
