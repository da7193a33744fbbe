"""Domain errors raised by the services and translated by the routers."""

from __future__ import annotations


class WinWorkError(Exception):
    """Base class for errors the API reports to callers."""


class LinkNotFoundError(WinWorkError, LookupError):
    def __init__(self, link_id: int) -> None:
        super().__init__(f"Link with ID {link_id} not found")
        self.link_id = link_id


class LinkValidationError(WinWorkError, ValueError):
    pass


class LinkMoveError(WinWorkError, ValueError):
    """The requested reparent would break the tree."""


class TagConflictError(WinWorkError):
    pass


class TagNotFoundError(WinWorkError, LookupError):
    def __init__(self, tag_id: int) -> None:
        super().__init__(f"Tag with ID {tag_id} not found")
        self.tag_id = tag_id
