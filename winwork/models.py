"""Database models."""

from __future__ import annotations

import enum

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from .database import Base


def tag_name_key(name: str) -> str:
    return name.strip().casefold()


class LinkType(enum.IntEnum):
    """Kinds of tree nodes; stored as integers in ``links.type``."""

    FOLDER = 0
    WEB_URL = 1
    FILE_PATH = 2
    APPLICATION = 3
    FOLDER_PATH = 4
    WINDOWS_STORE_APP = 5
    SYSTEM_LOCATION = 6
    NOTES = 7
    TERMINAL = 8

    @property
    def needs_target(self) -> bool:
        return self not in (LinkType.FOLDER, LinkType.NOTES)


class Link(Base):
    """Node of the bookmark tree: either a folder or something that can be opened.

    Parent and children are plain id lookups through ``parent_id``; the
    repository walks the tree with queries instead of loaded object graphs.
    """

    __tablename__ = "links"
    __table_args__ = (Index("ix_links_parent_sort", "parent_id", "sort_order"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    url = Column(String(2048), nullable=True)
    type = Column(Integer, nullable=False, default=int(LinkType.WEB_URL))
    description = Column(String(1000), nullable=True)
    notes = Column(Text, nullable=True)
    parent_id = Column(Integer, ForeignKey("links.id"), nullable=True, index=True)
    sort_order = Column(Integer, nullable=False, default=0)
    icon_path = Column(String(500), nullable=True)
    command = Column(String(2000), nullable=True)
    terminal_type = Column(String(100), nullable=True)
    access_count = Column(Integer, nullable=False, default=0)
    last_accessed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def link_type(self) -> LinkType:
        return LinkType(self.type)

    @property
    def is_folder(self) -> bool:
        return self.type == LinkType.FOLDER


class Tag(Base):
    """Label that can be attached to any number of links."""

    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    # Case-folded copy of name; SQLite lower() only folds ASCII.
    name_key = Column(String(100), nullable=False, unique=True)
    color = Column(String(7), nullable=False, default="#808080")
    description = Column(String(500), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    @validates("name")
    def _sync_name_key(self, _key: str, value: str) -> str:
        self.name_key = tag_name_key(value)
        return value


class LinkTag(Base):
    __tablename__ = "link_tags"

    link_id = Column(Integer, ForeignKey("links.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class AppSetting(Base):
    """Key/value configuration row; values are kept as text and coerced on read."""

    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), nullable=False, unique=True)
    value = Column(Text, nullable=False, default="")
    description = Column(String(500), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
