"""Pydantic schemas for API requests and responses."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import LinkType


def _strip_optional(value: Optional[str]) -> Optional[str]:
    if isinstance(value, str):
        cleaned = value.strip()
        return cleaned if cleaned else None
    return value


class LinkBase(BaseModel):
    name: str = Field(max_length=255)
    url: Optional[str] = None
    type: LinkType = LinkType.WEB_URL
    description: Optional[str] = None
    notes: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: int = Field(default=0, ge=0)
    icon_path: Optional[str] = None
    command: Optional[str] = None
    terminal_type: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name cannot be empty")
        return value

    @field_validator(
        "url", "description", "icon_path", "command", "terminal_type", mode="before"
    )
    @classmethod
    def strip_strings(cls, value: Optional[str]) -> Optional[str]:
        return _strip_optional(value)


class LinkCreate(LinkBase):
    pass


class LinkUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    url: Optional[str] = None
    type: Optional[LinkType] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    icon_path: Optional[str] = None
    command: Optional[str] = None
    terminal_type: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            raise ValueError("name cannot be null")
        value = value.strip()
        if not value:
            raise ValueError("name cannot be empty")
        return value

    @field_validator(
        "url", "description", "icon_path", "command", "terminal_type", mode="before"
    )
    @classmethod
    def strip_strings(cls, value: Optional[str]) -> Optional[str]:
        return _strip_optional(value)


class LinkRead(LinkBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    access_count: int
    last_accessed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class LinkMovePayload(BaseModel):
    parent_id: Optional[int] = None
    sort_order: int = Field(default=1, ge=0)


class RemovedLink(BaseModel):
    name: str
    type: LinkType


class TagBase(BaseModel):
    name: str = Field(max_length=100)
    color: str = "#808080"
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name cannot be empty")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def strip_description(cls, value: Optional[str]) -> Optional[str]:
        return _strip_optional(value)


class TagCreate(TagBase):
    pass


class TagUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=100)
    color: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("name cannot be empty")
        return value


class TagRead(TagBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    updated_at: datetime


class SettingRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    value: str
    description: Optional[str] = None
    updated_at: datetime


class SettingWrite(BaseModel):
    value: str
    description: Optional[str] = None
