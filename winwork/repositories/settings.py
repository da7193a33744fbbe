"""Key/value settings store with typed accessors.

Values are always stored as text. Typed access goes through
:class:`SettingKind`, which pairs every supported value kind with exactly one
formatter (value -> canonical text) and one parser (text -> value). Parsing
is lenient about surrounding whitespace and reports anything it cannot read
as ``None`` instead of raising.
"""

from __future__ import annotations

import enum
import logging
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .. import models

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"^[+-]?[0-9]+$")


class SettingKind(enum.Enum):
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    DATETIME = "datetime"


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def _parse_bool(raw: str) -> bool:
    lowered = raw.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _format_int(value: int) -> str:
    return str(int(value))


def _parse_int(raw: str) -> int:
    if not _INT_RE.match(raw):
        raise ValueError(f"not an integer: {raw!r}")
    return int(raw)


def _format_float(value: float) -> str:
    return repr(float(value))


def _parse_float(raw: str) -> float:
    return float(raw)


def _format_datetime(value: datetime) -> str:
    return value.isoformat()


def _parse_datetime(raw: str) -> datetime:
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    return datetime.fromisoformat(raw)


_FORMATTERS: Dict[SettingKind, Callable[[Any], str]] = {
    SettingKind.BOOL: _format_bool,
    SettingKind.INT: _format_int,
    SettingKind.FLOAT: _format_float,
    SettingKind.DATETIME: _format_datetime,
}

_PARSERS: Dict[SettingKind, Callable[[str], Any]] = {
    SettingKind.BOOL: _parse_bool,
    SettingKind.INT: _parse_int,
    SettingKind.FLOAT: _parse_float,
    SettingKind.DATETIME: _parse_datetime,
}


def format_value(kind: SettingKind, value: Any) -> str:
    return _FORMATTERS[kind](value)


def parse_value(kind: SettingKind, raw: Optional[str]) -> Optional[Any]:
    if raw is None:
        return None
    raw = raw.strip()
    if not raw:
        return None
    try:
        return _PARSERS[kind](raw)
    except (ValueError, TypeError, OverflowError):
        logger.debug("Could not read %r as %s", raw, kind.value)
        return None


class SettingsRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def get_all(self) -> List[models.AppSetting]:
        statement = select(models.AppSetting).order_by(models.AppSetting.key)
        return list(self.session.scalars(statement))

    def get_by_key(self, key: str) -> Optional[models.AppSetting]:
        statement = select(models.AppSetting).where(models.AppSetting.key == key).limit(1)
        return self.session.scalars(statement).first()

    def get_value(self, key: str) -> Optional[str]:
        setting = self.get_by_key(key)
        return setting.value if setting is not None else None

    def get_typed(self, key: str, kind: SettingKind) -> Optional[Any]:
        return parse_value(kind, self.get_value(key))

    def set_value(self, key: str, value: str, description: Optional[str] = None) -> models.AppSetting:
        setting = self.get_by_key(key)
        if setting is None:
            setting = models.AppSetting(key=key, value=value, description=description)
        else:
            setting.value = value
            if description is not None:
                setting.description = description
        setting.updated_at = datetime.now(timezone.utc)
        self.session.add(setting)
        self.session.commit()
        self.session.refresh(setting)
        return setting

    def set_typed(self, key: str, kind: SettingKind, value: Any) -> models.AppSetting:
        return self.set_value(key, format_value(kind, value))

    def get_bool(self, key: str) -> Optional[bool]:
        return self.get_typed(key, SettingKind.BOOL)

    def get_int(self, key: str) -> Optional[int]:
        return self.get_typed(key, SettingKind.INT)

    def get_float(self, key: str) -> Optional[float]:
        return self.get_typed(key, SettingKind.FLOAT)

    def get_datetime(self, key: str) -> Optional[datetime]:
        return self.get_typed(key, SettingKind.DATETIME)

    def set_bool(self, key: str, value: bool) -> models.AppSetting:
        return self.set_typed(key, SettingKind.BOOL, value)

    def set_int(self, key: str, value: int) -> models.AppSetting:
        return self.set_typed(key, SettingKind.INT, value)

    def set_float(self, key: str, value: float) -> models.AppSetting:
        return self.set_typed(key, SettingKind.FLOAT, value)

    def set_datetime(self, key: str, value: datetime) -> models.AppSetting:
        return self.set_typed(key, SettingKind.DATETIME, value)

    def delete(self, key: str) -> bool:
        setting = self.get_by_key(key)
        if setting is None:
            return False
        self.session.delete(setting)
        self.session.commit()
        return True
