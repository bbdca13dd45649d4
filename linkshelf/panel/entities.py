"""Typed shapes for the records exchanged with the resource API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from dateutil import parser as dt_parser

DEFAULT_PRIORITY = 0


def resolve_priority(value: Any) -> int:
    """Return the effective priority of a record.

    This is the only place a missing priority is defaulted; every reader of
    priorities goes through it.
    """
    if value is None or isinstance(value, bool):
        return DEFAULT_PRIORITY
    try:
        priority = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PRIORITY
    return priority if priority >= 0 else DEFAULT_PRIORITY


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return dt_parser.isoparse(str(value))


def _format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _require_name(payload: dict) -> str:
    name = payload["name"]
    if not isinstance(name, str) or not name.strip():
        raise ValueError("record name must be a non-empty string")
    return name


@dataclass(eq=False)
class Link:
    name: str
    display_name: str = ""
    url: str = ""
    description: str | None = None
    logo: str | None = None
    priority: int | None = None
    creation_timestamp: datetime | None = None
    deletion_timestamp: datetime | None = None
    version: int | None = None

    @property
    def effective_priority(self) -> int:
        return resolve_priority(self.priority)

    @property
    def is_deleting(self) -> bool:
        return self.deletion_timestamp is not None

    @property
    def status(self) -> str:
        return "deleting" if self.is_deleting else "active"

    @classmethod
    def from_dict(cls, payload: dict) -> Link:
        if not isinstance(payload, dict):
            raise TypeError(f"expected a link mapping, got {type(payload).__name__}")
        return cls(
            name=_require_name(payload),
            display_name=str(payload.get("display_name") or ""),
            url=str(payload.get("url") or ""),
            description=payload.get("description"),
            logo=payload.get("logo"),
            priority=payload.get("priority"),
            creation_timestamp=_parse_timestamp(payload.get("creation_timestamp")),
            deletion_timestamp=_parse_timestamp(payload.get("deletion_timestamp")),
            version=payload.get("version"),
        )

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "display_name": self.display_name,
            "url": self.url,
            "description": self.description,
            "logo": self.logo,
            "priority": self.priority,
            "creation_timestamp": _format_timestamp(self.creation_timestamp),
            "deletion_timestamp": _format_timestamp(self.deletion_timestamp),
            "version": self.version,
        }

    def as_payload(self) -> dict:
        payload = {
            "name": self.name,
            "display_name": self.display_name,
            "url": self.url,
            "description": self.description,
            "logo": self.logo,
            "priority": self.priority,
        }
        if self.version is not None:
            payload["version"] = self.version
        return payload


@dataclass(eq=False)
class LinkGroup:
    name: str
    display_name: str = ""
    priority: int | None = None
    links: list[str] | None = None
    version: int | None = None

    @property
    def effective_priority(self) -> int:
        return resolve_priority(self.priority)

    @classmethod
    def from_dict(cls, payload: dict) -> LinkGroup:
        if not isinstance(payload, dict):
            raise TypeError(f"expected a group mapping, got {type(payload).__name__}")
        links = payload.get("links")
        if links is not None and not isinstance(links, list):
            raise TypeError("group links must be a list")
        return cls(
            name=_require_name(payload),
            display_name=str(payload.get("display_name") or ""),
            priority=payload.get("priority"),
            links=[str(item) for item in links] if links is not None else None,
            version=payload.get("version"),
        )

    def as_payload(self) -> dict:
        payload = {
            "name": self.name,
            "display_name": self.display_name,
            "priority": self.priority,
            "links": list(self.links or []),
        }
        if self.version is not None:
            payload["version"] = self.version
        return payload


@dataclass
class LinkPage:
    page: int = 1
    size: int = 20
    total: int = 0
    items: list[Link] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        if not self.total or self.size <= 0:
            return 0
        return (self.total + self.size - 1) // self.size

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @classmethod
    def from_dict(cls, payload: dict) -> LinkPage:
        if not isinstance(payload, dict):
            raise TypeError("expected a page mapping")
        items = payload["items"]
        if not isinstance(items, list):
            raise TypeError("page items must be a list")
        return cls(
            page=int(payload.get("page") or 1),
            size=int(payload.get("size") or len(items)),
            total=int(payload.get("total") or 0),
            items=[Link.from_dict(item) for item in items],
        )
