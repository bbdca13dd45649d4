import secrets
from datetime import datetime, timezone

from linkshelf.extensions import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


def generate_name(prefix: str) -> str:
    return f"{prefix}-{secrets.token_hex(6)}"


class Link(db.Model):
    __tablename__ = "links"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(255), nullable=False, default="")
    url = db.Column(db.Text, nullable=False, default="")
    description = db.Column(db.Text, nullable=True)
    logo = db.Column(db.Text, nullable=True)
    priority = db.Column(db.Integer, nullable=True)
    version = db.Column(db.Integer, nullable=False, default=1)

    creation_timestamp = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow
    )
    deletion_timestamp = db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    __table_args__ = (db.Index("ix_link_priority_created", "priority", "id"),)

    def as_dict(self):
        return {
            "name": self.name,
            "display_name": self.display_name,
            "url": self.url,
            "description": self.description,
            "logo": self.logo,
            "priority": self.priority,
            "creation_timestamp": _isoformat(self.creation_timestamp),
            "deletion_timestamp": _isoformat(self.deletion_timestamp),
            "version": self.version,
        }


class LinkGroup(db.Model):
    __tablename__ = "link_groups"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False, index=True)
    display_name = db.Column(db.String(255), nullable=False, default="")
    priority = db.Column(db.Integer, nullable=True)
    links = db.Column(db.JSON, nullable=False, default=list)
    version = db.Column(db.Integer, nullable=False, default=1)

    creation_timestamp = db.Column(
        db.DateTime(timezone=True), nullable=False, default=utcnow
    )

    def as_dict(self):
        return {
            "name": self.name,
            "display_name": self.display_name,
            "priority": self.priority,
            "links": list(self.links or []),
            "creation_timestamp": _isoformat(self.creation_timestamp),
            "version": self.version,
        }
