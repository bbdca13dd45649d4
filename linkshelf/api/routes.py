from __future__ import annotations

import re

from flask import current_app, jsonify, request
from sqlalchemy.exc import IntegrityError

from linkshelf.api import api_bp
from linkshelf.extensions import db
from linkshelf.models import Link, LinkGroup, generate_name, utcnow

_FIELD_SELECTOR_RE = re.compile(r"^\s*(?P<field>[a-z_]+)\s*=\s*\((?P<values>.*)\)\s*$")
_SELECTABLE_FIELDS = {"name"}
_NAME_RE = re.compile(r"^[a-z0-9]([-a-z0-9.]*[a-z0-9])?$")
MAX_NAME_LENGTH = 120


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _clean_text(value) -> str:
    return str(value or "").strip()


def _valid_name(name: str) -> bool:
    return len(name) <= MAX_NAME_LENGTH and bool(_NAME_RE.match(name))


def _clean_optional_text(value) -> str | None:
    text = _clean_text(value)
    return text or None


def _clean_priority(value) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError("priority must be an integer")
    priority = int(value)
    if priority < 0:
        raise ValueError("priority must be non-negative")
    return priority


def _clean_links(value) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError("links must be a list of link names")
    names: list[str] = []
    for item in value:
        name = _clean_text(item)
        if name and name not in names:
            names.append(name)
    return names


def _parse_field_selector(raw: str | None) -> tuple[str, list[str]] | None:
    if raw is None:
        return None
    match = _FIELD_SELECTOR_RE.match(raw)
    if not match or match.group("field") not in _SELECTABLE_FIELDS:
        raise ValueError(f"unsupported field selector: {raw}")
    values = [part.strip() for part in match.group("values").split(",")]
    return match.group("field"), [value for value in values if value]


def _page_args() -> tuple[int, int]:
    default_size = current_app.config["DEFAULT_PAGE_SIZE"]
    page = max(request.args.get("page", 1, type=int) or 1, 1)
    size = request.args.get("size", default_size, type=int) or default_size
    size = max(1, min(size, current_app.config["MAX_PAGE_SIZE"]))
    return page, size


def _paginate(query):
    page, size = _page_args()
    total = query.order_by(None).count()
    items = query.offset((page - 1) * size).limit(size).all()
    total_pages = (total + size - 1) // size if total else 0
    return jsonify(
        {
            "page": page,
            "size": size,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_previous": page > 1,
            "items": [item.as_dict() for item in items],
        }
    )


def _version_conflict(resource, payload: dict) -> bool:
    expected = payload.get("version")
    if expected is None:
        return False
    try:
        return int(expected) != resource.version
    except (TypeError, ValueError):
        return True


def _apply_link_payload(link: Link, payload: dict) -> None:
    link.display_name = _clean_text(payload.get("display_name"))
    link.url = _clean_text(payload.get("url"))
    link.description = _clean_optional_text(payload.get("description"))
    link.logo = _clean_optional_text(payload.get("logo"))
    link.priority = _clean_priority(payload.get("priority"))


def _apply_group_payload(group: LinkGroup, payload: dict) -> None:
    group.display_name = _clean_text(payload.get("display_name"))
    group.priority = _clean_priority(payload.get("priority"))
    group.links = _clean_links(payload.get("links"))


@api_bp.route("/health")
def health():
    return jsonify({"status": "ok"})


@api_bp.route("/links", methods=["GET"])
def links_list():
    try:
        selector = _parse_field_selector(request.args.get("field_selector"))
    except ValueError as exc:
        return _error(str(exc), 400)

    query = Link.query
    if selector is not None:
        _, names = selector
        query = query.filter(Link.name.in_(names))
    query = query.order_by(
        db.func.coalesce(Link.priority, 0).asc(),
        Link.creation_timestamp.asc(),
        Link.id.asc(),
    )
    return _paginate(query)


@api_bp.route("/links", methods=["POST"])
def links_create():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error("a JSON object is required", 400)

    name = _clean_text(payload.get("name")) or generate_name("link")
    if not _valid_name(name):
        return _error(
            f"invalid name {name!r}: use lowercase letters, digits, '-' and '.'", 400
        )
    link = Link(name=name)
    try:
        _apply_link_payload(link, payload)
    except (TypeError, ValueError) as exc:
        return _error(str(exc), 400)
    if not link.url:
        return _error("url is required", 400)

    db.session.add(link)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return _error(f"link {name} already exists", 409)
    return jsonify(link.as_dict()), 201


@api_bp.route("/links/<name>", methods=["GET"])
def links_get(name: str):
    link = Link.query.filter_by(name=name).first()
    if not link:
        return _error("link not found", 404)
    return jsonify(link.as_dict())


@api_bp.route("/links/<name>", methods=["PUT"])
def links_replace(name: str):
    link = Link.query.filter_by(name=name).first()
    if not link:
        return _error("link not found", 404)

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error("a JSON object is required", 400)
    if _clean_text(payload.get("name") or name) != name:
        return _error("link name is immutable", 400)
    if _version_conflict(link, payload):
        return _error(f"link {name} was modified concurrently", 409)

    try:
        _apply_link_payload(link, payload)
    except (TypeError, ValueError) as exc:
        db.session.rollback()
        return _error(str(exc), 400)
    if not link.url:
        db.session.rollback()
        return _error("url is required", 400)
    link.version += 1
    db.session.commit()
    return jsonify(link.as_dict())


@api_bp.route("/links/<name>", methods=["DELETE"])
def links_delete(name: str):
    link = Link.query.filter_by(name=name).first()
    if not link:
        return _error("link not found", 404)

    if link.deletion_timestamp is None:
        link.deletion_timestamp = utcnow()
        link.version += 1
        db.session.commit()
    return jsonify(link.as_dict()), 202


@api_bp.route("/groups", methods=["GET"])
def groups_list():
    query = LinkGroup.query.order_by(
        db.func.coalesce(LinkGroup.priority, 0).asc(),
        LinkGroup.creation_timestamp.asc(),
        LinkGroup.id.asc(),
    )
    return _paginate(query)


@api_bp.route("/groups", methods=["POST"])
def groups_create():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error("a JSON object is required", 400)

    name = _clean_text(payload.get("name")) or generate_name("link-group")
    if not _valid_name(name):
        return _error(
            f"invalid name {name!r}: use lowercase letters, digits, '-' and '.'", 400
        )
    group = LinkGroup(name=name)
    try:
        _apply_group_payload(group, payload)
    except (TypeError, ValueError) as exc:
        return _error(str(exc), 400)

    db.session.add(group)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return _error(f"group {name} already exists", 409)
    return jsonify(group.as_dict()), 201


@api_bp.route("/groups/<name>", methods=["GET"])
def groups_get(name: str):
    group = LinkGroup.query.filter_by(name=name).first()
    if not group:
        return _error("group not found", 404)
    return jsonify(group.as_dict())


@api_bp.route("/groups/<name>", methods=["PUT"])
def groups_replace(name: str):
    group = LinkGroup.query.filter_by(name=name).first()
    if not group:
        return _error("group not found", 404)

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return _error("a JSON object is required", 400)
    if _clean_text(payload.get("name") or name) != name:
        return _error("group name is immutable", 400)
    if _version_conflict(group, payload):
        return _error(f"group {name} was modified concurrently", 409)

    try:
        _apply_group_payload(group, payload)
    except (TypeError, ValueError) as exc:
        db.session.rollback()
        return _error(str(exc), 400)
    group.version += 1
    db.session.commit()
    return jsonify(group.as_dict())


@api_bp.route("/groups/<name>", methods=["DELETE"])
def groups_delete(name: str):
    group = LinkGroup.query.filter_by(name=name).first()
    if not group:
        return _error("group not found", 404)

    db.session.delete(group)
    db.session.commit()
    return jsonify({"status": "deleted"})
