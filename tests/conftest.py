import json
from datetime import datetime, timezone
from urllib.parse import unquote

import httpx
import pytest

from linkshelf import create_app
from linkshelf.config import TestConfig
from linkshelf.extensions import db
from linkshelf.panel import LinkPanel, ResourceClient

API_BASE = "http://panel.test/api/v1/"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


class FakeResourceServer:
    """In-memory stand-in for the resource API.

    Lists come back in insertion order so client-side sorting is observable.
    """

    def __init__(self):
        self.links: dict[str, dict] = {}
        self.groups: dict[str, dict] = {}
        self.requests: list[tuple[str, str]] = []
        self.failures: dict[tuple[str, str], int] = {}
        self.broken_lists = False
        self._counter = 0

    def add_link(self, name, priority=None, **fields):
        record = {
            "name": name,
            "display_name": fields.pop("display_name", name.title()),
            "url": fields.pop("url", f"https://example.com/{name}"),
            "description": fields.pop("description", None),
            "logo": fields.pop("logo", None),
            "priority": priority,
            "creation_timestamp": datetime.now(timezone.utc).isoformat(),
            "deletion_timestamp": fields.pop("deletion_timestamp", None),
            "version": 1,
        }
        record.update(fields)
        self.links[name] = record
        return record

    def add_group(self, name, links=None, priority=0, display_name=None):
        record = {
            "name": name,
            "display_name": display_name or name.title(),
            "priority": priority,
            "links": links,
            "version": 1,
        }
        self.groups[name] = record
        return record

    def calls(self, method, prefix=""):
        return [path for verb, path in self.requests if verb == method and path.startswith(prefix)]

    def _json(self, status, payload):
        return httpx.Response(status, json=payload)

    def _page(self, request, rows):
        page = int(request.url.params.get("page", 1))
        size = int(request.url.params.get("size", 20))
        total = len(rows)
        total_pages = (total + size - 1) // size if total else 0
        return self._json(
            200,
            {
                "page": page,
                "size": size,
                "total": total,
                "total_pages": total_pages,
                "has_next": page < total_pages,
                "has_previous": page > 1,
                "items": rows[(page - 1) * size : page * size],
            },
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = unquote(request.url.path).split("/api/v1/", 1)[1]
        self.requests.append((request.method, path))
        kind, _, name = path.partition("/")
        failure = self.failures.get((request.method, name or kind))
        if failure:
            return self._json(failure, {"error": "injected failure"})

        store = self.links if kind == "links" else self.groups
        if request.method == "GET" and not name:
            if self.broken_lists and kind == "links":
                return httpx.Response(200, text="<html>not json</html>")
            rows = list(store.values())
            selector = request.url.params.get("field_selector")
            if selector:
                wanted = selector.split("=(", 1)[1].rstrip(")").split(",")
                rows = [row for row in rows if row["name"] in wanted]
            return self._page(request, [dict(row) for row in rows])
        if request.method == "POST":
            payload = json.loads(request.content)
            if not payload.get("name"):
                self._counter += 1
                payload["name"] = f"{kind[:-1]}-{self._counter}"
            if payload["name"] in store:
                return self._json(409, {"error": "exists"})
            if kind == "links":
                record = self.add_link(**payload)
            else:
                record = self.add_group(**payload)
            return self._json(201, dict(record))
        if name not in store:
            return self._json(404, {"error": "not found"})
        if request.method == "GET":
            return self._json(200, dict(store[name]))
        if request.method == "PUT":
            payload = json.loads(request.content)
            record = store[name]
            record.update(payload)
            record["version"] = record.get("version", 1) + 1
            return self._json(200, dict(record))
        if request.method == "DELETE":
            record = store.pop(name)
            record["deletion_timestamp"] = datetime.now(timezone.utc).isoformat()
            return self._json(202, dict(record))
        return self._json(405, {"error": "method not allowed"})


@pytest.fixture
def fake_server():
    return FakeResourceServer()


@pytest.fixture
def resource_client(fake_server):
    http = httpx.AsyncClient(
        transport=httpx.MockTransport(fake_server.handle), base_url=API_BASE
    )
    return ResourceClient(API_BASE, client=http)


@pytest.fixture
def panel(resource_client):
    return LinkPanel(resource_client, page_size=20)
