from datetime import timedelta

from linkshelf.extensions import db
from linkshelf.jobs.scheduler import purge_deleted_links
from linkshelf.models import Link, LinkGroup, utcnow


def _create_link(client, name, priority=None, url=None):
    response = client.post(
        "/api/v1/links",
        json={
            "name": name,
            "display_name": name.title(),
            "url": url or f"https://example.com/{name}",
            "priority": priority,
        },
    )
    assert response.status_code == 201
    return response.get_json()


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_create_link_generates_name_and_requires_url(client):
    response = client.post("/api/v1/links", json={"display_name": "No url"})
    assert response.status_code == 400

    response = client.post(
        "/api/v1/links", json={"display_name": "Docs", "url": "https://docs.test"}
    )
    assert response.status_code == 201
    payload = response.get_json()
    assert payload["name"].startswith("link-")
    assert payload["priority"] is None
    assert payload["deletion_timestamp"] is None
    assert payload["version"] == 1


def test_create_link_rejects_duplicate_name_and_negative_priority(client):
    _create_link(client, "alpha")

    response = client.post(
        "/api/v1/links", json={"name": "alpha", "url": "https://other.test"}
    )
    assert response.status_code == 409

    response = client.post(
        "/api/v1/links",
        json={"name": "beta", "url": "https://beta.test", "priority": -1},
    )
    assert response.status_code == 400


def test_list_links_paginates_and_filters_by_name(client):
    for index in range(25):
        _create_link(client, f"link-{index:02d}", priority=index)

    response = client.get(
        "/api/v1/links",
        query_string={
            "page": 1,
            "size": 20,
            "field_selector": "name=({})".format(
                ",".join(f"link-{index:02d}" for index in range(25))
            ),
        },
    )
    payload = response.get_json()
    assert payload["total"] == 25
    assert payload["total_pages"] == 2
    assert payload["has_next"] is True
    assert len(payload["items"]) == 20

    response = client.get("/api/v1/links", query_string={"page": 2, "size": 20})
    payload = response.get_json()
    assert [item["name"] for item in payload["items"]] == [
        f"link-{index:02d}" for index in range(20, 25)
    ]
    assert payload["has_previous"] is True

    response = client.get(
        "/api/v1/links", query_string={"field_selector": "name=(link-03,link-01)"}
    )
    assert [item["name"] for item in response.get_json()["items"]] == [
        "link-01",
        "link-03",
    ]


def test_list_links_rejects_unknown_selector(client):
    response = client.get("/api/v1/links", query_string={"field_selector": "url=(x)"})
    assert response.status_code == 400


def test_replace_link_bumps_version_and_detects_stale_writes(client):
    created = _create_link(client, "alpha")

    response = client.put(
        "/api/v1/links/alpha",
        json={**created, "priority": 4, "display_name": "Renamed"},
    )
    assert response.status_code == 200
    assert response.get_json()["priority"] == 4
    assert response.get_json()["version"] == 2

    response = client.put("/api/v1/links/alpha", json={**created, "priority": 5})
    assert response.status_code == 409

    response = client.put(
        "/api/v1/links/alpha", json={"name": "other", "url": "https://x.test"}
    )
    assert response.status_code == 400

    response = client.put("/api/v1/links/missing", json={"url": "https://x.test"})
    assert response.status_code == 404


def test_delete_link_marks_deletion_and_still_lists_it(client):
    _create_link(client, "alpha")

    response = client.delete("/api/v1/links/alpha")
    assert response.status_code == 202
    assert response.get_json()["deletion_timestamp"] is not None

    items = client.get("/api/v1/links").get_json()["items"]
    assert [item["name"] for item in items] == ["alpha"]
    assert items[0]["deletion_timestamp"] is not None


def test_group_replace_is_full_replacement(client):
    response = client.post(
        "/api/v1/groups",
        json={"name": "tools", "display_name": "Tools", "priority": 1, "links": ["a"]},
    )
    assert response.status_code == 201

    response = client.put(
        "/api/v1/groups/tools",
        json={"display_name": "Tools", "links": ["a", "b", "a"], "version": 1},
    )
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["links"] == ["a", "b"]
    assert payload["priority"] is None
    assert payload["version"] == 2

    response = client.put("/api/v1/groups/tools", json={"links": "a,b"})
    assert response.status_code == 400


def test_groups_list_orders_by_priority(client):
    client.post("/api/v1/groups", json={"name": "late", "priority": 5})
    client.post("/api/v1/groups", json={"name": "early", "priority": 1})
    client.post("/api/v1/groups", json={"name": "unset"})

    names = [item["name"] for item in client.get("/api/v1/groups").get_json()["items"]]
    assert names == ["unset", "early", "late"]


def test_purge_removes_deleted_links_and_prunes_groups(app, client):
    _create_link(client, "keep")
    _create_link(client, "drop")
    client.post("/api/v1/groups", json={"name": "tools", "links": ["keep", "drop"]})
    client.delete("/api/v1/links/drop")

    assert purge_deleted_links(app) == 1

    with app.app_context():
        assert Link.query.filter_by(name="drop").first() is None
        group = LinkGroup.query.filter_by(name="tools").first()
        assert group.links == ["keep"]
        assert group.version == 2


def test_purge_respects_grace_period(app, client):
    _create_link(client, "recent")
    client.delete("/api/v1/links/recent")
    app.config["LINK_PURGE_GRACE_SECONDS"] = 3600

    assert purge_deleted_links(app) == 0

    with app.app_context():
        link = Link.query.filter_by(name="recent").first()
        link.deletion_timestamp = utcnow() - timedelta(hours=2)
        db.session.commit()

    assert purge_deleted_links(app) == 1


def test_create_rejects_names_the_filter_and_routes_cannot_address(client):
    for name in ["docs,v2", "a/b", "(paren)", "Upper", "-edge", "x" * 121]:
        response = client.post(
            "/api/v1/links", json={"name": name, "url": "https://x.test"}
        )
        assert response.status_code == 400, name
        assert "invalid name" in response.get_json()["error"]

    response = client.post("/api/v1/groups", json={"name": "tools,extra"})
    assert response.status_code == 400

    assert client.get("/api/v1/links").get_json()["total"] == 0

    _create_link(client, "docs.v2")
    items = client.get(
        "/api/v1/links", query_string={"field_selector": "name=(docs.v2)"}
    ).get_json()["items"]
    assert [item["name"] for item in items] == ["docs.v2"]


def test_list_size_is_clamped_to_max_page_size(app, client):
    app.config["MAX_PAGE_SIZE"] = 2
    for index in range(3):
        _create_link(client, f"link-{index}")

    payload = client.get("/api/v1/links", query_string={"size": 50}).get_json()

    assert payload["size"] == 2
    assert len(payload["items"]) == 2
    assert payload["total_pages"] == 2


def test_group_replace_rejects_renaming(client):
    client.post("/api/v1/groups", json={"name": "tools", "links": []})

    response = client.put(
        "/api/v1/groups/tools", json={"name": "renamed", "links": ["a"]}
    )

    assert response.status_code == 400
    group = client.get("/api/v1/groups/tools").get_json()
    assert group["links"] == []
    assert group["version"] == 1
