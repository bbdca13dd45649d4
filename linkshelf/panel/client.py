"""Async HTTP client for the link and group resources."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import httpx

from linkshelf.panel.entities import Link, LinkGroup, LinkPage

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "LinkShelfPanel/1.0",
    "Accept": "application/json",
}

GROUP_PAGE_SIZE = 200


def membership_filter(names: Iterable[str]) -> str:
    return "name=({})".format(",".join(names))


class ResourceClient:
    """Thin CRUD/list wrapper around the resource API.

    Transport and status errors propagate as ``httpx.HTTPError``; malformed
    bodies surface as ``ValueError``/``KeyError``/``TypeError``. Callers decide
    whether to log and reconcile.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/") + "/",
            timeout=timeout,
            headers=DEFAULT_HEADERS,
        )

    async def __aenter__(self) -> ResourceClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.debug(
                "%s %s failed: %s %s",
                method,
                path,
                exc.response.status_code,
                exc.response.text,
            )
            raise
        except httpx.RequestError as exc:
            logger.debug("%s %s request error: %s", method, path, exc)
            raise
        return response

    async def list_links(
        self, page: int, size: int, names: Iterable[str] | None = None
    ) -> LinkPage:
        params: dict[str, str | int] = {"page": page, "size": size}
        if names is not None:
            params["field_selector"] = membership_filter(names)
        response = await self._request("GET", "links", params=params)
        return LinkPage.from_dict(response.json())

    async def get_link(self, name: str) -> Link:
        response = await self._request("GET", f"links/{name}")
        return Link.from_dict(response.json())

    async def create_link(self, payload: dict) -> Link:
        response = await self._request("POST", "links", json=payload)
        return Link.from_dict(response.json())

    async def replace_link(self, link: Link) -> Link:
        response = await self._request(
            "PUT", f"links/{link.name}", json=link.as_payload()
        )
        return Link.from_dict(response.json())

    async def delete_link(self, name: str) -> Link:
        response = await self._request("DELETE", f"links/{name}")
        return Link.from_dict(response.json())

    async def list_groups(self) -> list[LinkGroup]:
        groups: list[LinkGroup] = []
        page = 1
        while True:
            response = await self._request(
                "GET", "groups", params={"page": page, "size": GROUP_PAGE_SIZE}
            )
            payload = response.json()
            items = payload["items"]
            if not isinstance(items, list):
                raise TypeError("group page items must be a list")
            groups.extend(LinkGroup.from_dict(item) for item in items)
            if not payload.get("has_next") or not items:
                return groups
            page += 1

    async def replace_group(self, group: LinkGroup) -> LinkGroup:
        response = await self._request(
            "PUT", f"groups/{group.name}", json=group.as_payload()
        )
        return LinkGroup.from_dict(response.json())
