from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from linkshelf.panel.client import ResourceClient
from linkshelf.panel.common import RESOURCE_ERRORS
from linkshelf.panel.entities import Link, LinkGroup, resolve_priority
from linkshelf.panel.search import DEFAULT_THRESHOLD, SearchIndex

logger = logging.getLogger(__name__)


@dataclass
class ActiveView:
    """What the panel currently shows.

    Only ``LinkCollection`` writes to it; everything else reads.
    """

    group: LinkGroup | None = None
    page: int = 1
    size: int = 20
    total: int = 0
    items: list[Link] = field(default_factory=list)
    keyword: str = ""
    loading: bool = False
    index: SearchIndex = field(default_factory=lambda: SearchIndex([]))

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

    @property
    def filtering(self) -> bool:
        return bool(self.keyword.strip())


def sort_by_priority(links: Sequence[Link]) -> list[Link]:
    for link in links:
        link.priority = resolve_priority(link.priority)
    return sorted(links, key=lambda link: link.priority)


class LinkCollection:
    def __init__(
        self,
        client: ResourceClient,
        page_size: int = 20,
        search_threshold: int = DEFAULT_THRESHOLD,
    ):
        self.client = client
        self.search_threshold = search_threshold
        self.view = ActiveView(size=page_size)
        self._listeners: list[Callable[[ActiveView], None]] = []
        self._group_listeners: list[Callable[[ActiveView], None]] = []

    def subscribe(self, listener: Callable[[ActiveView], None]) -> None:
        self._listeners.append(listener)

    def subscribe_group(self, listener: Callable[[ActiveView], None]) -> None:
        """Call ``listener`` whenever the view switches to a different group."""
        self._group_listeners.append(listener)

    def set_group(self, group: LinkGroup | None, reset_page: bool = True) -> None:
        previous = self.view.group
        self.view.group = group
        if reset_page:
            self.view.page = 1
            self.view.keyword = ""
        previous_name = previous.name if previous else None
        if previous_name != (group.name if group else None):
            for listener in self._group_listeners:
                listener(self.view)

    def set_keyword(self, keyword: str | None) -> None:
        self.view.keyword = keyword or ""

    def replace_items(self, items: Sequence[Link], total: int | None = None) -> None:
        self.view.items = list(items)
        if total is not None:
            self.view.total = total
        self.view.index = SearchIndex(self.view.items, self.search_threshold)
        for listener in self._listeners:
            listener(self.view)

    @property
    def current_view(self) -> list[Link]:
        return self.view.index.search(self.view.keyword)

    def set_current_view(self, items: Sequence[Link]) -> None:
        # Writes land on the full page even while a keyword narrows the view;
        # hidden items are dropped until the next fetch restores them.
        self.replace_items(items)

    async def fetch(self, mute: bool = False) -> None:
        group = self.view.group
        if group is None or group.links is None:
            return
        if not group.links:
            self.replace_items([], total=0)
            return

        if not mute:
            self.view.loading = True
        try:
            page = await self.client.list_links(
                self.view.page, self.view.size, names=group.links
            )
        except RESOURCE_ERRORS as exc:
            logger.error("Failed to fetch links for group %s: %s", group.name, exc)
            self.replace_items([], total=0)
            return
        finally:
            self.view.loading = False

        self.replace_items(sort_by_priority(page.items), total=page.total)

    async def change_page(self, page: int, size: int | None = None) -> None:
        self.view.page = max(page, 1)
        if size:
            self.view.size = size
        self.view.keyword = ""
        await self.fetch()

    def find(self, name: str) -> Link | None:
        for link in self.view.items:
            if link.name == name:
                return link
        return None
