from __future__ import annotations

import logging

from linkshelf.panel.client import ResourceClient
from linkshelf.panel.collection import LinkCollection
from linkshelf.panel.common import RESOURCE_ERRORS
from linkshelf.panel.entities import LinkGroup

logger = logging.getLogger(__name__)


class GroupCatalog:
    def __init__(self, client: ResourceClient, collection: LinkCollection):
        self.client = client
        self.collection = collection
        self.groups: list[LinkGroup] = []
        self.selected: LinkGroup | None = None

    @property
    def membership(self) -> list[str] | None:
        if self.selected is None:
            return None
        return self.selected.links

    async def list_groups(self) -> list[LinkGroup]:
        groups = await self.client.list_groups()
        self.groups = sorted(groups, key=lambda group: group.effective_priority)
        return self.groups

    def find(self, name: str) -> LinkGroup | None:
        for group in self.groups:
            if group.name == name:
                return group
        return None

    async def select(self, group: LinkGroup | None) -> None:
        self.selected = group
        self.collection.set_group(group)
        await self.collection.fetch()

    async def refresh(self) -> None:
        """Reload groups and re-point the selection at the fresh records.

        Keeps the current page and keyword; callers refetch the page themselves.
        """
        try:
            await self.list_groups()
        except RESOURCE_ERRORS as exc:
            logger.error("Failed to load link groups: %s", exc)
            return

        previous = self.selected
        current = self.find(previous.name) if previous else None
        if current is None and self.groups:
            current = self.groups[0]
        self.selected = current
        self.collection.set_group(
            current,
            reset_page=previous is None or current is None or current.name != previous.name,
        )
