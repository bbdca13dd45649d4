from __future__ import annotations

import copy
import logging
from collections.abc import Sequence

from linkshelf.panel.catalog import GroupCatalog
from linkshelf.panel.client import ResourceClient
from linkshelf.panel.collection import LinkCollection
from linkshelf.panel.common import RESOURCE_ERRORS
from linkshelf.panel.entities import Link, LinkGroup

logger = logging.getLogger(__name__)


class GroupAssigner:
    def __init__(
        self,
        client: ResourceClient,
        catalog: GroupCatalog,
        collection: LinkCollection,
    ):
        self.client = client
        self.catalog = catalog
        self.collection = collection

    async def assign(self, link: Link) -> LinkGroup | None:
        return await self.assign_many([link])

    async def assign_many(self, links: Sequence[Link]) -> LinkGroup | None:
        """Append links to the selected group with a full replace write."""
        group = self.catalog.selected
        saved = None
        if group is None:
            logger.warning(
                "No group selected; %d new links are not reachable from any group",
                len(links),
            )
        elif links:
            updated = copy.deepcopy(group)
            updated.links = list(updated.links or [])
            for link in links:
                if link.name not in updated.links:
                    updated.links.append(link.name)
            try:
                saved = await self.client.replace_group(updated)
            except RESOURCE_ERRORS as exc:
                logger.error("Failed to add links to group %s: %s", group.name, exc)

        await self.catalog.refresh()
        await self.collection.fetch()
        return saved
