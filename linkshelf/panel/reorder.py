from __future__ import annotations

import logging
from collections.abc import Sequence

from linkshelf.panel.client import ResourceClient
from linkshelf.panel.collection import LinkCollection
from linkshelf.panel.common import settle
from linkshelf.panel.entities import Link

logger = logging.getLogger(__name__)

STRATEGY_VISIBLE = "visible"
STRATEGY_MERGE = "merge"
REORDER_STRATEGIES = {STRATEGY_VISIBLE, STRATEGY_MERGE}


def merge_into_page(page: Sequence[Link], sequence: Sequence[Link]) -> list[Link] | None:
    """Splice a reordered subset back into the slots it holds in ``page``.

    Returns ``None`` when ``sequence`` holds items that are not on the page.
    """
    members = {id(link) for link in sequence}
    slots = [index for index, link in enumerate(page) if id(link) in members]
    if len(slots) != len(sequence):
        return None
    merged = list(page)
    for slot, link in zip(slots, sequence):
        merged[slot] = link
    return merged


class OrderReconciler:
    """Persists a drag-and-drop reorder and reconciles with the server.

    ``visible`` numbers the displayed sequence 0..k-1. While a keyword is
    active that sequence is a subset of the page, so the new numbers can
    collide with priorities of hidden items. ``merge`` splices the subset back
    into the full page and renumbers the whole page instead, writing only the
    items whose priority changed.
    """

    def __init__(
        self,
        client: ResourceClient,
        collection: LinkCollection,
        strategy: str = STRATEGY_VISIBLE,
    ):
        if strategy not in REORDER_STRATEGIES:
            raise ValueError(f"unknown reorder strategy: {strategy}")
        self.client = client
        self.collection = collection
        self.strategy = strategy

    def _plan(self, sequence: list[Link]) -> list[Link]:
        view = self.collection.view
        if self.strategy == STRATEGY_MERGE and view.filtering:
            merged = merge_into_page(view.items, sequence)
            if merged is not None:
                changed = [
                    link for index, link in enumerate(merged) if link.priority != index
                ]
                for index, link in enumerate(merged):
                    link.priority = index
                self.collection.replace_items(merged)
                return changed
            logger.warning("Reordered items are not all on the page; renumbering view")

        if view.filtering:
            logger.warning(
                "Renumbering %d filtered links of %d on the page; hidden links keep "
                "their priorities",
                len(sequence),
                len(view.items),
            )
        for index, link in enumerate(sequence):
            link.priority = index
        self.collection.set_current_view(sequence)
        return sequence

    async def reorder(self, sequence: Sequence[Link]) -> None:
        pending = self._plan(list(sequence))
        succeeded, _ = await settle(
            "Persist link priority",
            [link.name for link in pending],
            [self.client.replace_link(link) for link in pending],
        )
        saved = {name: result for name, result in succeeded}
        for link in pending:
            if link.name in saved:
                link.version = saved[link.name].version
        await self.collection.fetch(mute=True)
