from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from linkshelf.config import PanelConfig
from linkshelf.panel.assigner import GroupAssigner
from linkshelf.panel.bulk import BulkActions, Download
from linkshelf.panel.catalog import GroupCatalog
from linkshelf.panel.client import ResourceClient
from linkshelf.panel.collection import ActiveView, LinkCollection
from linkshelf.panel.common import RESOURCE_ERRORS
from linkshelf.panel.entities import Link
from linkshelf.panel.navigator import SequentialNavigator
from linkshelf.panel.reorder import STRATEGY_VISIBLE, OrderReconciler
from linkshelf.panel.selection import SelectionSet
from linkshelf.panel.shortcuts import ShortcutRegistry, bound_navigation

logger = logging.getLogger(__name__)


class LinkPanel:
    """Commands issued by the link management panel.

    Wires the collection, catalog, reconciler, selection and bulk actions
    around one shared ``ActiveView``.
    """

    def __init__(
        self,
        client: ResourceClient,
        page_size: int = 20,
        search_threshold: int = 70,
        reorder_strategy: str = STRATEGY_VISIBLE,
    ):
        self.client = client
        self.collection = LinkCollection(client, page_size, search_threshold)
        self.catalog = GroupCatalog(client, self.collection)
        self.selection = SelectionSet(self.collection)
        self.assigner = GroupAssigner(client, self.catalog, self.collection)
        self.reconciler = OrderReconciler(client, self.collection, reorder_strategy)
        self.bulk = BulkActions(client, self.collection, self.selection, self.assigner)
        self.navigator = SequentialNavigator(self.collection)
        self.shortcuts = ShortcutRegistry()

    @classmethod
    def from_config(cls, config=PanelConfig, client: ResourceClient | None = None):
        client = client or ResourceClient(config.API_URL, timeout=config.HTTP_TIMEOUT)
        return cls(
            client,
            page_size=config.PAGE_SIZE,
            search_threshold=config.SEARCH_THRESHOLD,
            reorder_strategy=config.REORDER_STRATEGY,
        )

    async def __aenter__(self) -> LinkPanel:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.client.aclose()

    @property
    def view(self) -> ActiveView:
        return self.collection.view

    @property
    def current_view(self) -> list[Link]:
        return self.collection.current_view

    async def load(self) -> None:
        await self.catalog.refresh()
        await self.collection.fetch()

    async def select_group(self, name: str) -> None:
        group = self.catalog.find(name)
        if group is None:
            raise KeyError(f"unknown link group: {name}")
        self.selection.clear()
        await self.catalog.select(group)

    def search(self, keyword: str | None) -> list[Link]:
        self.collection.set_keyword(keyword)
        return self.collection.current_view

    async def reorder(self, sequence: Sequence[Link]) -> None:
        await self.reconciler.reorder(sequence)

    async def change_page(self, page: int, size: int | None = None) -> None:
        self.selection.clear()
        await self.collection.change_page(page, size)

    async def create_link(self, payload: dict) -> Link | None:
        try:
            link = await self.client.create_link(payload)
        except RESOURCE_ERRORS as exc:
            logger.error("Failed to create link: %s", exc)
            return None
        await self.assigner.assign(link)
        return link

    async def update_link(self, link: Link) -> Link | None:
        saved = None
        try:
            saved = await self.client.replace_link(link)
        except RESOURCE_ERRORS as exc:
            logger.error("Failed to update link %s: %s", link.name, exc)
        await self.collection.fetch(mute=True)
        return saved

    async def delete_link(self, name: str) -> bool:
        deleted = True
        try:
            await self.client.delete_link(name)
        except RESOURCE_ERRORS as exc:
            logger.error("Failed to delete link %s: %s", name, exc)
            deleted = False
        self.selection.toggle(name, checked=False)
        await self.collection.fetch()
        return deleted

    async def delete_selected(self) -> int:
        return await self.bulk.delete_selected()

    def export_selected(self) -> Download | None:
        return self.bulk.export_selected()

    async def import_document(self, text: str) -> int:
        return await self.bulk.import_document(text)

    async def import_file(self, path: str | Path) -> int:
        return await self.bulk.import_file(path)

    @contextmanager
    def editing(self, link: Link | None = None) -> Iterator[SequentialNavigator]:
        """Open the editing dialog on ``link`` with navigation keys bound."""
        self.navigator.select(link)
        with bound_navigation(self.shortcuts, self.navigator) as navigator:
            try:
                yield navigator
            finally:
                navigator.clear()
