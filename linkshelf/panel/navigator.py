from __future__ import annotations

from linkshelf.panel.collection import LinkCollection
from linkshelf.panel.entities import Link


class SequentialNavigator:
    """Previous/next stepping through the full loaded page, without wraparound."""

    def __init__(self, collection: LinkCollection):
        self.collection = collection
        self.selected: Link | None = None

    def select(self, link: Link | None) -> Link | None:
        self.selected = link
        return link

    def clear(self) -> None:
        self.selected = None

    def _position(self) -> int | None:
        if self.selected is None:
            return None
        for index, link in enumerate(self.collection.view.items):
            if link.name == self.selected.name:
                return index
        return None

    def previous(self) -> Link | None:
        position = self._position()
        if position is None or position == 0:
            return self.select(None)
        return self.select(self.collection.view.items[position - 1])

    def next(self) -> Link | None:
        items = self.collection.view.items
        position = self._position()
        if position is None:
            return self.select(items[0] if items else None)
        if position + 1 >= len(items):
            return self.select(None)
        return self.select(items[position + 1])
