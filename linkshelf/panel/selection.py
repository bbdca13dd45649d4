from __future__ import annotations

from linkshelf.panel.collection import ActiveView, LinkCollection
from linkshelf.panel.entities import Link


class SelectionSet:
    """Checked link names, scoped to the loaded page.

    ``all_selected`` compares against the full page, so it reads false while a
    keyword narrows the view to fewer items than are selected.
    """

    def __init__(self, collection: LinkCollection):
        self.collection = collection
        self.names: set[str] = set()
        self.all_selected = False
        collection.subscribe(self._on_page_replaced)
        collection.subscribe_group(self._on_group_changed)

    def __contains__(self, name: str) -> bool:
        return name in self.names

    def __len__(self) -> int:
        return len(self.names)

    def _recompute(self) -> None:
        total = len(self.collection.view.items)
        self.all_selected = bool(total) and len(self.names) == total

    def _on_page_replaced(self, view: ActiveView) -> None:
        self._recompute()

    def _on_group_changed(self, view: ActiveView) -> None:
        self.names = set()
        self._recompute()

    def toggle(self, name: str, checked: bool | None = None) -> None:
        if checked is None:
            checked = name not in self.names
        if checked:
            self.names.add(name)
        else:
            self.names.discard(name)
        self._recompute()

    def toggle_all(self, checked: bool) -> None:
        if checked:
            self.names = {link.name for link in self.collection.view.items}
        else:
            self.names = set()
        self._recompute()

    def clear(self) -> None:
        self.toggle_all(False)

    def selected_links(self) -> list[Link]:
        return [link for link in self.collection.view.items if link.name in self.names]
