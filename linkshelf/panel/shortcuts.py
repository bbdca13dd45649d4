from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from linkshelf.panel.navigator import SequentialNavigator

PREVIOUS_KEY = "alt+left"
NEXT_KEY = "alt+right"


class ShortcutRegistry:
    def __init__(self):
        self._handlers: dict[str, list[Callable[[], object]]] = {}

    def bind(self, key: str, handler: Callable[[], object]) -> None:
        self._handlers.setdefault(key, []).append(handler)

    def unbind(self, key: str, handler: Callable[[], object]) -> None:
        handlers = self._handlers.get(key, [])
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            self._handlers.pop(key, None)

    def is_bound(self, key: str) -> bool:
        return bool(self._handlers.get(key))

    def dispatch(self, key: str) -> bool:
        handlers = list(self._handlers.get(key, []))
        for handler in handlers:
            handler()
        return bool(handlers)


@contextmanager
def bound_navigation(
    registry: ShortcutRegistry,
    navigator: SequentialNavigator,
    previous_key: str = PREVIOUS_KEY,
    next_key: str = NEXT_KEY,
) -> Iterator[SequentialNavigator]:
    """Bind previous/next keys for as long as an editing dialog is open."""
    registry.bind(previous_key, navigator.previous)
    registry.bind(next_key, navigator.next)
    try:
        yield navigator
    finally:
        registry.unbind(previous_key, navigator.previous)
        registry.unbind(next_key, navigator.next)
