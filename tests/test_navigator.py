import pytest

from linkshelf.panel.entities import Link
from linkshelf.panel.shortcuts import NEXT_KEY, PREVIOUS_KEY, ShortcutRegistry, bound_navigation


@pytest.fixture
def loaded_panel(panel):
    panel.collection.replace_items(
        [Link(name=name, priority=index) for index, name in enumerate("abc")]
    )
    return panel


def test_next_from_nothing_selects_first(loaded_panel):
    navigator = loaded_panel.navigator

    assert navigator.next().name == "a"
    assert navigator.next().name == "b"
    assert navigator.next().name == "c"
    assert navigator.next() is None
    assert navigator.selected is None


def test_previous_past_start_clears_selection(loaded_panel):
    navigator = loaded_panel.navigator
    navigator.select(loaded_panel.view.items[1])

    assert navigator.previous().name == "a"
    assert navigator.previous() is None
    assert navigator.previous() is None


def test_navigation_ignores_search_filter(loaded_panel):
    loaded_panel.search("=a")
    navigator = loaded_panel.navigator
    navigator.select(loaded_panel.view.items[0])

    assert navigator.next().name == "b"


def test_editing_binds_and_releases_keys(loaded_panel):
    registry = loaded_panel.shortcuts

    with loaded_panel.editing(loaded_panel.view.items[0]) as navigator:
        assert registry.is_bound(NEXT_KEY)
        assert registry.dispatch(NEXT_KEY)
        assert navigator.selected.name == "b"
        registry.dispatch(PREVIOUS_KEY)
        assert navigator.selected.name == "a"

    assert not registry.is_bound(NEXT_KEY)
    assert not registry.is_bound(PREVIOUS_KEY)
    assert loaded_panel.navigator.selected is None


def test_bindings_released_when_dialog_raises(loaded_panel):
    registry = ShortcutRegistry()

    with pytest.raises(RuntimeError):
        with bound_navigation(registry, loaded_panel.navigator):
            raise RuntimeError("dialog crashed")

    assert not registry.is_bound(NEXT_KEY)
    assert registry.dispatch(NEXT_KEY) is False
