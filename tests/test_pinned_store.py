import pytest

from clippocket.database.persistence import PINNED_ITEMS_KEY
from clippocket.models.clipboarditem import ClipboardItem, ItemType
from clippocket.models.pinneditem import PinnedClipboardItem
from clippocket.services.pinned_store import PinnedStore


@pytest.fixture
def store(settings, gateway):
    return PinnedStore(settings, gateway)


def _pin_texts(store, *texts):
    return [store.pin(ClipboardItem.from_text(text)) for text in texts]


def test_pin_inserts_at_front(store):
    a, b = _pin_texts(store, "a", "b")
    assert store.items == [b, a]


def test_pin_rejects_equal_content(store):
    item = ClipboardItem.from_text("only once")
    assert store.pin(item) is not None
    assert store.pin(ClipboardItem.from_text("only once")) is None
    assert len(store) == 1


def test_pin_keeps_custom_title(store):
    pinned = store.pin(ClipboardItem.from_text("ssh deploy@host"), custom_title="Deploy box")
    assert pinned.display_title == "Deploy box"


def test_pin_caps_at_max_pinned(settings):
    store = PinnedStore(settings.with_changes(max_pinned=2))
    _pin_texts(store, "a", "b", "c")
    assert [p.display_string for p in store.items] == ["c", "b"]


def test_is_pinned_uses_content_equality(store):
    store.pin(ClipboardItem.from_text("shared"))
    assert store.is_pinned(ClipboardItem.from_text("shared"))
    assert not store.is_pinned(ClipboardItem.from_text("shared", ItemType.CODE))


def test_unpin(store):
    pinned, = _pin_texts(store, "remove")
    assert store.unpin(pinned.id)
    assert store.unpin(pinned.id) is False
    assert len(store) == 0


def test_unpin_by_original_id(store):
    item = ClipboardItem.from_text("by original")
    store.pin(item)
    assert store.unpin_by_original_id(item.id)
    assert len(store) == 0


def test_set_title(store):
    pinned, = _pin_texts(store, "body")
    assert store.set_title(pinned.id, "Heading")
    assert store.get(pinned.id).display_title == "Heading"

    assert store.set_title(pinned.id, None)
    assert store.get(pinned.id).display_title == "body"
    assert store.set_title("missing", "x") is False


def test_reorder(store):
    c, b, a = _pin_texts(store, "c", "b", "a")
    assert store.items == [a, b, c]

    assert store.reorder(0, 2)
    assert store.items == [b, c, a]


def test_reorder_rejects_out_of_range(store):
    _pin_texts(store, "x", "y")
    before = store.items
    assert store.reorder(0, 2) is False
    assert store.reorder(-1, 0) is False
    assert store.items == before


def test_move_to_top(store):
    first, second = _pin_texts(store, "first", "second")
    assert store.move_to_top(first.id)
    assert store.items[0] == first


def test_search_matches_title_and_content(store):
    store.pin(ClipboardItem.from_text("git push origin main"), custom_title="Release")
    store.pin(ClipboardItem.from_text("unrelated"))
    assert len(store.search("release")) == 1
    assert len(store.search("origin")) == 1
    assert len(store.search("")) == 2


def test_mutations_are_saved_immediately(settings, gateway, store):
    pinned, = _pin_texts(store, "saved now")
    assert gateway.load_pinned() == [pinned]

    store.unpin(pinned.id)
    assert gateway.load_pinned() == []
    assert gateway.defaults.get(PINNED_ITEMS_KEY) == "[]"


def test_load_restores_order(settings, gateway, store):
    _pin_texts(store, "one", "two", "three")
    expected = store.items

    reloaded = PinnedStore(settings, gateway)
    assert reloaded.load() == 3
    assert reloaded.items == expected


def test_validate_integrity(store):
    _pin_texts(store, "fine", "also fine")
    assert store.validate_integrity()

    store._items.append(PinnedClipboardItem.pin(ClipboardItem.from_text("fine")))
    assert store.validate_integrity() is False


def test_replace_all_keeps_first_of_equal_content(store):
    first = PinnedClipboardItem.pin(ClipboardItem.from_text("dup"), custom_title="First")
    second = PinnedClipboardItem.pin(ClipboardItem.from_text("dup"))
    other = PinnedClipboardItem.pin(ClipboardItem.from_text("other"))

    store.replace_all([first, second, other])
    assert store.items == [first, other]
    assert store.validate_integrity()


def test_load_drops_duplicate_content(settings, gateway):
    first = PinnedClipboardItem.pin(ClipboardItem.from_text("dup"))
    second = PinnedClipboardItem.pin(ClipboardItem.from_text("dup"))
    gateway.save_pinned([first, second])

    store = PinnedStore(settings, gateway)
    assert store.load() == 1
    assert store.items == [first]


def test_validate_integrity_flags_empty_content(store):
    store.replace_all([PinnedClipboardItem.pin(ClipboardItem.from_text("", ItemType.TEXT))])
    assert store.validate_integrity() is False


def test_clear(store, gateway):
    _pin_texts(store, "a", "b")
    store.clear()
    assert len(store) == 0
    assert gateway.load_pinned() == []
