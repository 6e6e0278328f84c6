"""Tests for the item store and its change notification."""
import pytest

from formstate import ItemStore, PathError


def test_store_holds_item_by_reference(item):
    """The store never copies the item."""
    store = ItemStore(item)
    assert store.item is item
    store.set("user.name", "Ada")
    assert item["user"]["name"] == "Ada"


def test_default_item_is_empty_dict():
    """A store without an item starts from an empty dict."""
    assert ItemStore().item == {}


def test_set_increments_token_and_notifies(store):
    """Each write bumps the token and notifies listeners once."""
    calls = []
    store.connect_listener(lambda: calls.append(store.token))
    store.set("flag", True)
    assert store.token == 1
    assert calls == [1]
    assert store.get("flag") is True


def test_connect_listener_is_idempotent(store):
    """A listener connected twice is only called once."""
    calls = []

    def listener():
        calls.append(1)

    store.connect_listener(listener)
    store.connect_listener(listener)
    store.set("flag", True)
    assert calls == [1]

    store.disconnect_listener(listener)
    store.set("flag", False)
    assert calls == [1]


def test_failing_listener_does_not_stop_others(store):
    """Ordinary listener failures are logged, not raised."""
    calls = []

    def broken():
        raise RuntimeError("boom")

    store.connect_listener(broken)
    store.connect_listener(lambda: calls.append(1))
    store.set("flag", True)
    assert calls == [1]


def test_critical_listener_failure_propagates(store):
    """Critical listeners re-raise after every listener ran."""
    calls = []

    def broken():
        raise KeyError("render failed")

    store.connect_listener(broken, critical=True)
    store.connect_listener(lambda: calls.append(1))
    with pytest.raises(KeyError):
        store.set("flag", True)
    assert calls == [1]
    assert store.get("flag") is True


def test_atomic_coalesces_notifications(store):
    """Nested atomic blocks notify once at the outermost exit."""
    calls = []
    store.connect_listener(lambda: calls.append(store.token))
    with store.atomic():
        store.set("user.name", "Ada")
        with store.atomic():
            store.set("user.email", "ada@example.com")
        assert calls == []
        assert store.in_atomic
    assert calls == [2]
    assert not store.in_atomic


def test_atomic_without_changes_does_not_notify(store):
    """An empty atomic block stays silent."""
    calls = []
    store.connect_listener(lambda: calls.append(1))
    with store.atomic():
        pass
    assert calls == []


def test_replace_swaps_root(store):
    """Replacing the root notifies like a write."""
    calls = []
    store.connect_listener(lambda: calls.append(1))
    store.replace({"fresh": True})
    assert store.get("fresh") is True
    assert store.get("user.name") is None
    assert calls == [1]


def test_set_with_malformed_path_raises(store):
    """Malformed paths fail before any notification."""
    calls = []
    store.connect_listener(lambda: calls.append(1))
    with pytest.raises(PathError):
        store.set("a..b", 1)
    assert calls == []
    assert store.token == 0
