import uuid
from dataclasses import dataclass, field

from eventhub.store import Store


@dataclass
class Item:
    name: str
    colour: str = "red"
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass
class Other:
    id: uuid.UUID = field(default_factory=uuid.uuid4)


def test_add_and_get_by_uuid_and_string():
    store = Store()
    item = store.add(Item("a"))
    assert store.get(Item, item.id) is item
    assert store.get(Item, str(item.id)) is item


def test_get_invalid_or_missing():
    store = Store()
    item = store.add(Item("a"))
    assert store.get(Item, "nonsense") is None
    assert store.get(Item, uuid.uuid4()) is None
    assert store.get(Other, item.id) is None


def test_all_keeps_insertion_order():
    store = Store()
    items = [store.add(Item(name)) for name in ("x", "y", "z")]
    assert store.all(Item) == items
    assert store.all(Other) == []


def test_find_and_first():
    store = Store()
    store.add(Item("a", colour="blue"))
    b = store.add(Item("b", colour="red"))
    c = store.add(Item("c", colour="red"))
    assert store.find(Item, colour="red") == [b, c]
    assert store.first(Item, colour="red") is b
    assert store.first(Item, colour="green") is None
    assert store.find(Item, missing_attr=1) == []


def test_add_replaces_same_id():
    store = Store()
    item = store.add(Item("a"))
    item.name = "changed"
    store.add(item)
    assert len(store.all(Item)) == 1
    assert store.get(Item, item.id).name == "changed"


def test_delete():
    store = Store()
    item = store.add(Item("a"))
    assert store.delete(item) is True
    assert store.get(Item, item.id) is None
    assert store.delete(item) is False
    assert store.delete(Other()) is False


def test_ping():
    assert Store().ping() is True
    assert Store(online=False).ping() is False