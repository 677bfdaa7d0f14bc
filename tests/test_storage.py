import threading

from storefront_service.models import Order, utcnow
from storefront_service.storage import EntityKind, MemStorage


def make_order(storage, **overrides):
    fields = dict(
        id=storage.new_id(),
        customerName="Ana",
        customerEmail="ana@mail.com",
        customerPhone="123",
        shippingAddress="Street 1",
        total="100",
        createdAt=utcnow(),
    )
    fields.update(overrides)
    return Order(**fields)


def test_get_missing_returns_none(storage):
    assert storage.get(EntityKind.ORDER, "nope") is None


def test_put_then_get_and_overwrite(storage):
    order = make_order(storage)
    storage.put(EntityKind.ORDER, order)
    assert storage.get(EntityKind.ORDER, order.id) == order

    storage.put(EntityKind.ORDER, order.model_copy(update={"status": "shipped"}))
    assert storage.get(EntityKind.ORDER, order.id).status == "shipped"
    assert len(storage.scan(EntityKind.ORDER)) == 1


def test_kinds_are_separate_collections(storage):
    order = make_order(storage)
    storage.put(EntityKind.ORDER, order)
    assert storage.get(EntityKind.PRODUCT, order.id) is None
    assert storage.scan(EntityKind.PRODUCT) == []


def test_delete_reports_presence(storage):
    order = make_order(storage)
    storage.put(EntityKind.ORDER, order)
    assert storage.delete(EntityKind.ORDER, order.id) is True
    assert storage.delete(EntityKind.ORDER, order.id) is False
    assert storage.get(EntityKind.ORDER, order.id) is None


def test_entities_are_not_shared_with_callers(storage):
    order = make_order(storage)
    storage.put(EntityKind.ORDER, order)
    order.status = "mutated after put"

    fetched = storage.get(EntityKind.ORDER, order.id)
    assert fetched.status == "pending"
    fetched.status = "mutated after get"
    assert storage.scan(EntityKind.ORDER)[0].status == "pending"


def test_new_ids_are_unique(storage):
    ids = {storage.new_id() for _ in range(1000)}
    assert len(ids) == 1000


def test_locked_is_reentrant_and_excludes_other_threads():
    storage = MemStorage()
    order = make_order(storage)
    written = []

    def writer():
        storage.put(EntityKind.ORDER, order)
        written.append(True)

    with storage.locked():
        with storage.locked():
            thread = threading.Thread(target=writer)
            thread.start()
            thread.join(timeout=0.2)
            assert written == []
    thread.join(timeout=5)
    assert written == [True]
