import pytest

from dbhelper.base.events import (EVENT_BEFORE_WRITE, EVENT_INIT,
                                  BeforeWriteEvent, BeforeWriteObserver, Event,
                                  InitObserver, ListenerRegistry)
from dbhelper.base.exceptions import ListenerNotCallable
from dbhelper.base.operation_types import OperationType


class CountingInitObserver(InitObserver):
    def __init__(self):
        self.calls = 0

    def handle_init(self, event):
        self.calls += 1


class ReadOnlyObserver(BeforeWriteObserver):
    """Cancels all write operations on one table."""

    def __init__(self, table):
        self.table = table

    def handle_before_write(self, event):
        if self.table in event.get_sql():
            event.cancel(f"The table {self.table} is read only.")


@pytest.fixture
def registry():
    return ListenerRegistry()


def test_removed_listener_is_not_called(registry):
    calls = []
    listener_id = registry.add(EVENT_INIT, lambda event: calls.append(event))

    assert registry.remove(listener_id) is True
    assert registry.trigger(Event(EVENT_INIT)) is None
    assert calls == []


def test_remove_one_of_two_listeners(registry):
    calls = []
    first = registry.add(EVENT_INIT, lambda event: calls.append("first"))
    second = registry.add(EVENT_INIT, lambda event: calls.append("second"))

    registry.remove(first)

    assert registry.get_ids(EVENT_INIT) == [second]
    registry.trigger(Event(EVENT_INIT))
    assert calls == ["second"]


def test_listener_ids_are_unique_across_events(registry):
    init_id = registry.add(EVENT_INIT, lambda event: None)
    write_id = registry.add(EVENT_BEFORE_WRITE, lambda event: None)
    assert init_id != write_id


def test_remove_unknown_listener(registry):
    assert registry.remove(999) is False


def test_remove_all(registry):
    registry.add(EVENT_INIT, lambda event: None)
    registry.add(EVENT_INIT, lambda event: None)
    assert registry.has_listeners(EVENT_INIT)

    registry.remove_all(EVENT_INIT)
    assert not registry.has_listeners(EVENT_INIT)
    assert registry.get_ids(EVENT_INIT) == []


def test_observer_objects(registry):
    observer = CountingInitObserver()
    registry.add(EVENT_INIT, observer)
    registry.trigger(Event(EVENT_INIT))
    assert observer.calls == 1


@pytest.mark.parametrize("listener", [42, "not callable", None])
def test_non_callable_listener(registry, listener):
    with pytest.raises(ListenerNotCallable):
        registry.add(EVENT_INIT, listener)


def test_before_write_event_cancel(registry):
    registry.add(EVENT_BEFORE_WRITE, ReadOnlyObserver("products"))

    event = registry.trigger(
        BeforeWriteEvent(OperationType.DELETE, "DELETE FROM `products`", {"a": 1})
    )
    assert event.is_cancelled()
    assert event.get_cancel_reason() == "The table products is read only."
    assert event.get_operation_type() is OperationType.DELETE
    assert event.get_variables() == {"a": 1}
    assert event.is_write_operation()

    event = registry.trigger(
        BeforeWriteEvent(OperationType.DELETE, "DELETE FROM `product_variants`", {})
    )
    assert not event.is_cancelled()


def test_event_arguments():
    event = Event("Custom", ("a", 2))
    assert event.get_argument(0) == "a"
    assert event.get_argument(1) == 2
    assert event.get_argument(5) is None


def test_operation_type_write_classification():
    assert OperationType.INSERT.is_write
    assert OperationType.DROP.is_write
    assert not OperationType.SELECT.is_write
    assert not OperationType.TRANSACTION.is_write
    assert OperationType.write_types() == {
        OperationType.INSERT,
        OperationType.UPDATE,
        OperationType.DELETE,
        OperationType.TRUNCATE,
        OperationType.DROP,
    }
