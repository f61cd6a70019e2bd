import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from dbhelper.base.exceptions import ListenerNotCallable
from dbhelper.base.operation_types import OperationType

logger = logging.getLogger(__name__)

EVENT_INIT = "Init"
EVENT_BEFORE_WRITE = "BeforeDBWriteOperation"


class Event:
    """
    Object handed to every listener of an event.

    Listeners may cancel the event, which the triggering code checks
    after all listeners have run.
    """

    def __init__(self, name: str, arguments: Tuple[Any, ...] = ()):
        self.name = name
        self.arguments = tuple(arguments)
        self._cancelled = False
        self._cancel_reason = ""

    def get_name(self) -> str:
        return self.name

    def get_argument(self, index: int) -> Any:
        if 0 <= index < len(self.arguments):
            return self.arguments[index]
        return None

    def cancel(self, reason: str = "") -> None:
        self._cancelled = True
        self._cancel_reason = reason

    def is_cancelled(self) -> bool:
        return self._cancelled

    def get_cancel_reason(self) -> str:
        return self._cancel_reason


class BeforeWriteEvent(Event):
    """Triggered before a write statement is sent to the database."""

    def __init__(self, operation_type: OperationType, sql: str, variables: Mapping[str, Any]):
        super().__init__(EVENT_BEFORE_WRITE, (operation_type, sql, dict(variables)))

    def get_operation_type(self) -> OperationType:
        return self.arguments[0]

    def get_sql(self) -> str:
        return self.arguments[1]

    def get_variables(self) -> Dict[str, Any]:
        return self.arguments[2]

    def is_write_operation(self) -> bool:
        return self.get_operation_type().is_write


class InitObserver(ABC):
    @abstractmethod
    def handle_init(self, event: Event) -> None:
        pass


class BeforeWriteObserver(ABC):
    @abstractmethod
    def handle_before_write(self, event: BeforeWriteEvent) -> None:
        pass


Listener = Union[InitObserver, BeforeWriteObserver, Callable[[Event], Any]]

_OBSERVER_METHODS = {
    EVENT_INIT: (InitObserver, "handle_init"),
    EVENT_BEFORE_WRITE: (BeforeWriteObserver, "handle_before_write"),
}


@dataclass
class RegisteredListener:
    listener_id: int
    event_name: str
    handler: Callable[[Event], Any]


class ListenerRegistry:
    """
    Ordered listeners per event name, each with an integer handle.

    Handles are unique across all event names of one registry.
    """

    def __init__(self):
        self._listeners: Dict[str, List[RegisteredListener]] = {}
        self._ids = itertools.count(1)

    def _resolve_handler(self, event_name: str, listener: Listener) -> Callable[[Event], Any]:
        observer = _OBSERVER_METHODS.get(event_name)
        if observer is not None and isinstance(listener, observer[0]):
            return getattr(listener, observer[1])
        if callable(listener):
            return listener

        raise ListenerNotCallable(
            "The event listener is not callable.",
            f"Listener for event [{event_name}] is of type [{type(listener).__name__}].",
        )

    def add(self, event_name: str, listener: Listener) -> int:
        handler = self._resolve_handler(event_name, listener)
        listener_id = next(self._ids)
        self._listeners.setdefault(event_name, []).append(
            RegisteredListener(listener_id, event_name, handler)
        )
        logger.debug(f"Added listener #{listener_id} for event '{event_name}'.")
        return listener_id

    def remove(self, listener_id: int) -> bool:
        for event_name, listeners in self._listeners.items():
            for registered in listeners:
                if registered.listener_id == listener_id:
                    listeners.remove(registered)
                    logger.debug(f"Removed listener #{listener_id} from event '{event_name}'.")
                    return True
        return False

    def remove_all(self, event_name: str) -> None:
        self._listeners.pop(event_name, None)

    def has_listeners(self, event_name: str) -> bool:
        return bool(self._listeners.get(event_name))

    def get_ids(self, event_name: str) -> List[int]:
        return [registered.listener_id for registered in self._listeners.get(event_name, [])]

    def trigger(self, event: Event) -> Optional[Event]:
        """
        Calls all listeners of the event in registration order.

        Returns the event, or None if no listeners are registered.
        """
        listeners = list(self._listeners.get(event.name, []))
        if not listeners:
            return None

        for registered in listeners:
            registered.handler(event)

        if event.is_cancelled():
            logger.info(f"Event '{event.name}' was cancelled: {event.get_cancel_reason()}")

        return event
