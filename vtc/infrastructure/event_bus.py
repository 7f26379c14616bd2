import logging
from typing import Callable, Dict, List, Optional, Type
from vtc.domain.events import Event

Handler = Callable[[Event], None]


class EventBus:
    """Synchronous pub/sub between the dispatch loop and whoever observes it.

    A handler subscribed to a base event class also receives its subclasses,
    so one ``JobEvent`` handler sees every finished job whatever its outcome.
    Handlers run in the publisher's thread, most specific type first; an
    exception raised by a handler propagates to the publisher.
    """

    def __init__(self):
        self._handlers: Dict[Type[Event], List[Handler]] = {}
        self.logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[Event], handler: Optional[Handler] = None):
        """Registers ``handler`` for ``event_type``. Can be used as a decorator."""
        if handler is None:
            def register(func: Handler) -> Handler:
                self.subscribe(event_type, func)
                return func
            return register

        self._handlers.setdefault(event_type, []).append(handler)
        return handler

    def publish(self, event: Event) -> None:
        self.logger.debug(f"EVENT: {type(event).__name__}")
        for event_type in type(event).__mro__:
            for handler in self._handlers.get(event_type, []):
                handler(event)
