from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from shared.protocol.events import (
    ConnectionClosedEvent,
    ConnectionOpenedEvent,
    ExchangeEvent,
    TransportEvent,
)

logger = logging.getLogger(__name__)


class ConnectionObserver:
    """Receives connection lifecycle events. The default implementation ignores them."""

    def notify(self, event: TransportEvent) -> None:
        pass


class LoggingObserver(ConnectionObserver):
    """Logs traffic and owns the live connection counters.

    One lock guards both counters and the log output so lines from different
    connections never interleave.
    """

    def __init__(self, log: Optional[logging.Logger] = None) -> None:
        self._log = log or logger
        self._lock = threading.Lock()
        self.total = 0
        self.active = 0

    def notify(self, event: TransportEvent) -> None:
        with self._lock:
            if isinstance(event, ConnectionOpenedEvent):
                self.total += 1
                self.active += 1
                self._log.info("<-- %s (%d active)", event.describe(), self.active)
            elif isinstance(event, ConnectionClosedEvent):
                self.active -= 1
                self._log.info("--> %s (%d active)", event.describe(), self.active)
            elif isinstance(event, ExchangeEvent):
                self._log.debug("%s", event.describe())


class CallbackObserver(ConnectionObserver):
    """Adapts a plain callable into an observer."""

    def __init__(self, func: Callable[[TransportEvent], None]) -> None:
        self._func = func

    def notify(self, event: TransportEvent) -> None:
        self._func(event)


class CompositeObserver(ConnectionObserver):
    """Fans every event out to several observers in registration order."""

    def __init__(self, *observers: ConnectionObserver) -> None:
        self._observers: List[ConnectionObserver] = list(observers)

    def add(self, observer: ConnectionObserver) -> None:
        self._observers.append(observer)

    def notify(self, event: TransportEvent) -> None:
        for observer in self._observers:
            observer.notify(event)


__all__ = ["ConnectionObserver", "LoggingObserver", "CallbackObserver", "CompositeObserver"]
