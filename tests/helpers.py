from __future__ import annotations

import socket
import threading
import time
from typing import Callable, List, Tuple

from server.core import ConnectionObserver
from shared.protocol import QUIT_PAYLOAD
from shared.protocol.events import TransportEvent


def echo(request: str) -> Tuple[str, bool]:
    if request == QUIT_PAYLOAD:
        return "Bye", False
    return request, True


class RecordingObserver(ConnectionObserver):
    def __init__(self) -> None:
        self.events: List[TransportEvent] = []
        self._lock = threading.Lock()

    def notify(self, event: TransportEvent) -> None:
        with self._lock:
            self.events.append(event)

    def kinds(self, connection_id: int) -> List[str]:
        with self._lock:
            return [e.kind for e in self.events if e.connection_id == connection_id]

    def of_kind(self, kind: str) -> List[TransportEvent]:
        with self._lock:
            return [e for e in self.events if e.kind == kind]


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


