from __future__ import annotations

import pytest

from helpers import RecordingObserver, echo
from server.core import Listener


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()


@pytest.fixture
def listener(observer):
    server = Listener(0, echo, host="127.0.0.1", observer=observer)
    server.start()
    yield server
    server.shutdown()


@pytest.fixture
def port(listener) -> int:
    return listener.server_address[1]
