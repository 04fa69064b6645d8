from __future__ import annotations

import time
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field


def _default_timestamp() -> float:
    return time.time()


class TransportEvent(BaseModel):
    """Base envelope shared by every observer event."""

    model_config = ConfigDict(frozen=True)

    kind: str
    connection_id: int = Field(..., description="Sequence number assigned by the listener")
    peername: str = Field("", description="Remote address as host:port")
    timestamp: float = Field(default_factory=_default_timestamp, description="Unix timestamp (seconds)")

    def describe(self) -> str:
        return f"{self.kind} #{self.connection_id} {self.peername}".rstrip()


class ConnectionOpenedEvent(TransportEvent):
    kind: Literal["opened"] = "opened"


class ConnectionClosedEvent(TransportEvent):
    kind: Literal["closed"] = "closed"
    exchanges: int = Field(0, description="Completed request/response pairs on the connection")

    def describe(self) -> str:
        return f"{super().describe()} after {self.exchanges} exchange(s)"


class ExchangeEvent(TransportEvent):
    kind: Literal["exchange"] = "exchange"
    request: str
    response: str
    keep_alive: bool

    def describe(self) -> str:
        return f"#{self.connection_id}\n{self.request}\n{self.response}"


AnyEvent = Union[ConnectionOpenedEvent, ConnectionClosedEvent, ExchangeEvent]

__all__ = [
    "TransportEvent",
    "ConnectionOpenedEvent",
    "ConnectionClosedEvent",
    "ExchangeEvent",
    "AnyEvent",
]
