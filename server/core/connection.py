from __future__ import annotations

import logging
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple, Union

from shared.protocol.constants import QUIT_PAYLOAD
from shared.protocol.errors import TransportError
from shared.protocol.events import (
    ConnectionClosedEvent,
    ConnectionOpenedEvent,
    ExchangeEvent,
    TransportEvent,
)
from shared.protocol.framing import FrameCodec, SentinelCodec
from shared.protocol.sockets import close_socket

from .observer import ConnectionObserver

logger = logging.getLogger(__name__)

# request -> (response, keep_alive); a bare response string means keep_alive=False
CallbackResult = Union[str, Tuple[str, bool]]
RequestCallback = Callable[[str], CallbackResult]


class SessionState(str, Enum):
    ACTIVE = "active"
    ENDING = "ending"


@dataclass
class ConnectionContext:
    sock: socket.socket
    peername: str
    connection_id: int
    state: SessionState = SessionState.ACTIVE
    exchanges: int = 0

    def end(self) -> None:
        self.state = SessionState.ENDING

    @property
    def is_active(self) -> bool:
        return self.state is SessionState.ACTIVE


def format_peer(address) -> str:
    if isinstance(address, tuple) and len(address) >= 2:
        return f"{address[0]}:{address[1]}"
    return str(address)


class ConnectionHandler:
    """Owns one accepted connection and runs its request/response loop."""

    def __init__(
        self,
        ctx: ConnectionContext,
        callback: RequestCallback,
        codec: Optional[FrameCodec] = None,
        observer: Optional[ConnectionObserver] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> None:
        self.ctx = ctx
        self.callback = callback
        self.codec = codec or SentinelCodec()
        self.observer = observer
        self.on_finished = on_finished

    def run(self) -> None:
        ctx = self.ctx
        self._emit(ConnectionOpenedEvent(connection_id=ctx.connection_id, peername=ctx.peername))
        try:
            while ctx.is_active:
                if not self._exchange():
                    ctx.end()
        except Exception:
            logger.exception("Request callback failed on connection #%d (%s)", ctx.connection_id, ctx.peername)
        finally:
            ctx.end()
            close_socket(ctx.sock)
            self._emit(
                ConnectionClosedEvent(
                    connection_id=ctx.connection_id, peername=ctx.peername, exchanges=ctx.exchanges
                )
            )
            if self.on_finished is not None:
                self.on_finished()

    def _exchange(self) -> bool:
        """Serve one request. Returns whether the session stays open."""
        ctx = self.ctx
        try:
            raw = self.codec.read_frame(ctx.sock)
            if raw is None:
                logger.debug("Connection #%d closed by %s", ctx.connection_id, ctx.peername)
                return False
            request = self.codec.decode(raw)
        except TransportError as exc:
            logger.warning("Framing error on connection #%d (%s): %s", ctx.connection_id, ctx.peername, exc)
            return False

        keep_alive = False
        result = self.callback(request)
        if isinstance(result, str):
            response = result
        else:
            response, keep_alive = result
        if request == QUIT_PAYLOAD:
            keep_alive = False

        try:
            data = self.codec.encode(response)
        except TransportError as exc:
            logger.warning("Response dropped on connection #%d: %s", ctx.connection_id, exc)
            return False
        try:
            ctx.sock.sendall(data)
        except OSError as exc:
            logger.info("Send to %s failed: %s", ctx.peername, exc)
            return False

        ctx.exchanges += 1
        self._emit(
            ExchangeEvent(
                connection_id=ctx.connection_id,
                peername=ctx.peername,
                request=request,
                response=response,
                keep_alive=bool(keep_alive),
            )
        )
        return bool(keep_alive)

    def _emit(self, event: TransportEvent) -> None:
        if self.observer is None:
            return
        try:
            self.observer.notify(event)
        except Exception as exc:
            logger.error("Observer failed on %s: %s", event.kind, exc)


__all__ = [
    "CallbackResult",
    "RequestCallback",
    "SessionState",
    "ConnectionContext",
    "ConnectionHandler",
    "format_peer",
]
