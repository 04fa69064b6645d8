from __future__ import annotations

import itertools
import logging
import selectors
import socket
import threading
from typing import Optional, Tuple

from shared.protocol.constants import DEFAULT_BACKLOG, DEFAULT_MAX_CONNECTIONS
from shared.protocol.errors import SetupFailed
from shared.protocol.framing import FrameCodec, SentinelCodec
from shared.protocol.sockets import close_socket, create_tcp_socket

from .connection import ConnectionContext, ConnectionHandler, RequestCallback, format_peer
from .observer import ConnectionObserver

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.5  # seconds between shutdown checks while idle


class Listener:
    """Accepts TCP connections and runs one handler thread per connection."""

    def __init__(
        self,
        port: int,
        callback: RequestCallback,
        host: str = "0.0.0.0",
        backlog: int = DEFAULT_BACKLOG,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        codec: Optional[FrameCodec] = None,
        observer: Optional[ConnectionObserver] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.callback = callback
        self.backlog = backlog
        self.max_connections = max_connections
        self.codec = codec or SentinelCodec()
        self.observer = observer
        self._sock: Optional[socket.socket] = None
        self._slots: Optional[threading.BoundedSemaphore] = (
            threading.BoundedSemaphore(max_connections) if max_connections > 0 else None
        )
        self._ids = itertools.count(1)
        self._stopping = threading.Event()
        self._stopped = threading.Event()
        self._stopped.set()
        self._thread: Optional[threading.Thread] = None

    @property
    def server_address(self) -> Tuple[str, int]:
        if self._sock is None:
            return self.host, self.port
        return self._sock.getsockname()[:2]

    def bind(self) -> None:
        """Create, bind and listen. Failures are fatal and never retried."""
        if self._sock is not None:
            return
        sock = create_tcp_socket()
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
        except OSError as exc:
            sock.close()
            raise SetupFailed(f"Failed at bind on {self.host}:{self.port}: {exc}") from exc
        try:
            sock.listen(self.backlog)
        except OSError as exc:
            sock.close()
            raise SetupFailed(f"Failed at listen: {exc}") from exc
        self._sock = sock
        logger.info("Listening on %s:%s", *self.server_address)

    def serve_forever(self) -> None:
        self.bind()
        self._stopping.clear()
        self._stopped.clear()
        self._serve()

    def _serve(self) -> None:
        if self._sock is None:
            raise SetupFailed("Listener is not bound")
        try:
            with selectors.DefaultSelector() as selector:
                selector.register(self._sock, selectors.EVENT_READ)
                while not self._stopping.is_set():
                    if not self._acquire_slot():
                        continue
                    if not selector.select(POLL_INTERVAL):
                        self._release_slot()
                        continue
                    self._accept_once()
        finally:
            self._sock.close()
            self._sock = None
            self._stopped.set()
            logger.info("Listener stopped")

    def start(self) -> "Listener":
        """Bind synchronously, then accept on a background thread."""
        self.bind()
        self._stopping.clear()
        self._stopped.clear()
        self._thread = threading.Thread(target=self._serve, name="listener-accept", daemon=True)
        self._thread.start()
        return self

    def shutdown(self) -> None:
        """Stop accepting and close the listening socket. Open sessions keep running."""
        self._stopping.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        elif self._sock is not None and self._stopped.is_set():
            self._sock.close()
            self._sock = None

    def _acquire_slot(self) -> bool:
        if self._slots is None:
            return True
        return self._slots.acquire(timeout=POLL_INTERVAL)

    def _release_slot(self) -> None:
        if self._slots is not None:
            self._slots.release()

    def _accept_once(self) -> None:
        try:
            conn, address = self._sock.accept()
        except OSError as exc:
            self._release_slot()
            logger.warning("Accept failed: %s", exc)
            return
        conn.settimeout(None)
        ctx = ConnectionContext(sock=conn, peername=format_peer(address), connection_id=next(self._ids))
        handler = ConnectionHandler(
            ctx,
            self.callback,
            codec=self.codec,
            observer=self.observer,
            on_finished=self._release_slot,
        )
        thread = threading.Thread(target=handler.run, name=f"connection-{ctx.connection_id}", daemon=True)
        try:
            thread.start()
        except RuntimeError as exc:
            logger.warning("Could not start handler for %s: %s", ctx.peername, exc)
            close_socket(conn)
            self._release_slot()
            return
        logger.debug("Dispatched connection #%d from %s", ctx.connection_id, ctx.peername)

    def __enter__(self) -> "Listener":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()


def serve(port: int, callback: RequestCallback, **kwargs) -> None:
    """Bind ``port`` on all interfaces and accept connections until interrupted."""
    Listener(port, callback, **kwargs).serve_forever()


__all__ = ["Listener", "serve", "POLL_INTERVAL"]
