from __future__ import annotations

import logging
import socket
import time
from typing import Optional

from shared.protocol.constants import DEFAULT_MAX_TRIALS, DEFAULT_RETRY_INTERVAL, QUIT_PAYLOAD
from shared.protocol.errors import ConnectionClosed, ConnectionFailed, SetupFailed, TransportError
from shared.protocol.framing import FrameCodec, SentinelCodec
from shared.protocol.sockets import close_socket, create_tcp_socket

logger = logging.getLogger(__name__)


class Connector:
    """Blocking TCP client owning exactly one connection for its lifetime.

    The connection is opened in the constructor, retrying while the peer is
    not listening yet. ``close()`` sends the ``Quit`` request and waits for
    its acknowledgement before tearing the socket down.
    """

    def __init__(
        self,
        address: str,
        port: int,
        max_trials: int = DEFAULT_MAX_TRIALS,
        retry_interval: float = DEFAULT_RETRY_INTERVAL,
        codec: Optional[FrameCodec] = None,
    ) -> None:
        self.address = address
        self.port = port
        self.max_trials = max_trials
        self.retry_interval = retry_interval
        self.codec = codec or SentinelCodec()
        self._sock: Optional[socket.socket] = None
        self._connect()

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def _connect(self) -> None:
        try:
            socket.inet_pton(socket.AF_INET, self.address)
        except OSError as exc:
            raise SetupFailed(f"Invalid IPv4 address {self.address!r}") from exc
        if not (0 < self.port < 65536):
            raise SetupFailed(f"Invalid port {self.port}")

        for trial in range(1, self.max_trials + 1):
            sock = create_tcp_socket()
            try:
                sock.connect((self.address, self.port))
            except OSError as exc:
                sock.close()
                logger.warning(
                    "Connect attempt %s/%s to %s:%s failed: %s",
                    trial,
                    self.max_trials,
                    self.address,
                    self.port,
                    exc,
                )
                if trial < self.max_trials:
                    time.sleep(self.retry_interval)
                continue
            self._sock = sock
            logger.info("Connected to %s:%s", self.address, self.port)
            return
        raise ConnectionFailed(f"Failed at connect to {self.address}:{self.port} after {self.max_trials} attempts")

    def request(self, message: str) -> str:
        """Send one message and block for its reply."""
        if self._sock is None:
            raise ConnectionClosed("Connection already closed")
        data = self.codec.encode(message)
        try:
            self._sock.sendall(data)
        except OSError as exc:
            self._drop()
            raise ConnectionClosed(f"Server closed the connection: {exc}") from exc

        try:
            raw = self.codec.read_frame(self._sock)
        except TransportError:
            self._drop()
            raise
        if raw is None:
            self._drop()
            raise ConnectionClosed("Server closed the connection")
        response = self.codec.decode(raw)
        logger.debug("Request %r -> %r", message, response)
        return response

    def close(self) -> None:
        """Run the quit handshake, then shut down and close. Safe to call twice."""
        if self._sock is None:
            return
        try:
            self.request(QUIT_PAYLOAD)
        except TransportError as exc:
            logger.info("Quit handshake with %s:%s not acknowledged: %s", self.address, self.port, exc)
        if self._sock is not None:
            close_socket(self._sock)
            self._sock = None
        logger.info("Connection to %s:%s closed", self.address, self.port)

    def _drop(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> "Connector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_sock", None) is not None:
            self.close()


__all__ = ["Connector"]
