"""Process-wide socket subsystem setup and the uniform close operation."""

from __future__ import annotations

import atexit
import logging
import socket
import sys
import threading

from .errors import SetupFailed

logger = logging.getLogger(__name__)

_init_lock = threading.Lock()
_initialized = False


def ensure_network_ready() -> bool:
    """Initialise the socket subsystem once per process.

    Returns True only for the call that performed the initialisation. The
    interpreter's socket module already runs WSAStartup on Windows, so this
    only records the platform and registers the exit-time finaliser.
    """
    global _initialized
    with _init_lock:
        if _initialized:
            return False
        _initialized = True
    atexit.register(_finalize_network)
    logger.debug("Network stack ready (platform=%s)", sys.platform)
    return True


def _finalize_network() -> None:
    global _initialized
    with _init_lock:
        _initialized = False
    logger.debug("Network stack released")


def is_network_ready() -> bool:
    return _initialized


def create_tcp_socket() -> socket.socket:
    """Allocate an IPv4 TCP socket, mapping OS failures to SetupFailed."""
    ensure_network_ready()
    try:
        return socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    except OSError as exc:
        raise SetupFailed(f"Can not create socket: {exc}") from exc


def close_socket(sock: socket.socket) -> None:
    """Shut down both directions, then close."""
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as exc:
        # peer already gone or never connected
        logger.debug("Shutdown skipped for fd %s: %s", sock.fileno(), exc)
    sock.close()


__all__ = ["ensure_network_ready", "is_network_ready", "create_tcp_socket", "close_socket"]
