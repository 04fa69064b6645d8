from __future__ import annotations

from enum import IntEnum
from typing import Optional


class ErrorCode(IntEnum):
    """Transport error codes."""

    SETUP_FAILED = 1001
    CONNECTION_FAILED = 1002
    CONNECTION_CLOSED = 1003
    MESSAGE_TOO_LARGE = 1004


class TransportError(Exception):
    """Structured transport exception carrying code + message."""

    code: ErrorCode = ErrorCode.SETUP_FAILED

    def __init__(self, message: str = "", code: Optional[ErrorCode] = None) -> None:
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(f"{self.code.name} ({int(self.code)}): {message}")


class SetupFailed(TransportError):
    """Server socket could not be created/bound/listened, or client socket not allocated."""

    code = ErrorCode.SETUP_FAILED


class ConnectionFailed(TransportError):
    """All connect attempts were exhausted."""

    code = ErrorCode.CONNECTION_FAILED


class ConnectionClosed(TransportError):
    """Peer went away during a request."""

    code = ErrorCode.CONNECTION_CLOSED


class MessageTooLarge(TransportError):
    code = ErrorCode.MESSAGE_TOO_LARGE


__all__ = [
    "ErrorCode",
    "TransportError",
    "SetupFailed",
    "ConnectionFailed",
    "ConnectionClosed",
    "MessageTooLarge",
]
