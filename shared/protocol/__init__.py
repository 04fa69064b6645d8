"""
Shared protocol package that centralizes wire constants, framing codecs, the error
taxonomy, observer events and socket helpers for both client and server.
"""

from .constants import BUF_SIZE, ENCODING, FRAME_TERMINATOR, QUIT_PAYLOAD
from .errors import (
    ConnectionClosed,
    ConnectionFailed,
    ErrorCode,
    MessageTooLarge,
    SetupFailed,
    TransportError,
)
from .events import ConnectionClosedEvent, ConnectionOpenedEvent, ExchangeEvent, TransportEvent
from .framing import FrameCodec, LengthPrefixedCodec, SentinelCodec, build_codec, decode_msg, encode_msg
from .sockets import close_socket, create_tcp_socket, ensure_network_ready

__all__ = [
    "BUF_SIZE",
    "ENCODING",
    "FRAME_TERMINATOR",
    "QUIT_PAYLOAD",
    "ErrorCode",
    "TransportError",
    "SetupFailed",
    "ConnectionFailed",
    "ConnectionClosed",
    "MessageTooLarge",
    "TransportEvent",
    "ConnectionOpenedEvent",
    "ConnectionClosedEvent",
    "ExchangeEvent",
    "encode_msg",
    "decode_msg",
    "FrameCodec",
    "SentinelCodec",
    "LengthPrefixedCodec",
    "build_codec",
    "ensure_network_ready",
    "create_tcp_socket",
    "close_socket",
]
