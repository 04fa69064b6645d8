from __future__ import annotations

import logging
import socket
from typing import Dict, Optional, Type

from .constants import BUF_SIZE, ENCODING, FRAME_TERMINATOR, LENGTH_HEADER_SIZE
from .errors import ConnectionClosed, MessageTooLarge

logger = logging.getLogger(__name__)


def encode_msg(message: str, max_size: int = BUF_SIZE) -> bytes:
    """Encode text into bytes (payload + terminator)."""
    data = message.encode(ENCODING)
    if len(data) + len(FRAME_TERMINATOR) > max_size:
        raise MessageTooLarge(f"{len(data)} byte payload does not fit a {max_size} byte frame")
    return data + FRAME_TERMINATOR


def decode_msg(data: bytes, max_size: int = BUF_SIZE) -> str:
    """Decode received bytes, stopping at the terminator.

    Without a terminator inside the first ``max_size`` bytes the payload is
    truncated to ``max_size - 1`` bytes instead of failing.
    """
    window = data[:max_size]
    end = window.find(FRAME_TERMINATOR)
    payload = window[:end] if end >= 0 else window[: max_size - 1]
    return payload.decode(ENCODING, errors="replace")


def _recv_exactly(sock: socket.socket, size: int) -> bytes:
    """Receive up to ``size`` bytes, returning early only if the peer closes."""
    buf = bytearray()
    while len(buf) < size:
        try:
            chunk = sock.recv(size - len(buf))
        except OSError as exc:
            logger.debug("recv failed: %s", exc)
            break
        if not chunk:
            break
        buf += chunk
    return bytes(buf)


class FrameCodec:
    """Interface shared by the wire codecs."""

    name = ""

    def __init__(self, max_size: int = BUF_SIZE) -> None:
        self.max_size = max_size

    def encode(self, message: str) -> bytes:
        raise NotImplementedError

    def decode(self, data: bytes) -> str:
        raise NotImplementedError

    def read_frame(self, sock: socket.socket) -> Optional[bytes]:
        """Block until one frame is read. ``None`` means the peer closed first."""
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(max_size={self.max_size})"


class SentinelCodec(FrameCodec):
    """Payload followed by a single 0x00 byte, inside a fixed-size buffer."""

    name = "sentinel"

    def encode(self, message: str) -> bytes:
        return encode_msg(message, self.max_size)

    def decode(self, data: bytes) -> str:
        return decode_msg(data, self.max_size)

    def read_frame(self, sock: socket.socket) -> Optional[bytes]:
        """Read up to the first chunk holding a terminator, capped at ``max_size``.

        Only one request is in flight per connection, so bytes that arrive after
        the terminator in that same chunk are not kept for the next call.
        """
        buf = bytearray()
        while len(buf) < self.max_size:
            try:
                chunk = sock.recv(self.max_size - len(buf))
            except OSError as exc:
                logger.debug("recv failed: %s", exc)
                break
            if not chunk:
                break
            buf += chunk
            if FRAME_TERMINATOR in chunk:
                break
        return bytes(buf) if buf else None


class LengthPrefixedCodec(FrameCodec):
    """4-byte big-endian length header + payload; oversized frames are rejected."""

    name = "length"

    @property
    def max_payload(self) -> int:
        return self.max_size - LENGTH_HEADER_SIZE

    def encode(self, message: str) -> bytes:
        data = message.encode(ENCODING)
        if len(data) > self.max_payload:
            raise MessageTooLarge(f"{len(data)} byte payload exceeds limit of {self.max_payload}")
        return len(data).to_bytes(LENGTH_HEADER_SIZE, "big") + data

    def decode(self, data: bytes) -> str:
        if len(data) < LENGTH_HEADER_SIZE:
            raise ConnectionClosed("Incomplete frame header")
        length = self._check_length(data[:LENGTH_HEADER_SIZE])
        payload = data[LENGTH_HEADER_SIZE : LENGTH_HEADER_SIZE + length]
        if len(payload) != length:
            raise ConnectionClosed("Frame payload truncated")
        return payload.decode(ENCODING, errors="replace")

    def read_frame(self, sock: socket.socket) -> Optional[bytes]:
        header = _recv_exactly(sock, LENGTH_HEADER_SIZE)
        if not header:
            return None
        if len(header) != LENGTH_HEADER_SIZE:
            raise ConnectionClosed("Peer closed inside frame header")
        length = self._check_length(header)
        payload = _recv_exactly(sock, length)
        if len(payload) != length:
            raise ConnectionClosed("Peer closed inside frame payload")
        return header + payload

    def _check_length(self, header: bytes) -> int:
        length = int.from_bytes(header, "big")
        if length > self.max_payload:
            raise MessageTooLarge(f"Announced length {length} exceeds limit of {self.max_payload}")
        return length


CODECS: Dict[str, Type[FrameCodec]] = {
    SentinelCodec.name: SentinelCodec,
    LengthPrefixedCodec.name: LengthPrefixedCodec,
}


def build_codec(name: str = SentinelCodec.name, max_size: int = BUF_SIZE) -> FrameCodec:
    """Instantiate the codec registered under ``name``."""
    try:
        codec_cls = CODECS[name]
    except KeyError:
        raise ValueError(f"Unknown framing {name!r}; expected one of {sorted(CODECS)}") from None
    if max_size <= LENGTH_HEADER_SIZE:
        raise ValueError(f"max_size must be larger than {LENGTH_HEADER_SIZE}")
    return codec_cls(max_size)


__all__ = [
    "encode_msg",
    "decode_msg",
    "FrameCodec",
    "SentinelCodec",
    "LengthPrefixedCodec",
    "CODECS",
    "build_codec",
]
