from __future__ import annotations

import socket

import pytest

from shared.protocol import (
    BUF_SIZE,
    FRAME_TERMINATOR,
    ConnectionClosed,
    ErrorCode,
    LengthPrefixedCodec,
    MessageTooLarge,
    SentinelCodec,
    build_codec,
    decode_msg,
    encode_msg,
)


@pytest.fixture
def pair():
    left, right = socket.socketpair()
    yield left, right
    left.close()
    right.close()


def test_encode_appends_single_terminator():
    assert encode_msg("ping") == b"ping\x00"
    assert encode_msg("") == FRAME_TERMINATOR


@pytest.mark.parametrize("message", ["ping", "", "héllo wörld", "x" * (BUF_SIZE - 2)])
def test_encode_decode_roundtrip(message):
    assert decode_msg(encode_msg(message)) == message


def test_largest_payload_fits_exactly():
    data = encode_msg("a" * (BUF_SIZE - 1))
    assert len(data) == BUF_SIZE
    assert decode_msg(data) == "a" * (BUF_SIZE - 1)


def test_encode_rejects_oversized_payload():
    with pytest.raises(MessageTooLarge) as info:
        encode_msg("a" * BUF_SIZE)
    assert info.value.code == ErrorCode.MESSAGE_TOO_LARGE


def test_decode_truncates_without_terminator():
    decoded = decode_msg(b"a" * BUF_SIZE)
    assert decoded == "a" * (BUF_SIZE - 1)
    assert "\x00" not in decoded


def test_decode_never_reads_past_capacity():
    assert len(decode_msg(b"b" * (BUF_SIZE * 2))) == BUF_SIZE - 1
    assert decode_msg(b"c" * BUF_SIZE + b"\x00") == "c" * (BUF_SIZE - 1)


def test_decode_stops_at_first_terminator():
    assert decode_msg(b"abc\x00def\x00") == "abc"


def test_sentinel_read_frame_accumulates_chunks(pair):
    left, right = pair
    right.sendall(b"he")
    right.sendall(b"llo\x00")
    assert SentinelCodec().read_frame(left) == b"hello\x00"


def test_sentinel_read_frame_returns_none_when_peer_closed(pair):
    left, right = pair
    right.close()
    assert SentinelCodec().read_frame(left) is None


def test_sentinel_read_frame_keeps_partial_message_on_close(pair):
    left, right = pair
    right.sendall(b"partial")
    right.close()
    codec = SentinelCodec()
    assert codec.decode(codec.read_frame(left)) == "partial"


def test_sentinel_read_frame_stops_at_capacity(pair):
    left, right = pair
    codec = SentinelCodec(max_size=8)
    right.sendall(b"0123456789abcdef")
    raw = codec.read_frame(left)
    assert raw == b"01234567"
    assert codec.decode(raw) == "0123456"


def test_length_codec_frames_over_socket(pair):
    left, right = pair
    codec = LengthPrefixedCodec()
    right.sendall(codec.encode("with\x00nul inside"))
    raw = codec.read_frame(left)
    assert raw[:4] == (len("with\x00nul inside")).to_bytes(4, "big")
    assert codec.decode(raw) == "with\x00nul inside"


def test_length_codec_rejects_oversized_payload():
    codec = LengthPrefixedCodec(max_size=16)
    assert codec.decode(codec.encode("x" * 12)) == "x" * 12
    with pytest.raises(MessageTooLarge):
        codec.encode("x" * 13)


def test_length_codec_rejects_oversized_announcement(pair):
    left, right = pair
    right.sendall((10_000).to_bytes(4, "big"))
    with pytest.raises(MessageTooLarge):
        LengthPrefixedCodec().read_frame(left)


def test_length_codec_detects_truncated_frame(pair):
    left, right = pair
    right.sendall((10).to_bytes(4, "big") + b"abc")
    right.close()
    with pytest.raises(ConnectionClosed):
        LengthPrefixedCodec().read_frame(left)


def test_length_codec_returns_none_on_clean_close(pair):
    left, right = pair
    right.close()
    assert LengthPrefixedCodec().read_frame(left) is None


def test_build_codec():
    assert isinstance(build_codec(), SentinelCodec)
    codec = build_codec("length", 64)
    assert isinstance(codec, LengthPrefixedCodec)
    assert codec.max_size == 64
    with pytest.raises(ValueError):
        build_codec("json")
    with pytest.raises(ValueError):
        build_codec("sentinel", 4)


def test_sentinel_read_frame_drops_bytes_after_terminator(pair):
    left, right = pair
    codec = SentinelCodec()
    right.sendall(b"first\x00trailing")
    assert codec.decode(codec.read_frame(left)) == "first"
    right.close()
    assert codec.read_frame(left) is None
