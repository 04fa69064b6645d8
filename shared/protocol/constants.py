"""Protocol-wide constants shared by client and server."""

ENCODING = "utf-8"
BUF_SIZE = 1024  # wire capacity of one message, terminator included
FRAME_TERMINATOR = b"\x00"
LENGTH_HEADER_SIZE = 4
QUIT_PAYLOAD = "Quit"
DEFAULT_BACKLOG = 10
DEFAULT_MAX_TRIALS = 16
DEFAULT_RETRY_INTERVAL = 1.0  # seconds
DEFAULT_MAX_CONNECTIONS = 0  # 0 disables the concurrency gate

__all__ = [
    "ENCODING",
    "BUF_SIZE",
    "FRAME_TERMINATOR",
    "LENGTH_HEADER_SIZE",
    "QUIT_PAYLOAD",
    "DEFAULT_BACKLOG",
    "DEFAULT_MAX_TRIALS",
    "DEFAULT_RETRY_INTERVAL",
    "DEFAULT_MAX_CONNECTIONS",
]
