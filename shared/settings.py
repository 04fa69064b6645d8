from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from shared.protocol.constants import BUF_SIZE
from shared.protocol.framing import FrameCodec, build_codec


@dataclass
class Settings:
    """Shared baseline settings (both client/server build on top)."""

    framing: str = "sentinel"
    max_message_size: int = BUF_SIZE

    def codec(self) -> FrameCodec:
        return build_codec(self.framing, self.max_message_size)


SETTINGS = Settings()


def load_settings(env_path: str = ".env") -> Settings:
    """Load shared settings from env/.env."""
    if Path(env_path).exists():
        load_dotenv(env_path)
    SETTINGS.framing = os.getenv("SOCKET_FRAMING", SETTINGS.framing)
    SETTINGS.max_message_size = int(os.getenv("SOCKET_MAX_MESSAGE_SIZE", SETTINGS.max_message_size))
    return SETTINGS


__all__ = ["Settings", "SETTINGS", "load_settings"]
