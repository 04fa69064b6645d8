from __future__ import annotations

import os
from typing import Any, Dict

from shared.protocol.constants import DEFAULT_BACKLOG, DEFAULT_MAX_CONNECTIONS

DEFAULT_SERVER_CONFIG: Dict[str, Any] = {
    "host": "0.0.0.0",
    "port": 9000,
    "backlog": DEFAULT_BACKLOG,
    "max_connections": DEFAULT_MAX_CONNECTIONS,
    "log_level": "INFO",
}

SERVER_CONFIG = DEFAULT_SERVER_CONFIG.copy()


def load_server_config() -> Dict[str, Any]:
    SERVER_CONFIG["host"] = os.getenv("SERVER_HOST", SERVER_CONFIG["host"])
    SERVER_CONFIG["port"] = int(os.getenv("SERVER_PORT", SERVER_CONFIG["port"]))
    SERVER_CONFIG["backlog"] = int(os.getenv("SERVER_BACKLOG", SERVER_CONFIG["backlog"]))
    SERVER_CONFIG["max_connections"] = int(os.getenv("SERVER_MAX_CONNECTIONS", SERVER_CONFIG["max_connections"]))
    SERVER_CONFIG["log_level"] = os.getenv("SERVER_LOG_LEVEL", SERVER_CONFIG["log_level"])
    return SERVER_CONFIG


__all__ = ["SERVER_CONFIG", "DEFAULT_SERVER_CONFIG", "load_server_config"]
