from __future__ import annotations

import logging
from typing import Tuple

from server.config import load_server_config
from server.core import Listener, LoggingObserver
from shared.protocol import QUIT_PAYLOAD
from shared.settings import load_settings

logger = logging.getLogger(__name__)


def echo(request: str) -> Tuple[str, bool]:
    """Echo every request back; answer the quit request and end the session."""
    if request == QUIT_PAYLOAD:
        return "Bye", False
    return request, True


def run_server() -> None:
    settings = load_settings()
    config = load_server_config()
    logging.basicConfig(level=config["log_level"])

    listener = Listener(
        config["port"],
        echo,
        host=config["host"],
        backlog=config["backlog"],
        max_connections=config["max_connections"],
        codec=settings.codec(),
        observer=LoggingObserver(),
    )
    try:
        listener.serve_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")


if __name__ == "__main__":
    run_server()
