from __future__ import annotations

import logging
import sys
from typing import Iterable, List, Optional

from client.config import load_config
from client.core import Connector
from shared.settings import load_settings


def run_client(messages: Iterable[str]) -> List[str]:
    settings = load_settings()
    config = load_config()
    logging.basicConfig(level=config["log_level"])

    replies: List[str] = []
    with Connector(
        config["server_host"],
        config["server_port"],
        max_trials=config["max_trials"],
        retry_interval=config["retry_interval"],
        codec=settings.codec(),
    ) as connector:
        for message in messages:
            reply = connector.request(message)
            print(reply)
            replies.append(reply)
    return replies


def main(argv: Optional[List[str]] = None) -> None:
    args = sys.argv[1:] if argv is None else argv
    messages = args or (line.rstrip("\n") for line in sys.stdin)
    run_client(messages)


if __name__ == "__main__":
    main()
