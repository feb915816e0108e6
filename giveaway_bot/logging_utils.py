from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    # gateway chatter drowns out the sweep logs
    logging.getLogger("discord").setLevel(logging.WARNING)


__all__ = ["LOG_FORMAT", "configure_logging"]
