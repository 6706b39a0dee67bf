"""Logging setup for processes embedding the progression core."""
from __future__ import annotations

from typing import TextIO
import logging
import sys

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str | int = "INFO", stream: TextIO | None = None) -> logging.Logger:
    """
    Attach a handler to the ``gangcore`` logger namespace.

    Logs go to stdout unless another stream is given. Calling again
    reuses the handler and points it at the new stream.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    stream = stream if stream is not None else sys.stdout

    root = logging.getLogger("gangcore")
    root.setLevel(level)
    for handler in root.handlers:
        if getattr(handler, "_gangcore", False):
            handler.setStream(stream)
            break
    else:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._gangcore = True
        root.addHandler(handler)
    return root


__all__ = ["configure_logging", "LOG_FORMAT"]
