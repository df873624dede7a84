"""Logging setup shared by the API and the ops scripts."""

import logging

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_HANDLER_NAME = "oficinas"


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Attach a single stream handler to the root logger.

    Calling it again only updates the level, so app reloads and test clients
    do not stack duplicate handlers.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)

    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        root.addHandler(handler)

    return root
