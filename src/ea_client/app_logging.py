"""Logging configuration helpers."""

import logging

_LOGGER_NAME = "ea_client"


def configure_logging(level: str = "INFO") -> None:
    """Route ``ea_client`` loggers to one stream handler at ``level``.

    Calling it again only changes the level, so app factories built in
    tests do not stack handlers.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
