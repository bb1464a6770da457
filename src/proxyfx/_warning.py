"""Diagnostics channel. Warnings are logged, never raised."""

import logging

logger = logging.getLogger("proxyfx")


def warn(msg: str, *args: object) -> None:
    logger.warning(msg, *args)
