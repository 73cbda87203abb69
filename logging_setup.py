# -*- coding: utf-8 -*-
########################
# logging_setup.py
########################
# Purpose:
# - Configure the loguru sink for command line entrypoints.
#
# Design notes:
# - Library modules only call loguru.logger; they never add or remove sinks.
# - Output goes to stderr so JSON on stdout stays machine readable.
#
########################

from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str = "INFO", *, colorize: bool = True) -> int:
    """Replace loguru's default sink with a single stderr sink. Returns the new sink id."""
    logger.remove()
    return logger.add(sys.stderr, level=str(level).upper(), format=LOG_FORMAT, colorize=colorize)
