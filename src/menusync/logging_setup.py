"""Loguru configuration shared by the MCP server and scheduled jobs."""

from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | <level>{message}</level>"
)


def configure_logging(level: str = "INFO") -> int:
    """Replace loguru's default handler with a single stderr sink.

    stdout is left untouched because the stdio MCP transport writes protocol
    frames there. Returns the id of the installed handler.
    """
    logger.remove()
    logger.configure(extra={"component": "menusync"})
    return logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
