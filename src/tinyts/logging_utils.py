"""Opt-in logging for applications embedding tinyts.

The library logs through loguru and disables its own logger on import;
`configure_logging` turns it back on with a stderr sink.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from loguru import logger

from tinyts.config.settings import load_settings

_FORMAT = "{time:HH:mm:ss.SSS} | {level:<7} | {name}:{line} | {message}"
_configured_sink: int | None = None


class InterceptHandler(logging.Handler):
    """Route stdlib logging records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def parse_log_filter(value: str) -> tuple[str, dict[str | None, str | bool]]:
    """Parse a TINYTS_LOG_FILTER value into a level and a loguru module filter.

    "debug,tinyts.core.equiv=info,tinyts.core.subst=false" logs everything
    at DEBUG, the equivalence engine from INFO up and substitution not at all.
    """
    level = "info"
    modules: dict[str | None, str | bool] = {}
    for part in (p.strip() for p in value.lower().split(",")):
        if not part:
            continue
        module, sep, module_level = part.partition("=")
        if not sep:
            level = part
        elif module_level.strip() == "false":
            modules[module.strip()] = False
        else:
            modules[module.strip()] = module_level.strip().upper()
    return level, modules


def configure_logging(*, log_filter: str | None = None, sink: TextIO = sys.stderr) -> None:
    """Enable tinyts logging on sink, replacing any sink installed by an earlier call.

    log_filter defaults to the TINYTS_LOG_FILTER setting.
    """
    global _configured_sink

    if log_filter is None:
        log_filter = load_settings().log_filter
    level, modules = parse_log_filter(log_filter)

    if _configured_sink is not None:
        logger.remove(_configured_sink)
    _configured_sink = logger.add(
        sink,
        level=level.upper(),
        format=_FORMAT,
        filter=modules,
        backtrace=False,
        diagnose=False,
    )
    logger.enable("tinyts")

    root = logging.getLogger()
    if not any(isinstance(h, InterceptHandler) for h in root.handlers):
        root.addHandler(InterceptHandler())
