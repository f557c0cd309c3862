from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"


class _QuietThirdPartyFilter(logging.Filter):
    """Keep vita logs, let uvicorn through, drop chatty libraries below WARNING."""

    def filter(self, record: logging.LogRecord) -> bool:
        name = record.name
        if name.startswith("vita") or name.startswith("uvicorn"):
            return True
        return record.levelno >= logging.WARNING


def setup_logging(level: str | int = logging.INFO) -> None:
    """
    Configure the root logger with a single stderr handler.

    Safe to call more than once: only the handler installed by a previous
    call is replaced, so building several apps (tests) neither duplicates
    output nor drops handlers installed by someone else.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        if getattr(h, "_vita_handler", False):
            root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(_QuietThirdPartyFilter())
    handler._vita_handler = True  # type: ignore[attr-defined]
    root.addHandler(handler)

    logging.captureWarnings(True)
