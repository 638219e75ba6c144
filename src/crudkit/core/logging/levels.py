"""
Custom TRACE level (below DEBUG) for fine-grained entry/exit observations.

Registered with `logging.addLevelName` at import time, so `LOG_LEVEL=TRACE`
works in dictConfig and formatters print "TRACE".
"""
import logging

TRACE = 5

logging.addLevelName(TRACE, "TRACE")


def trace(logger: logging.Logger, msg: str, *args, **kwargs) -> None:
    """Log `msg` at TRACE level on `logger` (no-op when TRACE is disabled)."""
    if logger.isEnabledFor(TRACE):
        logger.log(TRACE, msg, *args, **kwargs)


__all__ = ["TRACE", "trace"]
