"""Run logging for network simulations.

Network construction, connectivity generation and each `run` report to
stdout through these loggers: a ruled header with the `brunelnet:<name>`
prefix, the level and the wall-clock time, then the message. An extra
stream can mirror the output, for example a log file kept next to a long
full-scale run.

Usage:
    from brunelnet.utils import get_logger
    log = get_logger("network")
    log.info("Running %d steps (%.1f ms) from step %d", 1000, 100.0, 0)
"""

from datetime import datetime
from functools import partial
import sys


LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
RULE = "_" * 72


def _render(msg, args):
    """Apply %-style arguments; messages that do not format are kept as is."""
    if not args:
        return msg
    try:
        return msg % args
    except (TypeError, ValueError):
        return msg


def get_logger(name, out=None):
    """Create a print-based logger for one part of a simulation run.

    Parameters
    ----------
    name : str
        Component name, shown as `brunelnet:<name>` in every header.
    out : file-like, optional
        Additional output stream, e.g. an open run log.

    Returns
    -------
    callable
        `log(level, msg, *args)`, with .debug, .info, .warning and .error
        shortcuts.
    """
    prefix = f"brunelnet:{name}"
    outputs = [sys.stdout] + ([out] if out else [])

    def log(level, msg, *args):
        stamp = datetime.now().strftime("%H:%M:%S")
        text = _render(msg, args)
        for dest in outputs:
            print(RULE, file=dest)
            print(f"{prefix} {level} [{stamp}]", file=dest)
            print(text, file=dest)

    for level in LEVELS:
        setattr(log, level.lower(), partial(log, level))

    return log
