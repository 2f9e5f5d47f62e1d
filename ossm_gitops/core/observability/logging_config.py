"""
Logging for the ``ossm-gitops`` CLI.

Only the ``ossm_gitops`` logger tree is configured.  Its records go to
stderr so that stdout stays clean for ``--json`` output, and they do not
propagate to the root logger of a host application.

Console level comes from the global flags (``--debug`` / ``-v`` / ``-q``),
falling back to ``OSSM_GITOPS_LOG_LEVEL``.  ``OSSM_GITOPS_LOG_FILE`` adds a
timestamped file log with its own level.
"""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "ossm_gitops"

# Console layout per verbosity; anything above INFO prints the bare message
_CONSOLE_FORMATS = {
    logging.DEBUG: "%(levelname)-7s %(name)s:%(lineno)d  %(message)s",
    logging.INFO: "%(levelname)-7s %(message)s",
}
_CONSOLE_DEFAULT = "%(levelname)s: %(message)s"

_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(name)s  %(message)s"


def parse_level(name: str | None) -> int:
    """Map a level name to its number; unknown or empty names mean WARNING."""
    value = logging.getLevelName((name or "WARNING").upper())
    return value if isinstance(value, int) else logging.WARNING


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> logging.Logger:
    """Attach the CLI's handlers to the package logger and return it.

    Calling it again replaces the handlers from the previous call.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    console_level = parse_level(level)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(
        logging.Formatter(_CONSOLE_FORMATS.get(console_level, _CONSOLE_DEFAULT))
    )
    logger.addHandler(console)
    levels = [console_level]

    if log_file:
        file_level = parse_level(log_file_level or level)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT))
        logger.addHandler(file_handler)
        levels.append(file_level)

    logger.setLevel(min(levels))
    return logger
