"""Logging setup for the xborrow CLI: colored level names on stderr."""

import logging
import sys

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVEL_STYLES = {
    TRACE: "90",
    logging.DEBUG: "36",
    logging.INFO: "32",
    logging.WARNING: "33",
    logging.ERROR: "31",
    logging.CRITICAL: "35",
}

# Chatty transport loggers, silenced unless TRACE is requested
_NOISY = ("web3", "urllib3")


class LevelColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        style = _LEVEL_STYLES.get(record.levelno)
        if style is None:
            return super().format(record)
        plain = record.levelname
        record.levelname = f"\033[1;{style}m{plain}\033[0m"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def setup_logging(log_level: str = "INFO") -> None:
    """Route the root logger to stderr at ``log_level``.

    stdout is left alone so ``--format json`` output stays parseable.
    """
    name = log_level.upper()
    level = TRACE if name == "TRACE" else logging.getLevelName(name)
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        LevelColorFormatter("%(asctime)s %(levelname)s [%(name)s] %(message)s", "%H:%M:%S")
    )
    logging.basicConfig(level=level, handlers=[handler], force=True)

    for noisy in _NOISY:
        logging.getLogger(noisy).setLevel(TRACE if level == TRACE else logging.WARNING)
