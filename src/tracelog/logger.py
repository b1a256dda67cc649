import logging
import sys

from tracelog.env import TRACELOG_LOG_LEVEL, TRACELOG_NO_COLOR

RESET = "\033[0m"
RED = "\033[31m"
YELLOW = "\033[33m"
GRAY = "\033[90m"


class ColorFormatter(logging.Formatter):
    COLORS = {
        logging.DEBUG: GRAY,
        logging.INFO: GRAY,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: RED,
    }

    def __init__(self, fmt=None, datefmt=None, use_color=True):
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record):
        message = super().format(record)
        if self.use_color:
            color = self.COLORS.get(record.levelno, "")
            if color:
                message = f"{color}{message}{RESET}"
        return message


def _setup_tracelog_logger() -> logging.Logger:
    logger = logging.getLogger("tracelog")
    if logger.handlers:
        return logger

    use_color = sys.stdout.isatty() and TRACELOG_NO_COLOR is None
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(TRACELOG_LOG_LEVEL.upper())
    handler.setFormatter(
        ColorFormatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            use_color=use_color,
        )
    )

    logger.setLevel(TRACELOG_LOG_LEVEL.upper())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


tracelog_logger = _setup_tracelog_logger()

__all__ = ("tracelog_logger", "ColorFormatter")
