from __future__ import annotations
import sys
from loguru import logger
from .paths import logs_dir

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{line} | {message}"

def configure_logging(level: str = "INFO") -> None:
    """Server-wide sinks: a rotating file that keeps everything, and stderr filtered at `level`."""
    logger.remove()
    logger.add(
        str(logs_dir() / "linecross.log"),
        level="DEBUG",
        format=LOG_FORMAT,
        rotation="5 MB",
        retention=10,
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
