"""
Loguru configuration.

Request trace ids are not bound onto loggers: LoggingMiddleware wraps each
request in ``logger.contextualize(trace_id=...)``, so module-level loggers
created at import time still tag their records with the current request.
Records written outside a request carry the ``system`` trace id.
"""

import sys
from pathlib import Path
from loguru import logger
from framework.config import settings

LOG_DIR = Path(settings.LOG_DIR)
LOG_DIR.mkdir(parents=True, exist_ok=True)

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan> | "
    "<magenta>Trace:{extra[trace_id]}</magenta> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[name]} | Trace:{extra[trace_id]} - {message}"


class LogConfig:
    """Sinks: stdout, a daily application file and an error file under LOG_DIR."""

    @classmethod
    def setup_logging(cls, level: str = "INFO"):
        logger.remove()
        logger.configure(extra={"trace_id": "system", "name": "app"})

        logger.add(
            sys.stdout,
            enqueue=True,
            backtrace=True,
            diagnose=settings.DEBUG,
            format=CONSOLE_FORMAT,
            level=level,
        )
        logger.add(
            LOG_DIR / "app_{time:YYYY-MM-DD}.log",
            rotation="00:00",
            retention="30 days",
            compression="zip",
            enqueue=True,
            format=FILE_FORMAT,
            level="DEBUG",
        )
        logger.add(
            LOG_DIR / "error_{time:YYYY-MM-DD}.log",
            rotation="100 MB",
            retention="30 days",
            enqueue=True,
            format=FILE_FORMAT,
            level="ERROR",
        )


def get_logger(name: str = None):
    """Logger tagged with a component name; the trace id comes from the request context."""
    if name:
        return logger.bind(name=name)
    return logger
