import logging
import sys
from typing import TextIO

from .config import settings

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s %(funcName)s():%(lineno)d - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


class _LevelColorFormatter(logging.Formatter):
    _PALETTE = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[1;35m',
    }

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)
        color = self._PALETTE.get(record.levelno)
        if not color:
            return formatted
        return formatted.replace(f'[{record.levelname}]', f'[{color}{record.levelname}\033[0m]', 1)


def setup_logging(level: int | str | None = None, stream: TextIO | None = None) -> None:
    """Route all ssimschedule loggers to one console handler.

    Level defaults to LOG_LEVEL from the settings. Colours only when the stream is a TTY.
    """
    if level is None:
        level = settings.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    stream = stream or sys.stdout
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    is_tty = hasattr(stream, 'isatty') and stream.isatty()
    formatter_cls = _LevelColorFormatter if is_tty else logging.Formatter
    handler.setFormatter(formatter_cls(LOG_FORMAT, datefmt=DATE_FORMAT))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
