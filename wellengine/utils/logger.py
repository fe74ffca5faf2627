import logging
import sys
from pathlib import Path
from typing import Optional

from wellengine.config.settings import LOG_FILE, LOG_LEVEL

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logger(name: str = "wellengine", level: Optional[str] = None, log_file: Optional[str] = None):
    """
    Configures the package root logger once for a process.

    Every module logs through `logging.getLogger(__name__)`, so records from
    `wellengine.health.status`, `wellengine.extract.mongo_source` and the
    rest propagate up to the handlers attached here. The component name is
    part of the line format.

    Args:
        name: Logger to configure. Defaults to the package root.
        level: Level name; falls back to LOG_LEVEL from the environment.
        log_file: Optional path; when set (or LOG_FILE is), records are also
            appended to that file.
    """
    logger = logging.getLogger(name)
    logger.setLevel((level or LOG_LEVEL).upper())

    # Prevent adding duplicate handlers if setup is called multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    log_file = log_file or LOG_FILE
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
