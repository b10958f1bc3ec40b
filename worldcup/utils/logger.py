import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from worldcup.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def log_file_path(day: Optional[date] = None) -> Path:
    """Daily log file under Config.LOG_DIR"""
    day = day or date.today()
    return Path(Config.LOG_DIR) / f'world_cup_{day:%Y%m%d}.log'


def setup_logger(name: str) -> logging.Logger:
    """
    Get a logger for a module of the board.

    Messages go to stderr so they never mix with table output on stdout.
    When LOG_TO_FILE is set, everything from DEBUG up is also written to the
    daily log file. Handlers are attached once per logger name.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    console_level = logging.DEBUG if Config.DEBUG else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if Config.LOG_TO_FILE:
        path = log_file_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(console_level)

    logger.propagate = False
    return logger
