"""Logging setup for the draft board CLI."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from .schemas import DraftBoardConfig

LOGGER_NAME = 'draftboard'

CONSOLE_FORMAT = '%(levelname)s: %(message)s'
FILE_FORMAT = '%(asctime)s %(levelname)-8s %(name)s [%(filename)s:%(lineno)d] %(message)s'


def setup_logging(
    level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    log_to_file: bool = False,
) -> logging.Logger:
    """
    Attach handlers to the 'draftboard' logger.

    Library modules log under 'draftboard.<module>' and never configure
    handlers themselves; only entry points call this. Calling it again
    replaces the previous handlers.

    Args:
        level: Threshold for both handlers
        log_dir: Where log files go (default: ./logs)
        log_to_file: Also write draftboard_<timestamp>.log

    Returns:
        The configured 'draftboard' logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    # stdout is reserved for command output
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_to_file:
        log_dir = Path(log_dir) if log_dir else Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        file_handler = logging.FileHandler(log_dir / f'draftboard_{stamp}.log', encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    return logger


def setup_logging_from_config(config: DraftBoardConfig, verbose: bool = False) -> logging.Logger:
    """Configure logging from app settings; verbose forces DEBUG."""
    level = logging.DEBUG if verbose else logging.getLevelName(config.log_level)
    return setup_logging(
        level=level,
        log_dir=Path(config.log_dir) if config.log_dir else None,
        log_to_file=config.log_to_file,
    )
