"""Logging configuration for the game_vault package."""

import logging
from logging.handlers import RotatingFileHandler

from rich.logging import RichHandler

from game_vault.config import Settings

LOGGER_NAME = "game_vault"


def setup_logging(settings: Settings, verbose: bool = False) -> logging.Logger:
    """Configure the package logger: rotating file in the data dir, rich console when verbose."""
    level = getattr(logging, settings.log_level, logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Configure once per process
    if logger.handlers:
        return logger

    log_dir = settings.data_dir / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_dir / f"{LOGGER_NAME}.log", maxBytes=2_000_000, backupCount=3, encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(file_handler)

    if verbose:
        # Without --verbose the CLI renders alerts itself
        console_handler = RichHandler(show_path=False)
        console_handler.setLevel(level)
        logger.addHandler(console_handler)

    return logger
