"""Logging configuration for the scheduling engine and its CLI."""
import logging
import logging.handlers
from pathlib import Path
from bim4d.config.settings import settings

LOG_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(message)s'
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _rotating_file_handler(name: str) -> logging.Handler:
    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        log_dir / f'{name}.log',
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding='utf-8',
    )


def configure_logging(name: str, level: str = None) -> logging.Logger:
    """
    Configure logging for a module or entry point.

    Console output always; a rotating file under settings.LOG_DIR only when
    that directory is configured. Calling again only updates the level.

    Args:
        name: Logger name (typically __name__ or the package name)
        level: Level name overriding settings.LOG_LEVEL

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level or settings.LOG_LEVEL)
    if logger.handlers:
        return logger

    handlers = [logging.StreamHandler()]
    if settings.LOG_DIR:
        handlers.append(_rotating_file_handler(name))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
