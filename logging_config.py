# logging_config.py
import logging.config
import sys

from config import get_settings


def build_logging_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": sys.stdout,
            },
        },
        "loggers": {
            # uvicorn ставит свои хендлеры, не дублируем
            "uvicorn.access": {"level": "WARNING"},
        },
        "root": {
            "handlers": ["console"],
            "level": level.upper(),
        },
    }


def configure_logging(level: str | None = None) -> logging.Logger:
    """Configure the root logger for the application."""
    logging.config.dictConfig(build_logging_config(level or get_settings().log_level))
    logger = logging.getLogger(__name__)
    logger.debug("Logging configured")
    return logger
