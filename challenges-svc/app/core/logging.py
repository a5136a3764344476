from __future__ import annotations
import logging.config

from .config import Settings

def configure_logging(settings: Settings) -> None:
    level = settings.log_level.upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
        },
        "handlers": {
            "console": {"class": "logging.StreamHandler", "formatter": "default", "level": level},
        },
        "root": {"handlers": ["console"], "level": level},
    })
