import logging
import logging.config
import os
from typing import Any, Dict, Optional

DEFAULT_LOG_DIR = "logs"

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] [%(filename)s:%(lineno)d] %(message)s"

def _rotating_file(level: str, filename: str) -> Dict[str, Any]:
    return {
        "level": level,
        "class": "logging.handlers.TimedRotatingFileHandler",
        "filename": filename,
        "when": "midnight",
        "interval": 1,
        "backupCount": 30,
        "encoding": "utf-8",
        "formatter": "standard",
    }

def build_logging_config(log_dir: str) -> Dict[str, Any]:
    """
    Console at INFO, everything to isim.log, errors also to isim.error.log.
    Both files rotate at midnight and keep 30 days.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {"format": LOG_FORMAT, "datefmt": "%Y-%m-%d %H:%M:%S"},
        },
        "handlers": {
            "console": {
                "level": "INFO",
                "class": "logging.StreamHandler",
                "formatter": "standard",
            },
            "file_app": _rotating_file("DEBUG", os.path.join(log_dir, "isim.log")),
            "file_error": _rotating_file("ERROR", os.path.join(log_dir, "isim.error.log")),
        },
        "root": {
            "handlers": ["console", "file_app", "file_error"],
            "level": "DEBUG",
        },
    }

_configured = False

def setup_logging(log_dir: Optional[str] = None):
    """
    Apply the logging configuration.
    log_dir defaults to the LOG_DIR environment variable, then ./logs.
    """
    global _configured
    log_dir = log_dir or os.environ.get("LOG_DIR", DEFAULT_LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)
    logging.config.dictConfig(build_logging_config(log_dir))
    _configured = True

def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with standard configuration."""
    # Configure once, unless a host (pytest, uvicorn) already installed handlers
    if not _configured and not logging.getLogger().handlers:
        setup_logging()

    return logging.getLogger(name)
