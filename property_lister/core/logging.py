import logging
import logging.config
from pathlib import Path
from property_lister.core.config import settings

FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

def build_logging_config(level: str = "INFO", log_dir: str | None = None) -> dict:
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "detailed",
            "stream": "ext://sys.stdout"
        }
    }
    if log_dir:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "detailed",
            "filename": str(Path(log_dir) / "app.log"),
            "maxBytes": 10485760,
            "backupCount": 5
        }
        handlers["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "ERROR",
            "formatter": "detailed",
            "filename": str(Path(log_dir) / "error.log"),
            "maxBytes": 10485760,
            "backupCount": 5
        }
    app_handlers = [name for name in handlers if name != "error_file"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "detailed": {"format": FORMAT}
        },
        "handlers": handlers,
        "root": {
            "level": level,
            "handlers": list(handlers)
        },
        "loggers": {
            "property_lister": {
                "level": level,
                "handlers": app_handlers,
                "propagate": False
            },
            "property_lister.services.cache_refresh": {
                "level": "DEBUG",
                "handlers": app_handlers,
                "propagate": False
            },
            "uvicorn.access": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False
            }
        }
    }

def configure_logging(level: str | None = None, log_dir: str | None = None):
    log_dir = log_dir if log_dir is not None else settings.LOG_DIR
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(level or settings.LOG_LEVEL, log_dir))
