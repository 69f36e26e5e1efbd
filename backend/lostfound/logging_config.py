import logging
import logging.config


def build_dict_config(level: str = "INFO") -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
            },
        },
        "loggers": {
            "lostfound": {
                "handlers": ["console"],
                "level": level,
                "propagate": True,
            },
            # SQL echo stays off unless explicitly raised
            "sqlalchemy.engine": {
                "level": "WARNING",
            },
        },
    }


def setup_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(build_dict_config(level.upper()))
