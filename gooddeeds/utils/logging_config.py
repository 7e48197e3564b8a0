import logging
from logging.config import dictConfig

from gooddeeds.core.config import LOG_JSON, LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str | None = None, json_logs: bool | None = None):
    formatter = "json" if (LOG_JSON if json_logs is None else json_logs) else "default"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": LOG_FORMAT,
                },
                "json": {  # structured logs for prod
                    "format": '{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": formatter,
                },
            },
            "root": {
                "level": (level or LOG_LEVEL).upper(),
                "handlers": ["console"],
            },
            # realtime client is chatty at INFO
            "loggers": {
                "realtime": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
            },
        }
    )
    logging.getLogger(__name__).debug(f"logging_configured formatter={formatter}")
