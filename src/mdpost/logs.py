"""Console logging setup for the CLI"""

import logging
import logging.config


def configure_logging(level: str = "WARNING") -> None:
    """Route all mdpost loggers to stderr at the given level."""
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": "%(asctime)s %(levelname)-8s %(name)s: %(message)s"},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "mdpost": {"level": level.upper(), "handlers": ["console"], "propagate": False},
        },
    })
