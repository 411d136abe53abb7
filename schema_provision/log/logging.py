"""
Loguru logger setup.

Structured context passed as keyword arguments (``event_type=...``) ends up in
``record["extra"]`` and is rendered in both the JSON and the console format.
"""

import sys

from loguru import logger

from schema_provision.core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[app_name]}</cyan> | "
    "<level>{message}</level> | {extra}"
)


def configure_logging(config: dict | None = None) -> None:
    """
    Replace the default loguru sink with one built from the logging config.

    Args:
        config: Logging configuration, defaults to ``settings.logging_config``.
    """
    config = config or settings.logging_config

    logger.remove()
    logger.configure(extra={"app_name": config["app_name"]})

    if config["json_logs"]:
        logger.add(
            sys.stderr,
            level=config["log_level"],
            serialize=True,
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stderr,
            level=config["log_level"],
            format=CONSOLE_FORMAT,
            colorize=True,
        )


configure_logging()

__all__ = ["logger", "configure_logging"]
