import logging
import os
from logging.handlers import RotatingFileHandler

from faucet_relay.config import LogConfig

_LOGGER_NAME = "faucet_relay"


def init(config: LogConfig) -> logging.Logger:
    """
    Send the relay's logs to stderr and to a rotating file under ``config.dir``.

    Handlers installed by an earlier call are replaced, not stacked.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    os.makedirs(config.dir, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(config.dir, config.filename),
        encoding="utf-8",
        delay=True,
        maxBytes=20 * 1024 * 1024,
        backupCount=3,
    )
    stream_handler = logging.StreamHandler()

    formatter = logging.Formatter(
        "[{asctime}] [{levelname:<8}] {name}: {message}",
        "%Y-%m-%d %H:%M:%S",
        style="{",
    )
    for handler in (stream_handler, file_handler):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(config.level)
    return logger
