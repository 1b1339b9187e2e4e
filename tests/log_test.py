import logging
import os

from faucet_relay import log
from faucet_relay.config import LogConfig


def test_log_init(tmp_path):
    config = LogConfig(dir=str(tmp_path / "logs"), level="DEBUG", filename="relay.log")

    logger = log.init(config)
    try:
        assert logger.name == "faucet_relay"
        assert logger.level == logging.DEBUG

        # a second init replaces the handlers of the first one
        logger = log.init(config)
        assert len(logger.handlers) == 2

        logging.getLogger("faucet_relay.claim.service").info("claim received")
        for handler in logger.handlers:
            handler.flush()

        with open(os.path.join(config.dir, "relay.log"), mode="r", encoding="utf-8") as f:
            content = f.read()
        assert "faucet_relay.claim.service: claim received" in content
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
