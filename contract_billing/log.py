import logging

PACKAGE_LOGGER = "contract_billing"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Set the package log level; Lambda already routes the root logger to CloudWatch."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if not logging.getLogger().handlers:
        logging.basicConfig(format="%(levelname)s %(name)s %(message)s")
    return logger
