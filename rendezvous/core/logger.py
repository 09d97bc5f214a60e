import logging
import sys
from rendezvous.core.config import settings

def setup_logging():
    """
    Configure the "rendezvous" logger and its children.
    """
    logger = logging.getLogger("rendezvous")
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    logger.setLevel(level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    handler.setFormatter(formatter)

    if not logger.handlers:
        logger.addHandler(handler)

    return logger

logger = setup_logging()

def get_logger(name: str) -> logging.Logger:
    # Child loggers propagate to the configured "rendezvous" handler
    return logger.getChild(name)
