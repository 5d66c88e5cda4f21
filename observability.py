import logging
import os

from pythonjsonlogger import jsonlogger


def setup_logging(level=None):
    """Send root logging to stderr as JSON lines."""
    level = (level or os.environ.get('LOG_LEVEL', 'INFO')).upper()
    logger = logging.getLogger()
    logger.setLevel(level)
    # Clear default handlers
    logger.handlers = []
    handler = logging.StreamHandler()
    handler.setFormatter(jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s'))
    logger.addHandler(handler)
