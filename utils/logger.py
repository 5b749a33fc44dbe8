"""
Logging setup shared by the server, the game engine and the scripts
"""
import logging
from config.settings import LOG_LEVEL

# Root logger for the project packages
logger = logging.getLogger('photo_bluff')
logger.setLevel(LOG_LEVEL)
logger.propagate = False

# Console handler
handler = logging.StreamHandler()
handler.setLevel(LOG_LEVEL)

# Log format
formatter = logging.Formatter(
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
handler.setFormatter(formatter)
if not logger.handlers:
    logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger nested under the project logger

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger
    """
    return logger.getChild(name)
