import logging
from typing import Union

def setup_logger(name: str = __name__, level: Union[int, str] = logging.INFO):
    """Configure and return the logger for the stability pipeline.

    Args:
        name: Logger name, defaults to module name
        level: Level applied to the root logger

    Returns:
        Configured logger instance
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logging.getLogger().setLevel(level)
    return logging.getLogger(name)
