import sys
from pathlib import Path
from typing import Optional

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(debug_mode: bool = True, log_dir: Optional[str] = "logs"):
    """
    Route loguru output to stderr and, when log_dir is given, to a
    rotating file in that directory.
    """
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if debug_mode else "INFO", format=CONSOLE_FORMAT)

    if log_dir:
        folder = Path(log_dir)
        folder.mkdir(parents=True, exist_ok=True)
        logger.add(folder / "navigator_{time}.log", rotation="10 MB", retention="1 week", level="DEBUG")

    logger.info(f"Logging initialized (debug={debug_mode}, dir={log_dir})")
