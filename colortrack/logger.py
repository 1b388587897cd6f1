import logging
import sys
from typing import Optional

from colortrack.config import LoggingConfig

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """
    Module loggers live under the "colortrack" namespace so one call to
    setup_logging() controls all of them.
    """
    if not name.startswith("colortrack"):
        name = f"colortrack.{name}"
    return logging.getLogger(name)


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    config = config or LoggingConfig()

    handlers = [logging.StreamHandler(sys.stdout)]
    if config.log_path is not None:
        config.log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.log_path, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, str(config.level).upper(), logging.INFO),
        format=_FORMAT,
        handlers=handlers,
        force=True,
    )
    return logging.getLogger("colortrack")
