import logging
import sys

from agrocoop.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = None) -> None:
    """Configure the root logger once at application start-up."""
    root = logging.getLogger()
    root.setLevel((level or settings.LOG_LEVEL).upper())

    # uvicorn --reload imports the app twice; don't stack handlers
    if any(getattr(h, "_agrocoop", False) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._agrocoop = True
    root.addHandler(handler)
