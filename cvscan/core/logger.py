import logging
import sys

from cvscan.core.config import Settings

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(settings: Settings) -> None:
    """Configure application logging once at startup."""
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    app_logger = logging.getLogger("cvscan")
    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        app_logger.addHandler(handler)
        app_logger.propagate = False

    # Diagnostics mode forces debug output for prompt/model tracing
    app_logger.setLevel(logging.DEBUG if settings.DEBUG_EXTRACTION else level)

    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
