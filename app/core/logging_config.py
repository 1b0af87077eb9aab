"""Logging setup shared by the API process and the admin scripts."""
import logging
import sys

from app.core.settings import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str | None = None) -> logging.Logger:
    """Configure the root handler once and return the application logger."""
    level_name = (level or settings.log_level).upper()
    root = logging.getLogger()
    if not any(getattr(h, "_wichtel_handler", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._wichtel_handler = True
        root.addHandler(handler)
    root.setLevel(level_name)

    # uvicorn access logs duplicate what LoggingMiddleware already writes
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if not settings.sql_debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger("app")
