import logging

from church_api.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Configure root logging once for the API process.

    Uvicorn installs its own handlers; this only sets the format and level
    for the application loggers under ``church_api``.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(format=LOG_FORMAT, level=level_name)
    app_logger = logging.getLogger("church_api")
    app_logger.setLevel(level_name)
    return app_logger
