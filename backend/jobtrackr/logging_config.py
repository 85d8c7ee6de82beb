import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging for the API process.

    Uvicorn installs its own handlers for its loggers; this only sets up the
    root logger used by the ``jobtrackr.*`` module loggers.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")
    """
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("jobtrackr").setLevel(level.upper())
