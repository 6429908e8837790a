import logging
from logging.handlers import RotatingFileHandler

from hr_portal.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
QUIET_LOGGERS = ("httpx", "httpcore", "passlib")


def configure_logging(level: str | None = None) -> None:
    """Console and rotating-file logging for the portal, set up once per process."""
    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    log_path = settings.data_dir / "hr_portal.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)
    root_logger.setLevel(level or settings.log_level)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [
        logging.StreamHandler(),
        RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    # request lines and bcrypt backend probing are logged at INFO
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
