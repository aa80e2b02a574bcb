import logging

from app.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = None) -> None:
    """Configure the root logger once; repeated calls only adjust the level."""
    root_logger = logging.getLogger()
    resolved = (level or settings.log_level or "INFO").upper()
    if not root_logger.handlers:
        logging.basicConfig(level=resolved, format=LOG_FORMAT)
    root_logger.setLevel(resolved)
