import logging
import sys

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'


def setup_logging(level=logging.INFO):
    """
    Sets up centralized logging configuration for the feed job.

    Configures the root logger with a StreamHandler that writes to stderr
    using a format including timestamp, logger name, level, filename,
    line number and the message. Calling it again only adjusts the root level.

    Args:
        level: The minimum logging level to capture (e.g., logging.INFO, logging.DEBUG).
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Prevent adding duplicate handlers if setup_logging is called multiple times
    if not root_logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)

        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)

    # SQL echo is noisy at INFO; statements are only interesting when debugging the database itself
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    root_logger.debug("Centralized logging configured.")
