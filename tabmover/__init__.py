"""Move the active browser tab to the next display."""

import logging
import os
import sys
from datetime import datetime

LOG_FORMAT = "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"


def log_file_path(config_manager):
    """Get today's log file: under the ``log_dir`` setting, else ``logs/`` beside the config."""
    log_dir = config_manager.get_setting("log_dir") or os.path.join(
        config_manager.config_dir, "logs"
    )
    return os.path.join(log_dir, f"tabmover_{datetime.now().strftime('%Y%m%d')}.log")


def setup_logging(config_manager, verbose=False):
    """Send ``TabMover.*`` records to the dated log file and stdout.

    Calling it again replaces the handlers instead of stacking them.

    Returns:
        logging.Logger: The ``TabMover`` logger
    """
    log_file = log_file_path(config_manager)
    os.makedirs(os.path.dirname(log_file), exist_ok=True)

    logger = logging.getLogger("TabMover")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in (logging.FileHandler(log_file), logging.StreamHandler(sys.stdout)):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info(f"Logging to {log_file}")
    return logger


__version__ = "1.0.0"
