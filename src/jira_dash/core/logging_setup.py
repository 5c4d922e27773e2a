"""Logging configuration.

The terminal belongs to the dashboard while it runs, so log records go to a
file under the application directory rather than to stderr.
"""

import logging
from pathlib import Path

LOG_FILE_NAME = "jira-dash.log"
LOG_FORMAT = "%(asctime)s %(name)s - %(levelname)s - %(message)s"


def configure_logging(*, debug: bool, log_dir: Path) -> Path:
    """Send log records for the jira_dash package to a file.

    Args:
        debug: Log at DEBUG instead of INFO
        log_dir: Directory for the log file; created if missing

    Returns:
        Path of the log file
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / LOG_FILE_NAME

    handler = logging.FileHandler(log_path, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    package_logger = logging.getLogger("jira_dash")
    for existing in list(package_logger.handlers):
        package_logger.removeHandler(existing)
        existing.close()
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    # httpx logs every request at INFO; only surface it when debugging.
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
    return log_path
