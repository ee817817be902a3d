import logging
import os
from pathlib import Path
from typing import Union

from rich.logging import RichHandler

from semaphore_installer.ui import console

LOGGER_NAME = "semaphore_installer"
# command output; written to the log file only, the runner echoes it itself
OUTPUT_LOGGER_NAME = f"{LOGGER_NAME}.output"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(log_file: Union[str, Path], debug: bool = False) -> logging.Logger:
    """
    Configure the installer logger: rich output on the terminal and a full
    DEBUG-level copy in the run's log file.
    """
    log_file = Path(log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()

    console_handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_handler.addFilter(lambda record: record.name != OUTPUT_LOGGER_NAME)
    logger.addHandler(console_handler)

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    logger.addHandler(file_handler)
    try:
        os.chmod(str(log_file), 0o600)
    except OSError as e:
        logger.warning(f"Could not set permissions on log file {log_file}: {e}")
    return logger


def close_logger() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()
