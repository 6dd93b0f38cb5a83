"""
Shared utilities for logging and small path helpers used across tasks.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional, Union

LOGGER_NAME = "XCJobs"


def get_logger(logger: Optional[logging.Logger] = None) -> logging.Logger:
    """Return `logger` when given, else the package logger."""
    return logger if logger is not None else logging.getLogger(LOGGER_NAME)


def setup_logging(
    task_name: str,
    *,
    log_dir: Optional[Union[str, Path]] = None,
    level: Union[int, str] = logging.INFO,
) -> logging.Logger:
    """Sets up the package logger for a task invocation."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level if isinstance(level, int) else str(level).upper())

    # Prevent adding multiple handlers if the logger already exists
    if not logger.handlers:
        session_id = int(time.time())
        formatter = logging.Formatter(
            f'%(asctime)s - %(levelname)s - [Session: {session_id}]-[Task: {task_name}] - %(message)s'
        )

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

        if log_dir is not None:
            log_dir_path = Path(log_dir)
            log_dir_path.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_dir_path / f"{task_name}_logs.log", mode='a')  # Append mode
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def with_default_extension(path: Optional[str], extension: str) -> Optional[str]:
    """Append `extension` to `path` when it has none (`App` -> `App.xcodeproj`)."""
    if not path:
        return path
    if Path(path).suffix:
        return path
    return f"{path}{extension}"
