"""
Utility module for logging and file operations.
"""

from .file_utils import (
    check_input_file,
    ensure_directory_exists,
    get_file_size,
)
from .logger import get_logger, log_section, set_log_level, setup_logger

__all__ = [
    "setup_logger",
    "get_logger",
    "set_log_level",
    "log_section",
    "ensure_directory_exists",
    "check_input_file",
    "get_file_size",
]
