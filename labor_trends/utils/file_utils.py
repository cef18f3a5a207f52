"""
File utility functions for the application.

Provides directory creation, input file checks and size reporting.
"""

import os
from pathlib import Path


def ensure_directory_exists(directory_path: str) -> None:
    """
    Create directory if it doesn't exist.

    Args:
        directory_path: Path to directory to create

    Raises:
        OSError: If directory creation fails
    """
    os.makedirs(directory_path, exist_ok=True)


def check_input_file(file_path: str) -> None:
    """
    Verify that an input file exists and is readable.

    Args:
        file_path: Path to the input file

    Raises:
        FileNotFoundError: If the file doesn't exist
        PermissionError: If the file isn't readable
    """
    path = Path(file_path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {file_path}")
    if not os.access(file_path, os.R_OK):
        raise PermissionError(f"File not readable: {file_path}")


def get_file_size(file_path: str, human_readable: bool = True) -> str:
    """
    Get file size in human-readable format or bytes.

    Args:
        file_path: Path to file
        human_readable: If True, return formatted string (e.g., "1.5 GB")

    Returns:
        str: File size as string

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    size_bytes: float = os.path.getsize(file_path)

    if not human_readable:
        return str(int(size_bytes))

    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size_bytes < 1024.0:
            return f"{size_bytes:.2f} {unit}"
        size_bytes /= 1024.0

    return f"{size_bytes:.2f} PB"

