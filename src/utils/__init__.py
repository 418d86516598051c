"""
Utility functions for PM2 Save Editor.
"""

from .logging import log_error, update_log_file_path, get_log_file, init_log_file
from .formatting import format_hex_dump, format_stat_value

__all__ = [
    "log_error",
    "update_log_file_path",
    "get_log_file",
    "init_log_file",
    "format_hex_dump",
    "format_stat_value",
]
