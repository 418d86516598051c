"""
Services layer for PM2 Save Editor.
Handles save file loading, stat editing, and checksums.
"""

from .pm2_save_editor import (
    SaveFileController,
    FileVersion,
    StatId,
)

__all__ = [
    "SaveFileController",
    "FileVersion",
    "StatId",
]
