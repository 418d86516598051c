"""Reading and writing PM2 save files on disk.

Failures are raised as LoadError / SaveError and never retried here;
asking the user to try again is up to the caller.
"""

import os
import shutil

from services.pm2_save_editor.errors import LoadError, SaveError, SizeMismatch
from services.pm2_save_editor.models import SAVE_FILE_SIZE

BACKUP_SUFFIX = ".bak"


def read_save_file(path: str) -> bytes:
    """Read a whole save file.

    Raises:
        LoadError: If the file is missing or cannot be read.
        SizeMismatch: If the file is not exactly SAVE_FILE_SIZE bytes.
    """
    if not os.path.isfile(path):
        raise LoadError(f"Could not find file {path}")

    size = os.path.getsize(path)
    if size != SAVE_FILE_SIZE:
        raise SizeMismatch(size, SAVE_FILE_SIZE)

    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise LoadError(f"Could not open file {path}: {e}") from e

    # File may have changed between the size check and the read
    if len(data) != SAVE_FILE_SIZE:
        raise SizeMismatch(len(data), SAVE_FILE_SIZE)
    return data


def backup_path(path: str) -> str:
    return path + BACKUP_SUFFIX


def write_save_file(path: str, data: bytes, backup: bool = False) -> None:
    """Write `data` to `path`, replacing any existing file.

    With `backup`, an existing file is first copied to `<path>.bak`.

    Raises:
        SaveError: On any filesystem failure.
    """
    try:
        output_dir = os.path.dirname(path)
        if output_dir:
            os.makedirs(output_dir, exist_ok=True)
        if backup and os.path.exists(path):
            shutil.copy2(path, backup_path(path))
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise SaveError(f"Error creating file {path}: {e}") from e
