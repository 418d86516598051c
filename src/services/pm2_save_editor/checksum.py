"""Checksum calculation for PM2 save files.

The game stores a 32-bit little-endian checksum inside the save image.
Only the English Refine algorithm is handled in full; it lives behind a
single replaceable function so a verified reimplementation, or the
game's own routine loaded from a native library, can be dropped in.

The built-in full checksum is a placeholder (CRC-32 over the image with
the checksum field zeroed). It is deterministic but NOT bit-exact with
the game, so files written with it will not pass the game's own check
until a native library or verified routine is installed.

Other versions use the partial checksum: a fixed value, written as-is.
"""

import ctypes
import os
import zlib
from typing import Callable

from services.pm2_save_editor.errors import LoadError
from services.pm2_save_editor.models import (
    CHECKSUM_OFFSETS,
    CHECKSUM_SIZE,
    FULL_CHECKSUM_VERSIONS,
    FileVersion,
)
from services.pm2_save_editor.save_buffer import SaveBuffer

# Value written by the partial checksum path
PARTIAL_CHECKSUM_VALUE = 0x00

# Name of the exported routine in the native checksum library
NATIVE_CHECKSUM_SYMBOL = "CalculateChecksum"

ChecksumFunc = Callable[[bytes, FileVersion], int]


def placeholder_checksum(data: bytes, version: FileVersion) -> int:
    """CRC-32 of the image with the stored checksum treated as zero."""
    offset = CHECKSUM_OFFSETS[version]
    image = bytearray(data)
    image[offset:offset + CHECKSUM_SIZE] = bytes(CHECKSUM_SIZE)
    return zlib.crc32(bytes(image)) & 0xFFFFFFFF


_full_checksum: ChecksumFunc = placeholder_checksum


def set_full_checksum(func: ChecksumFunc) -> None:
    """Install the routine used for fully supported versions."""
    global _full_checksum
    _full_checksum = func


def reset_full_checksum() -> None:
    """Go back to the built-in placeholder."""
    set_full_checksum(placeholder_checksum)


def get_full_checksum() -> ChecksumFunc:
    return _full_checksum


def is_full_checksum(version: FileVersion) -> bool:
    return version in FULL_CHECKSUM_VERSIONS


def compute_checksum(buffer: SaveBuffer, version: FileVersion) -> int:
    """Compute the checksum for `buffer` as saved by `version`.

    Pure: the buffer is only read.
    """
    if is_full_checksum(version):
        return _full_checksum(buffer.to_bytes(), version) & 0xFFFFFFFF
    return partial_checksum(buffer)


def partial_checksum(buffer: SaveBuffer) -> int:
    """Checksum for versions whose algorithm is not known yet."""
    return PARTIAL_CHECKSUM_VALUE


def load_native_checksum(library_path: str, install: bool = True) -> ChecksumFunc:
    """Bind the game's checksum routine from a native shared library.

    The library must export `int CalculateChecksum(unsigned char *save,
    int version)` with the C calling convention. The save image is copied
    into a fresh C buffer for each call.

    Raises:
        LoadError: If the library is missing, cannot be loaded, or does not
            export the routine.
    """
    if not os.path.exists(library_path):
        raise LoadError(f"Checksum library not found: {library_path}")
    try:
        library = ctypes.CDLL(library_path)
    except OSError as e:
        raise LoadError(f"Could not load checksum library {library_path}: {e}") from e
    try:
        routine = getattr(library, NATIVE_CHECKSUM_SYMBOL)
    except AttributeError as e:
        raise LoadError(
            f"{library_path} does not export {NATIVE_CHECKSUM_SYMBOL}"
        ) from e

    routine.argtypes = [ctypes.POINTER(ctypes.c_ubyte), ctypes.c_int]
    routine.restype = ctypes.c_int

    def native_checksum(data: bytes, version: FileVersion) -> int:
        image = (ctypes.c_ubyte * len(data)).from_buffer_copy(data)
        return routine(image, version.value) & 0xFFFFFFFF

    if install:
        set_full_checksum(native_checksum)
    return native_checksum
