"""In-memory image of a PM2 save file.

All reads and writes against save data go through SaveBuffer so that
every offset/size pair is checked against the fixed file length.
"""

from typing import Union

from services.pm2_save_editor.errors import (
    LengthMismatch,
    OutOfBounds,
    SizeMismatch,
)
from services.pm2_save_editor.models import SAVE_FILE_SIZE

BytesLike = Union[bytes, bytearray, memoryview]


class SaveBuffer:
    """Fixed-size mutable byte image of one save file."""

    def __init__(self, data: BytesLike):
        if len(data) != SAVE_FILE_SIZE:
            raise SizeMismatch(len(data), SAVE_FILE_SIZE)
        self._data = bytearray(data)

    @classmethod
    def create(cls, data: BytesLike) -> "SaveBuffer":
        return cls(data)

    @classmethod
    def blank(cls) -> "SaveBuffer":
        """An all-zero save image."""
        return cls(bytes(SAVE_FILE_SIZE))

    def __len__(self) -> int:
        return len(self._data)

    def _check_range(self, offset: int, size: int) -> None:
        if offset < 0 or size < 0 or offset + size > len(self._data):
            raise OutOfBounds(offset, size, len(self._data))

    def read_at(self, offset: int, size: int) -> bytes:
        """Return a copy of `size` bytes starting at `offset`."""
        self._check_range(offset, size)
        return bytes(self._data[offset:offset + size])

    def write_at(self, offset: int, size: int, data: BytesLike) -> None:
        """Overwrite `size` bytes at `offset` with the start of `data`."""
        self._check_range(offset, size)
        if len(data) < size:
            raise LengthMismatch(
                f"write of {size} bytes at 0x{offset:X} given only {len(data)} bytes"
            )
        self._data[offset:offset + size] = bytes(data[:size])

    def read_uint_le(self, offset: int, size: int) -> int:
        """Read an unsigned little-endian integer."""
        return int.from_bytes(self.read_at(offset, size), "little", signed=False)

    def write_uint_le(self, offset: int, size: int, value: int) -> None:
        """Write an unsigned little-endian integer."""
        self.write_at(offset, size, value.to_bytes(size, "little", signed=False))

    def to_bytes(self) -> bytes:
        return bytes(self._data)
