"""Typed accessors for individual stats in a save buffer.

An accessor binds one FieldDefinition to one SaveBuffer. It holds no
decoded state: every get() re-reads the buffer and every set() writes
straight back, so the buffer is the only source of truth.
"""

import math
from abc import ABC, abstractmethod
from typing import Union

from services.pm2_save_editor.errors import RangeViolation, TooLong
from services.pm2_save_editor.models import FieldDefinition, StatId
from services.pm2_save_editor.save_buffer import SaveBuffer

# Text encoding used by English Refine name fields
TEXT_ENCODING = "ascii"


class FieldAccessor(ABC):
    """Base class for stat accessors."""

    def __init__(self, definition: FieldDefinition, buffer: SaveBuffer):
        self.definition = definition
        self._buffer = buffer

    @property
    def stat(self) -> StatId:
        return self.definition.stat

    @property
    def label(self) -> str:
        return self.definition.label

    @property
    def offset(self) -> int:
        return self.definition.offset

    @property
    def width(self) -> int:
        return self.definition.width

    def raw(self) -> bytes:
        """The field's bytes as stored."""
        return self._buffer.read_at(self.offset, self.width)

    @abstractmethod
    def get(self):
        """Decode the current value from the buffer."""

    @abstractmethod
    def set(self, value) -> None:
        """Validate and encode `value` into the buffer."""

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.stat.value!r}, "
            f"offset=0x{self.offset:X}, width={self.width})"
        )


class IntegerField(FieldAccessor):
    """Unsigned little-endian integer of the definition's width."""

    def get(self) -> int:
        return self._buffer.read_uint_le(self.offset, self.width)

    def set(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{self.label}: expected int, got {type(value).__name__}")
        lo, hi = self.definition.minimum, self.definition.maximum
        if value < lo or value > hi:
            raise RangeViolation(self.label, value, lo, hi)
        self._buffer.write_uint_le(self.offset, self.width, value)


class FloatField(FieldAccessor):
    """Unsigned little-endian fixed-point value, decoded as raw / scale."""

    def get(self) -> float:
        raw = self._buffer.read_uint_le(self.offset, self.width)
        return raw / self.definition.scale

    def set(self, value: Union[int, float]) -> None:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{self.label}: expected number, got {type(value).__name__}")
        lo, hi = self.definition.minimum, self.definition.maximum
        if math.isnan(value) or value < lo or value > hi:
            raise RangeViolation(self.label, value, lo, hi)
        raw = int(round(value * self.definition.scale))
        self._buffer.write_uint_le(self.offset, self.width, raw)


class StringField(FieldAccessor):
    """Fixed-width NUL-terminated, NUL-padded text."""

    @property
    def max_length(self) -> int:
        # One byte is always kept for the terminator
        return self.width - 1

    def get(self) -> str:
        raw = self.raw().split(b"\x00", 1)[0]
        return raw.decode(TEXT_ENCODING, errors="replace")

    def set(self, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"{self.label}: expected str, got {type(value).__name__}")
        encoded = value.encode(TEXT_ENCODING, errors="replace")
        if len(encoded) > self.max_length:
            raise TooLong(self.label, len(encoded), self.max_length)
        self._buffer.write_at(self.offset, self.width, encoded.ljust(self.width, b"\x00"))
