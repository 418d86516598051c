"""Exceptions raised by the PM2 save editor core."""


class SaveEditorError(Exception):
    """Base class for all save editor errors."""
    pass


class LoadError(SaveEditorError):
    """Raised when a save file cannot be loaded."""
    pass


class SizeMismatch(LoadError):
    """Raised when the input is not exactly one save file long."""

    def __init__(self, actual: int, expected: int):
        super().__init__(
            f"Size mismatch: expected {expected:,} bytes, got {actual:,} bytes"
        )
        self.actual = actual
        self.expected = expected


class SaveError(SaveEditorError):
    """Raised when a save file cannot be produced or written."""
    pass


class NotLoaded(SaveError):
    """Raised when an operation needs a loaded save file and there is none."""

    def __init__(self, message: str = "No save file loaded"):
        super().__init__(message)


class OutOfBounds(SaveEditorError, IndexError):
    """Raised when an offset/size pair falls outside the save buffer."""

    def __init__(self, offset: int, size: int, length: int):
        super().__init__(
            f"Range 0x{offset:X}+{size} is outside the {length}-byte buffer"
        )
        self.offset = offset
        self.size = size


class LengthMismatch(SaveEditorError, ValueError):
    """Raised when fewer bytes are supplied than a write asks for."""
    pass


class FieldError(SaveEditorError, ValueError):
    """Base class for rejected field writes. The buffer is left unchanged."""
    pass


class RangeViolation(FieldError):
    """Raised when a value is outside a field's declared range."""

    def __init__(self, label: str, value, minimum, maximum):
        super().__init__(
            f"{label}: {value} is outside the valid range [{minimum}, {maximum}]"
        )
        self.value = value
        self.minimum = minimum
        self.maximum = maximum


class TooLong(FieldError):
    """Raised when text does not fit in a fixed-width string field."""

    def __init__(self, label: str, length: int, max_length: int):
        super().__init__(
            f"{label}: {length} characters given, at most {max_length} fit"
        )
        self.length = length
        self.max_length = max_length


class UnknownField(SaveEditorError, KeyError):
    """Raised when the field table and the stat enumeration disagree."""
    pass


class UnsupportedVersionChecksum(UserWarning):
    """Issued when a save is written with the partial checksum only."""
    pass
