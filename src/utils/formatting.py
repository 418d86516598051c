"""
Formatting utilities for PM2 Save Editor.
Provides functions for displaying stat values and raw save bytes.
"""

from typing import Any


def format_stat_value(value: Any) -> str:
    """
    Format a decoded stat value for display.

    Args:
        value: An int, float or str field value

    Returns:
        Display string (floats with two decimals, text quoted)
    """
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        return f"{value:.2f}"
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


def format_hex_dump(data: bytes, base_offset: int = 0, width: int = 16) -> str:
    """
    Format bytes as a classic offset / hex / ASCII dump.

    Args:
        data: The bytes to dump
        base_offset: Offset of data[0] in the save file
        width: Bytes per line

    Returns:
        Multi-line dump string
    """
    lines = []
    for i in range(0, len(data), width):
        chunk = data[i:i + width]
        hex_part = " ".join(f"{b:02X}" for b in chunk).ljust(width * 3 - 1)
        text_part = "".join(chr(b) if 0x20 <= b < 0x7F else "." for b in chunk)
        lines.append(f"{base_offset + i:04X}  {hex_part}  {text_part}")
    return "\n".join(lines)
