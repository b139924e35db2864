"""
File utilities (size formatting, local stat helpers)
"""
import os
import stat
from pathlib import Path
from typing import Optional

SIZE_UNITS = ("b", "kB", "MB", "GB", "TB")


def size_str(size: float) -> str:
    """
    Human-readable size: the unit escalates at every 1024 boundary.
    Bytes are printed without decimals, larger units with one.

      0 -> "0b", 1023 -> "1023b", 1536 -> "1.5kB", 1048576 -> "1.0MB"
    """
    unit = SIZE_UNITS[0]
    for unit in SIZE_UNITS:
        if size < 1024 or unit == SIZE_UNITS[-1]:
            break
        size /= 1024
    if unit == "b":
        return f"{size:.0f}{unit}"
    return f"{size:.1f}{unit}"


def percent_str(transferred: int, total: int) -> str:
    """Whole-number percentage; an empty file counts as complete."""
    if total <= 0:
        return "100"
    return f"{transferred / total * 100:.0f}"


def local_entry(path: Path) -> Optional[os.stat_result]:
    """lstat *path*; None if it is gone or is not a regular file or directory."""
    try:
        st = os.lstat(path)
    except FileNotFoundError:
        return None
    if not (stat.S_ISREG(st.st_mode) or stat.S_ISDIR(st.st_mode)):
        return None
    return st
