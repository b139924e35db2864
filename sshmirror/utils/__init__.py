"""Utilities (logging, retry, file utilities)"""
from .logging import log, vlog, warn, set_verbose, banner
from .retry import retried
from .file_utils import size_str, percent_str, local_entry

__all__ = [
    "log", "vlog", "warn", "set_verbose", "banner",
    "retried",
    "size_str", "percent_str", "local_entry",
]
