"""
Logging utilities for sshmirror
"""
import sys
from datetime import datetime

_verbose = False


def set_verbose(verbose: bool):
    """Set the verbose flag"""
    global _verbose
    _verbose = verbose


def log(msg: str, stream=None):
    """Log a message with timestamp"""
    ts = datetime.now().strftime("%H:%M:%S")
    print(f"[{ts}] {msg}", file=stream or sys.stdout, flush=True)


def vlog(msg: str):
    """Log a verbose message (only if verbose mode is enabled)"""
    if _verbose:
        log(msg)


def warn(msg: str):
    """Log a warning to stderr"""
    log(f"⚠  {msg}", stream=sys.stderr)


def banner(*lines: str, width: int = 64):
    """Print a framed block of lines (run header)."""
    print(f"\n{'=' * width}")
    for line in lines:
        print(f"  {line}")
    print(f"{'=' * width}\n", flush=True)
