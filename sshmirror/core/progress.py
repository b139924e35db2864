"""
Rate-limited progress reporting for a single file transfer
"""
import time
from typing import Callable, Optional
from .models import TransferProgress
from ..utils.file_utils import size_str, percent_str
from ..utils.logging import log

ProgressCallback = Callable[[int, int], None]

REPORT_INTERVAL = 1.0  # seconds


class ProgressThrottler:
    """
    Counts bytes as they stream through and calls *callback(transferred, total)*
    at most once per REPORT_INTERVAL, plus one unconditional report from
    finish() so every transfer ends on 100%.
    """

    def __init__(self, total: int, callback: Optional[ProgressCallback] = None,
                 clock: Callable[[], float] = time.monotonic,
                 interval: float = REPORT_INTERVAL):
        self.progress = TransferProgress(total=max(int(total), 0))
        self._callback = callback
        self._clock = clock
        self._interval = interval
        self.progress.last_reported_at = clock()

    @property
    def transferred(self) -> int:
        return self.progress.transferred

    @property
    def total(self) -> int:
        return self.progress.total

    def update(self, n: int):
        p = self.progress
        p.transferred += n
        if p.transferred > p.total:
            # the file grew after its change event was recorded
            p.total = p.transferred
        now = self._clock()
        if now - p.last_reported_at >= self._interval:
            p.last_reported_at = now
            self._report()

    def finish(self):
        p = self.progress
        p.total = p.transferred
        p.last_reported_at = self._clock()
        self._report()

    def _report(self):
        if self._callback is not None:
            self._callback(self.progress.transferred, self.progress.total)


def console_progress(transferred: int, total: int):
    """Default callback: '      1.5MB (42%)'."""
    log(f"      {size_str(transferred)} ({percent_str(transferred, total)}%)")
