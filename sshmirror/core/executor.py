"""
Remote operation executor: apply one batch of operations, strictly in order
"""
from typing import Callable, Iterable, Optional
from .errors import MirrorError
from .models import (RemoteOperation, EnsureDirectory, RemoveDirectory, TransferFile,
                     RemoveFile, describe)
from .progress import ProgressCallback, console_progress
from ..operations import ensure_directory, remove_directory, transfer_file, remove_file
from ..utils.logging import vlog


class Executor:
    """
    Applies operations against a remote filesystem capability (SFTPSession or
    anything with the same sftp_* methods), one at a time.

    The first failure aborts the rest of the batch; operations applied before
    it stay applied. Nothing is retried.
    """

    def __init__(self, session, progress: Optional[ProgressCallback] = console_progress,
                 clock: Optional[Callable[[], float]] = None):
        self.session = session
        self.progress = progress
        self.clock = clock

    def apply(self, op: RemoteOperation):
        vlog(f"  [op] {describe(op)}")
        try:
            if isinstance(op, EnsureDirectory):
                ensure_directory(self.session, op)
            elif isinstance(op, TransferFile):
                transfer_file(self.session, op, self.progress, self.clock)
            elif isinstance(op, RemoveFile):
                remove_file(self.session, op)
            elif isinstance(op, RemoveDirectory):
                remove_directory(self.session, op)
            else:
                raise TypeError(f"unknown remote operation: {op!r}")
        except MirrorError as exc:
            exc.operation = op
            raise

    def execute(self, operations: Iterable[RemoteOperation]) -> int:
        """Apply *operations* in order; return how many were applied."""
        applied = 0
        for op in operations:
            self.apply(op)
            applied += 1
        return applied
