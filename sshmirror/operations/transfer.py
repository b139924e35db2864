"""
File transfer: stream one local file to its remote path
"""
import os
from typing import Callable, Optional
from ..core.errors import TransferError
from ..core.ssh_manager import REMOTE_ERRORS
from ..core.models import TransferFile
from ..core.progress import ProgressThrottler, ProgressCallback
from ..utils.file_utils import size_str
from ..utils.logging import log

CHUNK_SIZE = 32 * 1024


def transfer_file(session, op: TransferFile,
                  progress: Optional[ProgressCallback] = None,
                  clock: Optional[Callable[[], float]] = None) -> int:
    """
    Copy op.local_path to op.remote_path in CHUNK_SIZE pieces, counting bytes
    through a ProgressThrottler. Both streams are closed on every path.
    Returns the number of bytes written. Never retried.
    """
    kw = {} if clock is None else {"clock": clock}
    try:
        with open(op.local_path, "rb") as src:
            total = max(op.size, os.fstat(src.fileno()).st_size)
            throttler = ProgressThrottler(total, progress, **kw)
            with session.sftp_open_write(str(op.remote_path), op.mode) as dst:
                for chunk in iter(lambda: src.read(CHUNK_SIZE), b""):
                    dst.write(chunk)
                    throttler.update(len(chunk))
    except REMOTE_ERRORS as exc:
        raise TransferError(f"transfer {op.local_path} → {op.remote_path} failed: {exc}",
                            path=str(op.remote_path)) from exc
    throttler.finish()
    log(f"  [PUSH ✓] {op.remote_path} ({size_str(throttler.transferred)})")
    return throttler.transferred
