"""
Remote file removal
"""
from ..core.errors import RemoteIOError
from ..core.ssh_manager import REMOTE_ERRORS
from ..core.models import RemoveFile, Absent
from ..utils.logging import log, vlog
from .directory import query_status


def remove_file(session, op: RemoveFile):
    """Absent → no-op; otherwise remove, surfacing denial as RemoteIOError."""
    status = query_status(session, op.path)
    if isinstance(status, Absent):
        vlog(f"  [DEL-SKIP] {op.path} already gone")
        return
    try:
        session.sftp_remove(str(op.path))
    except REMOTE_ERRORS as exc:
        raise RemoteIOError(f"could not delete {op.path}: {exc}", path=str(op.path)) from exc
    log(f"  [DEL ✓] {op.path}")
