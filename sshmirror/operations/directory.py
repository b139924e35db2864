"""
Directory operations (ensure / remove) with idempotent semantics
"""
from ..core.errors import Conflict, RemoteIOError
from ..core.ssh_manager import REMOTE_ERRORS
from ..core.models import EnsureDirectory, RemoveDirectory, Kind, Absent, QueryFailed
from ..utils.logging import log, vlog


def query_status(session, path):
    """stat *path*; QueryFailed surfaces as RemoteIOError, never as Absent."""
    status = session.sftp_stat(str(path))
    if isinstance(status, QueryFailed):
        raise RemoteIOError(f"could not stat {path}: {status.cause}", path=str(path))
    return status


def ensure_directory(session, op: EnsureDirectory):
    """
    Absent → create.  Directory → reconcile permissions.  File → Conflict.
    Applying the same op twice leaves the remote untouched the second time.
    """
    status = query_status(session, op.path)
    try:
        if isinstance(status, Absent):
            session.sftp_mkdir(str(op.path), op.mode)
            log(f"  [MKDIR ✓] {op.path}")
            return
        if status.kind is not Kind.DIRECTORY:
            raise Conflict(
                f"cannot create directory {op.path}: a file with the same name exists",
                path=str(op.path))
        if status.mode != op.mode:
            session.sftp_chmod(str(op.path), op.mode)
            log(f"  [CHMOD ✓] {op.path} {op.mode:o}")
        else:
            vlog(f"  [MKDIR-SKIP] {op.path}")
    except REMOTE_ERRORS as exc:
        raise RemoteIOError(f"could not create {op.path}: {exc}", path=str(op.path)) from exc


def remove_directory(session, op: RemoveDirectory):
    """Absent → no-op; otherwise rmdir (the directory must already be empty)."""
    status = query_status(session, op.path)
    if isinstance(status, Absent):
        vlog(f"  [RMDIR-SKIP] {op.path} already gone")
        return
    try:
        session.sftp_rmdir(str(op.path))
    except REMOTE_ERRORS as exc:
        raise RemoteIOError(f"could not remove directory {op.path}: {exc}",
                            path=str(op.path)) from exc
    log(f"  [RMDIR ✓] {op.path}")
