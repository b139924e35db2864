"""
Directory bootstrap: make sure both roots are usable before the first batch
"""
import os
import stat
from pathlib import Path, PurePosixPath
from .errors import InvalidLocalRoot, InvalidRemoteRoot, RemoteIOError
from .models import Kind, Absent, QueryFailed
from .ssh_manager import REMOTE_ERRORS
from ..utils.logging import log


def bootstrap(session, local_root: Path, remote_root: PurePosixPath):
    """
    Local root must be an existing directory.  Remote root is created with the
    local root's permission bits when absent, left alone when it is a
    directory, and rejected when it is a file.
    """
    try:
        st = os.stat(local_root)
    except OSError as exc:
        raise InvalidLocalRoot(f"local directory {local_root} is not accessible: {exc}",
                               path=str(local_root)) from exc
    if not stat.S_ISDIR(st.st_mode):
        raise InvalidLocalRoot(f"local directory {local_root} is not a directory",
                               path=str(local_root))

    status = session.sftp_stat(str(remote_root))
    if isinstance(status, QueryFailed):
        raise RemoteIOError(f"could not stat remote root {remote_root}: {status.cause}",
                            path=str(remote_root))
    if isinstance(status, Absent):
        mode = stat.S_IMODE(st.st_mode)
        try:
            session.sftp_mkdir(str(remote_root), mode)
        except REMOTE_ERRORS as exc:
            raise RemoteIOError(f"could not create remote root {remote_root}: {exc}",
                                path=str(remote_root)) from exc
        log(f"[bootstrap] created remote root {remote_root} ({mode:o})")
    elif status.kind is not Kind.DIRECTORY:
        raise InvalidRemoteRoot(f"remote directory {remote_root} is not a directory",
                                path=str(remote_root))
    else:
        log(f"[bootstrap] remote root {remote_root} ready")
