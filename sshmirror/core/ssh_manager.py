"""
SSH/SFTP session: the remote filesystem capability used by the mirror engine
"""
import errno
import stat
from contextlib import contextmanager
from typing import Optional
import paramiko
from .. import config as _cfg
from ..utils.logging import log, vlog
from ..utils.retry import retried
from .models import Kind, Present, QueryFailed, ABSENT, RemoteEntryStatus

# Everything paramiko raises for a failed remote call
REMOTE_ERRORS = (OSError, paramiko.SSHException, paramiko.SFTPError)


class SFTPSession:
    """
    Wraps paramiko SSHClient + SFTPClient.
    One instance is owned by a mirror run and passed explicitly to bootstrap
    and the executor; connect() / disconnect() bracket its lifetime.
    Sends SSH keep-alives to reduce mid-transfer drops.
    """

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None,
                 user: Optional[str] = None, key_path: Optional[str] = None,
                 password: Optional[str] = None, keepalive: Optional[int] = None):
        self.host = host or _cfg.SSH_HOST
        self.port = port or _cfg.SSH_PORT
        self.user = user or _cfg.SSH_USER
        self.key_path = key_path if key_path is not None else _cfg.SSH_KEY_PATH
        self.password = password if password is not None else _cfg.SSH_PASSWORD
        self.keepalive = keepalive if keepalive is not None else _cfg.KEEPALIVE
        self._ssh: Optional[paramiko.SSHClient] = None
        self._sftp: Optional[paramiko.SFTPClient] = None

    def __repr__(self):
        return f"SFTPSession({self.user}@{self.host}:{self.port})"

    # ── connection ─────────────────────────────────────────────────────────

    @retried
    def connect(self):
        if self.is_active():
            return

        self._close_quietly()
        log(f"[SSH] connecting to {self.user}@{self.host}:{self.port} …")
        client = paramiko.SSHClient()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        kw: dict = dict(hostname=self.host, port=self.port, username=self.user,
                        timeout=20, banner_timeout=30, auth_timeout=30)
        if self.key_path:
            kw["key_filename"] = self.key_path
        if self.password:
            kw["password"] = self.password

        client.connect(**kw)

        transport = client.get_transport()
        transport.set_keepalive(self.keepalive)

        self._ssh = client
        self._sftp = client.open_sftp()
        log("[SSH] connected ✓")

    def is_active(self) -> bool:
        if self._ssh is None or self._sftp is None:
            return False
        transport = self._ssh.get_transport()
        return transport is not None and transport.is_active()

    def _close_quietly(self):
        for closable in (self._sftp, self._ssh):
            if closable is None:
                continue
            try:
                closable.close()
            except REMOTE_ERRORS as exc:
                vlog(f"[SSH] close failed: {exc}")
        self._ssh = None
        self._sftp = None

    def disconnect(self):
        self._close_quietly()
        log("[SSH] disconnected.")

    def ensure_connected(self):
        """Call before any remote operation; reconnects a dropped session."""
        if not self.is_active():
            self.connect()

    # ── sftp ops ────────────────────────────────────────────────────────────

    def sftp_stat(self, remote: str) -> RemoteEntryStatus:
        """Present / Absent / QueryFailed; "not found" is never an error."""
        try:
            self.ensure_connected()
            attrs = self._sftp.stat(str(remote))
        except FileNotFoundError:
            return ABSENT
        except IOError as exc:
            if getattr(exc, "errno", None) == errno.ENOENT:
                return ABSENT
            return QueryFailed(exc)
        except (paramiko.SSHException, paramiko.SFTPError) as exc:
            return QueryFailed(exc)
        mode = attrs.st_mode or 0
        kind = Kind.DIRECTORY if stat.S_ISDIR(mode) else Kind.FILE
        return Present(kind, stat.S_IMODE(mode))

    def sftp_mkdir(self, remote: str, mode: int):
        self.ensure_connected()
        self._sftp.mkdir(str(remote), mode)
        # the server applies its umask to mkdir
        self._sftp.chmod(str(remote), mode)

    def sftp_chmod(self, remote: str, mode: int):
        self.ensure_connected()
        self._sftp.chmod(str(remote), mode)

    def sftp_remove(self, remote: str):
        self.ensure_connected()
        self._sftp.remove(str(remote))

    def sftp_rmdir(self, remote: str):
        self.ensure_connected()
        self._sftp.rmdir(str(remote))

    @contextmanager
    def sftp_open_write(self, remote: str, mode: int):
        """Truncating write stream on *remote* with permission bits *mode*."""
        self.ensure_connected()
        with self._sftp.open(str(remote), "wb") as f:
            f.set_pipelined(True)
            f.chmod(mode)
            yield f
