"""
Change reconciliation: order a batch so it can be replayed safely, and
translate each change into a remote operation.

Creations go shallow → deep so a directory is created before anything inside
it; removals go deep → shallow so a directory is empty before it is removed.
Python's sort is stable, so entries at the same depth keep the order in which
the watcher delivered them.
"""
import stat
from typing import Iterable
from .models import (Change, Kind, RemoteOperation, EnsureDirectory, RemoveDirectory,
                     TransferFile, RemoveFile)
from .paths import PathMapper

# used when a change event carries no permission bits
DEFAULT_DIR_MODE = 0o755
DEFAULT_FILE_MODE = 0o644


def order_changes(changes: Iterable[Change]) -> list[Change]:
    """Creations by ascending depth, then removals by descending depth."""
    changes = list(changes)
    creations = [c for c in changes if c.exists]
    removals = [c for c in changes if not c.exists]
    creations.sort(key=lambda c: c.depth)
    removals.sort(key=lambda c: c.depth, reverse=True)
    return creations + removals


def permission_bits(mode: int, default: int) -> int:
    """Strip file-type bits from a st_mode value."""
    bits = stat.S_IMODE(mode)
    return bits if bits else default


def to_operation(change: Change, mapper: PathMapper) -> RemoteOperation:
    remote = mapper.to_remote(change.name)
    if change.exists:
        if change.kind is Kind.DIRECTORY:
            return EnsureDirectory(remote, permission_bits(change.mode, DEFAULT_DIR_MODE))
        return TransferFile(mapper.to_local(change.name), remote,
                            permission_bits(change.mode, DEFAULT_FILE_MODE), change.size)
    if change.kind is Kind.DIRECTORY:
        return RemoveDirectory(remote)
    return RemoveFile(remote)


def reconcile(changes: Iterable[Change], mapper: PathMapper) -> list[RemoteOperation]:
    """Return the remote operations for one batch, in application order."""
    return [to_operation(c, mapper) for c in order_changes(changes)]
