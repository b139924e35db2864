"""
Mirror engine - batch dispatch and orchestration
"""
import queue
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional
from .bootstrap import bootstrap
from .errors import MirrorError
from .executor import Executor
from .models import Change, Kind, describe
from .paths import PathMapper
from .reconciler import reconcile
from ..utils.file_utils import size_str
from ..utils.logging import log, vlog, warn, banner


def log_batch(changes: list[Change]):
    log(f"changes: {len(changes)} files changed:")
    for c in changes:
        size = size_str(c.size) if c.kind is Kind.FILE else "-"
        log(f"    {c.name} {'add' if c.exists else 'remove'} {c.kind.value} {size}")


def process_batch(changes: Iterable[Change], mapper: PathMapper, executor: Executor) -> int:
    """
    Reconcile and apply one batch. Raises the MirrorError of the first failing
    operation; everything before it has been applied.
    """
    changes = list(changes)
    log_batch(changes)
    operations = reconcile(changes, mapper)
    applied = executor.execute(operations)
    log(f"   total: {applied} operation(s) applied")
    return applied


def report_failure(exc: MirrorError):
    where = describe(exc.operation) if exc.operation is not None else exc.path
    warn(f"batch aborted at {where}: {exc}")


def serve_batches(batches: "queue.Queue[Optional[list[Change]]]",
                  mapper: PathMapper, executor: Executor,
                  failures: Optional[list[MirrorError]] = None) -> int:
    """
    Consume batches one at a time until a None sentinel arrives. The next
    batch is taken only after the previous one has completed or failed.
    Each batch error is appended to *failures* as it happens.
    Returns the number of batches that failed.
    """
    failures = [] if failures is None else failures
    while True:
        changes = batches.get()
        if changes is None:
            return len(failures)
        if not changes:
            continue
        try:
            process_batch(changes, mapper, executor)
        except MirrorError as exc:
            failures.append(exc)
            report_failure(exc)
        log("[watch] waiting for changes …")


def run_mirror(session, watcher, local_root: Path, remote_root: PurePosixPath,
               executor: Optional[Executor] = None) -> int:
    """
    Connect, bootstrap the remote root, then mirror every batch the watcher
    produces until interrupted. Bootstrap errors propagate (fatal); batch
    errors are reported and the loop keeps listening.
    """
    local_root = Path(local_root).resolve()
    mapper = PathMapper(local_root, PurePosixPath(remote_root))
    executor = executor or Executor(session)
    failures: list[MirrorError] = []

    banner(f"Mirror  {local_root}", f"  →     {session!r}:{remote_root}")

    session.connect()
    try:
        bootstrap(session, local_root, PurePosixPath(remote_root))
        watcher.start()
        log("[watch] waiting for changes …")
        return serve_batches(watcher.batches, mapper, executor, failures)
    except KeyboardInterrupt:
        print()
        log("Interrupted by user; stopping.")
        return len(failures)
    finally:
        watcher.stop()
        vlog("[watch] stopped")
        session.disconnect()
