"""
Filesystem watch subscription

A watchdog Observer reports raw events on its own thread; the BatchCollector
coalesces them per path and, once no new event has arrived for
settle_seconds, describes the current state of every pending path as one
batch of Change records on a queue. The mirror engine is the only consumer of
that queue.
"""
import os
import queue
import stat
import threading
import time
from pathlib import Path
from typing import Callable, Optional
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer
from ..core.models import Change, Kind
from ..utils.file_utils import local_entry
from ..utils.logging import log, vlog


def relative_name(root: Path, path) -> Optional[str]:
    """Watcher-relative name with '/' separators; None for the root or outside it."""
    rel = os.path.relpath(os.fsdecode(path), str(root))
    if rel == os.curdir or rel == os.pardir or rel.startswith(os.pardir + os.sep):
        return None
    return rel.replace(os.sep, "/")


def describe_entry(root: Path, name: str, kind_hint: Kind) -> Optional[Change]:
    """Current state of *name*: an add/modify Change, or a removal if it is gone."""
    st = local_entry(root / name)
    if st is None:
        if os.path.lexists(root / name):
            # symlink, socket, fifo …
            return None
        return Change(name=name, kind=kind_hint, exists=False)
    kind = Kind.DIRECTORY if stat.S_ISDIR(st.st_mode) else Kind.FILE
    size = st.st_size if kind is Kind.FILE else 0
    return Change(name=name, kind=kind, mode=st.st_mode, size=size, exists=True)


def initial_batch(root: Path) -> list[Change]:
    """Every file and directory under *root*, parents before children."""
    root = Path(root)
    changes: list[Change] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for entry in dirnames + sorted(filenames):
            name = relative_name(root, os.path.join(dirpath, entry))
            change = describe_entry(root, name, Kind.FILE)
            if change is not None and change.exists:
                changes.append(change)
    return changes


class BatchCollector:
    """Coalesces raw events per path until the tree has been quiet for a while."""

    def __init__(self, root: Path, batches: queue.Queue, settle_seconds: float = 0.2,
                 clock: Callable[[], float] = time.monotonic):
        self.root = Path(root)
        self.batches = batches
        self.settle_seconds = settle_seconds
        self._clock = clock
        self._pending: dict[str, Kind] = {}
        self._last_event_at = 0.0
        self._lock = threading.Lock()

    def record(self, path, is_directory: bool):
        name = relative_name(self.root, path)
        if name is None:
            return
        with self._lock:
            self._pending[name] = Kind.DIRECTORY if is_directory else Kind.FILE
            self._last_event_at = self._clock()

    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._pending)

    def is_settled(self) -> bool:
        with self._lock:
            return bool(self._pending) and \
                self._clock() - self._last_event_at >= self.settle_seconds

    def flush(self) -> list[Change]:
        """Take all pending paths (first-seen order) and describe them."""
        with self._lock:
            pending, self._pending = self._pending, {}
        changes = []
        for name, kind in pending.items():
            change = describe_entry(self.root, name, kind)
            if change is not None:
                changes.append(change)
        return changes

    def flush_if_settled(self) -> bool:
        if not self.is_settled():
            return False
        changes = self.flush()
        if changes:
            self.batches.put(changes)
        return True


class _ChangeHandler(FileSystemEventHandler):
    def __init__(self, collector: BatchCollector):
        self.collector = collector

    def on_created(self, event):
        self.collector.record(event.src_path, event.is_directory)

    def on_modified(self, event):
        if event.is_directory:
            return
        self.collector.record(event.src_path, False)

    def on_deleted(self, event):
        self.collector.record(event.src_path, event.is_directory)

    def on_moved(self, event):
        self.collector.record(event.src_path, event.is_directory)
        self.collector.record(event.dest_path, event.is_directory)


class Watcher:
    """
    Watch subscription on *root*. start() begins observing, optionally queues
    the whole tree as the first batch, then streams batches of changes onto
    self.batches.
    stop() tears down without waiting for the consumer; it also queues a None
    sentinel so the consumer loop ends.
    """

    def __init__(self, root: Path, settle_seconds: float = 0.2, initial_sync: bool = True):
        self.root = Path(root).resolve()
        self.initial_sync = initial_sync
        self.batches: queue.Queue = queue.Queue()
        self.collector = BatchCollector(self.root, self.batches, settle_seconds)
        self._observer: Optional[Observer] = None
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    def start(self):
        if self._observer is not None:
            return
        self._observer = Observer()
        self._observer.schedule(_ChangeHandler(self.collector), str(self.root), recursive=True)
        self._observer.start()

        # events seen during the walk stay pending in the collector and are
        # flushed after the initial batch
        if self.initial_sync:
            changes = initial_batch(self.root)
            log(f"[watch] initial sync: {len(changes)} entries")
            if changes:
                self.batches.put(changes)

        self._thread = threading.Thread(target=self._run, name="sshmirror-collector", daemon=True)
        self._thread.start()
        log(f"[watch] watching {self.root}")

    def _run(self):
        interval = max(self.collector.settle_seconds / 2, 0.05)
        while not self._stop.wait(interval):
            if self.collector.flush_if_settled():
                vlog("[watch] batch queued")

    def stop(self):
        self._stop.set()
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=10)
            self._observer = None
        if self._thread is not None:
            self._thread.join(timeout=10)
            self._thread = None
        self.batches.put(None)
