"""
Data model: change events, remote operations, remote entry status, progress
"""
import enum
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Optional, Union


class Kind(enum.Enum):
    FILE = "f"
    DIRECTORY = "d"


@dataclass(frozen=True)
class Change:
    """One add/modify (exists=True) or remove (exists=False) notification."""
    name: str
    kind: Kind
    mode: int = 0
    size: int = 0
    exists: bool = True

    @classmethod
    def from_event(cls, event: dict) -> "Change":
        """Build from the wire form {name, type: "f"|"d", mode, size, exists}."""
        return cls(
            name=str(event["name"]),
            kind=Kind(event["type"]),
            mode=int(event.get("mode") or 0),
            size=int(event.get("size") or 0),
            exists=bool(event.get("exists", True)),
        )

    @property
    def depth(self) -> int:
        return self.name.replace("\\", "/").strip("/").count("/")


# ── remote operations ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class EnsureDirectory:
    path: PurePosixPath
    mode: int


@dataclass(frozen=True)
class RemoveDirectory:
    path: PurePosixPath


@dataclass(frozen=True)
class TransferFile:
    local_path: Path
    remote_path: PurePosixPath
    mode: int
    size: int

    @property
    def path(self) -> PurePosixPath:
        return self.remote_path


@dataclass(frozen=True)
class RemoveFile:
    path: PurePosixPath


RemoteOperation = Union[EnsureDirectory, RemoveDirectory, TransferFile, RemoveFile]


def describe(op: RemoteOperation) -> str:
    """Short label for logs, e.g. 'EnsureDirectory /srv/app/b'."""
    return f"{type(op).__name__} {getattr(op, 'path', '?')}"


# ── remote entry status ─────────────────────────────────────────────────────

@dataclass(frozen=True)
class Present:
    kind: Kind
    mode: int


@dataclass(frozen=True)
class Absent:
    pass


@dataclass(frozen=True)
class QueryFailed:
    cause: Exception


RemoteEntryStatus = Union[Present, Absent, QueryFailed]

ABSENT = Absent()


# ── progress ────────────────────────────────────────────────────────────────

@dataclass
class TransferProgress:
    total: int
    transferred: int = 0
    last_reported_at: Optional[float] = field(default=None)
