"""
Local-relative name → remote / local path mapping
"""
from dataclasses import dataclass
from pathlib import Path, PurePosixPath


@dataclass(frozen=True)
class PathMapper:
    """Pure path joins; local_root is expected to be resolved already."""
    local_root: Path
    remote_root: PurePosixPath

    def to_remote(self, name: str) -> PurePosixPath:
        return self.remote_root / _posix(name)

    def to_local(self, name: str) -> Path:
        return Path(self.local_root) / _posix(name)


def _posix(name: str) -> str:
    return name.replace("\\", "/").lstrip("/")
