"""
Error taxonomy for the mirror engine.

  InvalidLocalRoot / InvalidRemoteRoot  fatal, abort startup
  Conflict                              entry exists with the wrong kind
  RemoteIOError                         remote filesystem / transport fault,
                                        including a stat that could not be answered
  TransferError                         read or write fault while streaming a file

Everything except the two root errors aborts only the current batch.
"""
from typing import Optional


class MirrorError(Exception):
    """Base class; carries the remote/local path and the failing operation."""

    def __init__(self, message: str, path: Optional[str] = None, operation=None):
        super().__init__(message)
        self.path = path
        self.operation = operation


class InvalidLocalRoot(MirrorError):
    pass


class InvalidRemoteRoot(MirrorError):
    pass


class Conflict(MirrorError):
    pass


class RemoteIOError(MirrorError):
    pass


class TransferError(MirrorError):
    pass
