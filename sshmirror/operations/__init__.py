"""Operations (ensure/remove directory, transfer, delete)"""
from .directory import ensure_directory, remove_directory
from .transfer import transfer_file
from .delete import remove_file

__all__ = [
    "ensure_directory", "remove_directory",
    "transfer_file",
    "remove_file",
]
