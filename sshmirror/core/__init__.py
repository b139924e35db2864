"""Core functionality"""
from .ssh_manager import SFTPSession
from .paths import PathMapper
from .reconciler import reconcile
from .bootstrap import bootstrap

__all__ = ["SFTPSession", "PathMapper", "reconcile", "bootstrap"]
