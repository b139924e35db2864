"""Change source (watchdog subscription → batches of Change)"""
from .watcher import Watcher, BatchCollector, initial_batch

__all__ = ["Watcher", "BatchCollector", "initial_batch"]
