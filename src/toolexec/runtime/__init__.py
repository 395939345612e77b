"""Concurrency helpers: sync/async bridging and a readers-writer lock."""

from .interop import run_sync
from .rwlock import ReadWriteLock

__all__ = ["run_sync", "ReadWriteLock"]
