"""Small shared utilities."""

from __future__ import annotations

from weaver.utils.locking import ReadWriteLock

__all__ = ["ReadWriteLock"]
