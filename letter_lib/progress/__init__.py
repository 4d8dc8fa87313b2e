"""Per-letter progress tracking.

Exports:
    ProgressStore: Authoritative sample counters derived from the store.
"""

from .tracker import ProgressStore

__all__ = ['ProgressStore']
