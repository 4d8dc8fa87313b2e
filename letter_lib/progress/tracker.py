"""Per-letter progress tracking.

The tracker holds the authoritative in-memory sample count for every
letter. Counts are derived from the sample store at startup and then
updated incrementally, one increment per confirmed write, so that
``count(letter)`` always equals the number of sample files in that
letter's namespace.

Observers (a UI, a logger) subscribe to change notifications instead of
watching fields; each mutation publishes a fresh :class:`ProgressSnapshot`.

Example usage::

    from letter_lib.progress import ProgressStore
    from letter_lib.storage import SampleStore

    tracker = ProgressStore(SampleStore('dataset'))
    tracker.load()
    tracker.subscribe(lambda snap: print(snap.total_samples))

    sample = tracker.store.save('Q', raster)
    tracker.record_sample('Q')

    tracker.deficits()      # {'A': 100, ..., 'Q': 99, ...}
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Tuple

from ..config import ALPHABET, TARGET_COUNT
from ..domain.records import ProgressSnapshot
from ..storage.sample_store import SampleStore

logger = logging.getLogger(__name__)

ProgressListener = Callable[[ProgressSnapshot], None]


class ProgressStore:
    """Sample counters for every letter of the alphabet.

    Attributes:
        store: Sample store the counts are derived from.
        target_count: Desired samples per letter.
        alphabet: Letters tracked.
    """

    def __init__(self, store: SampleStore, target_count: int = TARGET_COUNT,
                 alphabet: str = ALPHABET):
        if target_count < 1:
            raise ValueError(f"target_count must be positive, got {target_count}")
        self.store = store
        self.target_count = target_count
        self.alphabet = alphabet
        self._counts: Dict[str, int] = {letter: 0 for letter in alphabet}
        self._listeners: List[ProgressListener] = []

    def load(self) -> Dict[str, int]:
        """Rebuild all counts by scanning the sample store.

        A missing namespace counts as 0. A namespace that cannot be read
        also counts as 0, for that letter only.

        Returns:
            Mapping of every letter to its count.
        """
        counts = {}
        for letter in self.alphabet:
            try:
                counts[letter] = self.store.count(letter)
            except OSError as e:
                logger.warning("Cannot read namespace for %s, counting 0: %s", letter, e)
                counts[letter] = 0
        self._counts = counts
        logger.info("Loaded progress: %d samples, %d/%d letters complete",
                    self.total_samples(), len(self.alphabet) - len(self.remaining_letters()),
                    len(self.alphabet))
        self._notify()
        return dict(counts)

    def record_sample(self, letter: str) -> int:
        """Count one confirmed write for ``letter``.

        Call only after the sample store has acknowledged the write.

        Returns:
            The new count for ``letter``.
        """
        if letter not in self._counts:
            raise ValueError(f"Not a tracked letter: {letter!r}")
        self._counts[letter] += 1
        if self._counts[letter] == self.target_count:
            logger.info("Letter %s reached target of %d samples", letter, self.target_count)
        self._notify()
        return self._counts[letter]

    def count(self, letter: str) -> int:
        return self._counts[letter]

    def counts(self) -> Dict[str, int]:
        return dict(self._counts)

    def is_complete(self) -> bool:
        """True once every letter has at least ``target_count`` samples."""
        return all(c >= self.target_count for c in self._counts.values())

    def total_samples(self) -> int:
        return sum(self._counts.values())

    def deficits(self) -> Dict[str, int]:
        """Missing samples per letter, for letters still below target."""
        return {
            letter: self.target_count - count
            for letter, count in self._counts.items()
            if count < self.target_count
        }

    def remaining_letters(self) -> Tuple[str, ...]:
        return tuple(self.deficits())

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(counts=dict(self._counts), target_count=self.target_count)

    def subscribe(self, listener: ProgressListener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)
