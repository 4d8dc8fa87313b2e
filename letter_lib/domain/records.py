"""Records describing dataset progress, stored samples, and prompts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Tuple


@dataclass(frozen=True)
class LetterProgress:
    """Number of stored samples for one letter."""
    letter: str
    count: int = 0

    def deficit(self, target_count: int) -> int:
        """Samples still missing; zero or negative once satisfied."""
        return target_count - self.count

    def is_complete(self, target_count: int) -> bool:
        return self.count >= target_count


@dataclass(frozen=True)
class ProgressSnapshot:
    """Read-only projection of tracked progress, handed to the UI.

    Attributes:
        counts: Letter to sample count, for every tracked letter.
        target_count: Desired samples per letter.
    """
    counts: Dict[str, int]
    target_count: int

    @property
    def total_samples(self) -> int:
        return sum(self.counts.values())

    @property
    def is_complete(self) -> bool:
        return all(c >= self.target_count for c in self.counts.values())

    @property
    def remaining_letters(self) -> Tuple[str, ...]:
        return tuple(l for l, c in self.counts.items() if c < self.target_count)

    def letters(self) -> Tuple[LetterProgress, ...]:
        return tuple(LetterProgress(l, c) for l, c in self.counts.items())


@dataclass(frozen=True)
class Sample:
    """One persisted sample, referenced by (letter, sequence_number)."""
    letter: str
    sequence_number: int
    path: Path

    @property
    def filename(self) -> str:
        return self.path.name


class PromptKind(str, Enum):
    LETTER = 'letter'
    WORD = 'word'


class SelectionReason(str, Enum):
    """Why the selection engine picked the current prompt.

    DEFICIT: chosen to fill the largest deficits.
    COMPLETE: every letter reached its target; uniform random continuation.
    CATALOG_EXHAUSTED: no catalog word contains a top-deficit letter, so
        the pick fell back to uniform random over the whole catalog.
    MANUAL: requested explicitly by the operator.
    """
    DEFICIT = 'deficit'
    COMPLETE = 'complete'
    CATALOG_EXHAUSTED = 'catalog_exhausted'
    MANUAL = 'manual'


@dataclass(frozen=True)
class Prompt:
    """The letter or word currently offered to the writer.

    Attributes:
        text: A single letter (letter mode) or a word (word mode).
        kind: Letter or word prompt.
        reason: How the prompt was chosen.
        focus_letters: Top-deficit letters the prompt was chosen for.
    """
    text: str
    kind: PromptKind
    reason: SelectionReason = SelectionReason.DEFICIT
    focus_letters: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def letters(self) -> Tuple[str, ...]:
        """Letters to capture, one capture cell each."""
        return tuple(self.text)

    def __str__(self) -> str:
        return self.text
