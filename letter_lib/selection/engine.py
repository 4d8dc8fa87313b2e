"""Selection of the next letter or word to request.

The engine decides what the writer is asked for next so that every letter
reaches its target with as few prompts as possible. It reads deficits from
the progress tracker and owns only one piece of mutable state: the current
prompt, which changes on explicit :meth:`SelectionEngine.advance` calls.

Word mode:
    1. No deficits left: the dataset is complete; pick uniformly from the
       whole catalog so collection can continue past the target.
    2. Take the top-N letters by deficit (ties broken randomly).
    3. Keep catalog words containing at least one of them.
    4. Score each word by how many distinct top-N letters it contains.
    5. Pick uniformly among the best-scoring words. If no word contains a
       top-N letter, fall back to the whole catalog and report
       ``CATALOG_EXHAUSTED``.

Letter mode:
    Pick uniformly among letters still below target, never repeating the
    current letter while another choice exists. Once complete, continue
    with uniform picks over the whole alphabet.

The random source is injected (a numpy ``RandomState``) so tests can seed
it and get reproducible selections.

Example usage::

    import numpy as np
    from letter_lib.selection import SelectionEngine, SelectionMode

    engine = SelectionEngine(tracker, mode=SelectionMode.WORD,
                             rng=np.random.RandomState(7))
    prompt = engine.advance()
    print(prompt.text, prompt.reason.value, prompt.focus_letters)
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

import numpy as np

from ..config import TOP_N_LETTERS
from ..domain.records import Prompt, PromptKind, SelectionReason
from ..progress.tracker import ProgressStore
from .catalog import WordCatalog

logger = logging.getLogger(__name__)

T = TypeVar('T')
PromptListener = Callable[[Prompt], None]


class SelectionMode(str, Enum):
    LETTER = 'letter'
    WORD = 'word'


class SelectionEngine:
    """Chooses prompts biased toward underrepresented letters.

    Attributes:
        progress: Tracker the deficits are read from.
        catalog: Words available in word mode.
        mode: Letter or word prompts.
        top_n: Number of top-deficit letters word selection aims at.
        rng: Random source for tie-breaking and picks.
    """

    def __init__(self, progress: ProgressStore, catalog: Optional[WordCatalog] = None,
                 mode: SelectionMode = SelectionMode.WORD, top_n: int = TOP_N_LETTERS,
                 rng: Optional[np.random.RandomState] = None):
        if top_n < 1:
            raise ValueError(f"top_n must be positive, got {top_n}")
        self.progress = progress
        self.catalog = catalog or WordCatalog.default()
        self.mode = SelectionMode(mode)
        self.top_n = top_n
        self.rng = rng if rng is not None else np.random.RandomState()
        self._current: Optional[Prompt] = None
        self._listeners: List[PromptListener] = []

    @property
    def current_prompt(self) -> Optional[Prompt]:
        """The prompt on display, or None before the first advance."""
        return self._current

    def _choice(self, items: Sequence[T]) -> T:
        return items[self.rng.randint(len(items))]

    def top_deficit_letters(self, deficits: Optional[Dict[str, int]] = None) -> List[str]:
        """The ``top_n`` letters with the largest deficit.

        Deficit size is the only ordering key; letters with equal deficits
        come out in random order.
        """
        if deficits is None:
            deficits = self.progress.deficits()
        letters = list(deficits)
        shuffled = [letters[i] for i in self.rng.permutation(len(letters))]
        # sorted() is stable, so the shuffle decides among ties
        ranked = sorted(shuffled, key=lambda letter: -deficits[letter])
        return ranked[:self.top_n]

    def select_word(self) -> Prompt:
        """Choose a word prompt without changing the current prompt."""
        deficits = self.progress.deficits()
        if not deficits:
            return Prompt(self._choice(self.catalog.words), PromptKind.WORD,
                          SelectionReason.COMPLETE)

        top = self.top_deficit_letters(deficits)
        candidates = self.catalog.entries_containing(top)
        if not candidates:
            logger.info("No catalog word contains any of %s, picking from the full catalog", top)
            return Prompt(self._choice(self.catalog.words), PromptKind.WORD,
                          SelectionReason.CATALOG_EXHAUSTED, tuple(top))

        scores = [entry.score(top) for entry in candidates]
        best = max(scores)
        pool = [entry.word for entry, score in zip(candidates, scores) if score == best]
        logger.debug("Top letters %s: %d candidates, %d at score %d",
                     top, len(candidates), len(pool), best)
        return Prompt(self._choice(pool), PromptKind.WORD, SelectionReason.DEFICIT, tuple(top))

    def select_letter(self) -> Prompt:
        """Choose a single-letter prompt without changing the current prompt."""
        current = None
        if self._current is not None and self._current.kind is PromptKind.LETTER:
            current = self._current.text

        pool = list(self.progress.deficits())
        reason = SelectionReason.DEFICIT
        if not pool:
            pool = list(self.progress.alphabet)
            reason = SelectionReason.COMPLETE

        if current in pool and len(pool) > 1:
            pool.remove(current)

        letter = self._choice(pool)
        return Prompt(letter, PromptKind.LETTER, reason, (letter,))

    def select(self) -> Prompt:
        if self.mode is SelectionMode.WORD:
            return self.select_word()
        return self.select_letter()

    def advance(self) -> Prompt:
        """Replace the current prompt with a fresh selection."""
        self._current = self.select()
        if self._current.reason is SelectionReason.COMPLETE:
            logger.info("All letters reached target; continuing with %r", self._current.text)
        else:
            logger.debug("Next prompt: %r (%s)", self._current.text, self._current.reason.value)
        for listener in list(self._listeners):
            listener(self._current)
        return self._current

    def set_mode(self, mode: SelectionMode) -> Prompt:
        """Switch between letter and word prompts and select a new prompt."""
        self.mode = SelectionMode(mode)
        return self.advance()

    def subscribe(self, listener: PromptListener) -> Callable[[], None]:
        """Register a prompt-change listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
