"""Service layer driving a collection session.

This module wires the four core components into the save-and-advance
workflow a drawing UI needs:

    drawing(s) -> CaptureNormalizer -> SampleStore -> ProgressStore
               -> SelectionEngine.advance() -> next prompt

:class:`CollectionSession` returns typed outcomes instead of raising: each
capture cell of a prompt gets its own :class:`SaveResult`, so a word where
4 of 5 letters saved reports exactly which one failed, and the tracker is
incremented only for the letters that reached disk.

Cells of one word are written in a thread pool; the per-letter lock in the
sample store keeps repeated letters (the two Zs of PIZZA) from racing for
the same sequence number. Progress is recorded on the calling thread as
each write completes, and the session advances only after every write has
reported.

Example usage::

    from letter_lib.api import CollectionSession
    from letter_lib.config import CollectorConfig

    session = CollectionSession.from_config(CollectorConfig(root_dir='dataset'))
    prompt = session.start()

    outcome = session.save(drawings)   # one drawing per letter of the prompt
    for result in outcome.failed:
        print(result.letter, result.error)
    print(session.status().total_samples)
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..capture.normalizer import CaptureNormalizer
from ..config import CollectorConfig
from ..domain.drawing import InkSource
from ..domain.records import ProgressSnapshot, Prompt, PromptKind, Sample, SelectionReason
from ..errors import EmptyCaptureError, PencilLettersError, SampleStoreError
from ..progress.tracker import ProgressStore
from ..selection.catalog import WordCatalog
from ..selection.engine import SelectionEngine, SelectionMode
from ..storage.sample_store import SampleStore

_logger = logging.getLogger(__name__)


@dataclass
class SaveResult:
    """Outcome of saving one capture cell."""
    letter: str
    index: int
    success: bool
    sample: Optional[Sample] = None
    error: Optional[PencilLettersError] = None

    @property
    def message(self) -> str:
        if self.success:
            return f"Saved {self.letter} as {self.sample.filename}"
        return f"Failed to save {self.letter}: {self.error}"


@dataclass
class BatchSaveResult:
    """Outcome of one save action for a whole prompt.

    Attributes:
        prompt: The prompt the drawings were captured for.
        results: One SaveResult per capture cell, in prompt order.
        next_prompt: The prompt on display after the save.
        advanced: Whether the session moved on to a new prompt.
    """
    prompt: Prompt
    results: List[SaveResult] = field(default_factory=list)
    next_prompt: Optional[Prompt] = None
    advanced: bool = False

    @property
    def saved(self) -> List[SaveResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[SaveResult]:
        return [r for r in self.results if not r.success]

    @property
    def all_saved(self) -> bool:
        return bool(self.results) and not self.failed

    @property
    def is_partial(self) -> bool:
        return bool(self.saved) and bool(self.failed)


@dataclass(frozen=True)
class SessionStatus:
    """Read-only status projection for the UI."""
    progress: ProgressSnapshot
    prompt: Optional[Prompt]

    @property
    def total_samples(self) -> int:
        return self.progress.total_samples

    @property
    def counts(self) -> Dict[str, int]:
        return dict(self.progress.counts)

    @property
    def is_complete(self) -> bool:
        return self.progress.is_complete

    @property
    def target_count(self) -> int:
        return self.progress.target_count


class CollectionSession:
    """Capture, normalize, persist and advance for one operator session.

    Attributes:
        store: Sample store written to.
        progress: Tracker incremented after each confirmed write.
        normalizer: Converts drawings into rasters.
        engine: Chooses prompts.
        save_workers: Thread pool size for multi-letter saves.
    """

    def __init__(self, store: SampleStore, progress: ProgressStore,
                 normalizer: CaptureNormalizer, engine: SelectionEngine,
                 save_workers: int = 1):
        self.store = store
        self.progress = progress
        self.normalizer = normalizer
        self.engine = engine
        self.save_workers = max(1, save_workers)

    @classmethod
    def from_config(cls, config: CollectorConfig,
                    mode: SelectionMode = SelectionMode.WORD,
                    catalog: Optional[WordCatalog] = None,
                    rng: Optional[np.random.RandomState] = None) -> CollectionSession:
        """Build a session from deployment configuration."""
        store = SampleStore(config.root_dir)
        progress = ProgressStore(store, target_count=config.target_count)
        normalizer = CaptureNormalizer(policy=config.policy, output_size=config.output_size)
        if rng is None:
            rng = np.random.RandomState(config.seed)
        engine = SelectionEngine(progress, catalog=catalog, mode=mode,
                                 top_n=config.top_n, rng=rng)
        return cls(store, progress, normalizer, engine, save_workers=config.save_workers)

    def start(self) -> Prompt:
        """Bind the dataset policy, load progress and select the first prompt.

        Raises:
            PolicyMismatchError: The dataset was built under another policy.
        """
        self.store.bind_policy(self.normalizer.policy, self.normalizer.output_size)
        self.progress.load()
        return self.engine.advance()

    @property
    def prompt(self) -> Optional[Prompt]:
        return self.engine.current_prompt

    def status(self) -> SessionStatus:
        return SessionStatus(progress=self.progress.snapshot(), prompt=self.prompt)

    def save_letter(self, drawing: InkSource) -> SaveResult:
        """Save the drawing for a single-letter prompt."""
        return self.save([drawing]).results[0]

    def save(self, drawings: Sequence[InkSource]) -> BatchSaveResult:
        """Save one drawing per letter of the current prompt, then advance.

        Empty cells are reported with EmptyCaptureError and nothing is
        written for them. The session advances when at least one cell was
        saved; otherwise the same prompt stays up for a retry.

        Raises:
            RuntimeError: If the session has not been started.
            ValueError: If the number of drawings does not match the prompt.
        """
        if self.prompt is None:
            raise RuntimeError("Session not started; call start() first")
        return self._save(self.prompt, drawings)

    def save_text(self, text: str, drawings: Sequence[InkSource]) -> BatchSaveResult:
        """Save drawings for explicitly named letters instead of the current prompt.

        Used for scripted imports. The session still advances afterwards.

        Raises:
            ValueError: If ``text`` contains untracked letters or the number
                of drawings does not match.
        """
        text = text.upper()
        if not text or any(letter not in self.progress.alphabet for letter in text):
            raise ValueError(f"Not a sequence of tracked letters: {text!r}")
        kind = PromptKind.LETTER if len(text) == 1 else PromptKind.WORD
        return self._save(Prompt(text, kind, SelectionReason.MANUAL, tuple(text)), drawings)

    def _save(self, prompt: Prompt, drawings: Sequence[InkSource]) -> BatchSaveResult:
        letters = prompt.letters
        if len(drawings) != len(letters):
            raise ValueError(
                f"Prompt {prompt.text!r} needs {len(letters)} drawings, got {len(drawings)}")

        results: Dict[int, SaveResult] = {}
        rasters: Dict[int, np.ndarray] = {}
        for index, (letter, drawing) in enumerate(zip(letters, drawings)):
            try:
                rasters[index] = self.normalizer.normalize(drawing, letter)
            except EmptyCaptureError as e:
                results[index] = SaveResult(letter, index, success=False, error=e)

        for result in self._persist_all(letters, rasters):
            results[result.index] = result

        outcome = BatchSaveResult(prompt=prompt, results=[results[i] for i in sorted(results)])
        if outcome.saved:
            outcome.next_prompt = self.engine.advance()
            outcome.advanced = True
        else:
            outcome.next_prompt = self.prompt

        if outcome.failed:
            _logger.warning("Saved %d/%d letters of %r; failed: %s",
                            len(outcome.saved), len(outcome.results), prompt.text,
                            ', '.join(r.letter for r in outcome.failed))
        return outcome

    def _persist_one(self, letter: str, index: int, raster: np.ndarray) -> SaveResult:
        try:
            sample = self.store.save(letter, raster)
        except SampleStoreError as e:
            _logger.error("Failed to save %s: %s", letter, e)
            return SaveResult(letter, index, success=False, error=e)
        return SaveResult(letter, index, success=True, sample=sample)

    def _persist_all(self, letters: Sequence[str],
                     rasters: Dict[int, np.ndarray]) -> List[SaveResult]:
        if not rasters:
            return []

        completed = []
        if self.save_workers == 1 or len(rasters) == 1:
            for index, raster in rasters.items():
                result = self._persist_one(letters[index], index, raster)
                self._record(result)
                completed.append(result)
            return completed

        with ThreadPoolExecutor(max_workers=self.save_workers) as executor:
            futures = [
                executor.submit(self._persist_one, letters[index], index, raster)
                for index, raster in rasters.items()
            ]
            for future in as_completed(futures):
                result = future.result()
                self._record(result)
                completed.append(result)
        return completed

    def _record(self, result: SaveResult) -> None:
        if result.success:
            self.progress.record_sample(result.letter)
