"""Integration tests for the collection session.

Exercises the full save path on a real dataset directory:
    drawing -> normalizer -> sample store -> progress -> next prompt

Covers partial word saves, empty captures, policy binding across
sessions, and consistency between tracked counts and files on disk.
"""

from unittest.mock import patch

import numpy as np
import pytest

from letter_lib.api.session import CollectionSession
from letter_lib.config import ALPHABET, CollectorConfig, NormalizationPolicy
from letter_lib.domain.drawing import Drawing
from letter_lib.domain.records import PromptKind, SelectionReason
from letter_lib.errors import EmptyCaptureError, PolicyMismatchError, WriteError
from letter_lib.selection.engine import SelectionMode

pytestmark = pytest.mark.integration


def make_session(root, mode=SelectionMode.WORD, seed=0, **kwargs):
    config = CollectorConfig(root_dir=root, seed=seed, **kwargs)
    return CollectionSession.from_config(config, mode=mode)


def assert_counts_match_files(session):
    for letter in ALPHABET:
        assert session.progress.count(letter) == session.store.count(letter), letter


class TestStart:

    def test_start_binds_policy_and_selects_prompt(self, dataset_root):
        session = make_session(dataset_root)
        prompt = session.start()
        assert session.prompt is prompt
        assert prompt.kind is PromptKind.WORD
        assert session.store.read_manifest()['policy'] == 'padded_crop'

    def test_save_before_start_is_rejected(self, dataset_root, letter_drawing):
        with pytest.raises(RuntimeError):
            make_session(dataset_root).save([letter_drawing])

    def test_other_policy_cannot_reopen_dataset(self, dataset_root):
        make_session(dataset_root).start()
        other = make_session(dataset_root, policy=NormalizationPolicy.FULL_CANVAS)
        with pytest.raises(PolicyMismatchError):
            other.start()


class TestLetterMode:

    def test_save_letter_persists_and_advances(self, dataset_root, letter_drawing):
        session = make_session(dataset_root, mode=SelectionMode.LETTER)
        prompt = session.start()
        result = session.save_letter(letter_drawing)

        assert result.success
        assert result.sample.path.is_file()
        assert result.sample.path.name == f'{prompt.text}_0001.png'
        assert session.progress.count(prompt.text) == 1
        assert session.prompt.text != prompt.text

    def test_stored_raster_matches_normalizer_output(self, dataset_root, letter_drawing):
        session = make_session(dataset_root, mode=SelectionMode.LETTER)
        prompt = session.start()
        result = session.save_letter(letter_drawing)
        stored = session.store.load_sample(prompt.text, result.sample.sequence_number)
        np.testing.assert_array_equal(stored, session.normalizer.normalize(letter_drawing))

    def test_empty_capture_has_no_side_effects(self, dataset_root):
        session = make_session(dataset_root, mode=SelectionMode.LETTER)
        prompt = session.start()
        before = session.progress.counts()

        result = session.save_letter(Drawing())

        assert not result.success
        assert isinstance(result.error, EmptyCaptureError)
        assert session.progress.counts() == before
        assert session.store.count(prompt.text) == 0
        assert session.prompt is prompt


class TestWordMode:

    def test_whole_word_saved(self, dataset_root, letter_drawing):
        session = make_session(dataset_root)
        session.start()
        outcome = session.save_text('PIZZA', [letter_drawing] * 5)

        assert outcome.all_saved
        assert outcome.advanced
        assert session.progress.count('Z') == 2
        names = sorted(p.name for p in session.store.sample_files('Z'))
        assert names == ['Z_0001.png', 'Z_0002.png']
        assert_counts_match_files(session)

    def test_partial_failure_counts_only_written_letters(self, dataset_root, letter_drawing):
        session = make_session(dataset_root)
        session.start()
        real_save = session.store.save

        def failing_save(letter, raster):
            if letter in ('E', 'O'):
                raise WriteError('disk full', letter=letter)
            return real_save(letter, raster)

        with patch.object(session.store, 'save', side_effect=failing_save):
            outcome = session.save_text('HELLO', [letter_drawing] * 5)

        assert [r.letter for r in outcome.saved] == ['H', 'L', 'L']
        assert [r.letter for r in outcome.failed] == ['E', 'O']
        assert all(isinstance(r.error, WriteError) for r in outcome.failed)
        assert outcome.is_partial
        assert outcome.advanced
        assert session.progress.count('H') == 1
        assert session.progress.count('L') == 2
        assert session.progress.count('E') == 0
        assert session.progress.count('O') == 0
        assert_counts_match_files(session)

    def test_results_follow_prompt_order(self, dataset_root, letter_drawing):
        session = make_session(dataset_root, save_workers=4)
        session.start()
        outcome = session.save_text('JUMBO', [letter_drawing] * 5)
        assert [r.index for r in outcome.results] == [0, 1, 2, 3, 4]
        assert [r.letter for r in outcome.results] == list('JUMBO')

    def test_empty_cell_skips_only_that_letter(self, dataset_root, letter_drawing):
        session = make_session(dataset_root)
        session.start()
        outcome = session.save_text('QUIZ', [letter_drawing, Drawing(), letter_drawing, letter_drawing])
        assert [r.letter for r in outcome.failed] == ['U']
        assert isinstance(outcome.failed[0].error, EmptyCaptureError)
        assert session.store.count('U') == 0
        assert session.progress.count('Q') == 1

    def test_nothing_saved_keeps_prompt(self, dataset_root):
        session = make_session(dataset_root)
        prompt = session.start()
        outcome = session.save([Drawing() for _ in prompt.letters])
        assert not outcome.advanced
        assert outcome.next_prompt is prompt
        assert session.prompt is prompt
        assert session.progress.total_samples() == 0

    def test_drawing_count_must_match_prompt(self, dataset_root, letter_drawing):
        session = make_session(dataset_root)
        session.start()
        with pytest.raises(ValueError):
            session.save_text('QUIZ', [letter_drawing] * 3)

    def test_untracked_text_rejected(self, dataset_root, letter_drawing):
        session = make_session(dataset_root)
        session.start()
        with pytest.raises(ValueError):
            session.save_text('A1', [letter_drawing] * 2)

    def test_manual_text_is_marked(self, dataset_root, letter_drawing):
        session = make_session(dataset_root)
        session.start()
        outcome = session.save_text('ok', [letter_drawing] * 2)
        assert outcome.prompt.text == 'OK'
        assert outcome.prompt.reason is SelectionReason.MANUAL


class TestPersistenceAcrossSessions:

    @pytest.mark.slow
    def test_counts_track_files_over_many_saves(self, dataset_root, letter_drawing):
        session = make_session(dataset_root, target_count=2)
        prompt = session.start()
        for _ in range(30):
            session.save([letter_drawing] * len(prompt.letters))
            prompt = session.prompt
        assert_counts_match_files(session)

    def test_restart_reloads_counts(self, dataset_root, letter_drawing):
        first = make_session(dataset_root)
        first.start()
        first.save_text('QUEEN', [letter_drawing] * 5)

        second = make_session(dataset_root)
        second.start()
        assert second.progress.count('E') == 2
        assert second.progress.count('Q') == 1
        assert second.status().total_samples == 5

        second.save_text('E', [letter_drawing])
        assert second.store.next_sequence_number('E') == 4

    def test_completion_switches_to_uniform_prompts(self, dataset_root, letter_drawing):
        session = make_session(dataset_root, mode=SelectionMode.LETTER, target_count=1)
        session.start()
        for letter in ALPHABET:
            session.save_text(letter, [letter_drawing])
        status = session.status()
        assert status.is_complete
        assert session.prompt.reason is SelectionReason.COMPLETE
