"""Integration tests for the pencil-letters command line."""

import json
import logging
from unittest.mock import patch

import pytest

from letter_lib.cli import main
from letter_lib.errors import WriteError

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures the root logger; put it back afterwards."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers.copy()
    level = root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)


@pytest.fixture
def drawing_file(tmp_path, letter_drawing):
    path = tmp_path / 'drawing.json'
    path.write_text(json.dumps(letter_drawing.to_dict()))
    return str(path)


def test_status_json_on_fresh_dataset(dataset_root, capsys):
    assert main(['--root', str(dataset_root), 'status', '--json']) == 0
    status = json.loads(capsys.readouterr().out)
    assert status['total_samples'] == 0
    assert status['target_count'] == 100
    assert status['is_complete'] is False
    assert len(status['counts']) == 26


def test_status_table(dataset_root, capsys):
    assert main(['--root', str(dataset_root), '--target', '5', 'status']) == 0
    out = capsys.readouterr().out
    assert 'A:    0 / 5' in out
    assert 'Total: 0' in out


def test_save_then_status(dataset_root, drawing_file, capsys):
    code = main(['--root', str(dataset_root), '--seed', '1',
                 'save', 'ZOO', drawing_file, drawing_file, drawing_file])
    assert code == 0
    out = capsys.readouterr().out
    assert 'Saved Z as Z_0001.png' in out
    assert 'Saved O as O_0002.png' in out
    assert 'Next:' in out

    main(['--root', str(dataset_root), 'status', '--json'])
    status = json.loads(capsys.readouterr().out)
    assert status['counts']['O'] == 2
    assert status['total_samples'] == 3


def test_failed_write_exits_with_one(dataset_root, drawing_file, capsys):
    with patch('letter_lib.storage.sample_store.SampleStore.save',
               side_effect=WriteError('disk full', letter='A')):
        code = main(['--root', str(dataset_root), 'save', 'A', drawing_file])
    assert code == 1
    assert 'Failed to save A' in capsys.readouterr().out


def test_next_prints_prompt(dataset_root, capsys):
    assert main(['--root', str(dataset_root), '--seed', '3', 'next', '--mode', 'letter']) == 0
    first_line = capsys.readouterr().out.splitlines()[0]
    assert len(first_line) == 1
    assert first_line.isupper()


def test_invalid_text_exits_with_two(dataset_root, drawing_file, capsys):
    assert main(['--root', str(dataset_root), 'save', 'A1', drawing_file, drawing_file]) == 2
    assert 'Error:' in capsys.readouterr().err


def test_wrong_number_of_drawings_exits_with_two(dataset_root, drawing_file, capsys):
    assert main(['--root', str(dataset_root), 'save', 'AB', drawing_file]) == 2


def test_next_on_missing_root_creates_nothing(dataset_root, capsys):
    assert main(['--root', str(dataset_root), '--seed', '2', 'next']) == 0
    assert capsys.readouterr().out.strip()
    assert not dataset_root.exists()


def test_next_on_bound_dataset_checks_policy(dataset_root, drawing_file, capsys):
    assert main(['--root', str(dataset_root), 'save', 'A', drawing_file]) == 0
    code = main(['--root', str(dataset_root), '--policy', 'full_canvas', 'next'])
    assert code == 2
    assert 'Error:' in capsys.readouterr().err


def test_non_numeric_stroke_width_exits_with_two(dataset_root, tmp_path, capsys):
    bad = tmp_path / 'bad.json'
    bad.write_text(json.dumps({'strokes': [{'points': [[10, 10], [10, 90]], 'width': 'wide'}]}))
    assert main(['--root', str(dataset_root), 'save', 'A', str(bad)]) == 2
    assert 'Error:' in capsys.readouterr().err
    assert not dataset_root.exists()


def test_status_table_marks_complete_letters(dataset_root, drawing_file, capsys):
    main(['--root', str(dataset_root), '--target', '1', 'save', 'A', drawing_file])
    capsys.readouterr()
    assert main(['--root', str(dataset_root), '--target', '1', 'status']) == 0
    out = capsys.readouterr().out
    assert 'A:    1 / 1  done' in out
    assert 'B:    0 / 1  -1' in out

