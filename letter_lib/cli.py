#!/usr/bin/env python3
"""Command-line interface for the letter collector.

Drives the same session service a drawing UI uses, for scripted imports
and for checking dataset progress.

Usage:
    pencil-letters --root dataset status
    pencil-letters --root dataset next --mode word
    pencil-letters --root dataset save QUIZ q.json u.json i.json z.json

Drawing files are JSON: ``{"strokes": [{"points": [[x, y], ...], "width": 20}]}``.

Or run via the package:
    python -m letter_lib --root dataset status
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .api.session import CollectionSession
from .config import (
    TARGET_COUNT,
    TOP_N_LETTERS,
    CollectorConfig,
    NormalizationPolicy,
    configure_logging,
)
from .domain.drawing import Drawing
from .errors import PencilLettersError
from .selection.engine import SelectionMode


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        description='Collect handwritten letter samples into a labeled dataset'
    )
    parser.add_argument('--root', '-r', type=str, default='dataset',
                        help='Dataset root directory (default: dataset)')
    parser.add_argument('--target', '-t', type=int, default=TARGET_COUNT,
                        help=f'Samples wanted per letter (default: {TARGET_COUNT})')
    parser.add_argument('--policy', choices=[p.value for p in NormalizationPolicy],
                        default=NormalizationPolicy.PADDED_CROP.value,
                        help='Normalization policy the dataset is bound to')
    parser.add_argument('--top-n', type=int, default=TOP_N_LETTERS,
                        help=f'Top-deficit letters targeted by word prompts (default: {TOP_N_LETTERS})')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for reproducible prompt selection')
    parser.add_argument('--log-level', default='WARNING',
                        help='Log level (default: WARNING)')
    parser.add_argument('--log-file', default=None,
                        help='Also log to this file')

    sub = parser.add_subparsers(dest='command', required=True)

    status = sub.add_parser('status', help='Show per-letter progress')
    status.add_argument('--json', action='store_true', help='Print status as JSON')

    nxt = sub.add_parser('next', help='Print the next prompt')
    nxt.add_argument('--mode', choices=[m.value for m in SelectionMode],
                     default=SelectionMode.WORD.value)

    save = sub.add_parser('save', help='Save drawings for a letter or word')
    save.add_argument('text', help='Letter or word the drawings spell')
    save.add_argument('drawings', nargs='+', help='One drawing JSON file per letter')
    save.add_argument('--mode', choices=[m.value for m in SelectionMode],
                      default=SelectionMode.WORD.value,
                      help='Prompt mode used for the suggestion printed afterwards')
    return parser


def _build_session(args: argparse.Namespace, mode: SelectionMode) -> CollectionSession:
    config = CollectorConfig(
        root_dir=Path(args.root),
        target_count=args.target,
        policy=NormalizationPolicy(args.policy),
        top_n=args.top_n,
        seed=args.seed,
    )
    return CollectionSession.from_config(config, mode=mode)


def _status_command(session: CollectionSession, as_json: bool) -> int:
    session.progress.load()
    status = session.status()
    if as_json:
        print(json.dumps({
            'total_samples': status.total_samples,
            'target_count': status.target_count,
            'is_complete': status.is_complete,
            'counts': status.counts,
        }, indent=2))
        return 0

    target = status.target_count
    for entry in status.progress.letters():
        mark = 'done' if entry.is_complete(target) else f'-{entry.deficit(target)}'
        print(f"{entry.letter}: {entry.count:4d} / {target}  {mark}")
    print(f"Total: {status.total_samples}")
    if status.is_complete:
        print("All letters completed")
    return 0


def _next_command(session: CollectionSession) -> int:
    if session.store.read_manifest() is None:
        # Query only; do not create a dataset
        session.progress.load()
        prompt = session.engine.advance()
    else:
        prompt = session.start()
    print(prompt.text)
    if prompt.focus_letters:
        print(f"  for: {', '.join(prompt.focus_letters)} ({prompt.reason.value})")
    return 0


def _load_drawing(path: str) -> Drawing:
    with open(path, 'r', encoding='utf-8') as f:
        return Drawing.from_dict(json.load(f))


def _save_command(session: CollectionSession, text: str, paths: List[str]) -> int:
    drawings = [_load_drawing(p) for p in paths]
    session.start()
    outcome = session.save_text(text, drawings)
    for result in outcome.results:
        print(result.message)
    if outcome.advanced:
        print(f"Next: {outcome.next_prompt.text}")
    return 0 if outcome.all_saved else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point.

    Returns:
        Process exit code: 0 on success, 1 if any save failed, 2 on a
        dataset or input error.
    """
    parser = _create_argument_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level, log_file=args.log_file)

    mode = SelectionMode(getattr(args, 'mode', SelectionMode.WORD.value))
    try:
        session = _build_session(args, mode)
        if args.command == 'status':
            return _status_command(session, args.json)
        if args.command == 'next':
            return _next_command(session)
        return _save_command(session, args.text, args.drawings)
    except (PencilLettersError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
