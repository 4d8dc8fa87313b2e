"""Domain objects for letter collection.

This module provides the value objects shared by every component of the
collector: ink geometry, drawings, progress records, stored samples and
prompts.

The module exports the following classes:

Geometry classes:
    Point: Immutable 2D point.
    BBox: Immutable bounding box with emptiness and padding helpers.

Drawing classes:
    InkSource: Interface the normalizer reads drawings through.
    Stroke: Polyline drawn with a round pen of a given width.
    Drawing: Collection of strokes for one capture cell.

Record classes:
    LetterProgress: Sample count for one letter.
    ProgressSnapshot: Read-only view of all counts.
    Sample: A persisted sample on disk.
    Prompt: The letter or word currently requested.

Example usage::

    from letter_lib.domain import Drawing, Stroke

    drawing = Drawing([Stroke.from_tuples([(0, 0), (0, 100)])])
    print(drawing.bounds.to_tuple())
"""

from .drawing import Drawing, InkSource, Stroke
from .geometry import BBox, Point
from .records import (
    LetterProgress,
    ProgressSnapshot,
    Prompt,
    PromptKind,
    Sample,
    SelectionReason,
)

__all__ = [
    'Point', 'BBox',
    'InkSource', 'Stroke', 'Drawing',
    'LetterProgress', 'ProgressSnapshot', 'Sample',
    'Prompt', 'PromptKind', 'SelectionReason',
]
