"""Stroke drawings handed over by the drawing surface.

A drawing surface (tablet canvas, web canvas, test fixture) produces one
drawing per capture cell. The normalizer only relies on the small
:class:`InkSource` interface:

    - ``is_empty``: whether any ink was laid down
    - ``bounds``: tight bounding box over the ink, including pen width
    - ``render(region, scale)``: rasterize a region of the drawing

:class:`Drawing` is the concrete implementation used by the CLI and tests.
It rasterizes with Pillow: polylines with curved joints and round caps,
black ink on an opaque white RGB background.

Example:
    Build a drawing and rasterize its ink::

        from letter_lib.domain.drawing import Drawing, Stroke

        drawing = Drawing([Stroke.from_tuples([(10, 10), (10, 90)], width=8)])
        img = drawing.render(drawing.bounds, scale=3.0)
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Tuple

from PIL import Image, ImageDraw

from ..config import DEFAULT_STROKE_WIDTH
from .geometry import BBox, Point

# Opaque white paper, black ink
PAPER_RGB = (255, 255, 255)
INK_RGB = (0, 0, 0)


class InkSource(ABC):
    """Read-only view of a drawing that can be normalized into a sample."""

    @property
    @abstractmethod
    def is_empty(self) -> bool:
        """True when no ink has been laid down."""

    @property
    @abstractmethod
    def bounds(self) -> BBox:
        """Tight bounding box over all ink. Empty when there is no ink."""

    @abstractmethod
    def render(self, region: BBox, scale: float) -> Image.Image:
        """Rasterize ``region`` at ``scale`` pixels per unit.

        Returns an opaque RGB image of size
        ``(round(region.width * scale), round(region.height * scale))``.
        """


@dataclass
class Stroke:
    """One pen stroke: an ordered polyline drawn with a round pen.

    Attributes:
        points: Ordered pen positions.
        width: Pen diameter in drawing units.
    """
    points: List[Point] = field(default_factory=list)
    width: float = DEFAULT_STROKE_WIDTH

    @property
    def bbox(self) -> BBox:
        """Bounding box of the inked area, including half the pen width."""
        if not self.points:
            return BBox.empty()
        return BBox.from_points(self.points).expanded(self.width / 2)

    def to_dict(self) -> dict:
        return {'points': [p.to_list() for p in self.points], 'width': float(self.width)}

    @classmethod
    def from_tuples(cls, tuples: List[Tuple[float, float]],
                    width: float = DEFAULT_STROKE_WIDTH) -> Stroke:
        """Create from list of (x, y) tuples."""
        return cls([Point(float(x), float(y)) for x, y in tuples], float(width))

    @classmethod
    def from_dict(cls, d) -> Stroke:
        """Create from ``{'points': [...], 'width': w}`` or a bare point list."""
        if isinstance(d, dict):
            points = d.get('points', [])
            width = d.get('width', DEFAULT_STROKE_WIDTH)
        else:
            points, width = d, DEFAULT_STROKE_WIDTH
        try:
            width = float(width)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Stroke width must be a number, got {width!r}") from e
        if not width > 0:
            raise ValueError(f"Stroke width must be positive, got {width}")
        return cls([Point.from_list(p) for p in points], width)


class Drawing(InkSource):
    """A collection of pen strokes for one capture cell."""

    def __init__(self, strokes: List[Stroke] | None = None):
        self.strokes: List[Stroke] = list(strokes or [])

    def __len__(self) -> int:
        return len(self.strokes)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Drawing):
            return NotImplemented
        return self.strokes == other.strokes

    def clear(self) -> None:
        """Drop all ink. Stored samples are unaffected."""
        self.strokes.clear()

    @property
    def is_empty(self) -> bool:
        return not any(stroke.points for stroke in self.strokes)

    @property
    def bounds(self) -> BBox:
        boxes = [stroke.bbox for stroke in self.strokes if stroke.points]
        if not boxes:
            return BBox.empty()
        result = boxes[0]
        for box in boxes[1:]:
            result = result.union(box)
        return result

    def render(self, region: BBox, scale: float) -> Image.Image:
        width = max(1, int(round(region.width * scale)))
        height = max(1, int(round(region.height * scale)))
        img = Image.new('RGB', (width, height), PAPER_RGB)
        draw = ImageDraw.Draw(img)

        for stroke in self.strokes:
            if not stroke.points:
                continue
            pts = [((p.x - region.x_min) * scale, (p.y - region.y_min) * scale)
                   for p in stroke.points]
            pen = stroke.width * scale
            if len(pts) >= 2:
                draw.line(pts, fill=INK_RGB, width=max(1, int(round(pen))), joint='curve')
            # Round caps; also covers single-point taps
            r = pen / 2
            for x, y in (pts[0], pts[-1]):
                draw.ellipse([x - r, y - r, x + r, y + r], fill=INK_RGB)

        return img

    def to_dict(self) -> dict:
        return {'strokes': [s.to_dict() for s in self.strokes]}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data) -> Drawing:
        """Create from ``{'strokes': [...]}`` or a bare list of strokes."""
        strokes = data.get('strokes', []) if isinstance(data, dict) else data
        return cls([Stroke.from_dict(s) for s in strokes])

    @classmethod
    def from_json(cls, text: str) -> Drawing:
        return cls.from_dict(json.loads(text))
