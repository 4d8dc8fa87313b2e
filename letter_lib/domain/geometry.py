"""Geometric value objects for captured ink."""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple


@dataclass(frozen=True)
class Point:
    """Immutable 2D point."""
    x: float
    y: float

    def to_list(self) -> List[float]:
        """Convert to list for JSON serialization."""
        return [float(self.x), float(self.y)]

    @classmethod
    def from_list(cls, lst) -> Point:
        """Create from a two-element list or tuple."""
        try:
            return cls(float(lst[0]), float(lst[1]))
        except (TypeError, ValueError, IndexError, KeyError) as e:
            raise ValueError(f"Point needs two numeric coordinates, got {lst!r}") from e


@dataclass(frozen=True)
class BBox:
    """Immutable axis-aligned bounding box.

    A box with zero or negative width or height is empty; an empty box is
    what a drawing without ink reports as its bounds.
    """
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def center(self) -> Point:
        return Point(
            (self.x_min + self.x_max) / 2,
            (self.y_min + self.y_max) / 2
        )

    def intersects(self, other: BBox) -> bool:
        """Check if the boxes overlap with positive area."""
        return (self.x_min < other.x_max and other.x_min < self.x_max and
                self.y_min < other.y_max and other.y_min < self.y_max)

    def expanded(self, margin: float) -> BBox:
        """Return a box grown by ``margin`` on every side."""
        return BBox(self.x_min - margin, self.y_min - margin,
                    self.x_max + margin, self.y_max + margin)

    def union(self, other: BBox) -> BBox:
        """Smallest box containing both boxes."""
        return BBox(min(self.x_min, other.x_min), min(self.y_min, other.y_min),
                    max(self.x_max, other.x_max), max(self.y_max, other.y_max))

    def to_tuple(self) -> Tuple[float, float, float, float]:
        """Convert to tuple for compatibility."""
        return (self.x_min, self.y_min, self.x_max, self.y_max)

    @classmethod
    def empty(cls) -> BBox:
        return cls(0.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_points(cls, points: List[Point]) -> BBox:
        """Create bounding box containing all points."""
        if not points:
            return cls.empty()
        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))
